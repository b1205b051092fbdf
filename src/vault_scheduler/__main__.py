from vault_scheduler.main import main

main()
