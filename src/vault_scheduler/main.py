"""
Vault Scheduler - Main Entry Point
Weekly and monthly planning on top of an Obsidian vault's SchedulerData folder.
"""

import sys
from pathlib import Path

from loguru import logger
from rich.console import Console

from vault_scheduler.app import SchedulerApp
from vault_scheduler.cli import SchedulerCLI
from vault_scheduler.config import SchedulerConfig, get_config


def configure_logging(config: SchedulerConfig) -> None:
    """Configure loguru: coloured stderr sink plus a rotating daily file."""
    # Remove default handler
    logger.remove()

    level = "DEBUG" if config.system.debug_mode else config.logging.level.upper()
    logger.add(
        sys.stderr,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
        colorize=True,
    )

    if config.logging.file_enabled:
        logger.add(
            str(Path(config.logging.log_dir) / "scheduler_{time:YYYY-MM-DD}.log"),
            level=level,
            format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {name}:{function}:{line} - {message}",
            rotation=config.logging.rotation,
            retention=config.logging.retention,
            compression=config.logging.compression,
        )


def main() -> None:
    """Main entry point for the vault scheduler."""
    config = get_config()
    configure_logging(config)

    console = Console()
    app = SchedulerApp.from_config(config, notify=lambda message: console.print(f"[green]{message}[/green]"))

    logger.info(f"Vault Scheduler v{config.system.version} starting")
    logger.info(f"Vault: {config.system.vault_path}")

    cli = SchedulerCLI(app, display=config.display, console=console)
    try:
        cli.start()
    except Exception as e:
        logger.error(f"Critical Error: {e}")
        raise
    finally:
        logger.info("Exiting Vault Scheduler")


if __name__ == "__main__":
    main()
