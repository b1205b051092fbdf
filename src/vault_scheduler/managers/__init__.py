"""Domain managers: schedule, backlog, goals, standard tasks and settings."""
from vault_scheduler.managers.backlog import BacklogManager
from vault_scheduler.managers.goals import GoalsManager
from vault_scheduler.managers.schedule import RemoveResult, ScheduleManager, UpdateResult
from vault_scheduler.managers.settings import SettingsManager
from vault_scheduler.managers.standard_tasks import StandardTasksManager

__all__ = [
    "BacklogManager",
    "GoalsManager",
    "RemoveResult",
    "ScheduleManager",
    "SettingsManager",
    "StandardTasksManager",
    "UpdateResult",
]
