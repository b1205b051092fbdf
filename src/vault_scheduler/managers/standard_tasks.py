"""
Standard Tasks Manager
Populates recurring templates (and the sleep/wake markers) into the viewed week.
"""
from typing import Callable

from loguru import logger

from vault_scheduler.managers.schedule import ScheduleManager
from vault_scheduler.models import (
    DAYS_IN_WEEK,
    ItemType,
    SchedulerItem,
    SchedulerSettings,
    StandardItemConfig,
)

SLEEP_TASK_NAME = "Sleep"
WAKE_TASK_NAME = "Wake Up"


def standard_item(name: str, description: str = "", category_id: str = "other") -> SchedulerItem:
    return SchedulerItem(
        name=name,
        description=description,
        category_id=category_id,
        item_type=ItemType.REGULAR,
        completed=False,
        is_standard=True,
        standard_task_name=name,
    )


def _is_instance_of(item: SchedulerItem, name: str) -> bool:
    return bool(item.is_standard) and (item.standard_task_name or item.name) == name


class StandardTasksManager:

    def __init__(self, schedule_manager: ScheduleManager, get_settings: Callable[[], SchedulerSettings]):
        self.schedule_manager = schedule_manager
        self._get_settings = get_settings

    def _insert_if_missing(self, day: int, hour: int, template: SchedulerItem) -> bool:
        cell = self.schedule_manager.get_items_for_cell(day, hour)
        if any(_is_instance_of(i, template.standard_task_name) for i in cell):
            return False
        self.schedule_manager.add_item_to_schedule(day, hour, template)
        return True

    def populate_standard_tasks(self) -> int:
        """
        Insert sleep/wake markers and every standard item into the viewed week.
        Slots that already hold the template are skipped. Returns the count added.
        """
        if self.schedule_manager.get_current_week_data() is None:
            return 0

        settings = self._get_settings()
        sleep = settings.sleep_schedule
        added = 0

        if sleep.enabled:
            sleep_item = standard_item(SLEEP_TASK_NAME)
            wake_item = standard_item(WAKE_TASK_NAME)
            for day in range(DAYS_IN_WEEK):
                if day not in sleep.exclude_sleep_days and self._insert_if_missing(day, sleep.sleep_time, sleep_item):
                    added += 1
                if day not in sleep.exclude_wake_days and self._insert_if_missing(day, sleep.wake_time, wake_item):
                    added += 1

        for standard in settings.standard_items:
            template = standard_item(standard.name, standard.description, standard.category_id)
            for day, hours in standard.schedule.items():
                for hour in hours:
                    if self._insert_if_missing(day, hour, template):
                        added += 1

        self.schedule_manager.save_year_data()
        logger.info(f"Populated {added} standard tasks into week {self.schedule_manager.current_week}")
        return added

    def update_standard_task(self, old_name: str, new_task: StandardItemConfig) -> int:
        """Replace the viewed week's instances of `old_name` with the slots of `new_task`."""
        week = self.schedule_manager.get_current_week_data()
        if week is None:
            return 0

        for day, hour, items in list(week.iter_cells()):
            week.schedule[day][hour] = [i for i in items if not _is_instance_of(i, old_name)]

        template = standard_item(new_task.name, new_task.description, new_task.category_id)
        added = 0
        for day, hours in new_task.schedule.items():
            for hour in hours:
                self.schedule_manager.add_item_to_schedule(day, hour, template)
                added += 1

        self.schedule_manager.save_year_data()
        logger.info(f"Standard task '{old_name}' -> '{new_task.name}': {added} slots")
        return added

    def clear_non_standard_tasks(self) -> int:
        week = self.schedule_manager.get_current_week_data()
        if week is None:
            return 0

        cleared = 0
        for day, hour, items in list(week.iter_cells()):
            kept = [i for i in items if i.is_standard]
            cleared += len(items) - len(kept)
            week.schedule[day][hour] = kept

        self.schedule_manager.save_year_data()
        logger.info(f"Cleared {cleared} non-standard tasks")
        return cleared
