"""
Settings Manager
Category, sleep schedule and recurring-task configuration. Every mutation is
saved immediately.
"""
from typing import Callable, Optional

from loguru import logger

from vault_scheduler.managers.standard_tasks import StandardTasksManager
from vault_scheduler.models import (
    DAYS_IN_WEEK,
    CategoryConfig,
    SchedulerError,
    SchedulerSettings,
    StandardItemConfig,
    generate_id,
)

DEFAULT_CATEGORY_COLOR = "#95A5A6"


class SettingsManager:

    def __init__(
        self,
        get_settings: Callable[[], SchedulerSettings],
        save_settings: Callable[[], None],
        standard_tasks: StandardTasksManager,
    ):
        self._get_settings = get_settings
        self._save_settings = save_settings
        self.standard_tasks = standard_tasks

    @property
    def settings(self) -> SchedulerSettings:
        return self._get_settings()

    # ---- categories ----

    def add_category(self, name: str = "New Category", color: str = DEFAULT_CATEGORY_COLOR) -> CategoryConfig:
        category = CategoryConfig(id=generate_id("category"), name=name, color=color)
        self.settings.categories.append(category)
        self._save_settings()
        logger.info(f"Added category '{name}'")
        return category

    def update_category(self, category_id: str, name: Optional[str] = None, color: Optional[str] = None) -> CategoryConfig:
        category = self.settings.get_category(category_id)
        if category is None:
            raise SchedulerError(f"Unknown category: {category_id}")
        if name is not None:
            category.name = name
        if color is not None:
            category.color = color
        self._save_settings()
        return category

    def delete_category(self, category_id: str) -> CategoryConfig:
        """Items keep the dangling id; they render under 'Uncategorized'."""
        category = self.settings.get_category(category_id)
        if category is None:
            raise SchedulerError(f"Unknown category: {category_id}")
        self.settings.categories.remove(category)
        self._save_settings()
        logger.info(f"Deleted category '{category.name}'")
        return category

    # ---- sleep schedule ----

    def set_sleep_enabled(self, enabled: bool) -> None:
        self.settings.sleep_schedule.enabled = enabled
        self._save_settings()

    def set_sleep_time(self, hour: int) -> None:
        self.settings.sleep_schedule.sleep_time = _check_hour(hour)
        self._save_settings()

    def set_wake_time(self, hour: int) -> None:
        self.settings.sleep_schedule.wake_time = _check_hour(hour)
        self._save_settings()

    def toggle_wake_exclusion(self, day: int) -> bool:
        """Returns True when `day` is now excluded."""
        return self._toggle_day(self.settings.sleep_schedule.exclude_wake_days, day)

    def toggle_sleep_exclusion(self, day: int) -> bool:
        return self._toggle_day(self.settings.sleep_schedule.exclude_sleep_days, day)

    def _toggle_day(self, days: list, day: int) -> bool:
        if not 0 <= day < DAYS_IN_WEEK:
            raise SchedulerError(f"Day must be 0-6, got {day}")
        if day in days:
            days.remove(day)
            excluded = False
        else:
            days.append(day)
            days.sort()
            excluded = True
        self._save_settings()
        return excluded

    # ---- recurring tasks ----

    def add_standard_task(self, task: StandardItemConfig) -> None:
        self.settings.standard_items.append(task)
        self._save_settings()
        logger.info(f"Added recurring task '{task.name}'")

    def edit_standard_task(self, index: int, task: StandardItemConfig) -> int:
        """Replace template `index` and rebuild its instances in the viewed week."""
        items = self.settings.standard_items
        if not 0 <= index < len(items):
            raise SchedulerError(f"No recurring task at position {index}")
        old_name = items[index].name
        items[index] = task
        self._save_settings()
        return self.standard_tasks.update_standard_task(old_name, task)

    def delete_standard_task(self, index: int) -> StandardItemConfig:
        items = self.settings.standard_items
        if not 0 <= index < len(items):
            raise SchedulerError(f"No recurring task at position {index}")
        removed = items.pop(index)
        self._save_settings()
        logger.info(f"Deleted recurring task '{removed.name}'")
        return removed

    def set_show_notifications(self, enabled: bool) -> None:
        self.settings.show_notifications = enabled
        self._save_settings()


def _check_hour(hour: int) -> int:
    if not 0 <= hour <= 23:
        raise SchedulerError(f"Hour must be 0-23, got {hour}")
    return hour
