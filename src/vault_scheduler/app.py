"""
Scheduler Application
Wires the data layer and the managers together and exposes one method per
user action. The CLI (and tests) talk only to this class.
"""
from datetime import date
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from vault_scheduler import dates
from vault_scheduler.config import SchedulerConfig
from vault_scheduler.data_manager import DataManager
from vault_scheduler.managers import (
    BacklogManager,
    GoalsManager,
    RemoveResult,
    ScheduleManager,
    SettingsManager,
    StandardTasksManager,
    UpdateResult,
)
from vault_scheduler.models import (
    CategoryConfig,
    Direction,
    ItemType,
    SchedulerItem,
    SchedulerSettings,
    WeekData,
    YearData,
    default_settings,
)

Notifier = Callable[[str], None]


class SchedulerApp:
    """
    Facade over the scheduler managers.

    Data is loaded lazily by `ensure_data_loaded()`; every mutating method
    calls it first, so callers never see half-initialised state.
    """

    def __init__(
        self,
        data_manager: DataManager,
        today: Optional[date] = None,
        notify: Optional[Notifier] = None,
    ):
        self.data_manager = data_manager
        self.today = today
        self._notify = notify
        self.settings: SchedulerSettings = default_settings()
        self.data_loaded = False

        info = dates.get_current_week_info(today)
        self.backlog = BacklogManager(data_manager, self._get_settings, self.save_settings)
        self.goals = GoalsManager(data_manager)
        self.schedule = ScheduleManager(data_manager, info.week_number, info.year, self._get_settings)
        self.standard_tasks = StandardTasksManager(self.schedule, self._get_settings)
        self.settings_manager = SettingsManager(self._get_settings, self.save_settings, self.standard_tasks)

    @classmethod
    def from_config(cls, config: SchedulerConfig, **kwargs: Any) -> "SchedulerApp":
        return cls(DataManager(config.system.vault_path, config.system.data_folder), **kwargs)

    def _get_settings(self) -> SchedulerSettings:
        return self.settings

    def notify(self, message: str) -> None:
        if self._notify and self.settings.show_notifications:
            self._notify(message)

    # ---- loading ----

    def ensure_data_loaded(self) -> None:
        if self.data_loaded:
            return
        self.load_settings()
        self.backlog.load_backlog()
        self.goals.load_goals()
        self.schedule.load_year_data(self.schedule.current_year)
        self.data_loaded = True
        logger.info(f"Scheduler data loaded from {self.data_manager.data_dir}")

    def load_settings(self) -> None:
        self.settings = self.data_manager.load_settings()

    def save_settings(self) -> None:
        self.data_manager.save_settings(self.settings)

    # ---- view state ----

    @property
    def current_week(self) -> int:
        return self.schedule.current_week

    @property
    def current_year(self) -> int:
        return self.schedule.current_year

    @property
    def current_year_data(self) -> Optional[YearData]:
        self.ensure_data_loaded()
        return self.schedule.get_year_data()

    def get_current_week_data(self) -> Optional[WeekData]:
        self.ensure_data_loaded()
        return self.schedule.get_current_week_data()

    def get_items_for_cell(self, day: int, hour: int) -> List[SchedulerItem]:
        self.ensure_data_loaded()
        return self.schedule.get_items_for_cell(day, hour)

    def get_monthly_tasks(self, month: int) -> List[SchedulerItem]:
        self.ensure_data_loaded()
        return self.schedule.get_monthly_tasks(month)

    def get_category_by_id(self, category_id: str) -> Optional[CategoryConfig]:
        return self.schedule.get_category_by_id(category_id)

    def get_backlog_items(self) -> List[SchedulerItem]:
        self.ensure_data_loaded()
        return self.backlog.get_backlog_items()

    def get_general_goals(self) -> List[SchedulerItem]:
        self.ensure_data_loaded()
        return self.goals.get_general_goals()

    def find_item(self, item_id: str) -> Optional[SchedulerItem]:
        self.ensure_data_loaded()
        return self.schedule.find_item_by_id(item_id, self.backlog.get_backlog_items(),
                                             self.goals.get_general_goals())

    # ---- navigation ----

    def change_week(self, delta: int) -> None:
        self.ensure_data_loaded()
        self.schedule.change_week(delta)

    def change_year(self, delta: int) -> None:
        self.ensure_data_loaded()
        self.schedule.change_year(delta)

    def go_to_date(self, target: date) -> None:
        self.ensure_data_loaded()
        self.schedule.go_to_date(target)

    def go_to_current_week(self) -> None:
        self.ensure_data_loaded()
        self.schedule.go_to_current_week(self.today)

    def go_to_current_year(self) -> None:
        self.ensure_data_loaded()
        self.schedule.go_to_current_year(self.today)

    # ---- items ----

    def add_item_to_schedule(self, day: int, hour: int, item: SchedulerItem) -> Optional[SchedulerItem]:
        self.ensure_data_loaded()
        return self.schedule.add_item_to_schedule(day, hour, item)

    def add_monthly_task(self, month: int, item: SchedulerItem) -> Optional[SchedulerItem]:
        self.ensure_data_loaded()
        return self.schedule.add_monthly_task(month, item)

    def add_backlog_item(self, item: SchedulerItem) -> SchedulerItem:
        self.ensure_data_loaded()
        return self.backlog.add_backlog_item(item)

    def add_general_goal(self, item: SchedulerItem) -> SchedulerItem:
        self.ensure_data_loaded()
        return self.goals.add_general_goal(item)

    def update_item(self, item_id: str, updates: Dict[str, Any]) -> UpdateResult:
        """Apply `updates` to every copy of the item and save whatever changed."""
        self.ensure_data_loaded()
        result = self.schedule.update_item(item_id, updates, self.backlog.get_backlog_items(),
                                           self.goals.get_general_goals())
        if result.needs_save_backlog:
            self.backlog.save_backlog()
        if result.needs_save_goals:
            self.goals.save_goals()
        if result.needs_save_year:
            self.schedule.save_year_data()
        return result

    def remove_item(self, item_id: str) -> RemoveResult:
        self.ensure_data_loaded()
        result = self.schedule.remove_item(item_id, self.backlog.get_backlog_items(),
                                           self.goals.get_general_goals())
        if result.needs_save_goals:
            self.goals.update_goals(result.new_goals)
            self.goals.save_goals()
        if result.needs_save_backlog:
            self.backlog.update_items(result.new_backlog)
            self.backlog.save_backlog()
        if result.needs_save_year:
            self.schedule.save_year_data()
        return result

    def toggle_task_complete(self, item_id: str) -> Optional[bool]:
        """Flip a task's checkbox. Returns the new state, or None when the item is not a task."""
        item = self.find_item(item_id)
        if item is None or item.item_type != ItemType.TASK:
            return None
        completed = not item.completed
        self.update_item(item_id, {"completed": completed})
        return completed

    def schedule_backlog_item(self, item_id: str, day: int, hour: int) -> Optional[SchedulerItem]:
        """Copy a backlog item into a cell of the viewed week and drop it from the backlog."""
        self.ensure_data_loaded()
        item = self.backlog.find_backlog_item_by_id(item_id)
        if item is None:
            return None
        scheduled = self.add_item_to_schedule(day, hour, item)
        self.remove_item(item_id)
        return scheduled

    # ---- reordering ----

    def reorder_monthly_task(self, item_id: str, month: int, task_type: str, direction: Direction | str) -> bool:
        self.ensure_data_loaded()
        return self.schedule.reorder_monthly_task(item_id, month, task_type, direction)

    def reorder_backlog_item_in_category(self, item_id: str, category_id: str, direction: Direction | str) -> bool:
        self.ensure_data_loaded()
        return self.backlog.reorder_backlog_item_in_category(item_id, category_id, direction)

    def reorder_general_goal(self, item_id: str, direction: Direction | str) -> bool:
        self.ensure_data_loaded()
        return self.goals.reorder_general_goal(item_id, direction)

    # ---- bulk actions ----

    def toggle_backlog_sidebar(self) -> bool:
        self.ensure_data_loaded()
        return self.backlog.toggle_backlog_sidebar()

    def clear_backlog_items(self) -> int:
        self.ensure_data_loaded()
        return self.backlog.clear_backlog_items()

    def clear_general_goals(self) -> int:
        self.ensure_data_loaded()
        return self.goals.clear_general_goals()

    def clear_category_goals(self, category_id: str) -> int:
        self.ensure_data_loaded()
        return self.goals.clear_category_goals(category_id)

    def clear_month_tasks(self, month: int) -> int:
        self.ensure_data_loaded()
        return self.schedule.clear_month_tasks(month)

    def populate_standard_tasks(self) -> int:
        self.ensure_data_loaded()
        added = self.standard_tasks.populate_standard_tasks()
        self.notify(f"Added {added} standard tasks to week {self.current_week}")
        return added

    def clear_non_standard_tasks(self) -> int:
        self.ensure_data_loaded()
        cleared = self.standard_tasks.clear_non_standard_tasks()
        self.notify(f"Cleared {cleared} non-standard tasks")
        return cleared

    def clear_all_tasks(self) -> int:
        self.ensure_data_loaded()
        cleared = self.schedule.clear_all_tasks()
        self.notify(f"Cleared all {cleared} tasks from week {self.current_week}")
        return cleared
