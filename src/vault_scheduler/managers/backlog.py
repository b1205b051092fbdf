"""
Backlog Manager
Unscheduled items, grouped by category in the sidebar.
"""
from typing import Callable, List, Optional

from loguru import logger

from vault_scheduler.data_manager import DataManager
from vault_scheduler.managers.schedule import swap_with_neighbour
from vault_scheduler.models import Direction, SchedulerItem, SchedulerSettings, generate_id


class BacklogManager:

    def __init__(
        self,
        data_manager: DataManager,
        get_settings: Callable[[], SchedulerSettings],
        save_settings: Callable[[], None],
    ):
        self.data_manager = data_manager
        self._get_settings = get_settings
        self._save_settings = save_settings
        self.backlog_items: List[SchedulerItem] = []

    def load_backlog(self) -> None:
        self.backlog_items = self.data_manager.load_backlog()
        logger.debug(f"Backlog loaded: {len(self.backlog_items)} items")

    def save_backlog(self) -> None:
        self.data_manager.save_backlog(self.backlog_items)

    def get_backlog_items(self) -> List[SchedulerItem]:
        return self.backlog_items

    def add_backlog_item(self, item: SchedulerItem) -> SchedulerItem:
        new_item = item.model_copy(update={"id": generate_id("backlog")}, deep=True)
        self.backlog_items.append(new_item)
        self.save_backlog()
        return new_item

    def clear_backlog_items(self) -> int:
        cleared = len(self.backlog_items)
        self.backlog_items = []
        self.save_backlog()
        logger.info(f"Backlog cleared ({cleared} items)")
        return cleared

    def reorder_backlog_item_in_category(self, item_id: str, category_id: str, direction: Direction | str) -> bool:
        """Move an item past its neighbour within the same category."""
        group = [i for i in self.backlog_items if i.category_id == category_id]
        if not swap_with_neighbour(self.backlog_items, group, item_id, direction):
            return False
        self.save_backlog()
        return True

    def toggle_backlog_sidebar(self) -> bool:
        settings = self._get_settings()
        settings.backlog_expanded = not settings.backlog_expanded
        self._save_settings()
        return settings.backlog_expanded

    def update_items(self, items: List[SchedulerItem]) -> None:
        self.backlog_items = items

    def find_backlog_item_by_id(self, item_id: str) -> Optional[SchedulerItem]:
        return next((i for i in self.backlog_items if i.id == item_id), None)
