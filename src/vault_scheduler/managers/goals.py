"""
Goals Manager
General (undated) goals, grouped by category.
"""
from typing import List, Optional

from loguru import logger

from vault_scheduler.data_manager import DataManager
from vault_scheduler.managers.schedule import swap_with_neighbour
from vault_scheduler.models import Direction, ItemType, SchedulerItem, generate_id


class GoalsManager:

    def __init__(self, data_manager: DataManager):
        self.data_manager = data_manager
        self.general_goals: List[SchedulerItem] = []

    def load_goals(self) -> None:
        self.general_goals = self.data_manager.load_goals()
        logger.debug(f"Goals loaded: {len(self.general_goals)} items")

    def save_goals(self) -> None:
        self.data_manager.save_goals(self.general_goals)

    def get_general_goals(self) -> List[SchedulerItem]:
        return self.general_goals

    def add_general_goal(self, item: SchedulerItem) -> SchedulerItem:
        """Store a copy of `item` as a goal, whatever type it was created with."""
        new_item = item.model_copy(update={"id": generate_id("goal"), "item_type": ItemType.GOAL}, deep=True)
        self.general_goals.append(new_item)
        self.save_goals()
        return new_item

    def clear_general_goals(self) -> int:
        cleared = len(self.general_goals)
        self.general_goals = []
        self.save_goals()
        logger.info(f"General goals cleared ({cleared} items)")
        return cleared

    def clear_category_goals(self, category_id: str) -> int:
        kept = [g for g in self.general_goals if g.category_id != category_id]
        cleared = len(self.general_goals) - len(kept)
        self.general_goals = kept
        self.save_goals()
        logger.info(f"Cleared {cleared} goals in category '{category_id}'")
        return cleared

    def reorder_general_goal(self, item_id: str, direction: Direction | str) -> bool:
        goal = self.find_goal_by_id(item_id)
        if goal is None:
            return False
        group = [g for g in self.general_goals if g.category_id == goal.category_id]
        if not swap_with_neighbour(self.general_goals, group, item_id, direction):
            return False
        self.save_goals()
        return True

    def update_goals(self, items: List[SchedulerItem]) -> None:
        self.general_goals = items

    def find_goal_by_id(self, item_id: str) -> Optional[SchedulerItem]:
        return next((g for g in self.general_goals if g.id == item_id), None)
