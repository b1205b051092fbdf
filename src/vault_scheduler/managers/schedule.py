"""
Schedule Manager
Week/year navigation plus CRUD for weekly cells and monthly task lists.

A deadline item lives in two places: the monthly list of its date's month
and the weekly cell (weekday, hour) of the ISO week containing that date.
Both copies are kept in step on add, update and remove. The two writes are
not transactional.
"""
from datetime import date
from typing import Any, Callable, Dict, Iterable, List, Optional, Set, Tuple

from loguru import logger
from pydantic import BaseModel, Field

from vault_scheduler import dates
from vault_scheduler.data_manager import DataManager
from vault_scheduler.models import (
    CategoryConfig,
    Direction,
    ItemType,
    SchedulerItem,
    SchedulerSettings,
    WeekData,
    YearData,
    generate_id,
)

GROUPED_TYPES = (ItemType.DEADLINE, ItemType.GOAL, ItemType.TASK)


class UpdateResult(BaseModel):
    """Which collections `update_item` touched and must be saved."""
    needs_save_backlog: bool = False
    needs_save_goals: bool = False
    needs_save_year: bool = False


class RemoveResult(UpdateResult):
    """Save flags plus the filtered goals/backlog lists."""
    new_goals: List[SchedulerItem] = Field(default_factory=list)
    new_backlog: List[SchedulerItem] = Field(default_factory=list)


def matches_type_group(item: SchedulerItem, task_type: str) -> bool:
    """Monthly type groups; 'regular' collects everything that is not deadline/goal/task."""
    if task_type == "regular":
        return item.item_type not in GROUPED_TYPES
    return item.item_type.value == task_type


def swap_with_neighbour(items: List[SchedulerItem], group: List[SchedulerItem], item_id: str,
                        direction: Direction | str) -> bool:
    """
    Swap `item_id` in `items` with its neighbour inside `group` (a filtered
    view of `items`). Returns False when the item is missing or already at
    the edge of its group.
    """
    direction = Direction(direction)
    index_in_group = next((i for i, it in enumerate(group) if it.id == item_id), -1)
    if index_in_group == -1:
        return False

    if direction is Direction.UP and index_in_group > 0:
        other = group[index_in_group - 1]
    elif direction is Direction.DOWN and index_in_group < len(group) - 1:
        other = group[index_in_group + 1]
    else:
        return False

    a = next(i for i, it in enumerate(items) if it.id == item_id)
    b = next(i for i, it in enumerate(items) if it.id == other.id)
    items[a], items[b] = items[b], items[a]
    return True


def deadline_years(item: Optional[SchedulerItem]) -> Set[int]:
    """Year files that may hold copies of a deadline item (calendar year and ISO week-year)."""
    if item is None or item.item_type != ItemType.DEADLINE or not item.deadline_date:
        return set()
    try:
        d = dates.from_iso_date_string(item.deadline_date)
    except ValueError:
        return set()
    week_number = dates.get_week_number(d)
    return {d.year, dates.get_year_for_week(week_number, d)}


def _update_copies(year_data: YearData, item_id: str, updates: Dict[str, Any]) -> bool:
    changed = False
    for week in year_data.weeks:
        for _, _, items in week.iter_cells():
            for index, item in enumerate(items):
                if item.id == item_id:
                    items[index] = item.merged(updates)
                    changed = True

    for items in year_data.monthly_tasks.values():
        for index, item in enumerate(items):
            if item.id == item_id:
                items[index] = item.merged(updates)
                changed = True
    return changed


def _remove_copies(year_data: YearData, item_id: str) -> bool:
    changed = False
    for week in year_data.weeks:
        for day, hour, items in list(week.iter_cells()):
            kept = [i for i in items if i.id != item_id]
            if len(kept) < len(items):
                week.schedule[day][hour] = kept
                changed = True

    for month, items in year_data.monthly_tasks.items():
        kept = [i for i in items if i.id != item_id]
        if len(kept) < len(items):
            year_data.monthly_tasks[month] = kept
            changed = True
    return changed


def _find_cell(year_data: YearData, item_id: str) -> Optional[Tuple[int, int, int]]:
    """(week number, day, hour) of the first weekly copy of the item."""
    for week in year_data.weeks:
        for day, hour, items in week.iter_cells():
            if any(i.id == item_id for i in items):
                return week.week_number, day, hour
    return None


def _find_in_year(year_data: YearData, item_id: str) -> Optional[SchedulerItem]:
    for week in year_data.weeks:
        for _, _, items in week.iter_cells():
            found = next((i for i in items if i.id == item_id), None)
            if found:
                return found

    for items in year_data.monthly_tasks.values():
        found = next((i for i in items if i.id == item_id), None)
        if found:
            return found
    return None


class ScheduleManager:
    """
    Owns the loaded YearData and the week/year being viewed.
    """

    def __init__(
        self,
        data_manager: DataManager,
        current_week: int,
        current_year: int,
        get_settings: Callable[[], SchedulerSettings],
    ):
        self.data_manager = data_manager
        self.current_week = current_week
        self.current_year = current_year
        self._get_settings = get_settings
        self._year_data: Optional[YearData] = None

    # ---- persistence ----

    def load_year_data(self, year: int) -> None:
        self._year_data = self.data_manager.load_year_data(year)

    def save_year_data(self) -> None:
        if self._year_data is None:
            return
        self.data_manager.save_year_data(self._year_data)

    def get_year_data(self) -> Optional[YearData]:
        return self._year_data

    # ---- navigation ----

    def _set_week(self, week_number: int, year: int) -> None:
        if year != self.current_year or self._year_data is None:
            self.current_year = year
            self.load_year_data(year)
        self.current_week = week_number
        logger.debug(f"Viewing week {week_number} of {year}")

    def change_week(self, delta: int) -> None:
        current_monday = dates.get_date_of_week(self.current_week, self.current_year)
        new_monday = dates.add_weeks(current_monday, delta)
        week_number = dates.get_week_number(new_monday)
        self._set_week(week_number, dates.get_year_for_week(week_number, new_monday))

    def change_year(self, delta: int) -> None:
        self.current_year += delta
        self.load_year_data(self.current_year)

    def go_to_date(self, target: date) -> None:
        """Jump to the ISO week that contains `target`."""
        week_number = dates.get_week_number(target)
        self._set_week(week_number, dates.get_year_for_week(week_number, target))

    def go_to_current_week(self, today: Optional[date] = None) -> None:
        self.go_to_date(today or date.today())

    def go_to_current_year(self, today: Optional[date] = None) -> None:
        year = (today or date.today()).year
        if year != self.current_year:
            self.current_year = year
            self.load_year_data(year)

    # ---- lookups ----

    def _week_of(self, year_data: YearData, week_number: int, year: int) -> WeekData:
        week = year_data.find_week(week_number)
        if week is None:
            start = dates.get_date_of_week(week_number, year)
            week = WeekData(
                week_number=week_number,
                start_date=dates.to_iso_date_string(start),
                end_date=dates.to_iso_date_string(dates.get_sunday(start)),
                schedule=self.data_manager.create_empty_weekly_schedule(),
            )
            year_data.weeks.append(week)
        return week

    def get_current_week_data(self) -> Optional[WeekData]:
        """The viewed week, created on first access."""
        if self._year_data is None:
            return None
        return self._week_of(self._year_data, self.current_week, self.current_year)

    def get_items_for_cell(self, day: int, hour: int) -> List[SchedulerItem]:
        week = self.get_current_week_data()
        if week is None:
            return []
        return week.schedule.get(day, {}).get(hour, [])

    def get_monthly_tasks(self, month: int) -> List[SchedulerItem]:
        if self._year_data is None:
            return []
        return self._year_data.monthly_tasks.get(month, [])

    def get_category_by_id(self, category_id: str) -> Optional[CategoryConfig]:
        return self._get_settings().get_category(category_id)

    def find_item_by_id(self, item_id: str, backlog_items: List[SchedulerItem],
                        general_goals: List[SchedulerItem]) -> Optional[SchedulerItem]:
        if self._year_data is None:
            return None
        found = _find_in_year(self._year_data, item_id)
        if found:
            return found
        found = next((i for i in general_goals if i.id == item_id), None)
        if found:
            return found
        return next((i for i in backlog_items if i.id == item_id), None)

    # ---- cross-year helpers ----

    def _open_year(self, year: int, others: Dict[int, YearData]) -> YearData:
        """The loaded YearData for the current year, otherwise a lazily loaded file kept in `others`."""
        if self._year_data is not None and year == self._year_data.year:
            return self._year_data
        if year not in others:
            others[year] = self.data_manager.load_year_data(year)
        return others[year]

    def _save_others(self, others: Dict[int, YearData], dirty: Iterable[int]) -> None:
        for year in sorted(set(dirty)):
            if year in others:
                self.data_manager.save_year_data(others[year])
                logger.info(f"Mirrored deadline change into {year}.json")

    def _place_in_month(self, item: SchedulerItem, others: Dict[int, YearData]) -> int:
        d = dates.from_iso_date_string(item.deadline_date)
        self._open_year(d.year, others).month(d.month - 1).append(item)
        return d.year

    def _place_in_week(self, item: SchedulerItem, others: Dict[int, YearData]) -> int:
        """Mirror a deadline into the weekly cell of its date. Returns the year file touched."""
        d = dates.from_iso_date_string(item.deadline_date)
        week_number = dates.get_week_number(d)
        week_year = dates.get_year_for_week(week_number, d)
        week = self._week_of(self._open_year(week_year, others), week_number, week_year)
        cell = week.cell(d.weekday(), item.deadline_hour)
        if not any(i.id == item.id for i in cell):
            cell.append(item.model_copy(deep=True))
        return week_year

    # ---- mutations ----

    def reorder_monthly_task(self, item_id: str, month: int, task_type: str, direction: Direction | str) -> bool:
        if self._year_data is None:
            return False
        tasks = self._year_data.monthly_tasks.get(month)
        if not tasks:
            return False

        group = [t for t in tasks if matches_type_group(t, task_type)]
        if not swap_with_neighbour(tasks, group, item_id, direction):
            return False
        self.save_year_data()
        return True

    def add_item_to_schedule(self, day: int, hour: int, item: SchedulerItem) -> Optional[SchedulerItem]:
        """Add a copy of `item` to a cell of the viewed week. Deadlines also land in their month."""
        week = self.get_current_week_data()
        if week is None:
            return None

        new_item = item.model_copy(update={"id": generate_id("item")}, deep=True)
        others: Dict[int, YearData] = {}
        dirty: List[int] = []

        if new_item.item_type == ItemType.DEADLINE:
            cell_date = dates.date_in_week(self.current_week, self.current_year, day)
            new_item.deadline_date = dates.to_iso_date_string(cell_date)
            new_item.deadline_hour = hour
            dirty.append(self._place_in_month(new_item.model_copy(deep=True), others))

        week.cell(day, hour).append(new_item)
        self._save_others(others, dirty)
        self.save_year_data()
        logger.debug(f"Added '{new_item.name}' ({new_item.item_type.value}) to day {day} {hour:02d}:00")
        return new_item

    def add_monthly_task(self, month: int, item: SchedulerItem) -> Optional[SchedulerItem]:
        if self._year_data is None:
            return None

        new_item = item.model_copy(update={"id": generate_id("task")}, deep=True)
        self._year_data.month(month).append(new_item)

        others: Dict[int, YearData] = {}
        if new_item.item_type == ItemType.DEADLINE and new_item.deadline_date and new_item.deadline_hour is not None:
            self._save_others(others, [self._place_in_week(new_item, others)])

        self.save_year_data()
        logger.debug(f"Added monthly task '{new_item.name}' to month {month}")
        return new_item

    def update_item(self, item_id: str, updates: Dict[str, Any], backlog_items: List[SchedulerItem],
                    general_goals: List[SchedulerItem]) -> UpdateResult:
        """
        Apply `updates` to every copy of the item. Goals and backlog lists are
        modified in place; the result says which collections need saving.
        """
        result = UpdateResult()
        if self._year_data is None:
            return result

        others: Dict[int, YearData] = {}
        dirty: Set[int] = set()
        loaded_year = self._year_data.year

        before = self.find_item_by_id(item_id, backlog_items, general_goals)
        years = {loaded_year} | deadline_years(before)

        # 1) weekly and monthly copies
        for year in years:
            if _update_copies(self._open_year(year, others), item_id, updates):
                if year == loaded_year:
                    result.needs_save_year = True
                else:
                    dirty.add(year)

        # 2) general goals
        for index, goal in enumerate(general_goals):
            if goal.id == item_id:
                general_goals[index] = goal.merged(updates)
                result.needs_save_goals = True

        # 3) backlog
        for index, entry in enumerate(backlog_items):
            if entry.id == item_id:
                backlog_items[index] = entry.merged(updates)
                result.needs_save_backlog = True

        updated = self.find_item_by_id(item_id, backlog_items, general_goals)

        # 4) a weekly item turned deadline without a date is due at its own cell
        if updated is not None and updated.item_type == ItemType.DEADLINE and not updated.deadline_date:
            slot = _find_cell(self._year_data, item_id)
            if slot is not None:
                week_number, day, hour = slot
                cell_date = dates.date_in_week(week_number, loaded_year, day)
                _update_copies(self._year_data, item_id, {
                    "deadline_date": dates.to_iso_date_string(cell_date),
                    "deadline_hour": hour,
                })
                result.needs_save_year = True
                updated = self.find_item_by_id(item_id, backlog_items, general_goals)

        # 5) deadline relocation
        if (updated is not None and updated.item_type == ItemType.DEADLINE
                and updated.deadline_date and updated.deadline_hour is not None):
            for year in years | deadline_years(updated):
                if _remove_copies(self._open_year(year, others), item_id):
                    if year == loaded_year:
                        result.needs_save_year = True
                    else:
                        dirty.add(year)

            for year in (self._place_in_month(updated.model_copy(deep=True), others),
                         self._place_in_week(updated, others)):
                if year == loaded_year:
                    result.needs_save_year = True
                else:
                    dirty.add(year)
            logger.debug(f"Relocated deadline {item_id} to {updated.deadline_date} {updated.deadline_hour:02d}:00")

        self._save_others(others, dirty)
        return result

    def remove_item(self, item_id: str, backlog_items: List[SchedulerItem],
                    general_goals: List[SchedulerItem]) -> RemoveResult:
        if self._year_data is None:
            return RemoveResult(new_goals=list(general_goals), new_backlog=list(backlog_items))

        others: Dict[int, YearData] = {}
        dirty: Set[int] = set()
        result = RemoveResult()

        found = self.find_item_by_id(item_id, backlog_items, general_goals)
        for year in {self._year_data.year} | deadline_years(found):
            if _remove_copies(self._open_year(year, others), item_id):
                if year == self._year_data.year:
                    result.needs_save_year = True
                else:
                    dirty.add(year)

        result.new_goals = [g for g in general_goals if g.id != item_id]
        result.needs_save_goals = len(result.new_goals) < len(general_goals)
        result.new_backlog = [b for b in backlog_items if b.id != item_id]
        result.needs_save_backlog = len(result.new_backlog) < len(backlog_items)

        self._save_others(others, dirty)
        return result

    def clear_month_tasks(self, month: int) -> int:
        if self._year_data is None:
            return 0
        cleared = len(self._year_data.monthly_tasks.get(month, []))
        self._year_data.monthly_tasks[month] = []
        self.save_year_data()
        logger.info(f"Cleared {cleared} tasks from month {month}")
        return cleared

    def clear_all_tasks(self) -> int:
        """Empty every cell of the viewed week, standard items included."""
        week = self.get_current_week_data()
        if week is None:
            return 0

        cleared = 0
        for day, hour, items in list(week.iter_cells()):
            cleared += len(items)
            week.schedule[day][hour] = []

        self.save_year_data()
        logger.info(f"Cleared all {cleared} tasks from week {self.current_week}")
        return cleared
