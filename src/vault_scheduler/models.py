"""
Scheduler Data Model
Pydantic schemas for everything stored in the vault's SchedulerData folder.

Field names are snake_case in Python and camelCase on disk, so the JSON files
stay readable by the Obsidian plugin that shares the vault.
"""
import random
import string
import time
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel


DAYS_IN_WEEK = 7
HOURS_IN_DAY = 24
MONTHS_IN_YEAR = 12

DAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]
MONTH_NAMES = [
    "January", "February", "March", "April", "May", "June",
    "July", "August", "September", "October", "November", "December",
]


class SchedulerError(Exception):
    """Base error for scheduler operations."""


def generate_id(prefix: str) -> str:
    """Ids look like `item-1700000000000-k3j9x0a1b`: prefix, epoch millis, 9 base36 chars."""
    suffix = "".join(random.choices(string.ascii_lowercase + string.digits, k=9))
    return f"{prefix}-{int(time.time() * 1000)}-{suffix}"


class ItemType(str, Enum):
    """Kinds of scheduler items. Display order is deadline, goal, task, regular."""
    REGULAR = "regular"
    TASK = "task"
    GOAL = "goal"
    DEADLINE = "deadline"


class Direction(str, Enum):
    UP = "up"
    DOWN = "down"


class VaultModel(BaseModel):
    """
    Base schema: camelCase aliases on disk, snake_case names in code.
    Keys written by the plugin that are not modelled here survive a save.
    """
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="allow")

    def to_json_dict(self) -> Dict[str, Any]:
        """Dump in the on-disk shape (aliases, string keys, no nulls)."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class CategoryConfig(VaultModel):
    id: str
    name: str
    color: str = "#95A5A6"


class SchedulerItem(VaultModel):
    """A single entry shown in a weekly cell, a month, the goals list or the backlog."""

    id: str = ""
    name: str
    description: str = ""
    category_id: str = ""
    item_type: ItemType = ItemType.REGULAR
    completed: Optional[bool] = None
    is_standard: Optional[bool] = None
    standard_task_name: Optional[str] = None
    deadline_date: Optional[str] = None
    deadline_hour: Optional[int] = Field(default=None, ge=0, le=23)

    @field_validator("item_type", mode="before")
    @classmethod
    def _unknown_type_is_regular(cls, value: Any) -> Any:
        if isinstance(value, ItemType):
            return value
        if isinstance(value, str) and value in {t.value for t in ItemType}:
            return value
        return ItemType.REGULAR

    def merged(self, updates: Dict[str, Any]) -> "SchedulerItem":
        """Return a validated copy with `updates` (field names or aliases) applied."""
        aliases = {field.alias: name for name, field in SchedulerItem.model_fields.items() if field.alias}
        data = self.model_dump()
        data.update({aliases.get(key, key): value for key, value in updates.items()})
        return SchedulerItem.model_validate(data)


class StandardItemConfig(VaultModel):
    """Recurring task template: which hours it occupies on each weekday (0 = Monday)."""
    name: str
    description: str = ""
    category_id: str = "other"
    schedule: Dict[int, List[int]] = Field(default_factory=dict)

    @model_validator(mode="before")
    @classmethod
    def _migrate_days_hours(cls, data: Any) -> Any:
        # Older settings stored `days` + `hours`; an empty `days` meant every day.
        if not isinstance(data, dict) or "schedule" in data or "hours" not in data:
            return data
        data = dict(data)
        days = data.pop("days", None) or list(range(DAYS_IN_WEEK))
        hours = sorted(set(data.pop("hours") or []))
        data["schedule"] = {day: list(hours) for day in days} if hours else {}
        return data

    def has_slots(self) -> bool:
        return any(self.schedule.values())


class SleepSchedule(VaultModel):
    enabled: bool = True
    sleep_time: int = Field(default=22, ge=0, le=23)
    wake_time: int = Field(default=4, ge=0, le=23)
    exclude_wake_days: List[int] = Field(default_factory=list)
    exclude_sleep_days: List[int] = Field(default_factory=list)


class SchedulerSettings(VaultModel):
    categories: List[CategoryConfig] = Field(default_factory=list)
    standard_items: List[StandardItemConfig] = Field(default_factory=list)
    sleep_schedule: SleepSchedule = Field(default_factory=SleepSchedule)
    backlog_expanded: bool = True
    show_notifications: bool = True

    def get_category(self, category_id: str) -> Optional[CategoryConfig]:
        return next((cat for cat in self.categories if cat.id == category_id), None)


def empty_weekly_schedule() -> Dict[int, Dict[int, List[SchedulerItem]]]:
    return {day: {hour: [] for hour in range(HOURS_IN_DAY)} for day in range(DAYS_IN_WEEK)}


def empty_monthly_tasks() -> Dict[int, List[SchedulerItem]]:
    return {month: [] for month in range(MONTHS_IN_YEAR)}


class WeekData(VaultModel):
    week_number: int
    start_date: str
    end_date: str
    schedule: Dict[int, Dict[int, List[SchedulerItem]]] = Field(default_factory=empty_weekly_schedule)

    def cell(self, day: int, hour: int) -> List[SchedulerItem]:
        """Return the item list for a cell, creating missing day/hour buckets."""
        return self.schedule.setdefault(day, {}).setdefault(hour, [])

    def iter_cells(self):
        for day, hours in self.schedule.items():
            for hour, items in hours.items():
                yield day, hour, items


class YearData(VaultModel):
    year: int
    weeks: List[WeekData] = Field(default_factory=list)
    monthly_tasks: Dict[int, List[SchedulerItem]] = Field(default_factory=empty_monthly_tasks)

    def find_week(self, week_number: int) -> Optional[WeekData]:
        return next((w for w in self.weeks if w.week_number == week_number), None)

    def month(self, month: int) -> List[SchedulerItem]:
        return self.monthly_tasks.setdefault(month, [])


def default_settings() -> SchedulerSettings:
    """Factory defaults used when no settings file exists yet."""
    return SchedulerSettings(
        categories=[
            CategoryConfig(id="personal", name="Personal", color="#2ECC71"),
            CategoryConfig(id="health", name="Health", color="#E74C3C"),
            CategoryConfig(id="school", name="School", color="#8B4513"),
            CategoryConfig(id="work", name="Work", color="#3498DB"),
            CategoryConfig(id="projects", name="Projects", color="#9B59B6"),
            CategoryConfig(id="other", name="Other", color="#95A5A6"),
        ],
        standard_items=[
            StandardItemConfig(
                name="Gym",
                description="Morning workout",
                category_id="health",
                schedule={0: [5], 2: [5], 4: [5]},
            )
        ],
        sleep_schedule=SleepSchedule(),
        backlog_expanded=True,
        show_notifications=True,
    )
