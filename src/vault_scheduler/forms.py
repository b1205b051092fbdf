"""
Item and Recurring-Task Forms
Terminal replacements for the add/edit dialogs.

The `build_*` functions hold all validation and are what the rest of the
package calls; the `prompt_*` functions only collect raw answers with
rich prompts and re-ask until the builders accept them.
"""
import re
from datetime import date
from typing import Any, Dict, Iterable, List, Optional, Sequence

from rich.console import Console
from rich.prompt import Confirm, IntPrompt, Prompt

from vault_scheduler import dates
from vault_scheduler.models import (
    DAYS_IN_WEEK,
    HOURS_IN_DAY,
    MONTH_NAMES,
    CategoryConfig,
    ItemType,
    SchedulerError,
    SchedulerItem,
    StandardItemConfig,
)

DAY_ABBREVIATIONS = ["mon", "tue", "wed", "thu", "fri", "sat", "sun"]
DAY_GROUPS = {
    "daily": list(range(7)),
    "all": list(range(7)),
    "weekdays": list(range(5)),
    "weekends": [5, 6],
}


class FormValidationError(SchedulerError):
    """User input was rejected; the message is shown as-is."""


# ---- validation ----


def _check_category(category_id: str, categories: Sequence[CategoryConfig]) -> str:
    if not any(cat.id == category_id for cat in categories):
        raise FormValidationError(f"Unknown category: {category_id}")
    return category_id


def _check_type(item_type: Any) -> ItemType:
    try:
        return ItemType(item_type)
    except ValueError:
        raise FormValidationError(f"Unknown item type: {item_type}") from None


def _check_hour(hour: Any) -> int:
    try:
        hour = int(hour)
    except (TypeError, ValueError):
        raise FormValidationError(f"Hour must be a number, got {hour!r}") from None
    if not 0 <= hour < HOURS_IN_DAY:
        raise FormValidationError("Hour must be between 0 and 23")
    return hour


def parse_deadline_date(value: str, month: Optional[int] = None, year: Optional[int] = None) -> date:
    """Parse YYYY-MM-DD; when month (0-11) and year are given the date must fall inside that month."""
    try:
        parsed = dates.from_iso_date_string(value)
    except (AttributeError, ValueError):
        raise FormValidationError(f"Invalid date: {value!r} (expected YYYY-MM-DD)") from None
    if month is not None and year is not None and (parsed.month - 1, parsed.year) != (month, year):
        raise FormValidationError(f"Deadline must fall in {MONTH_NAMES[month]} {year}")
    return parsed


def build_item(
    name: str,
    description: str,
    category_id: str,
    item_type: Any,
    categories: Sequence[CategoryConfig],
    deadline_date: Optional[str] = None,
    deadline_hour: Optional[Any] = None,
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> SchedulerItem:
    """
    Validate an add-item form.

    A deadline added to a month (month and year given) needs its own date and
    hour; a deadline added to a weekly cell takes both from the cell, so they
    may be omitted here.
    """
    name = (name or "").strip()
    if not name:
        raise FormValidationError("Item name is required!")

    item_type = _check_type(item_type)
    item = SchedulerItem(
        name=name,
        description=(description or "").strip(),
        category_id=_check_category(category_id, categories),
        item_type=item_type,
    )
    if item_type == ItemType.TASK:
        item.completed = False

    if item_type == ItemType.DEADLINE and month is not None:
        if not deadline_date or deadline_hour is None:
            raise FormValidationError("Deadlines need a date and an hour")
        item.deadline_date = dates.to_iso_date_string(parse_deadline_date(deadline_date, month, year))
        item.deadline_hour = _check_hour(deadline_hour)
    return item


def build_item_updates(
    item: SchedulerItem,
    name: str,
    description: str,
    category_id: str,
    categories: Sequence[CategoryConfig],
    item_type: Optional[Any] = None,
    deadline_date: Optional[str] = None,
    deadline_hour: Optional[Any] = None,
) -> Dict[str, Any]:
    """Validate an edit form and return only the fields to merge into every copy of `item`."""
    name = (name or "").strip()
    if not name:
        raise FormValidationError("Item name is required!")

    updates: Dict[str, Any] = {
        "name": name,
        "description": (description or "").strip(),
        "category_id": _check_category(category_id, categories),
    }

    new_type = _check_type(item_type) if item_type is not None else item.item_type
    if new_type != item.item_type:
        updates["item_type"] = new_type
        if new_type == ItemType.TASK and item.completed is None:
            updates["completed"] = False

    if new_type == ItemType.DEADLINE and (deadline_date or deadline_hour is not None):
        if not deadline_date or deadline_hour is None:
            raise FormValidationError("Deadlines need both a date and an hour")
        updates["deadline_date"] = dates.to_iso_date_string(parse_deadline_date(deadline_date))
        updates["deadline_hour"] = _check_hour(deadline_hour)
    return updates


def build_standard_task(
    name: str,
    description: str,
    category_id: str,
    schedule: Dict[int, Iterable[int]],
    categories: Sequence[CategoryConfig],
) -> StandardItemConfig:
    name = (name or "").strip()
    if not name:
        raise FormValidationError("Task name is required!")

    cleaned = {day: sorted(set(hours)) for day, hours in schedule.items() if hours}
    for day, hours in cleaned.items():
        if not 0 <= day < DAYS_IN_WEEK or any(not 0 <= h < HOURS_IN_DAY for h in hours):
            raise FormValidationError(f"Invalid time slot on day {day}: {hours}")
    if not cleaned:
        raise FormValidationError("Please select at least one time slot!")

    return StandardItemConfig(
        name=name,
        description=(description or "").strip(),
        category_id=_check_category(category_id, categories),
        schedule=dict(sorted(cleaned.items())),
    )


# ---- schedule grid presets ----


def select_all_slots() -> Dict[int, List[int]]:
    return {day: list(range(HOURS_IN_DAY)) for day in range(DAYS_IN_WEEK)}


def clear_all_slots() -> Dict[int, List[int]]:
    return {}


def select_weekday_work_hours() -> Dict[int, List[int]]:
    """Monday-Friday, 09:00-17:00."""
    return {day: list(range(9, 18)) for day in range(5)}


def toggle_slot(schedule: Dict[int, List[int]], day: int, hour: int) -> Dict[int, List[int]]:
    """Flip one (day, hour) slot, keeping each day's hours sorted."""
    hours = schedule.setdefault(day, [])
    if hour in hours:
        hours.remove(hour)
    else:
        hours.append(hour)
        hours.sort()
    return schedule


def _parse_days(token: str) -> List[int]:
    token = token.lower()
    if token in DAY_GROUPS:
        return list(DAY_GROUPS[token])

    days: List[int] = []
    for part in token.split(","):
        bounds = part.split("-")
        try:
            indexes = [DAY_ABBREVIATIONS.index(b[:3]) for b in bounds]
        except ValueError:
            raise FormValidationError(f"Unknown day: {part!r}") from None
        if len(indexes) == 1:
            days.append(indexes[0])
        elif len(indexes) == 2 and indexes[0] <= indexes[1]:
            days.extend(range(indexes[0], indexes[1] + 1))
        else:
            raise FormValidationError(f"Bad day range: {part!r}")
    return days


def _parse_hours(token: str) -> List[int]:
    hours: List[int] = []
    for part in token.split(","):
        match = re.fullmatch(r"(\d{1,2})(?:-(\d{1,2}))?", part.strip())
        if not match:
            raise FormValidationError(f"Bad hour: {part!r}")
        start = _check_hour(match.group(1))
        end = _check_hour(match.group(2)) if match.group(2) else start
        if end < start:
            raise FormValidationError(f"Bad hour range: {part!r}")
        hours.extend(range(start, end + 1))
    return hours


def parse_slot_spec(text: str) -> Dict[int, List[int]]:
    """
    Parse slot text such as 'mon-fri 9-17; sat 10' or 'mon,wed,fri 5'.

    Entries are separated by ';'. Each entry is DAYS HOURS where DAYS is a
    day, a day range, a comma list, or one of daily/weekdays/weekends.
    """
    schedule: Dict[int, List[int]] = {}
    for entry in filter(None, (e.strip() for e in text.split(";"))):
        parts = entry.split()
        if len(parts) != 2:
            raise FormValidationError(f"Expected 'DAYS HOURS', got {entry!r}")
        hours = _parse_hours(parts[1])
        for day in _parse_days(parts[0]):
            schedule[day] = sorted(set(schedule.get(day, [])) | set(hours))
    return dict(sorted(schedule.items()))


def format_slot_spec(schedule: Dict[int, List[int]]) -> str:
    return "; ".join(
        f"{DAY_ABBREVIATIONS[day]} {','.join(str(h) for h in hours)}"
        for day, hours in sorted(schedule.items()) if hours
    )


# ---- interactive collectors ----


def _ask_category(console: Console, categories: Sequence[CategoryConfig], default: Optional[str] = None) -> str:
    for index, cat in enumerate(categories, start=1):
        console.print(f"  [{index}] {cat.name}")
    default_index = next((i for i, c in enumerate(categories, start=1) if c.id == default), 1)
    choice = IntPrompt.ask("Category", default=default_index)
    if not 1 <= choice <= len(categories):
        return ""
    return categories[choice - 1].id


def prompt_new_item(
    console: Console,
    categories: Sequence[CategoryConfig],
    allowed_types: Sequence[ItemType] = tuple(ItemType),
    month: Optional[int] = None,
    year: Optional[int] = None,
) -> SchedulerItem:
    """Ask until the answers form a valid item."""
    while True:
        name = Prompt.ask("Name")
        description = Prompt.ask("Description", default="")
        category_id = _ask_category(console, categories)
        item_type = allowed_types[0]
        if len(allowed_types) > 1:
            item_type = Prompt.ask("Type", choices=[t.value for t in allowed_types], default=allowed_types[0].value)

        deadline_date = deadline_hour = None
        if item_type == ItemType.DEADLINE and month is not None:
            deadline_date = Prompt.ask("Deadline date (YYYY-MM-DD)")
            deadline_hour = IntPrompt.ask("Deadline hour (0-23)", default=12)

        try:
            return build_item(name, description, category_id, item_type, categories,
                              deadline_date=deadline_date, deadline_hour=deadline_hour,
                              month=month, year=year)
        except FormValidationError as e:
            console.print(f"[red]{e}[/red]")


def prompt_item_updates(console: Console, item: SchedulerItem, categories: Sequence[CategoryConfig]) -> Dict[str, Any]:
    if item.is_standard:
        console.print("[yellow]⚠️ This is a standard/recurring task. Changes here only affect this instance.[/yellow]")

    while True:
        name = Prompt.ask("Name", default=item.name)
        description = Prompt.ask("Description", default=item.description)
        category_id = _ask_category(console, categories, default=item.category_id)
        item_type = Prompt.ask("Type", choices=[t.value for t in ItemType], default=item.item_type.value)

        deadline_date = deadline_hour = None
        if item_type == ItemType.DEADLINE.value and Confirm.ask("Change deadline date/hour?", default=False):
            deadline_date = Prompt.ask("Deadline date (YYYY-MM-DD)", default=item.deadline_date or "")
            default_hour = 12 if item.deadline_hour is None else item.deadline_hour
            deadline_hour = IntPrompt.ask("Deadline hour (0-23)", default=default_hour)

        try:
            return build_item_updates(item, name, description, category_id, categories,
                                      item_type=item_type, deadline_date=deadline_date,
                                      deadline_hour=deadline_hour)
        except FormValidationError as e:
            console.print(f"[red]{e}[/red]")


def prompt_standard_task(
    console: Console,
    categories: Sequence[CategoryConfig],
    existing: Optional[StandardItemConfig] = None,
) -> StandardItemConfig:
    console.print("[dim]Slots: 'mon-fri 9-17; sat 10', or a preset: all, clear, work[/dim]")
    presets = {"all": select_all_slots, "clear": clear_all_slots, "work": select_weekday_work_hours}

    while True:
        name = Prompt.ask("Task name", default=existing.name if existing else None)
        description = Prompt.ask("Description", default=existing.description if existing else "")
        category_id = _ask_category(console, categories, default=existing.category_id if existing else None)
        current = format_slot_spec(existing.schedule) if existing else ""
        raw = Prompt.ask("Time slots", default=current or None)

        try:
            schedule = presets[raw.strip()]() if raw and raw.strip() in presets else parse_slot_spec(raw or "")
            return build_standard_task(name, description, category_id, schedule, categories)
        except FormValidationError as e:
            console.print(f"[red]{e}[/red]")
