"""
Weekly Schedule Renderer
7 day columns by hour rows for the viewed week.
"""
from datetime import date
from typing import Callable, List, Optional

from rich.console import Group
from rich.table import Table
from rich.text import Text

from vault_scheduler import dates
from vault_scheduler.models import DAY_NAMES, CategoryConfig, SchedulerSettings, WeekData
from vault_scheduler.render.items import render_item


def visible_hours(settings: SchedulerSettings) -> List[int]:
    """Wake..sleep (inclusive) when the sleep schedule is on, otherwise the full day."""
    sleep = settings.sleep_schedule
    if sleep.enabled and sleep.wake_time <= sleep.sleep_time:
        return list(range(sleep.wake_time, sleep.sleep_time + 1))
    return list(range(24))


def week_title(week_number: int, year: int) -> str:
    start = dates.get_date_of_week(week_number, year)
    return f"Week {week_number} · {dates.get_week_range_string(start, dates.get_sunday(start))}"


def render_week(
    week: WeekData,
    settings: SchedulerSettings,
    current_week: int,
    current_year: int,
    today: Optional[date] = None,
    show_ids: bool = False,
    max_items_per_cell: int = 3,
) -> Group:
    today = today or date.today()
    info = dates.get_current_week_info(today)
    is_current_week = info.week_number == current_week and info.year == current_year
    get_category: Callable[[str], Optional[CategoryConfig]] = settings.get_category

    table = Table(show_lines=True, expand=True, header_style="bold")
    table.add_column("Time", justify="right", style="dim", no_wrap=True)
    for index, name in enumerate(DAY_NAMES):
        day_date = dates.date_in_week(current_week, current_year, index)
        header = f"{name}\n{day_date.day:02d}"
        if is_current_week and index == today.weekday():
            header = f"[reverse]{header}[/reverse]"
        table.add_column(header, ratio=1)

    for hour in visible_hours(settings):
        row = [Text(f"{hour:02d}:00")]
        for day in range(len(DAY_NAMES)):
            items = week.schedule.get(day, {}).get(hour, [])
            lines = [render_item(item, get_category(item.category_id), show_id=show_ids)
                     for item in items[:max_items_per_cell]]
            if len(items) > max_items_per_cell:
                lines.append(Text(f"+{len(items) - max_items_per_cell} more", style="dim italic"))
            row.append(Text("\n").join(lines) if lines else Text(""))
        table.add_row(*row)

    title = Text(week_title(current_week, current_year), style="bold cyan")
    return Group(title, table)
