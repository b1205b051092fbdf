"""
Monthly Tasks Renderer
12 months laid out as 3 rows x 4 columns. Within a month, items are grouped
by type in the order Deadlines, Goals, Tasks, Regular.
"""
from typing import List, Tuple

from rich.console import Group
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from vault_scheduler.managers.schedule import matches_type_group
from vault_scheduler.models import MONTH_NAMES, SchedulerItem, SchedulerSettings, YearData
from vault_scheduler.render.items import render_item

TYPE_GROUPS = [
    ("deadline", "Deadlines"),
    ("goal", "Goals"),
    ("task", "Tasks"),
    ("regular", "Regular"),
]


def group_monthly_tasks(items: List[SchedulerItem]) -> List[Tuple[str, str, List[SchedulerItem]]]:
    """Non-empty (key, label, items) groups in display order, keeping each group's relative order."""
    groups = []
    for key, label in TYPE_GROUPS:
        members = [item for item in items if matches_type_group(item, key)]
        if members:
            groups.append((key, label, members))
    return groups


def render_month(month: int, items: List[SchedulerItem], settings: SchedulerSettings, show_ids: bool = False) -> Panel:
    lines: List[Text] = []
    for _, label, members in group_monthly_tasks(items):
        lines.append(Text(f"── {label} ──", style="dim"))
        lines.extend(render_item(item, settings.get_category(item.category_id), show_id=show_ids)
                     for item in members)

    body = Group(*lines) if lines else Text("(empty)", style="dim italic")
    return Panel(body, title=f"{month + 1}. {MONTH_NAMES[month]}", title_align="left")


def render_year(year_data: YearData, settings: SchedulerSettings, show_ids: bool = False) -> Group:
    grid = Table.grid(expand=True, padding=(0, 1))
    for _ in range(4):
        grid.add_column(ratio=1)

    for row in range(3):
        grid.add_row(*[
            render_month(month, year_data.monthly_tasks.get(month, []), settings, show_ids)
            for month in range(row * 4, row * 4 + 4)
        ])

    return Group(Text(f"Monthly Schedule · {year_data.year}", style="bold cyan"), grid)
