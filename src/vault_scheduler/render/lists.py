"""
Goals and Backlog Renderers
Both sections list items per category; goals whose category was deleted
show up under 'Uncategorized'.
"""
from typing import List, Optional, Tuple

from rich.columns import Columns
from rich.console import Group
from rich.panel import Panel
from rich.text import Text

from vault_scheduler.models import CategoryConfig, SchedulerItem, SchedulerSettings
from vault_scheduler.render.items import render_item, safe_color

UNCATEGORIZED = CategoryConfig(id="", name="Uncategorized", color="#95A5A6")


def group_by_category(
    items: List[SchedulerItem], categories: List[CategoryConfig], include_empty: bool = False
) -> List[Tuple[CategoryConfig, List[SchedulerItem]]]:
    """Pair each category with its items, in settings order. Orphans are collected last."""
    known = {cat.id for cat in categories}
    groups = []
    for category in categories:
        members = [item for item in items if item.category_id == category.id]
        if members or include_empty:
            groups.append((category, members))

    orphans = [item for item in items if item.category_id not in known]
    if orphans:
        groups.append((UNCATEGORIZED, orphans))
    return groups


def _category_panel(category: CategoryConfig, members: List[SchedulerItem],
                    lookup: Optional[CategoryConfig], show_ids: bool) -> Panel:
    if members:
        body = Group(*[render_item(item, lookup, show_id=show_ids, show_description=True) for item in members])
    else:
        body = Text("(none)", style="dim italic")
    border = safe_color(category.color) if category is not UNCATEGORIZED else None
    return Panel(body, title=f"{category.name} ({len(members)})", title_align="left",
                 border_style=border or "dim")


def render_goals(goals: List[SchedulerItem], settings: SchedulerSettings, show_ids: bool = False) -> Group:
    panels = [
        _category_panel(category, members, settings.get_category(category.id), show_ids)
        for category, members in group_by_category(goals, settings.categories, include_empty=True)
    ]
    return Group(Text("General Goals", style="bold cyan"), Columns(panels, expand=True))


def render_backlog(items: List[SchedulerItem], settings: SchedulerSettings, show_ids: bool = False) -> Group:
    title = Text("Backlog", style="bold cyan")
    if not settings.backlog_expanded:
        return Group(title, Text(f"{len(items)} items (collapsed)", style="dim"))

    if not items:
        return Group(title, Text("Backlog is empty.", style="dim italic"))

    panels = [
        _category_panel(category, members, settings.get_category(category.id), show_ids)
        for category, members in group_by_category(items, settings.categories)
    ]
    return Group(title, *panels)
