"""Rich renderers for the weekly grid, monthly columns, goals and backlog."""
from vault_scheduler.render.items import get_contrast_color, hex_to_rgb, item_style, render_item
from vault_scheduler.render.lists import group_by_category, render_backlog, render_goals
from vault_scheduler.render.monthly import group_monthly_tasks, render_year
from vault_scheduler.render.weekly import render_week, visible_hours

__all__ = [
    "get_contrast_color",
    "group_by_category",
    "group_monthly_tasks",
    "hex_to_rgb",
    "item_style",
    "render_backlog",
    "render_goals",
    "render_item",
    "render_week",
    "render_year",
    "visible_hours",
]
