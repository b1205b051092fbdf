"""
Shared Item Rendering
Colour helpers and the one-line card used by every section (weekly cells,
months, goals, backlog).

Item type styling:
- regular / deadline: solid category background, contrast text
- task: category-coloured text with a checkbox, struck through when done
- goal: category-coloured text inside a bracket outline
"""
import re
from typing import Optional, Tuple

from rich.style import Style
from rich.text import Text

from vault_scheduler.models import CategoryConfig, ItemType, SchedulerItem

DARK_TEXT = "#1a1a1a"
LIGHT_TEXT = "#ffffff"
_HEX_RE = re.compile(r"^#?([a-f\d]{2})([a-f\d]{2})([a-f\d]{2})$", re.IGNORECASE)


def hex_to_rgb(hex_color: str) -> Tuple[int, int, int]:
    """'#3498DB' -> (52, 152, 219). Anything unparseable is black."""
    match = _HEX_RE.match(hex_color.strip())
    if not match:
        return (0, 0, 0)
    return tuple(int(part, 16) for part in match.groups())


def safe_color(color: str) -> Optional[str]:
    """Normalised '#rrggbb', or None when `color` is not a hex colour."""
    if not _HEX_RE.match(color.strip()):
        return None
    return "#{:02x}{:02x}{:02x}".format(*hex_to_rgb(color))


def get_contrast_color(bg_color: str) -> str:
    """Black or white text, whichever reads better on `bg_color`."""
    r, g, b = hex_to_rgb(bg_color)
    luminance = (0.299 * r + 0.587 * g + 0.114 * b) / 255
    return DARK_TEXT if luminance > 0.5 else LIGHT_TEXT


def item_style(item: SchedulerItem, category: Optional[CategoryConfig]) -> Style:
    completed = item.item_type == ItemType.TASK and bool(item.completed)
    base = safe_color(category.color) if category else None
    if base is None:
        return Style(strike=completed, dim=completed)

    if item.item_type in (ItemType.REGULAR, ItemType.DEADLINE):
        return Style(color=get_contrast_color(base), bgcolor=base, bold=item.item_type == ItemType.DEADLINE)
    return Style(color=base, strike=completed, dim=completed)


def item_label(item: SchedulerItem, show_id: bool = False, show_description: bool = False) -> str:
    parts = []
    if item.item_type == ItemType.TASK:
        parts.append("☑" if item.completed else "☐")
    if item.item_type == ItemType.DEADLINE:
        parts.append("⏰")
    if item.is_standard:
        parts.append("⚑")

    name = f"[{item.name}]" if item.item_type == ItemType.GOAL else item.name
    parts.append(name)

    if item.item_type == ItemType.DEADLINE and item.deadline_date:
        hour = f" {item.deadline_hour:02d}:00" if item.deadline_hour is not None else ""
        parts.append(f"({item.deadline_date}{hour})")
    if show_description and item.description:
        parts.append(f"- {item.description}")
    if show_id:
        parts.append(f"#{item.id}")
    return " ".join(parts)


def render_item(item: SchedulerItem, category: Optional[CategoryConfig], show_id: bool = False,
                show_description: bool = False) -> Text:
    """One styled line for an item card."""
    text = Text(item_label(item, show_id=False, show_description=show_description), style=item_style(item, category))
    if show_id:
        text.append(f" #{item.id}", style="dim")
    return text
