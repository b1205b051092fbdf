"""
Renderer Tests
Colour helpers, grouping rules and rich output of each section.
"""
from datetime import date

import pytest
from rich.console import Console

from vault_scheduler.models import CategoryConfig, ItemType, SchedulerItem, WeekData, YearData
from vault_scheduler.render import (
    get_contrast_color,
    group_by_category,
    group_monthly_tasks,
    hex_to_rgb,
    item_style,
    render_backlog,
    render_goals,
    render_item,
    render_week,
    render_year,
    visible_hours,
)
from vault_scheduler.render.items import DARK_TEXT, LIGHT_TEXT, safe_color


def export(renderable, width=200):
    console = Console(record=True, width=width, color_system=None)
    console.print(renderable)
    return console.export_text()


class TestColours:

    def test_hex_to_rgb(self):
        """Test hex parsing with and without the hash."""
        assert hex_to_rgb("#3498DB") == (52, 152, 219)
        assert hex_to_rgb("2ecc71") == (46, 204, 113)
        assert hex_to_rgb("blue") == (0, 0, 0)

    def test_contrast(self):
        """Test dark text on light colours and light text on dark ones."""
        assert get_contrast_color("#FFFFFF") == DARK_TEXT
        assert get_contrast_color("#2ECC71") == DARK_TEXT
        assert get_contrast_color("#8B4513") == LIGHT_TEXT
        assert get_contrast_color("not-a-colour") == LIGHT_TEXT

    def test_safe_color(self):
        """Test that only valid hex colours reach rich."""
        assert safe_color("#ABCDEF") == "#abcdef"
        assert safe_color("nope") is None


class TestItemStyle:

    def test_regular_uses_background(self):
        """Test that regular items are drawn on their category colour."""
        style = item_style(SchedulerItem(name="A"), CategoryConfig(id="w", name="W", color="#3498DB"))
        assert style.bgcolor is not None
        assert style.color is not None

    def test_completed_task_struck(self):
        """Test that a completed task is struck through."""
        task = SchedulerItem(name="A", item_type=ItemType.TASK, completed=True)
        style = item_style(task, CategoryConfig(id="w", name="W", color="#3498DB"))
        assert style.strike is True
        assert style.bgcolor is None

    def test_missing_category(self):
        """Test that an item with no category gets no background."""
        assert item_style(SchedulerItem(name="A"), None).bgcolor is None

    def test_labels(self):
        """Test the text label of tasks, deadlines and goals."""
        task = SchedulerItem(name="Read", item_type=ItemType.TASK, completed=False, is_standard=True)
        assert render_item(task, None).plain == "☐ ⚑ Read"
        deadline = SchedulerItem(id="item-1", name="Tax", item_type=ItemType.DEADLINE,
                                 deadline_date="2024-04-15", deadline_hour=9)
        assert render_item(deadline, None, show_id=True).plain == "⏰ Tax (2024-04-15 09:00) #item-1"
        assert render_item(SchedulerItem(name="Run", item_type=ItemType.GOAL), None).plain == "[Run]"


class TestGrouping:

    def test_monthly_group_order(self):
        """Test that monthly groups run deadline, goal, task, regular."""
        items = [
            SchedulerItem(id="r", name="r"),
            SchedulerItem(id="t", name="t", item_type=ItemType.TASK),
            SchedulerItem(id="d", name="d", item_type=ItemType.DEADLINE),
            SchedulerItem(id="g", name="g", item_type=ItemType.GOAL),
            SchedulerItem(id="t2", name="t2", item_type=ItemType.TASK),
        ]
        groups = group_monthly_tasks(items)
        assert [key for key, _, _ in groups] == ["deadline", "goal", "task", "regular"]
        assert [i.id for i in groups[2][2]] == ["t", "t2"]

    def test_empty_groups_skipped(self):
        """Test that groups without items are left out."""
        assert group_monthly_tasks([SchedulerItem(name="r")])[0][1] == "Regular"
        assert group_monthly_tasks([]) == []

    def test_group_by_category_orphans_last(self, settings):
        """Test that items of deleted categories come last."""
        items = [SchedulerItem(name="a", category_id="gone"), SchedulerItem(name="b", category_id="work")]
        groups = group_by_category(items, settings.categories)
        assert [cat.name for cat, _ in groups] == ["Work", "Uncategorized"]

    def test_group_by_category_with_empty(self, settings):
        """Test that empty categories can be kept."""
        groups = group_by_category([], settings.categories, include_empty=True)
        assert len(groups) == 6


class TestSections:

    def test_visible_hours(self, settings):
        """Test that the grid shows wake to sleep hours unless sleep is off."""
        assert visible_hours(settings) == list(range(4, 23))
        settings.sleep_schedule.enabled = False
        assert visible_hours(settings) == list(range(24))

    def test_visible_hours_overnight_wake(self, settings):
        """Test that a window wrapping midnight shows all hours."""
        settings.sleep_schedule.wake_time = 23
        settings.sleep_schedule.sleep_time = 1
        assert visible_hours(settings) == list(range(24))

    def test_render_week(self, settings):
        """Test the weekly grid header, cells and overflow marker."""
        week = WeekData(week_number=11, start_date="2024-03-11", end_date="2024-03-17")
        week.cell(2, 9).append(SchedulerItem(name="Standup", category_id="work"))
        for n in range(5):
            week.cell(3, 10).append(SchedulerItem(name=f"Busy{n}", category_id="work"))

        text = export(render_week(week, settings, 11, 2024, today=date(2024, 3, 13), max_items_per_cell=3))
        assert "Week 11 · March 11-17, 2024" in text
        assert "Standup" in text
        assert "+2 more" in text
        assert "03:00" not in text
        assert "22:00" in text

    def test_render_year(self, settings):
        """Test the twelve-month overview."""
        year = YearData(year=2024)
        year.month(0).append(SchedulerItem(name="Plan year", item_type=ItemType.GOAL, category_id="personal"))
        text = export(render_year(year, settings))
        assert "Monthly Schedule · 2024" in text
        assert "January" in text and "December" in text
        assert "Goals" in text
        assert "[Plan year]" in text

    def test_render_goals_uncategorized(self, settings):
        """Test goal panels with an Uncategorized group."""
        goals = [SchedulerItem(name="Orphan", item_type=ItemType.GOAL, category_id="deleted")]
        text = export(render_goals(goals, settings))
        assert "Uncategorized (1)" in text
        assert "Work (0)" in text

    @pytest.mark.parametrize("expanded, expected", [(True, "Fix bike"), (False, "1 items (collapsed)")])
    def test_render_backlog(self, settings, expanded, expected):
        """Test the expanded and collapsed backlog."""
        settings.backlog_expanded = expanded
        text = export(render_backlog([SchedulerItem(name="Fix bike", category_id="personal")], settings))
        assert expected in text

    def test_render_empty_backlog(self, settings):
        """Test the empty backlog message."""
        assert "Backlog is empty." in export(render_backlog([], settings))
