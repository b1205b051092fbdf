"""
Data Model Tests
On-disk JSON shape, id generation and legacy settings migration.
"""
import re

import pytest
from pydantic import ValidationError

from vault_scheduler.models import (
    ItemType,
    SchedulerItem,
    SchedulerSettings,
    StandardItemConfig,
    WeekData,
    YearData,
    default_settings,
    generate_id,
)


class TestGenerateId:

    def test_format(self):
        """Test the prefix-millis-suffix id format."""
        assert re.fullmatch(r"item-\d{13}-[a-z0-9]{9}", generate_id("item"))

    def test_ids_are_unique(self):
        """Test that repeated ids do not collide."""
        assert len({generate_id("task") for _ in range(200)}) == 200


class TestSchedulerItem:

    def test_camel_case_on_disk(self):
        """Test that items dump camelCase keys without nulls."""
        item = SchedulerItem(name="Report", category_id="work", item_type=ItemType.DEADLINE,
                             deadline_date="2024-03-15", deadline_hour=17)
        data = item.to_json_dict()
        assert data["categoryId"] == "work"
        assert data["itemType"] == "deadline"
        assert data["deadlineDate"] == "2024-03-15"
        assert data["deadlineHour"] == 17
        assert "completed" not in data

    def test_parses_plugin_json(self):
        """Test reading an item written by the plugin."""
        item = SchedulerItem.model_validate({
            "id": "task-1-abc", "name": "Read", "description": "", "categoryId": "school",
            "itemType": "task", "completed": True,
        })
        assert item.category_id == "school"
        assert item.item_type == ItemType.TASK
        assert item.completed is True

    def test_unknown_type_falls_back_to_regular(self):
        """Test that an unknown item type reads as regular."""
        item = SchedulerItem.model_validate({"name": "Odd", "itemType": "meeting"})
        assert item.item_type == ItemType.REGULAR

    def test_unknown_keys_survive(self):
        """Test that unknown item keys are written back."""
        item = SchedulerItem.model_validate({"name": "X", "color": "red"})
        assert item.to_json_dict()["color"] == "red"

    def test_deadline_hour_range(self):
        """Test that a deadline hour of 24 is rejected."""
        with pytest.raises(ValidationError):
            SchedulerItem(name="Late", deadline_hour=24)

    def test_merged_accepts_field_names_and_aliases(self):
        """Test that merged takes both key styles and leaves the original alone."""
        item = SchedulerItem(id="item-1", name="Old", category_id="work")
        merged = item.merged({"name": "New", "categoryId": "health"})
        assert merged.name == "New"
        assert merged.category_id == "health"
        assert merged.id == "item-1"
        assert item.name == "Old"


class TestStandardItemConfig:

    def test_legacy_days_and_hours(self):
        """Test migrating days + hours into a schedule map."""
        task = StandardItemConfig.model_validate({"name": "Run", "categoryId": "health",
                                                  "days": [0, 2], "hours": [7, 6, 7]})
        assert task.schedule == {0: [6, 7], 2: [6, 7]}

    def test_legacy_empty_days_means_every_day(self):
        """Test that empty legacy days expand to the whole week."""
        task = StandardItemConfig.model_validate({"name": "Read", "days": [], "hours": [21]})
        assert sorted(task.schedule) == list(range(7))
        assert task.has_slots()

    def test_schedule_keys_written_as_strings(self):
        """Test that weekday keys are strings on disk."""
        task = StandardItemConfig(name="Gym", schedule={0: [5]})
        assert task.to_json_dict()["schedule"] == {"0": [5]}

    def test_string_keys_parsed(self):
        """Test that string weekday keys load as ints."""
        task = StandardItemConfig.model_validate({"name": "Gym", "schedule": {"4": [5]}})
        assert task.schedule == {4: [5]}


class TestContainers:

    def test_default_settings(self):
        """Test the factory default settings."""
        settings = default_settings()
        assert [c.id for c in settings.categories] == ["personal", "health", "school", "work", "projects", "other"]
        assert settings.sleep_schedule.sleep_time == 22
        assert settings.sleep_schedule.wake_time == 4
        assert settings.standard_items[0].schedule == {0: [5], 2: [5], 4: [5]}
        assert settings.get_category("work").color == "#3498DB"
        assert settings.get_category("missing") is None

    def test_settings_round_trip_shape(self):
        """Test that dumped settings validate back to the defaults."""
        data = default_settings().to_json_dict()
        assert data["sleepSchedule"]["excludeWakeDays"] == []
        assert data["backlogExpanded"] is True
        assert SchedulerSettings.model_validate(data) == default_settings()

    def test_settings_keep_unknown_keys(self):
        """Test that unknown keys in settings and its nested sections are written back."""
        settings = SchedulerSettings.model_validate({
            "pluginOnlyKey": 42,
            "sleepSchedule": {"nightMode": "dim"},
        })
        data = settings.to_json_dict()
        assert data["pluginOnlyKey"] == 42
        assert data["sleepSchedule"]["nightMode"] == "dim"
        assert data["sleepSchedule"]["sleepTime"] == 22

    def test_week_cell_creates_buckets(self):
        """Test that cell() creates missing day and hour buckets."""
        week = WeekData(week_number=1, start_date="2024-01-01", end_date="2024-01-07", schedule={})
        week.cell(3, 9).append(SchedulerItem(name="A"))
        assert [i.name for i in week.schedule[3][9]] == ["A"]
        assert [(d, h) for d, h, items in week.iter_cells() if items] == [(3, 9)]

    def test_year_month_and_find_week(self):
        """Test month() bucket creation and week lookup."""
        year = YearData(year=2024, monthly_tasks={})
        year.month(5).append(SchedulerItem(name="June"))
        assert year.monthly_tasks[5][0].name == "June"
        assert year.find_week(11) is None
