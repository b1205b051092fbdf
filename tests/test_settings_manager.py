"""
Settings Manager Tests
Categories, sleep schedule and recurring task configuration.
"""
from unittest.mock import MagicMock, patch

import pytest

from vault_scheduler.managers import SettingsManager, StandardTasksManager
from vault_scheduler.models import SchedulerError, StandardItemConfig


@pytest.fixture
def save():
    return MagicMock()


@pytest.fixture
def manager(settings, save, schedule_manager):
    return SettingsManager(lambda: settings, save, StandardTasksManager(schedule_manager, lambda: settings))


class TestCategories:

    def test_add_category(self, manager, settings, save):
        """Test that a new category is appended with a generated id and saved."""
        category = manager.add_category("Family", "#FF8800")
        assert category.id.startswith("category-")
        assert settings.categories[-1] is category
        save.assert_called_once()

    def test_same_millisecond_ids_differ(self, manager):
        """Test that categories added within one millisecond get distinct ids."""
        with patch("vault_scheduler.models.time.time", return_value=1700000000.0):
            first = manager.add_category("A")
            second = manager.add_category("B")
        assert first.id != second.id
        assert first.id.startswith("category-1700000000000-")

    def test_add_category_defaults(self, manager):
        """Test the default name and colour of a new category."""
        category = manager.add_category()
        assert (category.name, category.color) == ("New Category", "#95A5A6")

    def test_update_category(self, manager, settings):
        """Test that only the given fields of a category change."""
        manager.update_category("work", color="#000000")
        work = settings.get_category("work")
        assert (work.name, work.color) == ("Work", "#000000")

    def test_delete_category(self, manager, settings):
        """Test that a deleted category is no longer found."""
        manager.delete_category("school")
        assert settings.get_category("school") is None

    def test_unknown_category_raises(self, manager):
        """Test that editing or deleting an unknown category raises."""
        with pytest.raises(SchedulerError):
            manager.update_category("nope", name="X")
        with pytest.raises(SchedulerError):
            manager.delete_category("nope")


class TestSleepSchedule:

    def test_times(self, manager, settings):
        """Test setting the sleep and wake hours."""
        manager.set_sleep_time(23)
        manager.set_wake_time(6)
        assert (settings.sleep_schedule.sleep_time, settings.sleep_schedule.wake_time) == (23, 6)

    def test_invalid_hour(self, manager):
        """Test that an hour outside 0-23 is rejected."""
        with pytest.raises(SchedulerError):
            manager.set_wake_time(24)

    def test_toggle_exclusions(self, manager, settings):
        """Test toggling wake and sleep exclusion days on and off."""
        assert manager.toggle_wake_exclusion(6) is True
        assert manager.toggle_wake_exclusion(5) is True
        assert settings.sleep_schedule.exclude_wake_days == [5, 6]
        assert manager.toggle_wake_exclusion(6) is False
        assert settings.sleep_schedule.exclude_wake_days == [5]
        assert manager.toggle_sleep_exclusion(0) is True
        assert settings.sleep_schedule.exclude_sleep_days == [0]

    def test_toggle_invalid_day(self, manager):
        """Test that a weekday outside 0-6 is rejected."""
        with pytest.raises(SchedulerError):
            manager.toggle_sleep_exclusion(7)

    def test_enable_and_notifications(self, manager, settings, save):
        """Test the sleep and notification switches, each saved once."""
        manager.set_sleep_enabled(False)
        manager.set_show_notifications(False)
        assert settings.sleep_schedule.enabled is False
        assert settings.show_notifications is False
        assert save.call_count == 2


class TestRecurringTasks:

    def test_add_and_delete(self, manager, settings):
        """Test appending and deleting recurring task templates."""
        manager.add_standard_task(StandardItemConfig(name="Read", schedule={6: [20]}))
        assert [t.name for t in settings.standard_items] == ["Gym", "Read"]
        removed = manager.delete_standard_task(0)
        assert removed.name == "Gym"
        assert [t.name for t in settings.standard_items] == ["Read"]

    def test_edit_rebuilds_week(self, manager, settings, schedule_manager):
        """Test that editing a template repopulates the viewed week."""
        manager.standard_tasks.populate_standard_tasks()
        added = manager.edit_standard_task(0, StandardItemConfig(name="Gym", category_id="health",
                                                                 schedule={5: [9, 10]}))
        assert added == 2
        assert settings.standard_items[0].schedule == {5: [9, 10]}
        assert schedule_manager.get_items_for_cell(0, 5) == []
        assert [i.name for i in schedule_manager.get_items_for_cell(5, 10)] == ["Gym"]

    def test_bad_index(self, manager):
        """Test that an out-of-range template index raises."""
        with pytest.raises(SchedulerError):
            manager.edit_standard_task(5, StandardItemConfig(name="X"))
        with pytest.raises(SchedulerError):
            manager.delete_standard_task(-1)
