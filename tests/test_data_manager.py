"""
Data Manager Tests
JSON persistence in the vault's SchedulerData folder.
"""
import json
from unittest.mock import patch

import pytest

from vault_scheduler.data_manager import DataFileError, DataManager
from vault_scheduler.models import SchedulerItem, WeekData, default_settings


class TestSettingsFile:

    def test_missing_settings_give_defaults(self, data_manager):
        """Test that a vault without settings.json loads the factory defaults."""
        assert data_manager.load_settings() == default_settings()

    def test_save_then_load(self, data_manager):
        """Test that settings are written camelCase and read back unchanged."""
        settings = default_settings()
        settings.backlog_expanded = False
        settings.sleep_schedule.wake_time = 6
        data_manager.save_settings(settings)

        raw = json.loads((data_manager.data_dir / "settings.json").read_text())
        assert raw["backlogExpanded"] is False
        assert raw["sleepSchedule"]["wakeTime"] == 6

        loaded = data_manager.load_settings()
        assert loaded.backlog_expanded is False
        assert loaded.sleep_schedule.wake_time == 6

    def test_partial_file_merged_over_defaults(self, data_manager):
        """Test that stored keys override defaults and missing keys keep them."""
        data_manager.data_dir.mkdir(parents=True)
        (data_manager.data_dir / "settings.json").write_text(json.dumps({"showNotifications": False}))

        loaded = data_manager.load_settings()
        assert loaded.show_notifications is False
        assert len(loaded.categories) == 6

    def test_corrupt_file_gives_defaults(self, data_manager):
        """Test that unparsable JSON falls back to defaults."""
        data_manager.data_dir.mkdir(parents=True)
        (data_manager.data_dir / "settings.json").write_text("{not json")
        assert data_manager.load_settings() == default_settings()

    def test_legacy_standard_items_migrated(self, data_manager):
        """Test that days + hours recurring tasks load as a schedule map."""
        data_manager.data_dir.mkdir(parents=True)
        (data_manager.data_dir / "settings.json").write_text(json.dumps({
            "standardItems": [{"name": "Run", "description": "", "categoryId": "health",
                               "days": [1], "hours": [6]}],
        }))
        loaded = data_manager.load_settings()
        assert loaded.standard_items[0].schedule == {1: [6]}

    def test_unknown_keys_survive_save(self, data_manager):
        """Test that plugin-only keys at every settings level are written back."""
        data_manager.data_dir.mkdir(parents=True)
        (data_manager.data_dir / "settings.json").write_text(json.dumps({
            "pluginOnlyKey": 42,
            "sleepSchedule": {"enabled": True, "sleepTime": 23, "wakeTime": 6, "nightMode": "dim"},
            "categories": [{"id": "work", "name": "Work", "color": "#3498DB", "icon": "briefcase"}],
        }))

        data_manager.save_settings(data_manager.load_settings())

        raw = json.loads((data_manager.data_dir / "settings.json").read_text())
        assert raw["pluginOnlyKey"] == 42
        assert raw["sleepSchedule"]["nightMode"] == "dim"
        assert raw["sleepSchedule"]["sleepTime"] == 23
        assert raw["categories"][0]["icon"] == "briefcase"


class TestItemFiles:

    def test_backlog_round_trip(self, data_manager):
        """Test the on-disk shape of backlog.json and reading it back."""
        items = [SchedulerItem(id="backlog-1", name="Paint", category_id="personal")]
        data_manager.save_backlog(items)

        raw = json.loads((data_manager.data_dir / "backlog.json").read_text())
        assert raw == {"items": [{"id": "backlog-1", "name": "Paint", "description": "",
                                  "categoryId": "personal", "itemType": "regular"}]}
        assert data_manager.load_backlog() == items

    def test_goals_missing_file(self, data_manager):
        """Test that a missing goals.json is an empty list."""
        assert data_manager.load_goals() == []

    def test_invalid_entries_skipped(self, data_manager):
        """Test that an entry without a name is dropped and the rest kept."""
        data_manager.data_dir.mkdir(parents=True)
        (data_manager.data_dir / "goals.json").write_text(json.dumps({
            "items": [{"id": "goal-1", "name": "Learn Go"}, {"id": "goal-2"}],
        }))
        goals = data_manager.load_goals()
        assert [g.id for g in goals] == ["goal-1"]

    def test_wrong_shape_gives_empty(self, data_manager):
        """Test that a document without an items list is treated as empty."""
        data_manager.data_dir.mkdir(parents=True)
        (data_manager.data_dir / "backlog.json").write_text(json.dumps([1, 2, 3]))
        assert data_manager.load_backlog() == []


class TestYearFiles:

    def test_missing_year_is_empty(self, data_manager):
        """Test that an absent year file yields twelve empty months and no weeks."""
        year = data_manager.load_year_data(2030)
        assert year.year == 2030
        assert year.weeks == []
        assert sorted(year.monthly_tasks) == list(range(12))

    def test_year_round_trip(self, data_manager):
        """Test that weekly cells and monthly tasks persist with string keys."""
        year = data_manager.create_empty_year_data(2024)
        week = WeekData(week_number=11, start_date="2024-03-11", end_date="2024-03-17",
                        schedule=data_manager.create_empty_weekly_schedule())
        week.cell(2, 9).append(SchedulerItem(id="item-1", name="Standup", category_id="work"))
        year.weeks.append(week)
        year.monthly_tasks[2].append(SchedulerItem(id="task-1", name="Taxes", category_id="personal"))
        data_manager.save_year_data(year)

        raw = json.loads((data_manager.data_dir / "2024.json").read_text())
        assert raw["weeks"][0]["weekNumber"] == 11
        assert raw["weeks"][0]["schedule"]["2"]["9"][0]["name"] == "Standup"
        assert raw["monthlyTasks"]["2"][0]["id"] == "task-1"

        loaded = data_manager.load_year_data(2024)
        assert loaded.find_week(11).schedule[2][9][0].name == "Standup"
        assert loaded.monthly_tasks[2][0].name == "Taxes"

    def test_missing_months_filled(self, data_manager):
        """Test that months absent from the file are added as empty lists."""
        data_manager.data_dir.mkdir(parents=True)
        (data_manager.data_dir / "2024.json").write_text(json.dumps({
            "year": 2024, "weeks": [], "monthlyTasks": {"0": [{"id": "task-1", "name": "Plan"}]},
        }))
        loaded = data_manager.load_year_data(2024)
        assert sorted(loaded.monthly_tasks) == list(range(12))
        assert loaded.monthly_tasks[0][0].name == "Plan"

    def test_invalid_item_drops_only_itself(self, data_manager):
        """Test that one bad item does not wipe the rest of the year on the next save."""
        data_manager.data_dir.mkdir(parents=True)
        (data_manager.data_dir / "2024.json").write_text(json.dumps({
            "year": 2024,
            "weeks": [{
                "weekNumber": 11, "startDate": "2024-03-11", "endDate": "2024-03-17",
                "schedule": {"2": {"9": [{"id": "item-1", "name": "Standup"},
                                         {"id": "item-2", "deadlineHour": 3}]}},
            }],
            "monthlyTasks": {
                "0": [{"id": "task-1", "name": "Keep me"}],
                "5": [{"id": "x", "name": "bad", "deadlineHour": 24}],
            },
        }))

        loaded = data_manager.load_year_data(2024)
        assert [i.id for i in loaded.find_week(11).schedule[2][9]] == ["item-1"]
        assert [i.id for i in loaded.monthly_tasks[0]] == ["task-1"]
        assert loaded.monthly_tasks[5] == []

        loaded.monthly_tasks[1].append(SchedulerItem(id="task-2", name="New"))
        data_manager.save_year_data(loaded)

        raw = json.loads((data_manager.data_dir / "2024.json").read_text())
        assert [i["id"] for i in raw["monthlyTasks"]["0"]] == ["task-1"]
        assert raw["weeks"][0]["schedule"]["2"]["9"][0]["name"] == "Standup"

    def test_invalid_week_skipped(self, data_manager):
        """Test that a week missing its dates is skipped while other weeks load."""
        data_manager.data_dir.mkdir(parents=True)
        (data_manager.data_dir / "2024.json").write_text(json.dumps({
            "year": 2024,
            "weeks": [
                {"weekNumber": 10},
                {"weekNumber": 11, "startDate": "2024-03-11", "endDate": "2024-03-17"},
            ],
            "monthlyTasks": {},
        }))

        loaded = data_manager.load_year_data(2024)
        assert [w.week_number for w in loaded.weeks] == [11]


class TestAtomicWrite:

    def test_no_temp_files_left(self, data_manager):
        """Test that a successful save leaves only the target file."""
        data_manager.save_goals([])
        assert [p.name for p in data_manager.data_dir.iterdir()] == ["goals.json"]

    def test_write_failure_raises_data_file_error(self, data_manager):
        """Test that a failed rename raises DataFileError and cleans the temp file."""
        with patch("vault_scheduler.data_manager.os.replace", side_effect=OSError("disk full")):
            with pytest.raises(DataFileError):
                data_manager.save_goals([])
        assert not (data_manager.data_dir / "goals.json").exists()
        assert list(data_manager.data_dir.iterdir()) == []

    def test_custom_data_folder(self, vault_path):
        """Test that the data folder name is configurable."""
        manager = DataManager(vault_path, data_folder="Planner")
        manager.save_backlog([])
        assert (vault_path / "Planner" / "backlog.json").exists()
