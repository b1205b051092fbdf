"""
Data Manager (JSON Implementation)
Reads and writes the scheduler documents stored in the vault:

- SchedulerData/settings.json  -> SchedulerSettings
- SchedulerData/backlog.json   -> {"items": [...]}
- SchedulerData/goals.json     -> {"items": [...]}
- SchedulerData/<year>.json    -> YearData
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger
from pydantic import ValidationError

from vault_scheduler.models import (
    SchedulerError,
    SchedulerItem,
    SchedulerSettings,
    WeekData,
    YearData,
    default_settings,
    empty_monthly_tasks,
    empty_weekly_schedule,
)

SCHEDULER_DATA_FOLDER = "SchedulerData"
SETTINGS_FILE = "settings.json"
BACKLOG_FILE = "backlog.json"
GOALS_FILE = "goals.json"


class DataFileError(SchedulerError):
    """A scheduler file could not be written."""


class DataManager:
    """
    Persistence for the scheduler. Reads never raise: a missing or corrupt
    file yields defaults. Writes replace the target atomically.
    """

    def __init__(self, vault_path: Path | str, data_folder: str = SCHEDULER_DATA_FOLDER):
        self.vault_path = Path(vault_path).expanduser()
        self.data_dir = self.vault_path / data_folder

        if not self.vault_path.exists():
            logger.warning(f"Vault not found at {self.vault_path}. It will be created on first save.")

    def _ensure_folder(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)

    def _atomic_write(self, file_name: str, data: Any) -> None:
        """Serialise `data` to a temp file next to the target, then rename it into place."""
        target = self.data_dir / file_name
        try:
            self._ensure_folder()
            fd, tmp_name = tempfile.mkstemp(dir=self.data_dir, prefix=f".{file_name}.", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(data, f, indent=2, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp_name, target)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as e:
            logger.error(f"Failed to write {target}: {e}")
            raise DataFileError(f"Could not write {target}: {e}") from e
        logger.debug(f"Saved {target}")

    def _atomic_read(self, file_name: str) -> Optional[Any]:
        """Return the parsed JSON document, or None when missing or unreadable."""
        path = self.data_dir / file_name
        if not path.exists():
            return None
        try:
            with open(path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Scheduler: Failed to read {path}: {e}")
            return None

    # ---- settings ----

    def load_settings(self) -> SchedulerSettings:
        """Stored keys win over defaults; unknown keys are kept for the next save."""
        loaded = self._atomic_read(SETTINGS_FILE)
        defaults = default_settings()
        if not isinstance(loaded, dict):
            return defaults

        merged = {**defaults.to_json_dict(), **loaded}
        try:
            return SchedulerSettings.model_validate(merged)
        except ValidationError as e:
            logger.error(f"Invalid settings file, using defaults: {e}")
            return defaults

    def save_settings(self, settings: SchedulerSettings) -> None:
        self._atomic_write(SETTINGS_FILE, settings.to_json_dict())

    # ---- backlog / goals ----

    @staticmethod
    def _valid_items(raw_items: Any, where: str) -> List[SchedulerItem]:
        """Validate entries one by one; a bad entry is logged and skipped."""
        if not isinstance(raw_items, list):
            return []

        items = []
        for raw in raw_items:
            try:
                items.append(SchedulerItem.model_validate(raw))
            except ValidationError as e:
                logger.error(f"Skipping invalid item in {where}: {e}")
        return items

    def _load_items(self, file_name: str) -> List[SchedulerItem]:
        data = self._atomic_read(file_name)
        return self._valid_items(data.get("items") if isinstance(data, dict) else None, file_name)

    def _save_items(self, file_name: str, items: List[SchedulerItem]) -> None:
        self._atomic_write(file_name, {"items": [item.to_json_dict() for item in items]})

    def load_backlog(self) -> List[SchedulerItem]:
        return self._load_items(BACKLOG_FILE)

    def save_backlog(self, items: List[SchedulerItem]) -> None:
        self._save_items(BACKLOG_FILE, items)

    def load_goals(self) -> List[SchedulerItem]:
        return self._load_items(GOALS_FILE)

    def save_goals(self, items: List[SchedulerItem]) -> None:
        self._save_items(GOALS_FILE, items)

    # ---- year files ----

    @staticmethod
    def year_file(year: int) -> str:
        return f"{year}.json"

    def load_year_data(self, year: int) -> YearData:
        data = self._atomic_read(self.year_file(year))
        if not isinstance(data, dict):
            return self.create_empty_year_data(year)

        # Validated entry by entry; a bad item drops only itself
        file_name = self.year_file(year)
        year_data = self.create_empty_year_data(year)

        raw_weeks = data.get("weeks")
        for raw_week in raw_weeks if isinstance(raw_weeks, list) else []:
            week = self._load_week(raw_week, file_name)
            if week is not None:
                year_data.weeks.append(week)

        raw_months = data.get("monthlyTasks")
        for key, raw_items in (raw_months.items() if isinstance(raw_months, dict) else []):
            try:
                month = int(key)
            except (TypeError, ValueError):
                logger.error(f"Skipping month {key!r} in {file_name}")
                continue
            year_data.monthly_tasks[month] = self._valid_items(raw_items, f"{file_name} month {key}")

        logger.debug(f"Loaded year {year}: {len(year_data.weeks)} weeks")
        return year_data

    def _load_week(self, raw_week: Any, file_name: str) -> Optional[WeekData]:
        if not isinstance(raw_week, dict):
            logger.error(f"Skipping malformed week in {file_name}")
            return None

        raw_week = dict(raw_week)
        schedule = raw_week.get("schedule")
        if isinstance(schedule, dict):
            where = f"{file_name} week {raw_week.get('weekNumber')}"
            raw_week["schedule"] = {
                day: {hour: self._valid_items(items, where) for hour, items in hours.items()}
                for day, hours in schedule.items()
                if isinstance(hours, dict)
            }
        else:
            raw_week.pop("schedule", None)

        try:
            return WeekData.model_validate(raw_week)
        except ValidationError as e:
            logger.error(f"Skipping invalid week in {file_name}: {e}")
            return None

    def save_year_data(self, year_data: YearData) -> None:
        self._atomic_write(self.year_file(year_data.year), year_data.to_json_dict())

    # ---- empty structures ----

    def create_empty_year_data(self, year: int) -> YearData:
        return YearData(year=year, weeks=[], monthly_tasks=self.create_empty_monthly_tasks())

    @staticmethod
    def create_empty_monthly_tasks() -> Dict[int, List[SchedulerItem]]:
        return empty_monthly_tasks()

    @staticmethod
    def create_empty_weekly_schedule() -> Dict[int, Dict[int, List[SchedulerItem]]]:
        return empty_weekly_schedule()
