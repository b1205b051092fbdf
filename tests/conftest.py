"""
Pytest Configuration
Allows tests to import the package from src/ and loads Environment Variables.
Shared fixtures build a scheduler on a temporary vault with a fixed clock.
"""
import sys
import os
from datetime import date

import pytest
from dotenv import load_dotenv

# 1. LOAD ENV
load_dotenv()

# 2. ADD SOURCE CODE TO PATH
sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..", "src")))

from vault_scheduler.app import SchedulerApp
from vault_scheduler.data_manager import DataManager
from vault_scheduler.managers import ScheduleManager
from vault_scheduler.models import ItemType, SchedulerItem, default_settings

# Wednesday of ISO week 11, 2024 (Monday 2024-03-11 .. Sunday 2024-03-17)
TODAY = date(2024, 3, 13)


@pytest.fixture
def today():
    return TODAY


@pytest.fixture
def vault_path(tmp_path):
    """An empty vault directory."""
    path = tmp_path / "vault"
    path.mkdir()
    return path


@pytest.fixture
def data_manager(vault_path):
    return DataManager(vault_path)


@pytest.fixture
def settings():
    return default_settings()


@pytest.fixture
def schedule_manager(data_manager, settings):
    """ScheduleManager viewing week 11 of 2024 with its year file loaded."""
    manager = ScheduleManager(data_manager, 11, 2024, lambda: settings)
    manager.load_year_data(2024)
    return manager


@pytest.fixture
def app(data_manager, today):
    scheduler = SchedulerApp(data_manager, today=today)
    scheduler.ensure_data_loaded()
    return scheduler


@pytest.fixture
def make_item():
    """Factory for unsaved items."""
    def _make(name="Item", item_type=ItemType.REGULAR, category_id="work", **kwargs):
        return SchedulerItem(name=name, item_type=item_type, category_id=category_id, **kwargs)
    return _make
