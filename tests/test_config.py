import pytest

from core import config
from core.config import LedgerTargets, require_settings
from core.errors import ConfigurationError


def test_complete_targets_validate(targets):
    targets.validate()


def test_missing_targets_are_listed():
    targets = LedgerTargets(
        internal_project="14", meeting_task="", leave_task="8", client_project=" ", client_task="5"
    )
    with pytest.raises(ConfigurationError, match="client_project, meeting_task"):
        targets.validate()


def test_require_settings_names_every_missing_variable(monkeypatch):
    monkeypatch.setitem(config._SETTING_VALUES, "TIME_TRACKER_API_URL", "https://tracker.example.com")
    monkeypatch.setitem(config._SETTING_VALUES, "TIME_TRACKER_EMAIL", "")
    monkeypatch.setitem(config._SETTING_VALUES, "TIME_TRACKER_PASSWORD", "")

    with pytest.raises(ConfigurationError) as excinfo:
        require_settings("TIME_TRACKER_API_URL", "TIME_TRACKER_EMAIL", "TIME_TRACKER_PASSWORD")

    message = str(excinfo.value)
    assert "TIME_TRACKER_EMAIL, TIME_TRACKER_PASSWORD" in message
    assert "TIME_TRACKER_API_URL" not in message


def test_require_settings_passes_when_set(monkeypatch):
    monkeypatch.setitem(config._SETTING_VALUES, "WORK_CALENDAR_ID", "AAMkADk")
    require_settings("WORK_CALENDAR_ID")


def test_default_weekend_is_friday_saturday():
    assert config.ClassificationPolicy(weekend_days=frozenset({5, 6})).weekend_days == {5, 6}
    assert all(1 <= day <= 7 for day in config.WEEKEND_DAYS)
