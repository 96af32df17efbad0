"""Tests for environment-driven settings."""

from jobtrack.config import Settings, get_settings


def test_defaults():
    s = Settings(_env_file=None)
    assert s.db_path == "jobtrack.db"
    assert s.key_prefix == "jobtrack_"
    assert s.debounce_ms == 300
    assert s.debounce_s == 0.3
    assert s.virtualization_threshold == 50
    assert s.overscan == 5
    assert s.row_height == 56
    assert s.status_ttl_s == 3.0


def test_env_prefix(monkeypatch):
    monkeypatch.setenv("JOBTRACK_DEBOUNCE_MS", "150")
    monkeypatch.setenv("JOBTRACK_SEED_DEMO_DATA", "true")
    s = Settings(_env_file=None)
    assert s.debounce_ms == 150
    assert s.seed_demo_data is True


def test_log_level_is_normalized(monkeypatch):
    monkeypatch.setenv("JOBTRACK_LOG_LEVEL", "debug")
    assert Settings(_env_file=None).log_level == "DEBUG"
    monkeypatch.setenv("JOBTRACK_LOG_LEVEL", "chatty")
    assert Settings(_env_file=None).log_level == "WARNING"


def test_get_settings_is_cached():
    get_settings.cache_clear()
    assert get_settings() is get_settings()
