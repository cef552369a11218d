"""Tests for environment-driven settings."""

from decimal import Decimal
from pathlib import Path

import pytest

from pocket_ledger.config import Settings, get_settings, validate_all_settings


@pytest.fixture(autouse=True)
def fresh_settings():
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestSettings:
    """Tests for the settings sections."""

    def test_defaults(self):
        settings = Settings()
        assert settings.storage.backend == "json"
        assert settings.storage.data_dir == Path("ledger_data")
        assert settings.audit.enabled is True
        assert settings.app.log_level == "INFO"
        assert settings.app.large_amount_warning == Decimal("1000000")

    def test_env_overrides(self, monkeypatch):
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "memory")
        monkeypatch.setenv("LEDGER_LOG_LEVEL", "debug")
        monkeypatch.setenv("LEDGER_AUDIT_MAX_EVENTS", "50")
        settings = Settings()
        assert settings.storage.backend == "memory"
        assert settings.app.log_level == "DEBUG"
        assert settings.audit.max_events == 50

    def test_data_dir_expands_home(self, monkeypatch, tmp_path):
        monkeypatch.setenv("HOME", str(tmp_path))
        monkeypatch.setenv("LEDGER_STORAGE_DATA_DIR", "~/ledger")
        assert Settings().storage.data_dir == tmp_path / "ledger"

    def test_validate_all_settings_ok(self):
        assert validate_all_settings() == {"storage": True, "audit": True, "app": True}

    def test_validate_all_settings_reports_bad_section(self, monkeypatch):
        monkeypatch.setenv("LEDGER_STORAGE_BACKEND", "sqlite")
        results = validate_all_settings()
        assert results["storage"] is False
        assert "storage_error" in results
        assert results["app"] is True


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
