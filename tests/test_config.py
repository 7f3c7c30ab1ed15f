from pathlib import Path

import pytest
from pydantic import ValidationError

from api_dashboard.config import Settings, get_settings


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("API_DASHBOARD_BASE_URL")
        settings = Settings()
        assert settings.base_url == "http://localhost:8000"
        assert settings.request_timeout is None
        assert settings.catalog_file is None
        assert settings.log_level == "WARNING"

    def test_env_overrides(self, monkeypatch, tmp_path):
        monkeypatch.setenv("API_DASHBOARD_BASE_URL", "https://api.example.com/")
        monkeypatch.setenv("API_DASHBOARD_REQUEST_TIMEOUT", "2.5")
        monkeypatch.setenv("API_DASHBOARD_CATALOG_FILE", str(tmp_path / "catalog.yaml"))
        settings = Settings()
        assert settings.api_base() == "https://api.example.com"
        assert settings.request_timeout == 2.5
        assert settings.catalog_file == Path(tmp_path / "catalog.yaml")

    def test_timeout_must_be_positive(self, monkeypatch):
        monkeypatch.setenv("API_DASHBOARD_REQUEST_TIMEOUT", "0")
        with pytest.raises(ValidationError):
            Settings()

    def test_get_settings_is_cached(self):
        assert get_settings() is get_settings()

    def test_annotations_are_evaluated(self):
        assert Settings.__annotations__["catalog_file"] == Path | None
        assert Settings.__annotations__["request_timeout"] == float | None
