import json

import pytest
import requests

from api_dashboard.config import get_settings


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    monkeypatch.setenv("API_DASHBOARD_SESSION_FILE", str(tmp_path / "session.json"))
    monkeypatch.setenv("API_DASHBOARD_BASE_URL", "http://backend.test")
    for var in ("API_DASHBOARD_CATALOG_FILE", "API_DASHBOARD_REQUEST_TIMEOUT", "API_DASHBOARD_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


@pytest.fixture
def make_response():
    """Build a real requests.Response with the given status and JSON body."""

    def _make(status_code: int = 200, body=None, reason: str = "OK", raw: bytes | None = None):
        response = requests.Response()
        response.status_code = status_code
        response.reason = reason
        response.encoding = "utf-8"
        if raw is not None:
            response._content = raw
        elif body is not None:
            response._content = json.dumps(body).encode("utf-8")
        else:
            response._content = b""
        return response

    return _make
