"""Backend client for account and API-key management.

Unlike the explorer, which turns every failure into a LiveResult, these calls
raise DashboardError subclasses and leave presentation to the caller.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any
from urllib.parse import quote

import requests
from pydantic import BaseModel, TypeAdapter, ValidationError

from api_dashboard.errors import AuthenticationRequired, DecodeError
from api_dashboard.request.draft import PreparedCall
from api_dashboard.request.transport import execute
from api_dashboard.session import SessionStore

logger = logging.getLogger("api_dashboard.client")


class ApiKey(BaseModel):
    key_id: str
    created_at: str
    description: str | None = None
    last_used: str | None = None


class ApiKeyResponse(BaseModel):
    """Returned on create/regenerate; ``api_key`` is the only time the secret is shown."""

    key_id: str
    api_key: str | None = None
    created_at: str
    description: str | None = None


class KeyStats(BaseModel):
    total_keys: int
    last_used: datetime | None = None

    @classmethod
    def from_keys(cls, keys: list[ApiKey]) -> "KeyStats":
        """Count the keys and find the most recent ``last_used`` among them."""
        used = []
        for key in keys:
            if not key.last_used:
                continue
            try:
                stamp = _TIMESTAMP.validate_python(key.last_used)
            except ValidationError:
                logger.debug("unparseable_last_used key_id=%s value=%r", key.key_id, key.last_used)
                continue
            # naive timestamps are taken as UTC
            used.append(stamp if stamp.tzinfo else stamp.replace(tzinfo=timezone.utc))
        return cls(total_keys=len(keys), last_used=max(used, default=None))


_TIMESTAMP = TypeAdapter(datetime)


class DashboardClient:
    def __init__(
        self,
        base_url: str,
        session: SessionStore,
        http: requests.Session | None = None,
        timeout: float | None = None,
    ):
        self.api_url = base_url.rstrip("/") + "/api"
        self.session = session
        self.http = http
        self.timeout = timeout

    # -- auth -------------------------------------------------------------------

    def login(self, email: str, password: str) -> str:
        return self._authenticate("/signin", email, password)

    def register(self, email: str, password: str) -> str:
        return self._authenticate("/signup", email, password)

    def logout(self) -> None:
        self.session.clear_token()
        logger.info("logged_out")

    def is_authenticated(self) -> bool:
        return bool(self.session.get_token())

    def _authenticate(self, path: str, email: str, password: str) -> str:
        data = self._call("POST", path, body={"email": email, "password": password})
        token = data.get("access_token") if isinstance(data, dict) else None
        if not token:
            raise DecodeError("Response did not contain an access token")
        self.session.set_token(token)
        logger.info("authenticated path=%s", path)
        return token

    # -- API keys ---------------------------------------------------------------

    def list_api_keys(self) -> list[ApiKey]:
        data = self._call("GET", "/api-keys", auth=True)
        return _parse(list[ApiKey], data or [])

    def api_key_stats(self) -> KeyStats:
        return KeyStats.from_keys(self.list_api_keys())

    def create_api_key(self, description: str | None = None) -> ApiKeyResponse:
        data = self._call("POST", "/api-keys", body={"description": description}, auth=True)
        return _parse(ApiKeyResponse, data)

    def regenerate_api_key(self, key_id: str) -> ApiKeyResponse:
        data = self._call("POST", f"/api-keys/{quote(key_id, safe='')}/regenerate", auth=True)
        return _parse(ApiKeyResponse, data)

    def delete_api_key(self, key_id: str) -> None:
        self._call("DELETE", f"/api-keys/{quote(key_id, safe='')}", auth=True)

    # -- plumbing ---------------------------------------------------------------

    def _call(self, method: str, path: str, body: dict | None = None, auth: bool = False) -> Any:
        headers = {"Content-Type": "application/json"}
        if auth:
            token = self.session.get_token()
            if not token:
                raise AuthenticationRequired()
            headers["Authorization"] = f"Bearer {token}"

        call = PreparedCall(
            method=method,
            url=f"{self.api_url}{path}",
            headers=headers,
            body=json.dumps(body) if body is not None else None,
        )
        return execute(call, self.http, self.timeout)


def _parse(model, data: Any):
    try:
        return TypeAdapter(model).validate_python(data)
    except ValidationError as e:
        raise DecodeError(f"Unexpected response shape: {e.error_count()} invalid field(s)") from e
