"""Token storage for the signed-in user.

The builder and the backend client only see the SessionStore protocol, so
they can be driven by an in-memory store in tests and embeddings.
"""

import json
import logging
import os
from pathlib import Path
from typing import Protocol

logger = logging.getLogger("api_dashboard.session")


class SessionStore(Protocol):
    def get_token(self) -> str | None: ...

    def set_token(self, token: str) -> None: ...

    def clear_token(self) -> None: ...


class MemorySessionStore:
    """Holds the token for the lifetime of the process."""

    def __init__(self, token: str | None = None):
        self._token = token

    def get_token(self) -> str | None:
        return self._token

    def set_token(self, token: str) -> None:
        self._token = token

    def clear_token(self) -> None:
        self._token = None


class FileSessionStore:
    """Persists the token in a small JSON file readable only by its owner."""

    def __init__(self, path: Path):
        self.path = path

    def get_token(self) -> str | None:
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except ValueError:
            logger.warning("session_file_corrupt path=%s", self.path)
            return None
        token = data.get("token") if isinstance(data, dict) else None
        return token or None

    def set_token(self, token: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(self.path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, 0o600)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump({"token": token}, f)

    def clear_token(self) -> None:
        self.path.unlink(missing_ok=True)
