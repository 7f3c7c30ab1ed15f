"""Exception types shared by the request builder, the backend client and the CLI."""

import requests


class DashboardError(Exception):
    """Base class for every error surfaced to the user."""


class CatalogError(DashboardError):
    """The endpoint catalog could not be loaded or is malformed."""


class TransportError(DashboardError):
    """Network failure, timeout or refused connection."""


class ApiError(DashboardError):
    """The backend answered with a non-2xx status."""

    def __init__(self, status_code: int, message: str):
        super().__init__(message)
        self.status_code = status_code
        self.message = message


class DecodeError(DashboardError):
    """The backend answered with a body that is not JSON."""

    def __init__(self, message: str = "Response was not valid JSON"):
        super().__init__(message)


class AuthenticationRequired(DashboardError):
    """No token is stored for a call that needs one."""

    def __init__(self, message: str = "Authentication required"):
        super().__init__(message)


def error_message_for(response: requests.Response) -> str:
    """Return the human-readable error text of a failed response.

    The backend reports errors as ``{"detail": "<message>"}``; anything else
    falls back to the status line.
    """
    try:
        data = response.json()
    except ValueError:
        data = None
    if isinstance(data, dict) and isinstance(data.get("detail"), str):
        return data["detail"]
    return f"API error: {response.status_code} {response.reason}"
