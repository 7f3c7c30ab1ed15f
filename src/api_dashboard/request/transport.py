"""Executes a PreparedCall over HTTP and maps failures onto DashboardError types."""

from typing import Any

import requests

from api_dashboard.errors import ApiError, DecodeError, TransportError, error_message_for
from api_dashboard.request.draft import PreparedCall


def execute(call: PreparedCall, http: requests.Session | None = None, timeout: float | None = None) -> Any:
    """Send the call and return the decoded JSON body.

    Raises TransportError, ApiError or DecodeError. An empty body (e.g. 204)
    decodes to None.
    """
    sender = http if http is not None else requests
    data = call.body.encode("utf-8") if call.body is not None else None
    try:
        response = sender.request(call.method, call.url, headers=call.headers, data=data, timeout=timeout)
    except requests.RequestException as e:
        raise TransportError(str(e) or e.__class__.__name__) from e
    except (UnicodeError, ValueError) as e:
        # http.client encodes header values as latin-1
        raise TransportError(f"Request could not be encoded: {e}") from e

    if not response.ok:
        raise ApiError(response.status_code, error_message_for(response))

    if not response.content:
        return None
    try:
        return response.json()
    except ValueError as e:
        raise DecodeError() from e
