"""Request builder: turns a draft into a concrete HTTP call and sends it.

The module-level functions are pure functions of a RequestDraft. The snippet
generator resolves drafts through the same ``prepare_call`` so generated code
always matches what ``RequestBuilder.send`` transmits.
"""

import logging
from urllib.parse import quote, urlencode

import requests

from api_dashboard.catalog.base import PLACEHOLDER_RE, EndpointDescriptor
from api_dashboard.catalog.registry import EndpointCatalog
from api_dashboard.errors import ApiError, DecodeError, TransportError
from api_dashboard.request.draft import (
    FailureKind,
    Language,
    LiveResult,
    PreparedCall,
    RequestDraft,
    ValidationIssue,
)
from api_dashboard.request.transport import execute
from api_dashboard.session import SessionStore

logger = logging.getLogger("api_dashboard.request")

# Session-token endpoints; everything else authenticates with an API key.
BEARER_AUTH_PREFIXES = (
    "/api/signup",
    "/api/signin",
    "/api/logout",
    "/api/profile",
    "/api/api-keys",
)


def uses_bearer_auth(path: str) -> bool:
    return path.startswith(BEARER_AUTH_PREFIXES)


def build_url(draft: RequestDraft) -> str:
    """Resolve the endpoint path: substitute path parameters, append the query string.

    Unset (or empty) path parameters stay as the literal ``{name}`` token.
    """
    endpoint = draft.selected_endpoint
    values = draft.param_values

    def substitute(match) -> str:
        value = values.get(match.group(1))
        return quote(value, safe="") if value else match.group(0)

    url = PLACEHOLDER_RE.sub(substitute, endpoint.path)
    query = [(name, values[name]) for name in endpoint.query_params if name in values]
    if query:
        url += "?" + urlencode(query)
    return url


def build_headers(draft: RequestDraft) -> dict[str, str]:
    headers = {"Content-Type": "application/json"}
    if uses_bearer_auth(draft.selected_endpoint.path):
        headers["Authorization"] = f"Bearer {draft.auth_token}"
    else:
        headers["x-api-key"] = draft.auth_token
    return headers


def request_body(draft: RequestDraft) -> str | None:
    if draft.selected_endpoint.method == "GET":
        return None
    if draft.body_override is not None:
        return draft.body_override
    return draft.selected_endpoint.request_body


def prepare_call(draft: RequestDraft, base_url: str = "") -> PreparedCall:
    return PreparedCall(
        method=draft.selected_endpoint.method,
        url=base_url.rstrip("/") + build_url(draft),
        headers=build_headers(draft),
        body=request_body(draft),
    )


def _header_safe(value: str) -> bool:
    try:
        value.encode("latin-1")
    except UnicodeEncodeError:
        return False
    return "\r" not in value and "\n" not in value


def validate(draft: RequestDraft) -> list[ValidationIssue]:
    issues = []
    if not draft.auth_token:
        issues.append(ValidationIssue(field="auth_token", message="API key required"))
    elif not _header_safe(draft.auth_token):
        issues.append(ValidationIssue(field="auth_token", message="API key contains characters not allowed in a header"))
    for name in draft.selected_endpoint.path_params:
        if not draft.param_values.get(name):
            issues.append(ValidationIssue(field=name, message=f"Missing path parameter: {name}"))
    return issues


class RequestBuilder:
    """Holds the explorer's RequestDraft and the result of the last send."""

    def __init__(
        self,
        catalog: EndpointCatalog,
        session: SessionStore | None = None,
        base_url: str = "",
        http: requests.Session | None = None,
        timeout: float | None = None,
    ):
        self.catalog = catalog
        self.base_url = base_url
        self.http = http
        self.timeout = timeout
        token = session.get_token() if session is not None else None
        self.draft = RequestDraft(selected_endpoint=catalog.default(), auth_token=token or "")
        self.result: LiveResult | None = None

    @property
    def endpoint(self) -> EndpointDescriptor:
        return self.draft.selected_endpoint

    def select_endpoint(self, endpoint: EndpointDescriptor) -> None:
        self.draft.selected_endpoint = endpoint
        self.draft.param_values = {}
        self.draft.body_override = None
        self.result = None

    def select(self, path: str, method: str) -> EndpointDescriptor | None:
        """Select an endpoint by catalog key. Returns None if the catalog has no such endpoint."""
        endpoint = self.catalog.find(path, method)
        if endpoint is not None:
            self.select_endpoint(endpoint)
        return endpoint

    def set_param(self, name: str, value: str) -> None:
        self.draft.param_values[name] = value

    def unset_param(self, name: str) -> None:
        self.draft.param_values.pop(name, None)

    def set_body(self, text: str | None) -> None:
        self.draft.body_override = text

    def set_token(self, token: str) -> None:
        self.draft.auth_token = token

    def set_language(self, language: Language | str) -> None:
        self.draft.target_language = Language(language)

    def build_url(self) -> str:
        return build_url(self.draft)

    def build_headers(self) -> dict[str, str]:
        return build_headers(self.draft)

    def prepare(self) -> PreparedCall:
        return prepare_call(self.draft, self.base_url)

    def validate(self) -> list[ValidationIssue]:
        return validate(self.draft)

    def is_sendable(self) -> bool:
        return not validate(self.draft)

    def send(self) -> LiveResult:
        """Fire the request and store its outcome as the current result.

        Never raises for request failures; every failure becomes a LiveResult.
        """
        label = self.endpoint.label
        issues = self.validate()
        if issues:
            self.result = LiveResult.failure(label, FailureKind.VALIDATION, "; ".join(i.message for i in issues))
            return self.result

        call = self.prepare()
        logger.info("request_sent method=%s url=%s", call.method, call.url)
        try:
            value = execute(call, self.http, self.timeout)
        except ApiError as e:
            result = LiveResult.failure(label, FailureKind.API, e.message, status_code=e.status_code)
        except TransportError as e:
            result = LiveResult.failure(label, FailureKind.TRANSPORT, str(e))
        except DecodeError as e:
            result = LiveResult.failure(label, FailureKind.DECODE, str(e))
        else:
            result = LiveResult.success(label, value)

        if not result.ok:
            logger.warning("request_failed endpoint=%r kind=%s error=%s", label, result.kind.value, result.error)
        self.result = result
        return result
