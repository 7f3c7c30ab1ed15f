"""Per-session state of the endpoint explorer."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from api_dashboard.catalog.base import EndpointDescriptor


class Language(str, Enum):
    """Target languages for generated snippets."""

    JAVASCRIPT = "javascript"
    TYPESCRIPT = "typescript"
    PYTHON = "python"
    CURL = "curl"
    GO = "go"
    RUBY = "ruby"


class RequestDraft(BaseModel):
    """What the user has selected and typed so far.

    ``param_values`` only holds parameters the user actually set; an absent
    name and an empty string are different states.
    """

    selected_endpoint: EndpointDescriptor
    param_values: dict[str, str] = Field(default_factory=dict)
    body_override: str | None = None
    auth_token: str = ""
    target_language: Language = Language.JAVASCRIPT


class PreparedCall(BaseModel):
    """The exact request a draft resolves to."""

    method: str
    url: str
    headers: dict[str, str]
    body: str | None = None


class ValidationIssue(BaseModel):
    """A reason the draft cannot be sent yet."""

    field: str  # "auth_token" or a parameter name
    message: str


class FailureKind(str, Enum):
    VALIDATION = "validation"
    TRANSPORT = "transport"
    API = "api"
    DECODE = "decode"


class LiveResult(BaseModel):
    """Outcome of the most recent send: a decoded JSON value or an error message."""

    ok: bool
    endpoint: str  # "METHOD path" of the endpoint that was sent
    value: Any = None
    error: str | None = None
    kind: FailureKind | None = None
    status_code: int | None = None

    @classmethod
    def success(cls, endpoint: str, value: Any) -> "LiveResult":
        return cls(ok=True, endpoint=endpoint, value=value)

    @classmethod
    def failure(cls, endpoint: str, kind: FailureKind, error: str, status_code: int | None = None) -> "LiveResult":
        return cls(ok=False, endpoint=endpoint, kind=kind, error=error, status_code=status_code)
