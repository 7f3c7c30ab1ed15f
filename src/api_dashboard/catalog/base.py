"""Data model for catalog entries.

Every catalog source (the bundled YAML file, user catalogs, OpenAPI
documents) is converted into these models before anything else sees it.
"""

import json
import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

HttpMethod = Literal["GET", "POST", "PUT", "DELETE"]

PLACEHOLDER_RE = re.compile(r"\{([^{}]+)\}")


def placeholders(path: str) -> list[str]:
    """Return the ``{name}`` tokens of a path template in order of appearance."""
    names: list[str] = []
    for name in PLACEHOLDER_RE.findall(path):
        if name not in names:
            names.append(name)
    return names


class EndpointDescriptor(BaseModel):
    """Static definition of one backend operation."""

    model_config = ConfigDict(frozen=True)

    path: str
    method: HttpMethod
    description: str = ""
    category: str
    path_params: tuple[str, ...] = ()
    query_params: tuple[str, ...] = ()
    request_body: str | None = None  # canonical JSON text
    response_example: str | None = None  # canonical JSON text
    param_types: dict[str, str] = Field(default_factory=dict)
    param_descriptions: dict[str, str] = Field(default_factory=dict)

    @field_validator("method", mode="before")
    @classmethod
    def _upper_method(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("path")
    @classmethod
    def _absolute_path(cls, value: str) -> str:
        if not value.startswith("/"):
            raise ValueError(f"path must start with '/': {value!r}")
        return value

    @field_validator("request_body", "response_example")
    @classmethod
    def _valid_json(cls, value: str | None) -> str | None:
        if value is None:
            return value
        try:
            json.loads(value)
        except ValueError as e:
            raise ValueError(f"not valid JSON: {e}") from e
        return value

    @model_validator(mode="before")
    @classmethod
    def _derive_path_params(cls, data):
        if isinstance(data, dict) and data.get("path_params") is None and isinstance(data.get("path"), str):
            data = {**data, "path_params": placeholders(data["path"])}
        return data

    @model_validator(mode="after")
    def _path_params_in_path(self):
        for name in self.path_params:
            if "{" + name + "}" not in self.path:
                raise ValueError(f"path parameter {name!r} does not appear in {self.path!r}")
        overlap = set(self.path_params) & set(self.query_params)
        if overlap:
            raise ValueError(f"parameters declared as both path and query: {sorted(overlap)}")
        return self

    @property
    def key(self) -> tuple[str, str]:
        return self.method, self.path

    @property
    def label(self) -> str:
        return f"{self.method} {self.path}"

    @property
    def parameters(self) -> tuple[str, ...]:
        """Path parameters followed by query parameters."""
        return self.path_params + self.query_params

    def param_type(self, name: str) -> str:
        return self.param_types.get(name, "string")
