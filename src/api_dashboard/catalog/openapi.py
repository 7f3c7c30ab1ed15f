"""OpenAPI / Swagger document importer.

Converts OpenAPI 3.x and Swagger 2.0 documents into EndpointDescriptor
models so that any documented backend can be explored and called.
"""

import json
from pathlib import Path

import yaml

from api_dashboard.errors import CatalogError

from .base import EndpointDescriptor, placeholders

SUPPORTED_METHODS = ("GET", "POST", "PUT", "DELETE")
DEFAULT_CATEGORY = "General"
MAX_REF_DEPTH = 8

_TYPE_SAMPLES = {
    "string": "string",
    "integer": 0,
    "number": 0,
    "boolean": False,
    "array": [],
    "object": {},
}


def parse_openapi(file_path: Path) -> list[EndpointDescriptor]:
    """Parse an OpenAPI/Swagger file into a list of EndpointDescriptor."""
    text = file_path.read_text(encoding="utf-8")
    doc = yaml.safe_load(text)
    return parse_openapi_document(doc)


def parse_openapi_document(doc: dict) -> list[EndpointDescriptor]:
    endpoints = []
    paths = doc.get("paths") or {}
    if not isinstance(paths, dict):
        raise CatalogError("OpenAPI 'paths' is not a mapping")

    for path, methods in paths.items():
        if not isinstance(methods, dict):
            raise CatalogError(f"Path item {path} is not a mapping")
        shared_params = methods.get("parameters") or []
        for method, operation in methods.items():
            if str(method).upper() not in SUPPORTED_METHODS:
                continue
            if not isinstance(operation, dict):
                raise CatalogError(f"Operation {method.upper()} {path} is not a mapping")

            params = _merge_parameters(doc, shared_params, operation.get("parameters") or [])
            # the template is authoritative for substitution, declared or not
            path_params = placeholders(path)
            query_params = [p["name"] for p in params if p.get("in") == "query"]
            tags = operation.get("tags") or []

            endpoints.append(
                EndpointDescriptor(
                    path=path,
                    method=method.upper(),
                    description=operation.get("summary") or operation.get("description", ""),
                    category=tags[0] if tags else DEFAULT_CATEGORY,
                    path_params=path_params,
                    query_params=query_params,
                    request_body=_request_body(doc, operation, params),
                    response_example=_response_example(doc, operation.get("responses") or {}),
                    param_types={p["name"]: _param_type(p) for p in params if p.get("in") in ("path", "query")},
                    param_descriptions={
                        p["name"]: p["description"]
                        for p in params
                        if p.get("in") in ("path", "query") and p.get("description")
                    },
                )
            )

    return endpoints


def _merge_parameters(doc: dict, shared: list, own: list) -> list[dict]:
    """Path-level parameters overridden by operation-level ones with the same name and location."""
    merged: dict[tuple, dict] = {}
    for p in shared + own:
        p = _resolve(doc, p)
        merged[(p.get("name"), p.get("in"))] = p
    return list(merged.values())


def _param_type(param: dict) -> str:
    # Swagger 2 keeps the type on the parameter, OpenAPI 3 on its schema
    schema = param.get("schema", {})
    return schema.get("format") or schema.get("type") or param.get("type", "string")


def _resolve(doc: dict, node, depth: int = 0):
    if not isinstance(node, dict) or "$ref" not in node:
        return node
    if depth > MAX_REF_DEPTH:
        return {}
    ref = node["$ref"]
    if not ref.startswith("#/"):
        return {}
    target = doc
    for part in ref[2:].split("/"):
        target = target.get(part, {}) if isinstance(target, dict) else {}
    return _resolve(doc, target, depth + 1)


def _request_body(doc: dict, operation: dict, params: list[dict]) -> str | None:
    body = _resolve(doc, operation.get("requestBody"))
    if body:
        media = (body.get("content") or {}).get("application/json")
        if media is None:
            return None
        return _dump(_example_from_media(doc, media))

    # Swagger 2.0 body parameter
    for p in params:
        if p.get("in") == "body":
            return _dump(_sample(doc, p.get("schema", {})))
    return None


def _response_example(doc: dict, responses: dict) -> str | None:
    for status_code, resp in sorted(responses.items(), key=lambda item: str(item[0])):
        if not str(status_code).startswith("2"):
            continue
        resp = _resolve(doc, resp or {})
        media = (resp.get("content") or {}).get("application/json")
        if media is not None:
            return _dump(_example_from_media(doc, media))
        examples = resp.get("examples") or {}
        if "application/json" in examples:
            return _dump(examples["application/json"])
        if "schema" in resp:
            return _dump(_sample(doc, resp["schema"]))
    return None


def _example_from_media(doc: dict, media: dict):
    if "example" in media:
        return media["example"]
    for example in (media.get("examples") or {}).values():
        example = _resolve(doc, example)
        if isinstance(example, dict) and "value" in example:
            return example["value"]
    return _sample(doc, media.get("schema", {}))


def _sample(doc: dict, schema: dict, depth: int = 0):
    """Build a skeleton value from a JSON schema."""
    schema = _resolve(doc, schema)
    if not isinstance(schema, dict) or depth > MAX_REF_DEPTH:
        return None
    for key in ("example", "default"):
        if key in schema:
            return schema[key]
    if schema.get("enum"):
        return schema["enum"][0]

    schema_type = schema.get("type", "object" if "properties" in schema else None)
    if schema_type == "object":
        return {
            name: _sample(doc, prop, depth + 1)
            for name, prop in (schema.get("properties") or {}).items()
        }
    if schema_type == "array":
        item = _sample(doc, schema.get("items", {}), depth + 1)
        return [item] if item is not None else []
    return _TYPE_SAMPLES.get(schema_type)


def _dump(value) -> str:
    # YAML timestamps and dates load as datetime objects
    return json.dumps(value, indent=2, default=str)
