"""Load an EndpointCatalog from the bundled file or a user-supplied one."""

import json
import logging
from pathlib import Path

import yaml
from pydantic import ValidationError

from api_dashboard.errors import CatalogError

from .base import EndpointDescriptor
from .detect import detect_format
from .openapi import parse_openapi
from .registry import EndpointCatalog


BUNDLED_CATALOG = Path(__file__).parent / "endpoints.yaml"

logger = logging.getLogger("api_dashboard.catalog")


def load_catalog(file_path: Path | None = None) -> EndpointCatalog:
    """Load the bundled catalog, or a native catalog / OpenAPI file."""
    path = file_path or BUNDLED_CATALOG
    if not path.exists():
        raise CatalogError(f"Catalog file not found: {path}")

    fmt = detect_format(path)
    try:
        if fmt == "catalog":
            endpoints = parse_catalog(path)
        elif fmt == "openapi":
            endpoints = parse_openapi(path)
        else:
            raise CatalogError(f"Unrecognised catalog format: {path}")
    except ValidationError as e:
        raise CatalogError(f"Invalid endpoint in {path}: {e}") from e

    catalog = EndpointCatalog(endpoints)
    logger.debug("catalog_loaded path=%s format=%s endpoints=%d", path, fmt, len(catalog))
    return catalog


def parse_catalog(file_path: Path) -> list[EndpointDescriptor]:
    """Parse a native catalog file (``endpoints:`` list) into descriptors."""
    doc = yaml.safe_load(file_path.read_text(encoding="utf-8"))
    if not isinstance(doc, dict) or not isinstance(doc.get("endpoints"), list):
        raise CatalogError(f"Catalog file has no endpoints list: {file_path}")

    endpoints = []
    for index, item in enumerate(doc["endpoints"]):
        if not isinstance(item, dict):
            raise CatalogError(f"Catalog entry {index} is not a mapping: {item!r}")
        endpoints.append(EndpointDescriptor(**_normalise(item)))
    return endpoints


def _normalise(item: dict) -> dict:
    # Bodies may be written inline as YAML; store them as JSON text
    data = dict(item)
    for key in ("request_body", "response_example"):
        value = data.get(key)
        if value is not None and not isinstance(value, str):
            # YAML timestamps load as datetime
            data[key] = json.dumps(value, indent=2, default=str)
    return data
