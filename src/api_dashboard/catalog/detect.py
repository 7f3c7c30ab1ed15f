"""Auto-detect the format of a catalog file."""

import json
from pathlib import Path

import yaml


def _classify(data) -> str | None:
    if not isinstance(data, dict):
        return None
    if "openapi" in data or "swagger" in data:
        return "openapi"
    if isinstance(data.get("endpoints"), list):
        return "catalog"
    return None


def detect_format(file_path: Path) -> str:
    """Detect the format of a catalog file.

    Returns: 'catalog', 'openapi', or 'unknown'.
    """
    text = file_path.read_text(encoding="utf-8")

    try:
        fmt = _classify(yaml.safe_load(text))
        if fmt:
            return fmt
    except yaml.YAMLError:
        pass

    # JSON with tabs or other constructs YAML rejects
    try:
        fmt = _classify(json.loads(text))
        if fmt:
            return fmt
    except ValueError:
        pass

    return "unknown"
