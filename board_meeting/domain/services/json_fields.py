"""Decoding of JSON sub-fields stored on agenda rows.

Depending on which code path wrote a row, a JSON column may hold a real
list/dict, a JSON-encoded string, or a JSON string that itself contains a
JSON-encoded string. Everything read from the store goes through these
helpers once so the rest of the code only ever sees lists and dicts.
"""
from __future__ import annotations

import json
import logging
from typing import Any, Dict, List

logger = logging.getLogger(__name__)


def _decode(value: Any) -> Any:
    """Unwrap at most two levels of JSON string encoding.

    Raises ValueError when the text is not valid JSON.
    """
    if not isinstance(value, str):
        return value
    decoded = json.loads(value)
    if isinstance(decoded, str):
        decoded = json.loads(decoded)
    return decoded


def _is_blank(value: Any) -> bool:
    return value is None or (isinstance(value, str) and not value.strip())


def parse_json_list(value: Any, field: str = "value") -> List[Any]:
    if isinstance(value, list):
        return value
    if _is_blank(value):
        return []
    try:
        decoded = _decode(value)
    except (TypeError, ValueError):
        logger.warning("[json-field] %s is not valid JSON; treating as empty", field)
        return []
    if isinstance(decoded, list):
        return decoded
    logger.warning("[json-field] %s holds %s, expected list; treating as empty", field, type(decoded).__name__)
    return []


def parse_json_object(value: Any, field: str = "value") -> Dict[str, Any]:
    if isinstance(value, dict):
        return value
    if _is_blank(value):
        return {}
    try:
        decoded = _decode(value)
    except (TypeError, ValueError):
        logger.warning("[json-field] %s is not valid JSON; treating as empty", field)
        return {}
    if isinstance(decoded, dict):
        return decoded
    logger.warning("[json-field] %s holds %s, expected object; treating as empty", field, type(decoded).__name__)
    return {}


def parse_path_list(value: Any, field: str = "value") -> List[str]:
    """Storage paths; drops empty and placeholder entries."""
    return [str(p) for p in parse_json_list(value, field) if p and p != "null"]
