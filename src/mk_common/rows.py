"""Helpers for mapping raw text() SQL rows into domain dataclasses.

asyncpg hands back UUID objects for uuid columns and, without a registered
codec, JSON text for jsonb columns.
"""

import json
from typing import Any


def as_str_id(value: Any) -> str | None:
    return str(value) if value is not None else None


def as_json(value: Any) -> Any:
    if isinstance(value, (str, bytes)):
        return json.loads(value)
    return value


def to_json_param(value: Any) -> str | None:
    """Serialise a python value for a CAST(:param AS JSONB) parameter."""
    if value is None:
        return None
    return json.dumps(value)
