"""
ecs_log_transform.helpers.serializer

Wire serialization for finished ECS documents.

Responsibilities:
- Render the ECS mapping as compact JSON via structlog's JSONRenderer.
- Keep `@timestamp`, `log.level` and `message` at the front of every line.
- Surface unrepresentable values as `EcsSerializationError`.
"""

from __future__ import annotations

import json
from datetime import date, datetime, time
from decimal import Decimal
from pathlib import PurePath
from typing import Any
from uuid import UUID

import structlog

from ecs_log_transform.errors import EcsSerializationError

ECS_VERSION = "1.6.0"

_LEADING_KEYS = ("@timestamp", "log.level", "message")


def _default(obj: Any) -> Any:
    if isinstance(obj, (datetime, date, time)):
        return obj.isoformat()
    if isinstance(obj, (UUID, Decimal, PurePath)):
        return str(obj)
    if isinstance(obj, (set, frozenset)):
        return list(obj)
    if isinstance(obj, BaseException):
        return {"type": type(obj).__name__, "message": str(obj)}
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


_renderer = structlog.processors.JSONRenderer(
    serializer=json.dumps,
    default=_default,
    separators=(",", ":"),
    ensure_ascii=False,
    allow_nan=False,
)


def stringify(fields: dict[str, Any]) -> str:
    """
    Serialize an ECS field mapping to a single JSON line.

    Raises:
        EcsSerializationError: a value has no JSON representation (unknown type,
            NaN/Infinity, or a circular reference).
    """

    ordered = {key: fields[key] for key in _LEADING_KEYS if key in fields}
    for key in sorted(k for k in fields if k not in ordered):
        ordered[key] = fields[key]
    try:
        return _renderer(None, "", ordered)
    except (TypeError, ValueError) as e:
        raise EcsSerializationError(str(e)) from e


# --- Module Notes -----------------------------------------------------------
# Leading-key order matches what Elastic's log shippers expect to see first; the
# rest is sorted so identical documents always produce identical lines.
