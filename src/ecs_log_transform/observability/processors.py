"""
ecs_log_transform.observability.processors

structlog adapter for the ECS transform.

Responsibilities:
- Map structlog's event dict conventions (`event`, `logger`, `exc_info`) onto the
  record shape `ecs_transform` expects.
- Act as the final renderer in a structlog processor chain.
"""

from __future__ import annotations

import sys
from collections.abc import Mapping
from typing import Any

from ecs_log_transform.tracing import AUTODETECT, resolve_tracer
from ecs_log_transform.transform import MESSAGE, EcsOptions, ecs_transform

_METHOD_LEVELS = {"exception": "error", "warn": "warning", "msg": "info"}


def _exception_from(exc_info: Any) -> BaseException | None:
    if isinstance(exc_info, BaseException):
        return exc_info
    if isinstance(exc_info, tuple):
        return exc_info[1] if len(exc_info) == 3 else None
    if exc_info:
        return sys.exc_info()[1]
    return None


class EcsRenderer:
    """
    Final structlog processor: event dict in, ECS JSON line out.

    ```
    structlog.configure(processors=[structlog.stdlib.add_log_level, EcsRenderer()])
    ```
    """

    def __init__(
        self,
        options: EcsOptions | Mapping[str, Any] | None = None,
        *,
        tracer: Any = AUTODETECT,
    ) -> None:
        self._options = EcsOptions.coerce(options)
        self._tracer = resolve_tracer(tracer)

    def __call__(self, logger: Any, method_name: str, event_dict: dict[str, Any]) -> str:
        record = dict(event_dict)

        if "event" in record:
            record["message"] = record.pop("event")
        if "level" not in record:
            record["level"] = _METHOD_LEVELS.get(method_name, method_name)
        if "logger" in record:
            record["log.logger"] = record.pop("logger")

        exc = _exception_from(record.pop("exc_info", None))
        if exc is not None and "err" not in record:
            record["err"] = exc

        return ecs_transform(record, self._options, tracer=self._tracer)[MESSAGE]


# --- Module Notes -----------------------------------------------------------
# Place EcsRenderer last: anything after it would receive a string, not a dict.
