"""
ecs_log_transform.helpers.error

Exception -> ECS `error.*` fields.
"""

from __future__ import annotations

import traceback
from typing import Any

from ecs_log_transform.helpers.fields import set_fields


def _error_type(err: BaseException) -> str:
    cls = type(err)
    if cls.__module__ == "builtins":
        return cls.__qualname__
    return f"{cls.__module__}.{cls.__qualname__}"


def _error_code(err: BaseException) -> str | None:
    # OSError carries errno; HTTP/exit-style exceptions usually carry `code`.
    code = getattr(err, "errno", None)
    if code is None:
        code = getattr(err, "code", None)
    if isinstance(code, (str, int)) and not isinstance(code, bool):
        return str(code)
    return None


def format_error(fields: dict[str, Any], err: Any) -> bool:
    """
    Write `error.type`, `error.message`, `error.stack_trace` and `error.code`.

    Returns False, leaving `fields` untouched, when `err` is not an exception.
    """

    if not isinstance(err, BaseException):
        return False

    set_fields(
        fields,
        {
            "error.type": _error_type(err),
            "error.message": str(err),
            "error.stack_trace": "".join(
                traceback.format_exception(type(err), err, err.__traceback__)
            ),
            "error.code": _error_code(err),
        },
    )
    return True
