"""
ecs_log_transform.transform

Log record -> Elastic Common Schema (ECS) document.

Responsibilities:
- Build the ECS envelope and copy through every non-reserved field.
- Enrich with service/trace/transaction/span context from a started tracing agent.
- Convert `err`, `req` and `res` into ECS fields (or pass them through raw).
- Serialize the document and attach it to the record under `MESSAGE`.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping, MutableMapping
from dataclasses import dataclass, fields as dataclass_fields, replace
from datetime import UTC, datetime
from typing import Any

from ecs_log_transform.helpers import (
    ECS_VERSION,
    format_error,
    format_http_request,
    format_http_response,
    stringify,
)
from ecs_log_transform.helpers.fields import get_field, has_field, set_field
from ecs_log_transform.tracing import AUTODETECT, TracingProvider, resolve_tracer

LogRecord = MutableMapping[Any, Any]


class _Symbol:
    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        self.name = name

    def __repr__(self) -> str:
        return f"Symbol({self.name})"


# Key under which the rendered line is attached to the record. Not a string, so it
# can never clash with (or be copied as) an ordinary field.
MESSAGE = _Symbol("message")

RESERVED_FIELDS = frozenset(
    {"level", "log.level", "ecs", "@timestamp", "err", "req", "res"}
)

# camelCase spellings used by the JavaScript ECS formatters.
_OPTION_ALIASES = {"convertErr": "convert_err", "convertReqRes": "convert_req_res"}


@dataclass(frozen=True, slots=True)
class EcsOptions:
    # err -> error.*; req/res -> http.*, url.*, user_agent.*, client.*
    convert_err: bool = True
    convert_req_res: bool = False

    @classmethod
    def coerce(cls, options: EcsOptions | Mapping[str, Any] | None) -> EcsOptions:
        """
        Defaults for None; a mapping overrides only the keys it carries.

        Mapping keys may use the camelCase spellings; unknown keys raise ValueError.
        """

        if options is None:
            return cls()
        if isinstance(options, EcsOptions):
            return options
        known = {f.name for f in dataclass_fields(cls)}
        overrides: dict[str, bool] = {}
        for key, value in options.items():
            name = _OPTION_ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown ECS option: {key!r}")
            overrides[name] = bool(value)
        return replace(cls(), **overrides)


def _timestamp() -> str:
    return datetime.now(tz=UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _enrich_from_tracer(fields: dict[str, Any], tracer: TracingProvider) -> None:
    service_name = get_field(fields, "service.name")
    if not has_field(fields, "service.name"):
        # A started agent may still lack a service name when misconfigured.
        service_name = tracer.get_service_name()
        if service_name:
            set_field(fields, "service.name", service_name)
    if service_name and not has_field(fields, "event.dataset"):
        set_field(fields, "event.dataset", f"{service_name}.log")

    transaction = tracer.current_transaction()
    if transaction is None:
        return
    if transaction.trace_id:
        set_field(fields, "trace.id", transaction.trace_id)
    set_field(fields, "transaction.id", transaction.id)
    span = tracer.current_span()
    if span is not None:
        set_field(fields, "span.id", span.id)


def build_ecs_fields(
    record: Mapping[Any, Any],
    options: EcsOptions | Mapping[str, Any] | None = None,
    *,
    tracer: Any = AUTODETECT,
) -> dict[str, Any]:
    """
    Assemble the ECS document for `record` without serializing it.

    `tracer` is a `TracingProvider`, None for no tracing, or `AUTODETECT` to use the
    installed Elastic APM agent if there is one.
    """

    opts = EcsOptions.coerce(options)

    fields: dict[str, Any] = {
        "@timestamp": _timestamp(),
        "log.level": record.get("level"),
        "message": record.get("message"),
        "ecs": {"version": ECS_VERSION},
    }

    for key, value in record.items():
        if isinstance(key, str) and key not in RESERVED_FIELDS:
            fields[key] = value

    provider = resolve_tracer(tracer)
    if provider is not None and provider.is_started():
        _enrich_from_tracer(fields, provider)

    if "err" in record:
        if opts.convert_err:
            format_error(fields, record["err"])
        else:
            fields["err"] = record["err"]

    if "req" in record:
        if opts.convert_req_res:
            format_http_request(fields, record["req"])
        else:
            fields["req"] = record["req"]
    if "res" in record:
        if opts.convert_req_res:
            format_http_response(fields, record["res"])
        else:
            fields["res"] = record["res"]

    return fields


def ecs_transform(
    record: LogRecord,
    options: EcsOptions | Mapping[str, Any] | None = None,
    *,
    tracer: Any = AUTODETECT,
) -> LogRecord:
    """
    Render `record` as an ECS JSON line stored at `record[MESSAGE]`.

    Returns the same record object. Raises `EcsSerializationError` when a field
    value cannot be represented as JSON.
    """

    record[MESSAGE] = stringify(build_ecs_fields(record, options, tracer=tracer))
    return record


def ecs_format(
    options: EcsOptions | Mapping[str, Any] | None = None,
    *,
    tracer: Any = AUTODETECT,
) -> Callable[[LogRecord], LogRecord]:
    """
    Bind options and a tracer into a `record -> record` pipeline step.
    """

    opts = EcsOptions.coerce(options)
    provider = resolve_tracer(tracer)

    def _format(record: LogRecord) -> LogRecord:
        return ecs_transform(record, opts, tracer=provider)

    return _format


# --- Module Notes -----------------------------------------------------------
# `build_ecs_fields` is split out so adapters and tests can inspect the document
# before it is turned into a string; pipelines should call `ecs_transform`.
