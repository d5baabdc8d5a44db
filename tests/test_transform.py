"""
tests.test_transform

Behavior of the record -> ECS document transform.
"""

from __future__ import annotations

import json
import re
from datetime import datetime

import pytest
from starlette.requests import Request
from starlette.responses import Response

from ecs_log_transform import (
    ECS_VERSION,
    MESSAGE,
    EcsOptions,
    EcsSerializationError,
    build_ecs_fields,
    ecs_format,
    ecs_transform,
)
from ecs_log_transform.tracing import SpanInfo, TransactionInfo

_TS = re.compile(r"^\d{4}-\d{2}-\d{2}T\d{2}:\d{2}:\d{2}\.\d{3}Z$")


def _doc(record: dict) -> dict:
    return json.loads(record[MESSAGE])


def _http_request() -> Request:
    return Request(
        {
            "type": "http",
            "http_version": "1.1",
            "method": "POST",
            "scheme": "https",
            "path": "/orders",
            "query_string": b"",
            "headers": [(b"host", b"shop.example.com"), (b"user-agent", b"curl/8.5")],
            "client": ("10.1.2.3", 40000),
            "server": ("shop.example.com", 443),
        }
    )


def test_envelope_fields_always_present(record) -> None:
    doc = _doc(ecs_transform(record, tracer=None))

    assert _TS.match(doc["@timestamp"])
    datetime.fromisoformat(doc["@timestamp"].replace("Z", "+00:00"))
    assert doc["log.level"] == "info"
    assert doc["message"] == "order placed"
    assert doc["ecs"] == {"version": ECS_VERSION}


def test_returns_same_record_with_payload(record) -> None:
    out = ecs_transform(record, tracer=None)

    assert out is record
    assert isinstance(record[MESSAGE], str)
    assert record["order_id"] == 42


def test_missing_level_and_message_do_not_raise() -> None:
    doc = _doc(ecs_transform({}, tracer=None))

    assert doc["log.level"] is None
    assert doc["message"] is None


def test_non_reserved_fields_pass_through_unchanged(record) -> None:
    record["user"] = {"id": "u-1", "roles": ["admin"]}
    record["labels.env"] = "prod"

    fields = build_ecs_fields(record, tracer=None)

    assert fields["order_id"] == 42
    assert fields["user"] == {"id": "u-1", "roles": ["admin"]}
    assert fields["labels.env"] == "prod"


def test_reserved_fields_are_not_copied(record) -> None:
    record.update({"@timestamp": "yesterday", "ecs": {"version": "0.0.1"}, "log.level": "x"})

    fields = build_ecs_fields(record, tracer=None)

    assert fields["@timestamp"] != "yesterday"
    assert fields["ecs"] == {"version": ECS_VERSION}
    assert fields["log.level"] == "info"
    assert "level" not in fields


def test_non_string_keys_are_skipped(record) -> None:
    ecs_transform(record, tracer=None)
    first = record[MESSAGE]

    # A second pass must not embed the previous payload.
    doc = _doc(ecs_transform(record, tracer=None))

    assert first not in doc.values()
    assert set(doc) == {"@timestamp", "log.level", "message", "ecs", "order_id"}


def test_no_tracer_means_no_tracing_fields(record) -> None:
    fields = build_ecs_fields(record, tracer=None)

    assert not {"trace", "transaction", "span", "service", "event"} & set(fields)


def test_tracer_not_started_is_ignored(record, tracer) -> None:
    tracer.started = False
    tracer.transaction = TransactionInfo(id="t1", trace_id="r1")

    fields = build_ecs_fields(record, tracer=tracer)

    assert not {"trace", "transaction", "span", "service", "event"} & set(fields)


def test_service_name_and_dataset_from_tracer(record, tracer) -> None:
    fields = build_ecs_fields(record, tracer=tracer)

    assert fields["service"] == {"name": "checkout"}
    assert fields["event"] == {"dataset": "checkout.log"}
    assert "trace" not in fields


def test_pass_through_service_name_wins(record, tracer) -> None:
    record["service"] = {"name": "billing", "version": "2.0"}

    fields = build_ecs_fields(record, tracer=tracer)

    assert fields["service"] == {"name": "billing", "version": "2.0"}
    assert fields["event"] == {"dataset": "billing.log"}


def test_empty_pass_through_service_name_is_filled_from_tracer(record, tracer) -> None:
    record["service"] = {"name": "", "version": "2.0"}

    fields = build_ecs_fields(record, tracer=tracer)

    assert fields["service"] == {"name": "checkout", "version": "2.0"}
    assert fields["event"] == {"dataset": "checkout.log"}


def test_scalar_service_blocks_enrichment(record, tracer) -> None:
    record["service"] = "api"

    fields = build_ecs_fields(record, tracer=tracer)

    assert fields["service"] == "api"
    assert "event" not in fields


def test_pass_through_dataset_is_kept(record, tracer) -> None:
    record["event"] = {"dataset": "custom.events", "action": "buy"}

    fields = build_ecs_fields(record, tracer=tracer)

    assert fields["event"] == {"dataset": "custom.events", "action": "buy"}


def test_enrichment_does_not_mutate_caller_dicts(record, tracer) -> None:
    event = {"action": "buy"}
    record["event"] = event

    fields = build_ecs_fields(record, tracer=tracer)

    assert fields["event"] == {"action": "buy", "dataset": "checkout.log"}
    assert event == {"action": "buy"}


def test_misconfigured_tracer_without_service_name(record, tracer) -> None:
    tracer.service_name = None
    tracer.transaction = TransactionInfo(id="t1", trace_id="r1")

    fields = build_ecs_fields(record, tracer=tracer)

    assert "service" not in fields
    assert "event" not in fields
    assert fields["trace"] == {"id": "r1"}


def test_active_transaction_without_span(record, tracer) -> None:
    tracer.transaction = TransactionInfo(id="t1", trace_id="r1")

    doc = _doc(ecs_transform(record, tracer=tracer))

    assert doc["trace"] == {"id": "r1"}
    assert doc["transaction"] == {"id": "t1"}
    assert "span" not in doc


def test_active_transaction_and_span(record, tracer) -> None:
    tracer.transaction = TransactionInfo(id="t1", trace_id="r1")
    tracer.span = SpanInfo(id="s1")

    fields = build_ecs_fields(record, tracer=tracer)

    assert fields["span"] == {"id": "s1"}


def test_span_is_ignored_without_transaction(record, tracer) -> None:
    tracer.span = SpanInfo(id="s1")

    fields = build_ecs_fields(record, tracer=tracer)

    assert "span" not in fields
    assert "transaction" not in fields


def test_err_is_converted_by_default(record) -> None:
    record["err"] = RuntimeError("boom")

    doc = _doc(ecs_transform(record, tracer=None))

    assert doc["error"]["message"] == "boom"
    assert doc["error"]["type"] == "RuntimeError"
    assert "err" not in doc


def test_err_passes_through_when_conversion_disabled(record) -> None:
    err = RuntimeError("boom")
    record["err"] = err

    fields = build_ecs_fields(record, {"convert_err": False}, tracer=None)

    assert fields["err"] is err
    assert "error" not in fields


def test_raw_exception_appears_in_payload_when_conversion_disabled(record) -> None:
    record["err"] = RuntimeError("boom")

    doc = _doc(ecs_transform(record, EcsOptions(convert_err=False), tracer=None))

    assert doc["err"] == {"type": "RuntimeError", "message": "boom"}
    assert "error" not in doc


def test_unserializable_value_propagates(record) -> None:
    record["handle"] = object()

    with pytest.raises(EcsSerializationError):
        ecs_transform(record, tracer=None)


def test_req_res_pass_through_by_default(record) -> None:
    record["req"] = {"method": "GET", "url": "/"}
    record["res"] = {"statusCode": 200}

    doc = _doc(ecs_transform(record, tracer=None))

    assert doc["req"] == {"method": "GET", "url": "/"}
    assert doc["res"] == {"statusCode": 200}
    assert "http" not in doc


def test_req_res_converted_when_enabled(record) -> None:
    record["req"] = _http_request()
    record["res"] = Response("created", status_code=201)

    doc = _doc(ecs_transform(record, {"convert_req_res": True}, tracer=None))

    assert doc["http"]["request"]["method"] == "POST"
    assert doc["http"]["response"]["status_code"] == 201
    assert doc["url"]["full"] == "https://shop.example.com/orders"
    assert doc["user_agent"] == {"original": "curl/8.5"}
    assert "req" not in doc
    assert "res" not in doc


def test_conversions_do_not_interfere(record, tracer) -> None:
    tracer.transaction = TransactionInfo(id="t1", trace_id="r1")
    record["err"] = ValueError("bad input")
    record["res"] = {"status_code": 400, "headers": {"Content-Length": "11"}}

    fields = build_ecs_fields(record, EcsOptions(convert_req_res=True), tracer=tracer)

    assert set(fields["http"]) == {"response"}
    assert fields["error"]["message"] == "bad input"
    assert fields["http"]["response"]["body"] == {"bytes": 11}
    assert fields["trace"] == {"id": "r1"}


def test_unconvertible_req_writes_nothing(record) -> None:
    record["req"] = "GET /"

    fields = build_ecs_fields(record, EcsOptions(convert_req_res=True), tracer=None)

    assert "req" not in fields
    assert "http" not in fields


def test_serialized_payload_round_trips(record, tracer) -> None:
    tracer.transaction = TransactionInfo(id="t1", trace_id="r1")
    record["tags"] = ["a", "b"]
    fields = build_ecs_fields(record, tracer=tracer)

    ecs_transform(record, tracer=tracer)
    doc = _doc(record)

    doc.pop("@timestamp")
    fields.pop("@timestamp")
    assert doc == fields


def test_options_coercion() -> None:
    assert EcsOptions.coerce(None) == EcsOptions()
    assert EcsOptions.coerce({"convert_req_res": 1}) == EcsOptions(
        convert_err=True, convert_req_res=True
    )


def test_options_accept_camel_case_names() -> None:
    opts = EcsOptions.coerce({"convertErr": False, "convertReqRes": True})

    assert opts == EcsOptions(convert_err=False, convert_req_res=True)


def test_options_reject_unknown_names() -> None:
    with pytest.raises(ValueError, match="convert_errors"):
        EcsOptions.coerce({"convert_errors": False})


def test_ecs_format_binds_options_and_tracer(tracer) -> None:
    tracer.transaction = TransactionInfo(id="t9", trace_id="r9")
    fmt = ecs_format({"convert_err": False}, tracer=tracer)
    rec = {"level": "warn", "message": "slow", "err": "timeout"}

    out = fmt(rec)

    assert out is rec
    doc = _doc(out)
    assert doc["err"] == "timeout"
    assert doc["transaction"] == {"id": "t9"}


# --- Module Notes -----------------------------------------------------------
# Tests pass `tracer=None` or a FakeTracer so results never depend on whether the
# Elastic APM agent happens to be installed.
