"""
tests.conftest

Shared fixtures.

Responsibilities:
- Provide an in-memory tracing provider with controllable state.
"""

from __future__ import annotations

from dataclasses import dataclass

import pytest

from ecs_log_transform.tracing import SpanInfo, TransactionInfo


@dataclass
class FakeTracer:
    started: bool = True
    service_name: str | None = "checkout"
    transaction: TransactionInfo | None = None
    span: SpanInfo | None = None

    def is_started(self) -> bool:
        return self.started

    def get_service_name(self) -> str | None:
        return self.service_name

    def current_transaction(self) -> TransactionInfo | None:
        return self.transaction

    def current_span(self) -> SpanInfo | None:
        return self.span


@pytest.fixture
def tracer() -> FakeTracer:
    return FakeTracer()


@pytest.fixture
def record() -> dict:
    return {"level": "info", "message": "order placed", "order_id": 42}
