"""
ecs_log_transform.tracing

Read-only boundary to a distributed-tracing agent.

Responsibilities:
- Define the small query interface the transform needs (`TracingProvider`).
- Adapt the Elastic APM Python agent (`elasticapm`) to that interface when it is installed.
- Resolve the process-wide default provider once.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from types import ModuleType
from typing import Any, Final, Protocol, runtime_checkable

# Passed as `tracer=` to mean "use whatever agent is installed".
AUTODETECT: Final = object()


@dataclass(frozen=True, slots=True)
class TransactionInfo:
    id: str
    trace_id: str | None = None


@dataclass(frozen=True, slots=True)
class SpanInfo:
    id: str


@runtime_checkable
class TracingProvider(Protocol):
    """
    Queries the transform makes against a tracing agent.

    Every query may answer "absent" (None); implementations must not raise for a
    missing transaction, span or service name.
    """

    def is_started(self) -> bool: ...

    def get_service_name(self) -> str | None: ...

    def current_transaction(self) -> TransactionInfo | None: ...

    def current_span(self) -> SpanInfo | None: ...


class ElasticApmTracer:
    """
    `TracingProvider` backed by the `elasticapm` module's public API.

    The agent counts as started once a client has been created
    (`elasticapm.Client(...)` or a framework integration).
    """

    def __init__(self, agent: ModuleType | Any) -> None:
        self._agent = agent

    def is_started(self) -> bool:
        return self._agent.get_client() is not None

    def get_service_name(self) -> str | None:
        client = self._agent.get_client()
        config = getattr(client, "config", None)
        return getattr(config, "service_name", None) or None

    def current_transaction(self) -> TransactionInfo | None:
        transaction_id = self._agent.get_transaction_id()
        if not transaction_id:
            return None
        return TransactionInfo(id=transaction_id, trace_id=self._agent.get_trace_id())

    def current_span(self) -> SpanInfo | None:
        span_id = self._agent.get_span_id()
        return SpanInfo(id=span_id) if span_id else None


@lru_cache(maxsize=1)
def default_tracer() -> TracingProvider | None:
    # The APM agent is an optional extra; without it there is simply no tracing context.
    try:
        import elasticapm
    except ImportError:
        return None
    return ElasticApmTracer(elasticapm)


def resolve_tracer(tracer: Any) -> TracingProvider | None:
    if tracer is AUTODETECT:
        return default_tracer()
    return tracer


# --- Module Notes -----------------------------------------------------------
# The agent keeps trace/transaction/span in its own execution context; nothing here
# caches those values, so every log call sees the context current at that moment.
