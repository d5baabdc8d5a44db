"""
ecs_log_transform.observability.logging

Structured logging configuration emitting ECS JSON.

Responsibilities:
- Configure `structlog` so bound-logger events render through `EcsRenderer`.
- Route plain stdlib `logging` records through the same renderer.
- Provide a small wrapper for obtaining bound loggers.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, TextIO

import structlog

from ecs_log_transform.observability.processors import EcsRenderer
from ecs_log_transform.settings import EcsSettings, get_settings
from ecs_log_transform.tracing import AUTODETECT


def configure_logging(
    *,
    settings: EcsSettings | None = None,
    stream: TextIO | None = None,
    tracer: Any = AUTODETECT,
) -> None:
    """
    ECS JSON logs for ingestion by Filebeat/Elastic Agent.
    """

    settings = settings or get_settings()
    if tracer is AUTODETECT and not settings.apm_integration:
        tracer = None

    renderer = EcsRenderer(settings.options(), tracer=tracer)
    formatter = structlog.stdlib.ProcessorFormatter(
        # Only stdlib records run the pre-chain; structlog events arrive prepared.
        foreign_pre_chain=[
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.ExtraAdder(),
        ],
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    root = logging.getLogger()
    root.setLevel(getattr(logging, settings.log_level.upper(), logging.INFO))
    # Clean existing handlers (reconfiguring must not duplicate lines)
    for h in list(root.handlers):
        root.removeHandler(h)
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(formatter)
    root.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


# --- Module Notes -----------------------------------------------------------
# Request-scoped metadata bound with `structlog.contextvars.bind_contextvars` lands
# in every ECS line as ordinary pass-through fields.
