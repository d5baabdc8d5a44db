"""
ecs_log_transform.errors

Package exceptions.

Responsibilities:
- Signal that an assembled ECS document cannot be rendered to JSON.
"""

from __future__ import annotations


class EcsSerializationError(ValueError):
    """
    Raised when the ECS field mapping holds a value JSON cannot represent.

    The original `TypeError`/`ValueError` from the encoder is chained as `__cause__`.
    """


# --- Module Notes -----------------------------------------------------------
# This is the only failure the transform surfaces; it is never caught and logged
# internally because doing so would re-enter the logging pipeline.
