"""
ecs_log_transform

Convert application log records into Elastic Common Schema (ECS) JSON.

Responsibilities:
- Expose package version metadata and the transform entry points.
"""

from ecs_log_transform.errors import EcsSerializationError
from ecs_log_transform.helpers import ECS_VERSION
from ecs_log_transform.transform import (
    MESSAGE,
    RESERVED_FIELDS,
    EcsOptions,
    build_ecs_fields,
    ecs_format,
    ecs_transform,
)

__all__ = [
    "ECS_VERSION",
    "MESSAGE",
    "RESERVED_FIELDS",
    "EcsOptions",
    "EcsSerializationError",
    "build_ecs_fields",
    "ecs_format",
    "ecs_transform",
    "__version__",
]

__version__ = "0.1.0"


# --- Module Notes -----------------------------------------------------------
# Keep this file free of logging setup; importing the package must not touch
# global logging state.
