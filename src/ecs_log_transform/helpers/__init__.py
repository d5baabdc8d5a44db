"""
ecs_log_transform.helpers

Low-level ECS helpers used by the transform.

Responsibilities:
- Serialize a finished ECS mapping to its wire string.
- Expand exceptions and HTTP request/response objects into ECS sub-fields.
"""

from ecs_log_transform.helpers.error import format_error
from ecs_log_transform.helpers.http import format_http_request, format_http_response
from ecs_log_transform.helpers.serializer import ECS_VERSION, stringify

__all__ = [
    "ECS_VERSION",
    "format_error",
    "format_http_request",
    "format_http_response",
    "stringify",
]
