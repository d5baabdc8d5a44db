"""
ecs_log_transform.helpers.fields

Dotted-path access into an ECS field mapping.

Responsibilities:
- Read `a.b.c` paths through nested dicts (and literal dotted top-level keys).
- Write paths copy-on-write so nested dicts owned by the caller are never mutated.
"""

from __future__ import annotations

from collections.abc import Mapping, MutableMapping
from typing import Any


def get_field(fields: Mapping[str, Any], path: str) -> Any:
    """
    Return the value at `path`, or None when any segment is missing.

    A literal top-level key equal to `path` (e.g. `"service.name"`) wins over the
    nested form.
    """

    if path in fields:
        return fields[path]
    node: Any = fields
    for part in path.split("."):
        if not isinstance(node, Mapping) or part not in node:
            return None
        node = node[part]
    return node


def has_field(fields: Mapping[str, Any], path: str) -> bool:
    # Empty values count as unset. A namespace occupied by a scalar (e.g. service="api")
    # counts as set: a caller's value is never replaced to make room for a sub-field.
    if fields.get(path):
        return True
    node: Any = fields
    for part in path.split("."):
        if not isinstance(node, Mapping):
            return True
        if not node.get(part):
            return False
        node = node[part]
    return True


def set_field(fields: MutableMapping[str, Any], path: str, value: Any) -> None:
    head, _, rest = path.partition(".")
    if not rest:
        fields[head] = value
        return
    current = fields.get(head)
    container = dict(current) if isinstance(current, Mapping) else {}
    set_field(container, rest, value)
    fields[head] = container


def set_fields(fields: MutableMapping[str, Any], values: Mapping[str, Any]) -> None:
    """Write several paths at once, skipping None values."""

    for path, value in values.items():
        if value is not None:
            set_field(fields, path, value)


# --- Module Notes -----------------------------------------------------------
# Copy-on-write costs one shallow dict copy per path segment; ECS documents are
# small, and callers reuse their record dicts after the transform returns.
