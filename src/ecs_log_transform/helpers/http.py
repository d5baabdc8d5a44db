"""
ecs_log_transform.helpers.http

HTTP request/response objects -> ECS `http.*`, `url.*`, `user_agent.*`, `client.*`.

Responsibilities:
- Normalize ASGI scopes (and Starlette-style requests exposing `.scope`) and WSGI
  environs into one request view before writing ECS fields.
- Read status/headers from response objects (Starlette, httpx, requests) or mappings.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from ecs_log_transform.helpers.fields import set_fields


@dataclass(frozen=True, slots=True)
class _RequestView:
    method: str | None
    http_version: str | None
    scheme: str
    host: str | None
    port: int | None
    path: str
    query: str
    headers: dict[str, str]
    client_host: str | None
    client_port: int | None


def _to_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _split_host(host_header: str) -> tuple[str, int | None]:
    # "[::1]:8080" keeps its brackets out of url.domain.
    if host_header.startswith("["):
        host, _, rest = host_header[1:].partition("]")
        return host, _to_int(rest.lstrip(":")) if rest else None
    host, sep, port = host_header.rpartition(":")
    if not sep:
        return host_header, None
    return host, _to_int(port)


def _decode(value: Any) -> str:
    if isinstance(value, bytes):
        return value.decode("latin-1")
    return str(value)


def _header_dict(items: Iterable[tuple[Any, Any]]) -> dict[str, str]:
    headers: dict[str, str] = {}
    for key, value in items:
        name = _decode(key).lower()
        value = _decode(value)
        headers[name] = f"{headers[name]}, {value}" if name in headers else value
    return headers


def _from_asgi(scope: Mapping[str, Any]) -> _RequestView:
    headers = _header_dict(scope.get("headers") or ())
    server = scope.get("server") or (None, None)
    client = scope.get("client") or (None, None)

    host, port = (None, None)
    if "host" in headers:
        host, port = _split_host(headers["host"])
    elif server[0]:
        host, port = server[0], server[1]

    return _RequestView(
        method=scope.get("method"),
        http_version=scope.get("http_version"),
        scheme=scope.get("scheme") or "http",
        host=host,
        port=port,
        path=scope.get("path") or "/",
        query=_decode(scope.get("query_string") or b""),
        headers=headers,
        client_host=client[0],
        client_port=client[1],
    )


def _from_wsgi(environ: Mapping[str, Any]) -> _RequestView:
    headers = _header_dict(
        (key[5:].replace("_", "-"), value)
        for key, value in environ.items()
        if key.startswith("HTTP_")
    )
    for key in ("CONTENT_TYPE", "CONTENT_LENGTH"):
        if environ.get(key):
            headers[key.replace("_", "-").lower()] = str(environ[key])

    if "host" in headers:
        host, port = _split_host(headers["host"])
    else:
        host, port = environ.get("SERVER_NAME"), _to_int(environ.get("SERVER_PORT"))

    protocol = str(environ.get("SERVER_PROTOCOL") or "")
    return _RequestView(
        method=environ.get("REQUEST_METHOD"),
        http_version=protocol.partition("/")[2] or None,
        scheme=environ.get("wsgi.url_scheme") or "http",
        host=host,
        port=port,
        path=(environ.get("SCRIPT_NAME") or "") + (environ.get("PATH_INFO") or "/"),
        query=environ.get("QUERY_STRING") or "",
        headers=headers,
        client_host=environ.get("REMOTE_ADDR"),
        client_port=_to_int(environ.get("REMOTE_PORT")),
    )


def _request_view(req: Any) -> _RequestView | None:
    if isinstance(req, Mapping):
        if req.get("type") in ("http", "websocket"):
            return _from_asgi(req)
        if "REQUEST_METHOD" in req:
            return _from_wsgi(req)
        return None
    scope = getattr(req, "scope", None)
    if isinstance(scope, Mapping) and scope.get("type") in ("http", "websocket"):
        return _from_asgi(scope)
    return None


def format_http_request(fields: dict[str, Any], req: Any) -> bool:
    """
    Write ECS HTTP request, URL, user agent and client fields for `req`.

    Supported shapes: an ASGI scope, an object with an ASGI `scope` attribute
    (Starlette/FastAPI `Request`), or a WSGI environ. Anything else returns False.
    """

    view = _request_view(req)
    if view is None:
        return False

    authority = view.host or ""
    if view.host and view.port is not None:
        authority = f"{view.host}:{view.port}"
    full = f"{view.scheme}://{authority}{view.path}"
    if view.query:
        full = f"{full}?{view.query}"

    set_fields(
        fields,
        {
            "http.version": view.http_version,
            "http.request.method": view.method,
            "http.request.id": view.headers.get("x-request-id"),
            "http.request.headers": view.headers,
            "http.request.body.bytes": _to_int(view.headers.get("content-length")),
            "url.full": full,
            "url.path": view.path,
            "url.query": view.query or None,
            "url.domain": view.host,
            "url.port": view.port,
            "user_agent.original": view.headers.get("user-agent"),
            "client.address": view.client_host,
            "client.ip": view.client_host,
            "client.port": view.client_port,
        },
    )
    return True


def format_http_response(fields: dict[str, Any], res: Any) -> bool:
    """
    Write `http.response.status_code`, `http.response.headers` and body size.

    Works with any object exposing `status_code`/`headers` or a mapping holding
    `status_code` (or `status`) and `headers`. Returns False without a status.
    """

    if isinstance(res, Mapping):
        status = res.get("status_code", res.get("status"))
        raw_headers = res.get("headers")
    else:
        status = getattr(res, "status_code", None)
        raw_headers = getattr(res, "headers", None)

    status = _to_int(status)
    if status is None:
        return False

    headers = _header_dict(raw_headers.items()) if isinstance(raw_headers, Mapping) else {}
    set_fields(
        fields,
        {
            "http.response.status_code": status,
            "http.response.headers": headers,
            "http.response.body.bytes": _to_int(headers.get("content-length")),
        },
    )
    return True


# --- Module Notes -----------------------------------------------------------
# Framework types are never imported here; Starlette and httpx objects are read
# through the attributes they share with plain ASGI/WSGI data.
