"""Utilities for writing JSON API responses."""

from __future__ import annotations

import dataclasses
import enum
import json
import logging
from dataclasses import dataclass
from typing import Any, Optional, Union

from flask import Response

from .sink import ResponseSink, ResponseWriter

__all__ = [
    "ABSENT",
    "Absent",
    "CONTENT_TYPE",
    "ErrorEnvelope",
    "FALLBACK_BODY",
    "Present",
    "encode_json",
    "error_response",
    "json_response",
    "write_error",
    "write_json",
]

_logger = logging.getLogger(__name__)
_logger.addHandler(logging.NullHandler())

CONTENT_TYPE = "application/json"
FALLBACK_BODY = b'{"error":"failed to encode response"}'

_BODY_ERRORS = (TypeError, ValueError, RecursionError, OSError)

# Always escaped inside JSON strings; none of them can occur outside one.
_HTML_SAFE_ESCAPES = {
    ord("<"): "\\u003c",
    ord(">"): "\\u003e",
    ord("&"): "\\u0026",
    0x2028: "\\u2028",
    0x2029: "\\u2029",
}


class Absent(enum.Enum):
    """Marker for "no body", distinct from a JSON ``null``."""

    ABSENT = "absent"

    def __repr__(self) -> str:
        return "ABSENT"


ABSENT = Absent.ABSENT


@dataclass(frozen=True)
class Present:
    """A body value that must be written, even when it is ``None``."""

    value: Any


Body = Union[Present, Absent]


@dataclass(frozen=True)
class ErrorEnvelope:
    """The ``{"error": "..."}`` body of an error response."""

    error: str


def _default(obj: Any) -> Any:
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def encode_json(value: Any) -> bytes:
    """Serialise ``value`` as compact UTF-8 JSON with HTML-sensitive characters escaped.

    Raises ``TypeError``, ``ValueError`` or ``RecursionError`` when the value
    has no JSON representation.
    """

    text = json.dumps(
        value,
        default=_default,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )
    return text.translate(_HTML_SAFE_ESCAPES).encode("utf-8")


def _as_body(value: Any) -> Body:
    if isinstance(value, Absent):
        return value
    while isinstance(value, Present):
        value = value.value
    return Present(value)


def write_json(
    sink: ResponseSink,
    status: int,
    value: Any,
    *,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Write ``value`` as a JSON response with the given status code.

    ``ABSENT`` leaves the body empty. Once the status is written it cannot be
    changed, so an encode or write failure is answered with a fixed fallback
    body; if that write fails too the error is dropped.
    """

    log = logger or _logger
    body = _as_body(value)

    sink.headers["Content-Type"] = CONTENT_TYPE
    sink.write_header(status)

    if body is ABSENT:
        return

    try:
        sink.write(encode_json(body.value))
    except _BODY_ERRORS as exc:
        log.warning(
            "Failed to write JSON response body: %s",
            exc,
            extra={"status": status, "error_type": type(exc).__name__},
        )
        try:
            sink.write(FALLBACK_BODY)
        except OSError as write_exc:
            log.debug("Discarding fallback body write failure: %s", write_exc)


def write_error(
    sink: ResponseSink,
    status: int,
    message: str,
    *,
    logger: Optional[logging.Logger] = None,
) -> None:
    """Write ``{"error": message}`` with the given status code."""

    write_json(sink, status, ErrorEnvelope(error=message), logger=logger)


def json_response(status: int, value: Any = ABSENT) -> Response:
    """Return a Flask response holding ``value`` encoded by :func:`write_json`."""

    writer = ResponseWriter()
    write_json(writer, status, value)
    return writer.to_response()


def error_response(status_code: int, message: str) -> Response:
    """Return a JSON error envelope with the provided status code and message."""

    writer = ResponseWriter()
    write_error(writer, status_code, message)
    return writer.to_response()
