"""JSON response helpers for Flask APIs."""

from .utils.responses import (  # noqa: F401
    ABSENT,
    Absent,
    ErrorEnvelope,
    Present,
    error_response,
    json_response,
    write_error,
    write_json,
)
from .utils.sink import ResponseSink, ResponseWriter  # noqa: F401

__all__ = [
    "ABSENT",
    "Absent",
    "ErrorEnvelope",
    "Present",
    "ResponseSink",
    "ResponseWriter",
    "error_response",
    "json_response",
    "write_error",
    "write_json",
]
