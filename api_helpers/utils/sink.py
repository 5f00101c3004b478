"""Write-once response sinks used by the JSON helpers."""

from __future__ import annotations

import io
import logging
from typing import Optional, Protocol

from flask import Response
from werkzeug.datastructures import Headers

__all__ = ["ResponseSink", "ResponseWriter"]

logger = logging.getLogger(__name__)


class ResponseSink(Protocol):
    """Minimal surface of an HTTP response: headers, a status line and a body."""

    headers: Headers

    def write_header(self, status: int) -> None:
        ...

    def write(self, data: bytes) -> int:
        ...


class ResponseWriter:
    """Buffered sink that turns a header/status/body sequence into a Flask response.

    Headers are snapshotted when the status is committed, so later mutations of
    ``headers`` do not reach the response. Repeated ``write_header`` calls are
    ignored.
    """

    def __init__(self) -> None:
        self.headers = Headers()
        self._committed_headers: Optional[Headers] = None
        self._status: Optional[int] = None
        self._body = io.BytesIO()
        self._closed = False

    @property
    def status(self) -> Optional[int]:
        return self._status

    @property
    def committed(self) -> bool:
        return self._status is not None

    def write_header(self, status: int) -> None:
        if self._status is not None:
            logger.warning(
                "Superfluous write_header call", extra={"status": status, "committed_status": self._status}
            )
            return
        self._status = status
        self._committed_headers = Headers(self.headers)

    def write(self, data: bytes) -> int:
        if self._closed:
            raise OSError("write on closed response")
        if self._status is None:
            self.write_header(200)
        return self._body.write(data)

    def close(self) -> None:
        self._closed = True

    def body(self) -> bytes:
        return self._body.getvalue()

    def to_response(self) -> Response:
        """Return a Flask response carrying the committed status, headers and body."""

        if self._status is None:
            self.write_header(200)
        return Response(
            self.body(),
            status=self._status,
            headers=Headers(self._committed_headers),
        )
