"""Request logging middleware."""

import time
import uuid
from typing import Any, Dict

from flask import Flask, Response, g, request

REQUEST_ID_HEADER = "X-Request-ID"


def _client_ip() -> str:
    forwarded_for = request.headers.get("X-Forwarded-For")
    if forwarded_for:
        return forwarded_for.split(",")[0].strip()
    return request.remote_addr or ""


def setup_request_logging(app: Flask) -> None:
    """Attach request id and access logging hooks to the provided Flask application."""

    log_requests = app.config.get("REQUEST_LOGGING", True)

    @app.before_request
    def _start_timer() -> None:
        g.request_started_at = time.perf_counter()
        g.request_id = request.headers.get(REQUEST_ID_HEADER) or uuid.uuid4().hex

    @app.after_request
    def _log_request(response: Response) -> Response:
        request_id = getattr(g, "request_id", None)
        if request_id:
            response.headers.setdefault(REQUEST_ID_HEADER, request_id)

        if not log_requests:
            return response

        start = getattr(g, "request_started_at", None)
        duration_ms = None
        if start is not None:
            duration_ms = round((time.perf_counter() - start) * 1000, 3)

        log_record: Dict[str, Any] = {
            "method": request.method,
            "path": request.full_path.rstrip("?") or request.path,
            "status": response.status_code,
            "duration_ms": duration_ms,
            "ip": _client_ip(),
            "request_id": request_id,
            "user_agent": request.headers.get("User-Agent"),
        }
        app.logger.info("%s %s %s", request.method, request.path, response.status_code, extra=log_record)
        return response
