import json
import logging
import os
import sys

import pytest

sys.path.append(os.path.abspath(os.path.join(os.path.dirname(__file__), '..')))
from api_helpers.app import create_app  # noqa: E402
from api_helpers.utils.responses import FALLBACK_BODY, json_response  # noqa: E402


class _CapturingHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def app(monkeypatch):
    monkeypatch.delenv("LOGGER_NAME", raising=False)
    monkeypatch.delenv("REQUEST_LOGGING", raising=False)
    monkeypatch.setenv("LOG_LEVEL", "INFO")

    app = create_app()
    app.config["TESTING"] = True

    @app.route("/boom")
    def boom():
        raise RuntimeError("kaboom")

    @app.route("/unencodable")
    def unencodable():
        return json_response(200, {"handle": object()})

    @app.route("/empty")
    def empty():
        return json_response(204)

    return app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def captured(app):
    handler = _CapturingHandler()
    app.logger.addHandler(handler)
    yield handler
    app.logger.removeHandler(handler)


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.mimetype == "application/json"
    assert response.get_data() == b'{"service":"api-helpers","status":"ok"}'


def test_not_found_uses_error_envelope(client):
    response = client.get("/nonexistent")
    assert response.status_code == 404
    assert response.mimetype == "application/json"
    payload = response.json
    assert list(payload) == ["error"]
    assert isinstance(payload["error"], str)
    assert payload["error"]


def test_method_not_allowed_uses_error_envelope(client):
    response = client.post("/health")
    assert response.status_code == 405
    assert list(response.json) == ["error"]


def test_unhandled_exception_returns_500(client, captured):
    response = client.get("/boom")
    assert response.status_code == 500
    assert response.json == {"error": "Internal Server Error"}
    assert any(record.getMessage() == "Unhandled exception" for record in captured.records)


def test_encode_failure_keeps_status_and_returns_fallback(client):
    response = client.get("/unencodable")
    assert response.status_code == 200
    assert response.get_data() == FALLBACK_BODY


def test_absent_body_route(client):
    response = client.get("/empty")
    assert response.status_code == 204
    assert response.get_data() == b""


def test_request_id_generated(client):
    response = client.get("/health")
    request_id = response.headers["X-Request-ID"]
    assert len(request_id) == 32


def test_request_id_echoed(client):
    response = client.get("/health", headers={"X-Request-ID": "abc123"})
    assert response.headers["X-Request-ID"] == "abc123"


def test_request_is_logged(client, captured):
    client.get(
        "/health",
        headers={"X-Forwarded-For": "203.0.113.10, 10.0.0.1", "User-Agent": "pytest"},
    )
    records = [record for record in captured.records if getattr(record, "method", None)]
    assert records
    record = records[-1]
    assert record.method == "GET"
    assert record.path == "/health"
    assert record.status == 200
    assert record.ip == "203.0.113.10"
    assert record.user_agent == "pytest"
    assert record.duration_ms is not None


def test_request_logging_can_be_disabled():
    app = create_app({"REQUEST_LOGGING": False})
    handler = _CapturingHandler()
    app.logger.addHandler(handler)
    try:
        response = app.test_client().get("/health")
    finally:
        app.logger.removeHandler(handler)

    assert response.status_code == 200
    assert "X-Request-ID" in response.headers
    assert not [record for record in handler.records if getattr(record, "method", None)]


def test_config_overrides_are_applied():
    app = create_app({"LOG_LEVEL_NAME": "DEBUG", "LOGGER_NAME": "api_helpers.test"})
    assert app.config["LOG_LEVEL"] == logging.DEBUG
    assert app.logger.name == "api_helpers.test"
    assert app.logger.level == logging.DEBUG


def test_unknown_log_level_falls_back_to_info():
    app = create_app({"LOG_LEVEL_NAME": "CHATTY"})
    assert app.config["LOG_LEVEL"] == logging.INFO


def test_health_body_is_json(client):
    assert json.loads(client.get("/health").get_data()) == {
        "service": "api-helpers",
        "status": "ok",
    }
