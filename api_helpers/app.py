"""Application factory wiring the JSON response helpers into Flask."""

import logging
from pathlib import Path
from typing import Any, Mapping, Optional

from flask import Flask
from werkzeug.exceptions import HTTPException

from .middleware.logging import setup_request_logging
from .observability.logging import DEFAULT_LOGGER_NAME, configure_structured_logging
from .utils.config import (
    EnvironmentSettings,
    load_environment_settings,
    log_configuration_snapshot,
    parse_bool,
)
from .utils.responses import error_response, json_response

SERVICE_NAME = "api-helpers"


def _resolve_log_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    if isinstance(level, int):
        return level
    return logging.INFO


def _load_config(app: Flask, settings: EnvironmentSettings) -> None:
    app.config["APP_ENV"] = settings.name
    app.config["CONFIG_ENV_FILES"] = settings.loaded_files
    app.config["LOG_LEVEL_NAME"] = (settings.get("LOG_LEVEL") or "INFO").upper()
    app.config["LOGGER_NAME"] = settings.get("LOGGER_NAME") or DEFAULT_LOGGER_NAME
    app.config["REQUEST_LOGGING"] = parse_bool(settings.get("REQUEST_LOGGING"), True)
    app.config["APP_PORT"] = int(settings.get("APP_PORT") or settings.get("PORT") or "5000")


def _register_routes(app: Flask) -> None:
    @app.route("/health")
    def health():
        return json_response(200, {"service": SERVICE_NAME, "status": "ok"})


def _register_error_handlers(app: Flask) -> None:
    @app.errorhandler(HTTPException)
    def http_error_handler(error: HTTPException):
        """Return JSON envelopes for Werkzeug HTTP exceptions."""

        status_code = error.code or 500
        message = error.description or error.name or "Error"
        return error_response(status_code, message)

    @app.errorhandler(Exception)
    def generic_error_handler(error: Exception):  # noqa: D401 - brief message sufficient
        """Return a JSON envelope for unexpected errors."""

        app.logger.exception("Unhandled exception", exc_info=error)
        return error_response(500, "Internal Server Error")


def create_app(config: Optional[Mapping[str, Any]] = None) -> Flask:
    """Create and configure the Flask application."""

    project_root = Path(__file__).resolve().parent.parent
    settings = load_environment_settings(project_root=project_root)
    app = Flask(__name__)

    _load_config(app, settings)
    if config:
        app.config.update(config)
    app.config["LOG_LEVEL"] = _resolve_log_level(app.config["LOG_LEVEL_NAME"])

    configure_structured_logging(app)
    setup_request_logging(app)

    log_configuration_snapshot(
        logger=app.logger,
        settings=settings,
        config=app.config,
        keys_of_interest=[
            "APP_ENV",
            "CONFIG_ENV_FILES",
            "LOG_LEVEL_NAME",
            "LOGGER_NAME",
            "REQUEST_LOGGING",
            "APP_PORT",
        ],
    )

    _register_routes(app)
    _register_error_handlers(app)
    return app
