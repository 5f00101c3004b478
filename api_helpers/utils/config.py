"""Configuration helpers for environment-aware setup."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable, Mapping
import os

from dotenv import dotenv_values

__all__ = [
    "EnvironmentSettings",
    "load_environment_settings",
    "log_configuration_snapshot",
    "parse_bool",
]

_SECRET_MARKERS = ("SECRET", "PASSWORD", "TOKEN", "KEY")


@dataclass(frozen=True)
class EnvironmentSettings:
    """Environment name plus the values read from the layered ``.env`` files."""

    name: str
    loaded_files: tuple[str, ...]
    file_values: Mapping[str, str]

    def get(self, key: str, default: str | None = None) -> str | None:
        """Return ``key`` from the process environment, then the ``.env`` files."""

        value = os.getenv(key)
        if value is not None:
            return value
        return self.file_values.get(key, default)


def parse_bool(value: str | None, default: bool = False) -> bool:
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def load_environment_settings(
    *, env: str | None = None, project_root: str | Path | None = None
) -> EnvironmentSettings:
    """Load environment settings supporting layered ``.env`` files.

    Files are read in the order ``.env``, ``.env.local``, ``.env.<env>`` and
    ``.env.<env>.local``; later files override earlier ones. File values are
    never exported to ``os.environ``, so variables set in the process win.
    """

    root = Path(project_root or Path.cwd())
    name = (env or os.getenv("APP_ENV") or os.getenv("FLASK_ENV") or "development").strip()
    name = name or "development"
    slug = name.lower()
    ordered_files = [
        root / ".env",
        root / ".env.local",
        root / f".env.{slug}",
        root / f".env.{slug}.local",
    ]

    loaded_files: list[str] = []
    file_values: dict[str, str] = {}
    for candidate in ordered_files:
        if not candidate.exists():
            continue
        loaded_files.append(str(candidate))
        for key, value in dotenv_values(candidate).items():
            if value is not None:
                file_values[key] = value

    return EnvironmentSettings(
        name=name,
        loaded_files=tuple(loaded_files),
        file_values=file_values,
    )


def _sanitize_value(key: str, value: Any) -> Any:
    upper_key = key.upper()
    if any(marker in upper_key for marker in _SECRET_MARKERS):
        return "***"
    return value


def log_configuration_snapshot(
    *,
    logger: Any,
    settings: EnvironmentSettings,
    config: Mapping[str, Any],
    keys_of_interest: Iterable[str],
) -> None:
    """Log a sanitized snapshot of the runtime configuration."""

    snapshot = {
        key: _sanitize_value(key, config.get(key))
        for key in keys_of_interest
        if key in config
    }
    logger.info(
        "Runtime configuration initialised",
        extra={
            "environment": settings.name,
            "env_files": settings.loaded_files,
            "config_snapshot": snapshot,
        },
    )
