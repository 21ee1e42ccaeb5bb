"""
Environment-driven settings.

Every value has a local-development default so the API starts without a
.env file; production deployments override through the environment.
"""

from __future__ import annotations

import os

DEFAULT_CORS_ORIGINS = [
    "http://localhost:5173",
    "http://127.0.0.1:5173",
]


def env_str(name: str, default: str = "") -> str:
    return os.environ.get(name, "").strip() or default


def env_int(name: str, default: int) -> int:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        return default


def env_list(name: str, default: list[str]) -> list[str]:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return list(default)
    return [item.strip() for item in raw.split(",") if item.strip()]


def cors_origins() -> list[str]:
    return env_list("CORS_ORIGINS", DEFAULT_CORS_ORIGINS)


def log_level() -> str:
    return env_str("LOG_LEVEL", "INFO").upper()
