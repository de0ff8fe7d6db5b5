from __future__ import annotations

import os
from dataclasses import dataclass

VERSION = "0.1.0"


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class Settings:
    # Server
    host: str
    # Raw JSERVE_PORT value; the CLI validates it like `-p`.
    default_port: str

    # Logging
    log_level: str
    debug_log_requests: bool

    # Persistence
    json_indent: int


def get_settings() -> Settings:
    host = os.getenv("JSERVE_HOST", "127.0.0.1").strip() or "127.0.0.1"
    default_port = os.getenv("JSERVE_PORT", "3000").strip() or "3000"

    log_level = os.getenv("JSERVE_LOG_LEVEL", "INFO").strip().upper() or "INFO"
    debug_log_requests = _env_bool("JSERVE_DEBUG_LOG_REQUESTS", False)

    json_indent = max(0, _env_int("JSERVE_JSON_INDENT", 2))

    return Settings(
        host=host,
        default_port=default_port,
        log_level=log_level,
        debug_log_requests=debug_log_requests,
        json_indent=json_indent,
    )
