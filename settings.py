from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache

from dotenv import load_dotenv


_MONGO_URI_ENV = "MONGO_URI"
_DATABASE_NAME_ENV = "MONGO_DB_NAME"
_HOST_ENV = "HOST"
_PORT_ENV = "PORT"
_LOG_LEVEL_ENV = "LOG_LEVEL"

_MONGO_SCHEMES = ("mongodb://", "mongodb+srv://")


class ConfigurationError(RuntimeError):
    """Raised when required settings are missing or malformed."""


@dataclass(frozen=True)
class Settings:
    mongo_uri: str
    database_name: str
    host: str
    port: int
    log_level: str


def _read_str_env(name: str, default: str) -> str:
    value = os.getenv(name)
    if value is None:
        return default
    candidate = value.strip()
    return candidate or default


def _read_mongo_uri() -> str:
    candidate = (os.getenv(_MONGO_URI_ENV) or "").strip()
    if not candidate:
        raise ConfigurationError(f"{_MONGO_URI_ENV} is not defined.")
    if not candidate.startswith(_MONGO_SCHEMES):
        raise ConfigurationError(
            f"{_MONGO_URI_ENV} must start with 'mongodb://' or 'mongodb+srv://'."
        )
    return candidate


def _read_port(default: int) -> int:
    value = os.getenv(_PORT_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    try:
        parsed = int(candidate)
    except ValueError:
        return default
    return parsed if parsed > 0 else default


def _read_log_level(default: str) -> str:
    value = os.getenv(_LOG_LEVEL_ENV)
    if value is None:
        return default
    candidate = value.strip()
    if not candidate:
        return default
    return candidate.upper()


@lru_cache
def get_settings() -> Settings:
    load_dotenv()
    return Settings(
        mongo_uri=_read_mongo_uri(),
        database_name=_read_str_env(_DATABASE_NAME_ENV, "weatherdb"),
        host=_read_str_env(_HOST_ENV, "0.0.0.0"),
        port=_read_port(3000),
        log_level=_read_log_level("INFO"),
    )
