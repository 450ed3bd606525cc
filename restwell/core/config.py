"""Application configuration helpers."""

from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
import os

from sqlalchemy.engine import make_url

DEFAULT_SERVICE_NAME = "restwell"
DEFAULT_DATABASE_URL = "sqlite+pysqlite:///./restwell.db"
DEFAULT_LOG_LEVEL = "INFO"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


def _get_bool_env(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"{name} must be a boolean, got {raw!r}")


def redact_database_url(url: str) -> str:
    """Return the database URL with any password hidden."""
    return make_url(url).render_as_string(hide_password=True)


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the restwell service."""

    service_name: str
    database_url: str
    log_level: str
    create_schema: bool

    def safe_for_logging(self) -> dict[str, str | bool]:
        """Return settings safe for logs."""
        return {
            "service_name": self.service_name,
            "database_url": redact_database_url(self.database_url),
            "log_level": self.log_level,
            "create_schema": self.create_schema,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Load settings from the environment."""
    return Settings(
        service_name=os.getenv("RESTWELL_SERVICE_NAME", DEFAULT_SERVICE_NAME),
        database_url=os.getenv("RESTWELL_DATABASE_URL", DEFAULT_DATABASE_URL),
        log_level=os.getenv("RESTWELL_LOG_LEVEL", DEFAULT_LOG_LEVEL).upper(),
        create_schema=_get_bool_env("RESTWELL_CREATE_SCHEMA", True),
    )
