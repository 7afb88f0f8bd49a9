"""Application settings and configuration.

Settings are read from environment variables (and an optional ``.env`` file)
once at startup by :func:`load_settings`. The resulting object is passed
explicitly to the application factory and services and is never mutated.
"""

from __future__ import annotations

from datetime import timedelta

from pydantic import Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from brief_measure.core.errors import ConfigurationError


class Settings(BaseSettings):
    """Typed process configuration.

    Attributes:
        database_url: SQLAlchemy URL of the durable store. Required.
        database_max_connections: Connection pool size.
        database_connect_timeout_secs: Connect and pool-acquire timeout.
        database_statement_timeout_secs: Per-statement timeout (PostgreSQL only).
        observation_window_secs: Length of the sliding admission window.
        observation_window_cap: Observations accepted per key inside the window.
        observation_default_limit: Result count used when a query omits ``limit``.
        observation_max_limit: Largest ``limit`` a client may request.
        observation_strict_admission: Lock the API key row while counting and
            inserting so concurrent ingests cannot exceed the cap.
        bind_addr: ``host:port`` the HTTP server listens on.
    """

    app_name: str = Field(default="Brief Measure", alias="APP_NAME")
    app_version: str = Field(default="0.1.0", alias="APP_VERSION")
    log_level: str = Field(default="INFO", alias="LOG_LEVEL")

    # Database configuration
    database_url: str = Field(alias="DATABASE_URL")
    database_max_connections: int = Field(default=5, gt=0, alias="DATABASE_MAX_CONNECTIONS")
    database_connect_timeout_secs: int = Field(
        default=30, gt=0, alias="DATABASE_CONNECT_TIMEOUT_SECS"
    )
    database_statement_timeout_secs: int = Field(
        default=30, gt=0, alias="DATABASE_STATEMENT_TIMEOUT_SECS"
    )
    sql_debug: bool = Field(default=False, alias="SQL_DEBUG")

    # Admission window and query limits
    observation_window_secs: int = Field(default=86_400, gt=0, alias="OBSERVATION_WINDOW_SECS")
    observation_window_cap: int = Field(default=2, gt=0, alias="OBSERVATION_WINDOW_CAP")
    observation_default_limit: int = Field(default=90, gt=0, alias="OBSERVATION_DEFAULT_LIMIT")
    observation_max_limit: int = Field(default=90, gt=0, alias="OBSERVATION_MAX_LIMIT")
    observation_strict_admission: bool = Field(
        default=False, alias="OBSERVATION_STRICT_ADMISSION"
    )

    # HTTP server
    bind_addr: str = Field(default="127.0.0.1:3000", alias="BIND_ADDR")

    model_config = SettingsConfigDict(
        env_file=".env",
        extra="ignore",
        frozen=True,
    )

    @field_validator("bind_addr")
    @classmethod
    def _check_bind_addr(cls, value: str) -> str:
        host, sep, port = value.rpartition(":")
        if not sep or not host or not port.isdigit() or not 0 < int(port) < 65536:
            raise ValueError("expected host:port")
        return value

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"}:
            raise ValueError("unknown log level")
        return level

    @model_validator(mode="after")
    def _check_limits(self) -> "Settings":
        if self.observation_default_limit > self.observation_max_limit:
            raise ValueError("OBSERVATION_DEFAULT_LIMIT exceeds OBSERVATION_MAX_LIMIT")
        return self

    @property
    def observation_window(self) -> timedelta:
        """Return the admission window as a ``timedelta``."""
        return timedelta(seconds=self.observation_window_secs)

    @property
    def bind_host(self) -> str:
        return self.bind_addr.rpartition(":")[0].strip("[]")

    @property
    def bind_port(self) -> int:
        return int(self.bind_addr.rpartition(":")[2])


# Maps pydantic field names back to the environment variable users set.
_ENV_NAMES = {name: field.alias or name.upper() for name, field in Settings.model_fields.items()}


def load_settings(**overrides: object) -> Settings:
    """Build and validate settings, raising :class:`ConfigurationError` on failure.

    Args:
        overrides: Values keyed by environment variable name that take
            precedence over the environment (used by tests and tooling).

    Raises:
        ConfigurationError: Naming the first missing or invalid variable.
    """
    try:
        return Settings(**overrides)  # type: ignore[arg-type]
    except ValidationError as err:
        first = err.errors()[0]
        loc = first.get("loc") or ()
        field = str(loc[0]) if loc else ""
        # Model-level failures have no location; the limit check is the only one.
        key = _ENV_NAMES.get(field, field) if field else "OBSERVATION_DEFAULT_LIMIT"
        raise ConfigurationError(key, missing=first.get("type") == "missing") from err
