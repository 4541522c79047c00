"""Configuration management.

Loads from TOML config files + environment variables.
Uses pydantic-settings for validation and env var overriding.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

from pydantic import BaseModel, Field
from pydantic import ValidationError as PydanticValidationError
from pydantic_settings import BaseSettings

from .errors import ConfigError


# ---------------------------------------------------------------------------
# Sub-configs
# ---------------------------------------------------------------------------

class EventBusConfig(BaseModel):
    max_cascade_depth: int = Field(default=16, ge=1)  # nested publishes before drop
    max_history: int = Field(default=10_000, ge=1)  # retained events and dead letters


class NotificationConfig(BaseModel):
    webhook_url: str | None = None  # unset -> log-only notifier
    timeout_seconds: float = Field(default=5.0, gt=0)


class ObservabilityConfig(BaseModel):
    log_level: str = "INFO"
    log_format: Literal["json", "console"] = "console"


# ---------------------------------------------------------------------------
# Top-level settings
# ---------------------------------------------------------------------------

class Settings(BaseSettings):
    """Top-level application settings.

    Loaded from TOML config files, overridden by environment variables
    (``TEAMFLOW_DATABASE_URL``, ``TEAMFLOW_EVENT_BUS__MAX_CASCADE_DEPTH``...).
    """

    # None -> in-memory repositories
    database_url: str | None = None
    sql_echo: bool = False

    event_bus: EventBusConfig = Field(default_factory=EventBusConfig)
    notifications: NotificationConfig = Field(default_factory=NotificationConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    model_config = {"env_prefix": "TEAMFLOW_", "env_nested_delimiter": "__"}


def load_settings(
    config_path: str | Path | None = None,
    overrides: dict[str, Any] | None = None,
) -> Settings:
    """Load settings from TOML file + env vars.

    Args:
        config_path: Path to TOML config file (optional).  A missing file
            is an error.
        overrides: Dict of overrides to apply on top.

    Raises:
        ConfigError: If the file cannot be read or values fail validation.
    """
    data: dict[str, Any] = {}

    if config_path:
        path = Path(config_path)
        if not path.exists():
            raise ConfigError(f"config file not found: {path}")
        import tomli

        try:
            with open(path, "rb") as f:
                data = tomli.load(f)
        except tomli.TOMLDecodeError as exc:
            raise ConfigError(f"invalid TOML in {path}: {exc}") from exc

    if overrides:
        data.update(overrides)

    try:
        return Settings(**data)
    except PydanticValidationError as exc:
        raise ConfigError(f"invalid configuration: {exc}") from exc
