"""Configuration contract for lookeracl.

Pydantic-validated settings shared by the reconciliation driver, the
tracked-state store and logging setup. Credentials for the remote API
are NOT part of this model: the RemoteService implementation handed to
the driver owns its own transport and auth.

RULE: settings defined here come through this config object.
load_config_from_env() is the only function that reads the environment.
"""

from __future__ import annotations

from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, field_validator

DEFAULT_STATE_PREFIX = "lookeracl:state"


class LogLevel(str, Enum):
    """Standard log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class AclConfig(BaseModel):
    """Runtime configuration for lookeracl."""

    # Logging
    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Logging level",
    )
    log_json: bool = Field(
        default=False,
        description="Use JSON log format (default: plain text)",
    )

    # Tracked state persistence
    redis_url: Optional[str] = Field(
        default=None,
        description="Redis connection URL for RedisStateStore (e.g., redis://localhost:6379/0)",
    )
    state_prefix: str = Field(
        default=DEFAULT_STATE_PREFIX,
        description="Key prefix for tracked state records",
    )

    # Identification
    service_name: Optional[str] = Field(
        default=None,
        description="Name used for the top-level logger (e.g., 'looker-acl-sync')",
    )

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: Optional[str]) -> Optional[str]:
        """Validate Redis URL format."""
        if v is None:
            return v
        if not v.startswith(("redis://", "rediss://", "unix://")):
            raise ValueError("Redis URL must start with redis://, rediss://, or unix://")
        return v

    @field_validator("state_prefix")
    @classmethod
    def validate_state_prefix(cls, v: str) -> str:
        v = v.strip().rstrip(":")
        if not v:
            raise ValueError("state_prefix must not be empty")
        return v

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str | LogLevel) -> LogLevel:
        """Convert string to LogLevel enum."""
        if isinstance(v, LogLevel):
            return v
        if isinstance(v, str):
            try:
                return LogLevel[v.upper()]
            except KeyError:
                raise ValueError(f"Invalid log level: {v}. Must be one of {[e.value for e in LogLevel]}")
        raise ValueError(f"Log level must be string or LogLevel enum, got {type(v)}")

    model_config = {
        "use_enum_values": True,
        "extra": "forbid",
    }


def load_config_from_env() -> AclConfig:
    """Load configuration from environment variables.

    Environment variables:
    - LOG_LEVEL: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    - LOG_JSON: Use JSON log format (true/false, default: false)
    - REDIS_URL: Redis connection URL for tracked state
    - LOOKERACL_STATE_PREFIX: Key prefix for tracked state records
    - SERVICE_NAME: Top-level logger name

    Returns:
        AclConfig instance with values from environment or defaults.
    """
    import os

    return AclConfig(
        log_level=os.getenv("LOG_LEVEL", "INFO"),
        log_json=os.getenv("LOG_JSON", "false").lower() in ("true", "1", "yes"),
        redis_url=os.getenv("REDIS_URL") or None,
        state_prefix=os.getenv("LOOKERACL_STATE_PREFIX", DEFAULT_STATE_PREFIX),
        service_name=os.getenv("SERVICE_NAME"),
    )


__all__ = [
    "AclConfig",
    "DEFAULT_STATE_PREFIX",
    "LogLevel",
    "load_config_from_env",
]
