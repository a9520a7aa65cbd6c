"""iidresolver configuration management.

Two layers of configuration:
- Settings: process-wide knobs loaded by pydantic-settings from
  environment variables (prefixed IIDRESOLVER_) and .env files.
- ResolverConfig: the credentials payload handed to the plugin's
  configure call, decoded from JSON and validated.
"""

from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Callable, Mapping, Optional, Union

from pydantic import BaseModel, Field, ValidationError
from pydantic_settings import BaseSettings

from .constants import (
    DEFAULT_CONNECT_TIMEOUT,
    DEFAULT_READ_TIMEOUT,
    ENV_ACCESS_KEY_ID,
    ENV_SECRET_ACCESS_KEY,
)
from .errors import ConfigError


class Settings(BaseSettings):
    """Resolver process settings.

    All settings can be overridden via environment variables
    prefixed with IIDRESOLVER_.

    Example:
        IIDRESOLVER_LOG_LEVEL=DEBUG
        IIDRESOLVER_MAX_WORKERS=4
    """

    # Logging
    log_level: str = Field(default="INFO", description="Logging level")

    # AWS clients
    connect_timeout: int = Field(
        default=DEFAULT_CONNECT_TIMEOUT,
        description="Seconds to wait for an AWS connection"
    )
    read_timeout: int = Field(
        default=DEFAULT_READ_TIMEOUT,
        description="Seconds to wait for an AWS response"
    )

    # Resolution
    max_workers: int = Field(default=1, ge=1, description="Agent IDs resolved in parallel per batch")
    request_timeout: Optional[float] = Field(
        default=None,
        description="Overall deadline for one resolve call in seconds"
    )

    class Config:
        env_prefix = "IIDRESOLVER_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance.

    Returns:
        Settings instance loaded from environment
    """
    return Settings()


class ResolverConfig(BaseModel):
    """Credentials the resolver uses to build AWS clients."""

    access_key_id: str = ""
    secret_access_key: str = ""

    class Config:
        extra = "forbid"
        frozen = True

    def with_env_defaults(self, getenv: Callable[[str], Optional[str]]) -> "ResolverConfig":
        """Fill empty fields from the environment.

        Args:
            getenv: Environment lookup, normally os.getenv

        Returns:
            New config with blanks replaced by environment values
        """
        return ResolverConfig(
            access_key_id=self.access_key_id or getenv(ENV_ACCESS_KEY_ID) or "",
            secret_access_key=self.secret_access_key or getenv(ENV_SECRET_ACCESS_KEY) or "",
        )

    def validate_credentials(self) -> None:
        """Ensure both credential fields are present.

        Raises:
            ConfigError: If either or both fields are missing
        """
        if self.access_key_id and self.secret_access_key:
            return
        if self.access_key_id:
            raise ConfigError("configuration missing secret access key")
        if self.secret_access_key:
            raise ConfigError("configuration missing access key id")
        raise ConfigError("configuration missing both access key id and secret access key")

    def __repr__(self) -> str:
        """Safe repr that doesn't expose credentials."""
        return f"<ResolverConfig access_key_id={self.access_key_id[:4]}***>"

    __str__ = __repr__


def decode_configuration(payload: Union[str, bytes, Mapping[str, Any], None]) -> ResolverConfig:
    """Decode a plugin configuration payload.

    Args:
        payload: JSON document, already-decoded mapping, or None/empty

    Returns:
        Validated ResolverConfig (fields may still be empty)

    Raises:
        ConfigError: If the payload is not valid JSON or has unknown keys
    """
    if payload is None:
        return ResolverConfig()

    if isinstance(payload, (str, bytes)):
        if not payload.strip():
            return ResolverConfig()
        try:
            data = json.loads(payload)
        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            raise ConfigError(f"unable to decode configuration: {e}") from e
    else:
        data = dict(payload)

    if not isinstance(data, dict):
        raise ConfigError("unable to decode configuration: expected an object")

    try:
        return ResolverConfig(**data)
    except ValidationError as e:
        raise ConfigError(f"unable to decode configuration: {e}") from e
