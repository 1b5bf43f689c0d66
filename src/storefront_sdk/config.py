"""Configuration for the Storefront SDK.

Uses Pydantic v2 frozen models with sensible defaults so a client can be
built from a base URL alone or from environment variables.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Annotated, Any, Self

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    HttpUrl,
    field_validator,
)

from .errors import InvalidConfigError

LOG_LEVELS: dict[str, int] = {
    "DEBUG": logging.DEBUG,
    "INFO": logging.INFO,
    "WARNING": logging.WARNING,
    "ERROR": logging.ERROR,
    "CRITICAL": logging.CRITICAL,
}


class TelemetryConfig(BaseModel):
    """OpenTelemetry and structlog configuration."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = True
    service_name: str = "storefront-sdk"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Normalise and validate the log level name."""
        level = v.upper()
        if level not in LOG_LEVELS:
            msg = f"Unsupported log level: {v}"
            raise ValueError(msg)
        return level


class StorageConfig(BaseModel):
    """Where and under which keys session state is persisted."""

    model_config = ConfigDict(frozen=True)

    # None keeps everything in memory for the lifetime of the process
    path: Path | None = None
    access_token_key: str = Field(default="accessToken", min_length=1)
    refresh_token_key: str = Field(default="refreshToken", min_length=1)
    identity_key: str = Field(default="user", min_length=1)
    # Extra application keys wiped on sign-out (cart, cached orders, ...)
    clear_on_sign_out: tuple[str, ...] = ()


class RefreshConfig(BaseModel):
    """Refresh-token exchange contract with the backend."""

    model_config = ConfigDict(frozen=True)

    endpoint: str = "/auth/refresh-token"
    request_field: str = Field(default="refreshToken", min_length=1)
    # The backend currently returns a single ``refreshToken`` value that is
    # used as both credentials; point these elsewhere once that changes.
    access_token_field: str = Field(default="refreshToken", min_length=1)
    refresh_token_field: str = Field(default="refreshToken", min_length=1)
    # Seconds before exp at which the gateway already refreshes
    expiry_leeway: Annotated[int, Field(ge=0, le=300)] = 0

    @field_validator("endpoint")
    @classmethod
    def validate_endpoint(cls, v: str) -> str:
        """Refresh endpoint must be a path relative to the base URL."""
        if not v.startswith("/"):
            msg = "Refresh endpoint must start with '/'"
            raise ValueError(msg)
        return v


class StorefrontConfig(BaseModel):
    """Main configuration for the Storefront SDK."""

    model_config = ConfigDict(frozen=True, validate_default=True)

    # Required
    base_url: HttpUrl

    # HTTP settings
    timeout: Annotated[float, Field(gt=0, le=300)] = 30.0
    connect_timeout: Annotated[float, Field(gt=0, le=60)] = 10.0
    user_agent: str = "storefront-sdk/0.1.0 Python"

    # Sub-configurations
    storage: StorageConfig = Field(default_factory=StorageConfig)
    refresh: RefreshConfig = Field(default_factory=RefreshConfig)
    telemetry: TelemetryConfig = Field(default_factory=TelemetryConfig)

    @property
    def base_url_str(self) -> str:
        """Get base URL as string without trailing slash."""
        return str(self.base_url).rstrip("/")

    def with_overrides(self, **kwargs: Any) -> Self:
        """Create new config with overridden values."""
        data = self.model_dump()
        data.update(kwargs)
        return self.__class__(**data)

    @classmethod
    def from_env(cls, prefix: str = "STOREFRONT_") -> Self:
        """Create config from environment variables."""
        import os

        def get_env(key: str, default: Any = None) -> Any:
            return os.environ.get(f"{prefix}{key}", default)

        base_url = get_env("BASE_URL")
        if not base_url:
            raise InvalidConfigError(
                f"{prefix}BASE_URL environment variable is required",
                field="base_url",
            )

        storage_path = get_env("STORAGE_PATH")
        clear_keys = get_env("CLEAR_ON_SIGN_OUT", "")

        return cls(
            base_url=base_url,
            timeout=float(get_env("TIMEOUT", "30.0")),
            storage=StorageConfig(
                path=Path(storage_path) if storage_path else None,
                clear_on_sign_out=tuple(clear_keys.split()) if clear_keys else (),
            ),
            telemetry=TelemetryConfig(log_level=get_env("LOG_LEVEL", "INFO")),
        )
