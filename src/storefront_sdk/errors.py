"""Error classes for the Storefront SDK.

Structured error hierarchy with error codes and correlation IDs. Every
failure surfaced by the request gateway is a ``StorefrontError``.
"""

from __future__ import annotations

import json
from enum import StrEnum
from typing import Any


class ErrorCode(StrEnum):
    """Standardized error codes for the Storefront SDK."""

    # Authentication errors (1xxx)
    TOKEN_INVALID = "AUTH_1002"
    TOKEN_REFRESH_FAILED = "AUTH_1003"
    UNAUTHORIZED = "AUTH_1005"
    FORBIDDEN = "AUTH_1006"

    # Validation errors (2xxx)
    VALIDATION_ERROR = "VAL_2001"
    INVALID_CONFIG = "VAL_2002"

    # Network errors (3xxx)
    NETWORK_ERROR = "NET_3001"
    TIMEOUT_ERROR = "NET_3002"

    # API errors (4xxx)
    API_ERROR = "API_4000"
    NOT_FOUND = "API_4004"

    # Server errors (5xxx)
    SERVER_ERROR = "SRV_5001"


class StorefrontError(Exception):
    """Base error for the Storefront SDK with structured error information."""

    def __init__(
        self,
        message: str,
        code: ErrorCode | str,
        *,
        status_code: int | None = None,
        correlation_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code if isinstance(code, str) else code.value
        self.status_code = status_code
        self.correlation_id = correlation_id
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary for logging/serialization."""
        return {
            "error": self.message,
            "code": self.code,
            "status_code": self.status_code,
            "correlation_id": self.correlation_id,
            "details": self.details,
        }

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class TokenRefreshError(StorefrontError):
    """Failed to refresh credentials; the session is over."""

    def __init__(
        self,
        message: str = "Failed to refresh token",
        *,
        correlation_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.TOKEN_REFRESH_FAILED,
            status_code=401,
            correlation_id=correlation_id,
            details=details,
        )


class ApiError(StorefrontError):
    """Non-2xx response from the storefront API.

    The message follows ``HTTP <status>: <body>`` so callers can show or
    pattern-match it directly.
    """

    default_code: ErrorCode = ErrorCode.API_ERROR

    def __init__(
        self,
        status_code: int,
        body: str = "",
        *,
        reason: str = "",
        correlation_id: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            f"HTTP {status_code}: {body or reason}",
            self.default_code,
            status_code=status_code,
            correlation_id=correlation_id,
            details=details,
        )
        self.body = body

    def json(self) -> Any:
        """Parse the response body as JSON, ``None`` if it isn't."""
        try:
            return json.loads(self.body)
        except ValueError:
            return None


class UnauthorizedError(ApiError):
    """401 that could not be recovered by a credential refresh."""

    default_code = ErrorCode.UNAUTHORIZED


class ForbiddenError(ApiError):
    """403 from the API."""

    default_code = ErrorCode.FORBIDDEN


class NotFoundError(ApiError):
    """404 from the API."""

    default_code = ErrorCode.NOT_FOUND


class ServerError(ApiError):
    """5xx from the API."""

    default_code = ErrorCode.SERVER_ERROR


class NetworkError(StorefrontError):
    """Network request failed."""

    def __init__(
        self,
        message: str = "Network request failed",
        *,
        correlation_id: str | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.NETWORK_ERROR,
            correlation_id=correlation_id,
            details={"cause": str(cause)} if cause else None,
        )
        self.__cause__ = cause


class TimeoutError(StorefrontError):
    """Request timed out."""

    def __init__(
        self,
        message: str = "Request timed out",
        *,
        correlation_id: str | None = None,
        timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.TIMEOUT_ERROR,
            status_code=408,
            correlation_id=correlation_id,
            details={"timeout_seconds": timeout_seconds} if timeout_seconds else None,
        )


class InvalidConfigError(StorefrontError):
    """Invalid SDK configuration."""

    def __init__(
        self,
        message: str,
        *,
        field: str | None = None,
    ) -> None:
        super().__init__(
            message,
            ErrorCode.INVALID_CONFIG,
            details={"field": field} if field else None,
        )


def is_auth_error(error: BaseException) -> bool:
    """Whether the error means the user must sign in again."""
    if isinstance(error, (TokenRefreshError, UnauthorizedError, ForbiddenError)):
        return True
    return isinstance(error, StorefrontError) and error.code in {
        ErrorCode.TOKEN_INVALID.value,
        ErrorCode.UNAUTHORIZED.value,
    }


def is_network_error(error: BaseException) -> bool:
    """Whether the error came from the transport rather than the API."""
    return isinstance(error, (NetworkError, TimeoutError))
