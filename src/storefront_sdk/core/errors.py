"""Centralized error factory for the Storefront SDK.

Provides consistent error creation from HTTP responses and transport
exceptions.
"""

from __future__ import annotations

import uuid
from typing import Any

import httpx

from ..errors import (
    ApiError,
    ForbiddenError,
    NetworkError,
    NotFoundError,
    ServerError,
    StorefrontError,
    TimeoutError,
    TokenRefreshError,
    UnauthorizedError,
)


class ErrorFactory:
    """Centralized error creation with consistent structure.

    All errors created through this factory include:
    - Standardized error codes
    - Optional correlation IDs for tracing
    - The response status and body text for API failures
    """

    @staticmethod
    def generate_correlation_id() -> str:
        """Generate a unique correlation ID."""
        return str(uuid.uuid4())

    @staticmethod
    def from_http_response(
        response: httpx.Response,
        *,
        correlation_id: str | None = None,
    ) -> ApiError:
        """Create SDK error from a non-2xx HTTP response.

        Args:
            response: HTTP response object.
            correlation_id: Optional correlation ID for tracing.

        Returns:
            Appropriate ApiError subclass carrying status and body.
        """
        status = response.status_code
        correlation_id = (
            correlation_id
            or response.headers.get("X-Correlation-ID")
            or ErrorFactory.generate_correlation_id()
        )

        details: dict[str, Any] = {}
        try:
            request = response.request
        except RuntimeError:
            # Response built without a request (tests, custom transports)
            request = None
        if request is not None:
            details["method"] = request.method
            details["url"] = str(request.url)

        error_cls: type[ApiError] = ApiError
        if status == 401:
            error_cls = UnauthorizedError
        elif status == 403:
            error_cls = ForbiddenError
        elif status == 404:
            error_cls = NotFoundError
        elif status >= 500:
            error_cls = ServerError

        return error_cls(
            status,
            response.text,
            reason=response.reason_phrase,
            correlation_id=correlation_id,
            details=details,
        )

    @staticmethod
    def from_exception(
        exc: Exception,
        *,
        correlation_id: str | None = None,
    ) -> StorefrontError:
        """Create SDK error from exception.

        Args:
            exc: Original exception.
            correlation_id: Optional correlation ID for tracing.

        Returns:
            Appropriate StorefrontError subclass.
        """
        correlation_id = correlation_id or ErrorFactory.generate_correlation_id()

        if isinstance(exc, StorefrontError):
            if exc.correlation_id is None:
                exc.correlation_id = correlation_id
            return exc

        if isinstance(exc, httpx.TimeoutException):
            return TimeoutError(
                f"Request timed out: {exc}",
                correlation_id=correlation_id,
            )

        if isinstance(exc, httpx.ConnectError):
            return NetworkError(
                f"Connection failed: {exc}",
                correlation_id=correlation_id,
                cause=exc,
            )

        if isinstance(exc, httpx.HTTPStatusError):
            return ErrorFactory.from_http_response(
                exc.response,
                correlation_id=correlation_id,
            )

        if isinstance(exc, httpx.HTTPError):
            return NetworkError(
                f"HTTP error: {exc}",
                correlation_id=correlation_id,
                cause=exc,
            )

        return NetworkError(
            f"Unexpected error: {exc}",
            correlation_id=correlation_id,
            cause=exc,
        )

    @staticmethod
    def refresh_error(
        cause: BaseException | None = None,
        *,
        message: str = "Failed to refresh token",
        correlation_id: str | None = None,
    ) -> TokenRefreshError:
        """Create the error shared by every caller of a failed refresh.

        Args:
            cause: Underlying failure, if any.
            message: Error message.
            correlation_id: Optional correlation ID.

        Returns:
            TokenRefreshError with the cause recorded in details.
        """
        details: dict[str, Any] = {}
        if isinstance(cause, StorefrontError):
            details["cause"] = cause.to_dict()
            correlation_id = correlation_id or cause.correlation_id
        elif cause is not None:
            details["cause"] = str(cause)

        error = TokenRefreshError(
            message,
            correlation_id=correlation_id or ErrorFactory.generate_correlation_id(),
            details=details,
        )
        error.__cause__ = cause
        return error
