"""Unit tests for error classes and the error factory.

Tests error hierarchy, serialization, error codes and HTTP mapping.
"""

import httpx
import pytest

from storefront_sdk.core.errors import ErrorFactory
from storefront_sdk.errors import (
    ApiError,
    ErrorCode,
    ForbiddenError,
    InvalidConfigError,
    NetworkError,
    NotFoundError,
    ServerError,
    StorefrontError,
    TimeoutError,
    TokenRefreshError,
    UnauthorizedError,
    is_auth_error,
    is_network_error,
)


class TestErrorCode:
    """Tests for ErrorCode enum."""

    def test_error_codes_are_strings(self) -> None:
        """Error codes should be string values."""
        assert ErrorCode.TOKEN_REFRESH_FAILED == "AUTH_1003"
        assert ErrorCode.VALIDATION_ERROR == "VAL_2001"
        assert ErrorCode.NETWORK_ERROR == "NET_3001"
        assert ErrorCode.API_ERROR == "API_4000"
        assert ErrorCode.SERVER_ERROR == "SRV_5001"


class TestStorefrontError:
    """Tests for base StorefrontError."""

    def test_basic_error(self) -> None:
        """Should create error with message and code."""
        error = StorefrontError("Test error", ErrorCode.VALIDATION_ERROR)

        assert str(error) == "Test error"
        assert error.message == "Test error"
        assert error.code == "VAL_2001"
        assert error.details == {}

    def test_to_dict(self) -> None:
        """Should serialize to dictionary."""
        error = StorefrontError(
            "Boom",
            ErrorCode.SERVER_ERROR,
            status_code=500,
            correlation_id="req-1",
            details={"path": "/orders"},
        )

        assert error.to_dict() == {
            "error": "Boom",
            "code": "SRV_5001",
            "status_code": 500,
            "correlation_id": "req-1",
            "details": {"path": "/orders"},
        }

    def test_repr(self) -> None:
        """Repr should name the class and code."""
        error = StorefrontError("Boom", ErrorCode.API_ERROR)

        assert repr(error) == "StorefrontError(code='API_4000', message='Boom')"


class TestApiError:
    """Tests for ApiError and its status subclasses."""

    def test_message_carries_status_and_body(self) -> None:
        """Message should read 'HTTP <status>: <body>'."""
        error = ApiError(418, "short and stout")

        assert error.message == "HTTP 418: short and stout"
        assert error.status_code == 418
        assert error.body == "short and stout"
        assert error.code == ErrorCode.API_ERROR

    def test_empty_body_falls_back_to_reason(self) -> None:
        """Reason phrase should be used when the body is empty."""
        error = ApiError(409, reason="Conflict")

        assert error.message == "HTTP 409: Conflict"

    def test_json_body(self) -> None:
        """JSON bodies should be parseable from the error."""
        assert ApiError(400, '{"message": "bad"}').json() == {"message": "bad"}
        assert ApiError(400, "plain text").json() is None

    @pytest.mark.parametrize(
        ("cls", "code"),
        [
            (UnauthorizedError, ErrorCode.UNAUTHORIZED),
            (ForbiddenError, ErrorCode.FORBIDDEN),
            (NotFoundError, ErrorCode.NOT_FOUND),
            (ServerError, ErrorCode.SERVER_ERROR),
        ],
    )
    def test_subclass_codes(self, cls: type[ApiError], code: ErrorCode) -> None:
        """Each status subclass should carry its own code."""
        error = cls(500, "x")

        assert isinstance(error, ApiError)
        assert error.code == code


class TestSpecificErrors:
    """Tests for the remaining error types."""

    def test_token_refresh_error(self) -> None:
        """Refresh failures should look like a 401."""
        error = TokenRefreshError()

        assert error.code == ErrorCode.TOKEN_REFRESH_FAILED
        assert error.status_code == 401

    def test_network_error_records_cause(self) -> None:
        """Cause should be chained and described in details."""
        cause = OSError("connection reset")
        error = NetworkError(cause=cause)

        assert error.__cause__ is cause
        assert error.details == {"cause": "connection reset"}

    def test_timeout_error(self) -> None:
        """Timeouts should report the configured limit."""
        error = TimeoutError(timeout_seconds=30.0)

        assert error.code == ErrorCode.TIMEOUT_ERROR
        assert error.details == {"timeout_seconds": 30.0}

    def test_invalid_config_error(self) -> None:
        """Config errors should name the offending field."""
        error = InvalidConfigError("bad url", field="base_url")

        assert error.details == {"field": "base_url"}


class TestClassifiers:
    """Tests for is_auth_error and is_network_error."""

    def test_auth_errors(self) -> None:
        assert is_auth_error(TokenRefreshError())
        assert is_auth_error(UnauthorizedError(401))
        assert is_auth_error(ForbiddenError(403))
        assert not is_auth_error(ServerError(500))
        assert not is_auth_error(ValueError("nope"))

    def test_network_errors(self) -> None:
        assert is_network_error(NetworkError())
        assert is_network_error(TimeoutError())
        assert not is_network_error(ApiError(400))


class TestErrorFactory:
    """Tests for ErrorFactory."""

    @pytest.mark.parametrize(
        ("status", "cls"),
        [
            (400, ApiError),
            (401, UnauthorizedError),
            (403, ForbiddenError),
            (404, NotFoundError),
            (422, ApiError),
            (500, ServerError),
            (503, ServerError),
        ],
    )
    def test_from_http_response_maps_status(self, status: int, cls: type[ApiError]) -> None:
        """Status codes should map to the matching error class."""
        request = httpx.Request("GET", "https://api.storefront.test/orders")
        response = httpx.Response(status, text="failure body", request=request)

        error = ErrorFactory.from_http_response(response)

        assert type(error) is cls
        assert error.status_code == status
        assert error.message == f"HTTP {status}: failure body"
        assert error.details == {
            "method": "GET",
            "url": "https://api.storefront.test/orders",
        }

    def test_from_http_response_uses_correlation_header(self) -> None:
        """Server correlation id should be preserved."""
        response = httpx.Response(500, headers={"X-Correlation-ID": "srv-9"})

        error = ErrorFactory.from_http_response(response)

        assert error.correlation_id == "srv-9"
        assert error.details == {}

    def test_from_http_response_generates_correlation_id(self) -> None:
        """A correlation id should be generated when the server sends none."""
        error = ErrorFactory.from_http_response(httpx.Response(500))

        assert error.correlation_id

    def test_from_exception_timeout(self) -> None:
        error = ErrorFactory.from_exception(httpx.ReadTimeout("slow"))

        assert isinstance(error, TimeoutError)

    def test_from_exception_connect(self) -> None:
        error = ErrorFactory.from_exception(httpx.ConnectError("refused"))

        assert isinstance(error, NetworkError)
        assert "Connection failed" in error.message

    def test_from_exception_passes_sdk_errors_through(self) -> None:
        original = ServerError(500, "x")

        error = ErrorFactory.from_exception(original, correlation_id="c-1")

        assert error is original
        assert error.correlation_id == "c-1"

    def test_refresh_error_wraps_cause(self) -> None:
        """Refresh errors should record the underlying failure."""
        cause = ServerError(502, "bad gateway", correlation_id="c-2")

        error = ErrorFactory.refresh_error(cause)

        assert isinstance(error, TokenRefreshError)
        assert error.__cause__ is cause
        assert error.correlation_id == "c-2"
        assert error.details["cause"]["status_code"] == 502
