"""OpenTelemetry and structlog integration for the Storefront SDK.

Request, refresh and sign-out events are logged as structured key-value
records; gateway calls, HTTP round trips and refresh exchanges each get a
span.
"""

from __future__ import annotations

import functools
import logging
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Awaitable, Callable, ParamSpec, TypeVar

import structlog
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from .config import LOG_LEVELS

if TYPE_CHECKING:
    from collections.abc import Generator

    from .config import TelemetryConfig

P = ParamSpec("P")
T = TypeVar("T")

SDK_NAME = "storefront-sdk"
SDK_VERSION = "0.1.0"

_tracer: trace.Tracer | None = None
_logger: structlog.BoundLogger | None = None


def get_tracer() -> trace.Tracer:
    """Get or create the SDK tracer."""
    global _tracer
    if _tracer is None:
        _tracer = trace.get_tracer(SDK_NAME, SDK_VERSION)
    return _tracer


def get_logger() -> structlog.BoundLogger:
    """Get or create the SDK logger."""
    global _logger
    if _logger is None:
        _logger = structlog.get_logger(SDK_NAME)
    return _logger


def configure_telemetry(config: TelemetryConfig) -> None:
    """Install JSON log rendering and the SDK tracer.

    With telemetry disabled only the tracer is replaced by a no-op one;
    logging keeps whatever structlog configuration the application has.

    Args:
        config: Telemetry configuration.
    """
    global _tracer, _logger

    if not config.enabled:
        _tracer = trace.NoOpTracer()
        return

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            _log_level_to_int(config.log_level)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _tracer = trace.get_tracer(config.service_name, SDK_VERSION)
    _logger = structlog.get_logger(config.service_name).bind(service=config.service_name)


def _log_level_to_int(level: str) -> int:
    return LOG_LEVELS.get(level.upper(), logging.INFO)


@contextmanager
def trace_operation(
    name: str,
    *,
    attributes: dict[str, Any] | None = None,
) -> Generator[trace.Span, None, None]:
    """Run a block inside a span, marking the span failed if it raises.

    Args:
        name: Span name.
        attributes: Attributes set on the span before the block runs.

    Yields:
        The active span.
    """
    with get_tracer().start_as_current_span(name, attributes=attributes) as span:
        try:
            yield span
        except Exception as e:
            span.set_status(Status(StatusCode.ERROR, str(e)))
            span.record_exception(e)
            raise


def traced_async(
    name: str | None = None,
) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Wrap a coroutine function in ``trace_operation``.

    Args:
        name: Span name, defaulting to the function's qualified name.
    """

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        span_name = name or func.__qualname__

        @functools.wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            with trace_operation(span_name):
                return await func(*args, **kwargs)

        return wrapper

    return decorator
