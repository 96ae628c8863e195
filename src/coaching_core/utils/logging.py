"""Structured logging utilities with correlation ID support.

Provides:
- Correlation ID context management for request tracing
- Structured logging formatter for consistent log output
- A helper for logging monetary decisions made by the core

Usage:
    from coaching_core.utils.logging import get_logger, set_correlation_id

    # In middleware/request handler:
    set_correlation_id(request.headers.get("X-Correlation-ID"))

    # In service code:
    logger = get_logger(__name__)
    log_ledger_operation(logger, "deduct", entity_id="BB-123", remaining_sessions=4)
"""

import logging
import uuid
from contextvars import ContextVar
from typing import Any

# Context variable for correlation ID - thread-safe and async-safe
_correlation_id: ContextVar[str | None] = ContextVar("correlation_id", default=None)

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def generate_correlation_id() -> str:
    """Generate a new correlation ID.

    Returns:
        UUID-based correlation ID string
    """
    return str(uuid.uuid4())


def set_correlation_id(correlation_id: str | None = None) -> str:
    """Set the correlation ID for the current request context.

    Args:
        correlation_id: Optional existing correlation ID. If None, generates new one.

    Returns:
        The correlation ID that was set
    """
    cid = correlation_id or generate_correlation_id()
    _correlation_id.set(cid)
    return cid


def get_correlation_id() -> str | None:
    """Get the current correlation ID."""
    return _correlation_id.get()


def clear_correlation_id() -> None:
    """Clear the correlation ID context."""
    _correlation_id.set(None)


class CorrelationIdFilter(logging.Filter):
    """Logging filter that adds correlation_id to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.correlation_id = get_correlation_id() or "no-correlation-id"
        return True


class StructuredFormatter(logging.Formatter):
    """Formatter for structured log output with correlation ID."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record with a correlation ID prefix.

        Args:
            record: Log record to format

        Returns:
            Formatted log string
        """
        if not hasattr(record, "correlation_id"):
            record.correlation_id = get_correlation_id() or "no-correlation-id"

        base = super().format(record)

        # Prefix for easy grep/filtering
        return f"[{record.correlation_id}] {base}"


def get_logger(name: str) -> logging.Logger:
    """Get a logger with correlation ID support.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Configured logger instance
    """
    logger = logging.getLogger(name)

    if not any(isinstance(f, CorrelationIdFilter) for f in logger.filters):
        logger.addFilter(CorrelationIdFilter())

    return logger


def configure_logging(level: str | int = "INFO") -> None:
    """Install the structured formatter on the root logger.

    Safe to call more than once; an existing structured handler is reused.

    Args:
        level: Log level name or number
    """
    root = logging.getLogger()
    root.setLevel(level)

    for handler in root.handlers:
        if isinstance(handler.formatter, StructuredFormatter):
            return

    handler = logging.StreamHandler()
    handler.setFormatter(StructuredFormatter(LOG_FORMAT))
    handler.addFilter(CorrelationIdFilter())
    root.addHandler(handler)


def log_ledger_operation(
    logger: logging.Logger,
    operation: str,
    *,
    entity_id: str | None = None,
    amount_pence: int | None = None,
    status: str | None = None,
    error: str | None = None,
    **extra: Any,
) -> None:
    """Log a monetary decision with structured context.

    Args:
        logger: Logger instance
        operation: Operation name (e.g., "deduct", "refund_evaluated")
        entity_id: Booking or block booking ID if available
        amount_pence: Amount in pence if relevant
        status: Resulting status
        error: Error message if the operation was refused
        **extra: Additional context fields
    """
    context: dict[str, Any] = {"operation": operation}

    if entity_id:
        context["entity_id"] = entity_id
    if amount_pence is not None:
        context["amount_pence"] = amount_pence
    if status:
        context["status"] = status
    if error:
        context["error"] = error

    context.update(extra)

    msg_parts = [f"Ledger operation: {operation}"]
    for key, value in context.items():
        if key != "operation":
            msg_parts.append(f"{key}={value}")

    message = " | ".join(msg_parts)

    if error:
        logger.error(message, extra=context)
    else:
        logger.info(message, extra=context)
