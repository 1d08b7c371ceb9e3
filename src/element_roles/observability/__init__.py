"""Public observability primitives: JSON-lines structured logging."""

from element_roles.observability.logging import (
    LoggingConfig,
    StructuredLoggingHandle,
    configure_structlog,
    flush_logging,
    get_active_logging_handle,
    reset_structlog,
    setup_logging,
    setup_structured_logging,
    shutdown_logging,
)

__all__ = [
    "LoggingConfig",
    "StructuredLoggingHandle",
    "configure_structlog",
    "flush_logging",
    "get_active_logging_handle",
    "reset_structlog",
    "setup_logging",
    "setup_structured_logging",
    "shutdown_logging",
]
