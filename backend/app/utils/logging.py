"""
Production logging utility for structured JSON logging.

Provides event-specific logging functions with mandatory fields:
- timestamp (ISO8601)
- level
- service
- event

Optional fields (included when applicable):
- slug
- object_key
- size_bytes
- duration_ms

Usage:
    from app.utils.logging import configure_logging, log_upload_finalized

    configure_logging('earlbox-api', 'INFO')
    log_upload_finalized(logger, slug='lx1...', size_bytes=512000, duration_ms=4.2)
"""
import logging
import sys
from typing import Optional, Dict, Any
from pythonjsonlogger import jsonlogger


class StructuredLogger:
    """Structured JSON logger with mandatory fields."""

    _service_name = None
    _configured = False

    @classmethod
    def configure(cls, service_name: str, log_level: str = "INFO"):
        """
        Configure structured JSON logging for the application.

        Args:
            service_name: Service identifier (earlbox-api)
            log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        """
        if cls._configured:
            return  # Already configured

        cls._service_name = service_name

        # Remove default handlers
        root_logger = logging.getLogger()
        root_logger.handlers = []

        formatter = jsonlogger.JsonFormatter(
            '%(timestamp)s %(levelname)s %(name)s %(message)s',
            timestamp=True,
            json_ensure_ascii=False
        )

        # Console handler (for docker logs)
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(formatter)

        root_logger.addHandler(handler)
        root_logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))

        # Add service name to all log records via filter
        class ServiceFilter(logging.Filter):
            def filter(self, record):
                record.service = cls._service_name
                return True

        handler.addFilter(ServiceFilter())
        cls._configured = True


def _build_log_extra(
    event: str,
    slug: Optional[str] = None,
    object_key: Optional[str] = None,
    size_bytes: Optional[int] = None,
    duration_ms: Optional[float] = None,
    **kwargs
) -> Dict[str, Any]:
    """
    Build extra fields for structured logging.

    Args:
        event: Event name (mandatory)
        slug: Optional file slug
        object_key: Optional storage object key
        size_bytes: Optional file size
        duration_ms: Optional duration in milliseconds
        **kwargs: Additional fields

    Returns:
        Dictionary of extra fields
    """
    extra = {
        "event": event,
        **kwargs
    }

    if slug:
        extra["slug"] = slug
    if object_key:
        extra["object_key"] = object_key
    if size_bytes is not None:
        extra["size_bytes"] = size_bytes
    if duration_ms is not None:
        extra["duration_ms"] = round(duration_ms, 2)

    return extra


def log_upload_requested(
    logger: logging.Logger,
    slug: str,
    object_key: str,
    size_bytes: int,
    content_type: Optional[str] = None,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """Log issuance of an upload credential."""
    extra = _build_log_extra(
        event="upload_requested",
        slug=slug,
        object_key=object_key,
        size_bytes=size_bytes,
        duration_ms=duration_ms,
        **kwargs
    )
    if content_type:
        extra["content_type"] = content_type

    logger.info(f"Upload requested: {slug}", extra=extra)


def log_upload_finalized(
    logger: logging.Logger,
    slug: str,
    size_bytes: int,
    record_id: Optional[int] = None,
    duration_ms: Optional[float] = None,
    **kwargs
):
    """Log a committed upload."""
    extra = _build_log_extra(
        event="upload_finalized",
        slug=slug,
        size_bytes=size_bytes,
        duration_ms=duration_ms,
        **kwargs
    )
    if record_id is not None:
        extra["record_id"] = record_id

    logger.info(f"Upload finalized: {slug}", extra=extra)


def log_upload_rejected(
    logger: logging.Logger,
    operation: str,
    code: str,
    reason: str,
    slug: Optional[str] = None,
    **kwargs
):
    """
    Log a rejected protocol call (validation, conflict, not found).

    These are caller errors, so they are logged at WARNING without a trace.
    """
    extra = _build_log_extra(
        event="upload_rejected",
        slug=slug,
        operation=operation,
        code=code,
        reason=reason,
        **kwargs
    )

    logger.warning(f"Upload {operation} rejected ({code}): {reason}", extra=extra)


def log_registry_failure(
    logger: logging.Logger,
    operation: str,
    error: str,
    slug: Optional[str] = None,
    include_traceback: bool = True,
    **kwargs
):
    """
    Log a registry or storage backend failure.

    Args:
        logger: Logger instance
        operation: Protocol operation that failed (required)
        error: Error message (required)
        slug: Optional file slug
        include_traceback: Attach the active exception's stack trace if any
        **kwargs: Additional fields
    """
    extra = _build_log_extra(
        event="registry_failure",
        slug=slug,
        operation=operation,
        error=str(error),
        **kwargs
    )

    message = f"Backend failure during {operation}: {error}"

    if include_traceback and sys.exc_info()[0] is not None:
        logger.error(message, extra=extra, exc_info=True)
    else:
        logger.error(message, extra=extra)


# Convenience alias
def configure_logging(service_name: str, log_level: str = "INFO"):
    """Configure logging (alias for StructuredLogger.configure)."""
    StructuredLogger.configure(service_name, log_level)
