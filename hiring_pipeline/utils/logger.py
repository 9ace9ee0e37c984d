"""
Logging infrastructure for the hiring pipeline.

Uses Loguru for console and rotating file output, plus a dedicated
audit sink for pipeline decisions (status changes, scores).
"""

import sys
from typing import Any

from loguru import logger

from hiring_pipeline.utils.config import get_settings
from hiring_pipeline.utils.constants import AUDIT_TYPES, AuditAction


def setup_logging() -> None:
    """
    Configure application-wide logging.

    Sets up console and file logging with appropriate formatting,
    rotation, and retention policies.
    """
    settings = get_settings()
    log_settings = settings.logging

    # Remove default handler
    logger.remove()

    # Security: diagnose=False outside development to keep variable values out of tracebacks
    enable_diagnose = settings.debug and settings.environment == "development"

    if log_settings.console_output:
        logger.add(
            sys.stderr,
            format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
            "<level>{level: <8}</level> | "
            "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
            "<level>{message}</level>",
            level=log_settings.level,
            colorize=True,
            backtrace=True,
            diagnose=enable_diagnose,
        )

    if not log_settings.file_output:
        logger.info(f"Logging initialized - Level: {log_settings.level} (console only)")
        return

    log_file = log_settings.file_path
    log_file.parent.mkdir(parents=True, exist_ok=True)

    logger.add(
        log_file,
        format=log_settings.format,
        level=log_settings.level,
        rotation=log_settings.rotation,
        retention=log_settings.retention,
        compression="zip",
        backtrace=True,
        diagnose=enable_diagnose,
        enqueue=True,  # Thread-safe logging
    )

    # Pipeline decisions are kept longer than ordinary logs
    audit_log_path = log_file.parent / "audit.log"
    logger.add(
        audit_log_path,
        format="{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[audit_type]} | {message}",
        level="INFO",
        filter=lambda record: record["extra"].get("audit_type") in AUDIT_TYPES,
        rotation="1 week",
        retention="1 year",
        compression="zip",
        enqueue=True,
    )

    logger.info(f"Logging initialized - Level: {log_settings.level}")


def get_logger(name: str) -> Any:
    """
    Get a logger instance with the specified name.

    Args:
        name: The name for the logger (typically __name__)

    Returns:
        A configured logger instance
    """
    return logger.bind(name=name)


SENSITIVE_KEYS = frozenset(
    {
        "password", "passwd", "pwd", "secret", "token", "api_key",
        "apikey", "auth", "credential", "private_key", "access_token",
        "refresh_token", "email", "phone",
    }
)


def _sanitize_for_logging(data: Any) -> Any:
    """
    Sanitize data before logging to prevent sensitive information exposure.

    Redacts credentials and applicant contact details.
    """
    if isinstance(data, dict):
        return {
            k: "***REDACTED***"
            if any(s in str(k).lower() for s in SENSITIVE_KEYS)
            else _sanitize_for_logging(v)
            for k, v in data.items()
        }
    elif isinstance(data, (list, tuple)):
        return [_sanitize_for_logging(item) for item in data]
    return data


def audit_log(
    action: AuditAction,
    details: dict[str, Any],
    audit_type: str = "DECISION",
) -> None:
    """
    Write a pipeline event to the audit sink.

    Args:
        action: The pipeline event, e.g. ``AuditAction.STATUS_CHANGED``
        details: Event fields; contact details and credentials are redacted
        audit_type: One of ``AUDIT_TYPES``

    Raises:
        ValueError: If ``audit_type`` is not a known category
    """
    if audit_type not in AUDIT_TYPES:
        raise ValueError(f"Unknown audit type: {audit_type}")
    sanitized_details = _sanitize_for_logging(details)
    logger.bind(audit_type=audit_type, action=action.value).info(
        f"{action.value} | {sanitized_details}"
    )


class LoggerMixin:
    """
    Mixin class to add logging capability to any class.

    Usage:
        class MyService(LoggerMixin):
            def run(self):
                self.logger.info("Running...")
    """

    @property
    def logger(self) -> Any:
        """Get a logger instance for this class."""
        if not hasattr(self, "_logger"):
            self._logger = get_logger(self.__class__.__name__)
        return self._logger

