"""
Utility modules for the hiring pipeline.

This package contains shared utilities used across the application:
- config: Configuration management
- logger: Logging infrastructure
- constants: Application-wide constants and enums
"""

from hiring_pipeline.utils.config import (
    AppSettings,
    DatabaseSettings,
    LoggingSettings,
    PipelineSettings,
    get_settings,
    reload_settings,
    ROOT_DIR,
)
from hiring_pipeline.utils.constants import (
    APP_NAME,
    APP_DISPLAY_NAME,
    VERSION,
    SYSTEM_ACTOR,
    ApplicationSource,
    ApplicationStatus,
    AuditAction,
    HistoryEntryType,
    JobStatus,
)
from hiring_pipeline.utils.logger import (
    setup_logging,
    get_logger,
    audit_log,
    LoggerMixin,
)

__all__ = [
    # Config
    "AppSettings",
    "DatabaseSettings",
    "LoggingSettings",
    "PipelineSettings",
    "get_settings",
    "reload_settings",
    "ROOT_DIR",
    # Constants
    "APP_NAME",
    "APP_DISPLAY_NAME",
    "VERSION",
    "SYSTEM_ACTOR",
    "ApplicationSource",
    "ApplicationStatus",
    "AuditAction",
    "HistoryEntryType",
    "JobStatus",
    # Logger
    "setup_logging",
    "get_logger",
    "audit_log",
    "LoggerMixin",
]
