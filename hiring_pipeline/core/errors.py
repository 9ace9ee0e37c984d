"""
Error taxonomy for the hiring pipeline.

Every error carries a structured code and a retryable flag so API
layers can map it to a response without inspecting the message.
"""

from enum import Enum
from typing import Any, Optional


class ErrorCode(str, Enum):
    """Structured error codes."""

    NOT_FOUND = "NOT_FOUND"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    SCORING_UNAVAILABLE = "SCORING_UNAVAILABLE"
    STORAGE_ERROR = "STORAGE_ERROR"
    WRITE_CONFLICT = "WRITE_CONFLICT"


class PipelineError(Exception):
    """Base exception for pipeline errors with structured error information."""

    code: ErrorCode = ErrorCode.VALIDATION_ERROR
    retryable: bool = False

    def __init__(
        self,
        message: str,
        retryable: Optional[bool] = None,
        original_error: Optional[Exception] = None,
    ):
        """
        Initialize a pipeline error.

        Args:
            message: Human-readable error message
            retryable: Override the class default for whether the call may be repeated
            original_error: The original exception if this wraps another error
        """
        self.message = message
        if retryable is not None:
            self.retryable = retryable
        self.original_error = original_error
        super().__init__(message)

    def to_dict(self) -> dict[str, Any]:
        """Convert error to dictionary format for API responses."""
        return {
            "error": {
                "code": self.code.value,
                "message": self.message,
                "retryable": self.retryable,
            }
        }


class NotFoundError(PipelineError):
    """Unknown application or job id."""

    code = ErrorCode.NOT_FOUND


class InvalidTransitionError(PipelineError):
    """Move out of a terminal state, or backwards through the pipeline."""

    code = ErrorCode.INVALID_TRANSITION


class ValidationError(PipelineError):
    """Out-of-range rating or score, blank note, duplicate application."""

    code = ErrorCode.VALIDATION_ERROR


class ScoringUnavailableError(PipelineError):
    """The scoring collaborator failed; application state is unchanged."""

    code = ErrorCode.SCORING_UNAVAILABLE
    retryable = True


class StorageError(PipelineError):
    """The database rejected or failed an operation. Safe for callers to retry."""

    code = ErrorCode.STORAGE_ERROR
    retryable = True


class WriteConflictError(StorageError):
    """A document kept changing underneath a write until attempts ran out."""

    code = ErrorCode.WRITE_CONFLICT
