"""
Error handling framework for shadowsync.

This module provides:
- Hierarchical exception classes
- Error context preservation
- Structured error responses
"""

from typing import Optional, Dict, Any, List
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from contextlib import contextmanager

from .logging import get_logger


logger = get_logger("shadowsync.errors")


class ErrorSeverity(Enum):
    """Error severity levels."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for classification."""
    CONFIGURATION = "configuration"
    NETWORK = "network"
    PATCH = "patch"
    VALIDATION = "validation"
    INTERNAL = "internal"
    UNKNOWN = "unknown"


@dataclass
class ErrorContext:
    """Context information for an error."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    component: Optional[str] = None
    operation: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)


class SyncError(Exception):
    """Base exception for all shadowsync errors."""

    code: str = "SYNC_ERROR"
    default_message: str = "A synchronization error occurred"
    severity: ErrorSeverity = ErrorSeverity.ERROR
    category: ErrorCategory = ErrorCategory.UNKNOWN
    is_retryable: bool = False

    def __init__(
        self,
        message: Optional[str] = None,
        context: Optional[ErrorContext] = None,
        cause: Optional[BaseException] = None,
        **kwargs
    ):
        self.message = message or self.default_message
        self.context = context or ErrorContext()
        self.cause = cause
        self.kwargs = kwargs
        super().__init__(self.message)

    def get_suggestions(self) -> List[str]:
        """Get error resolution suggestions."""
        return []

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "severity": self.severity.value,
                "category": self.category.value,
                "is_retryable": self.is_retryable,
                "suggestions": self.get_suggestions(),
                "cause": repr(self.cause) if self.cause else None,
                "context": {
                    "timestamp": self.context.timestamp.isoformat(),
                    "component": self.context.component,
                    "operation": self.context.operation,
                    "metadata": self.context.metadata
                }
            }
        }


# Configuration Errors

class ConfigurationError(SyncError):
    """Configuration errors. These signal a setup mistake and are never retried."""
    code = "CONFIG_ERROR"
    default_message = "Configuration error"
    category = ErrorCategory.CONFIGURATION
    severity = ErrorSeverity.CRITICAL

    def get_suggestions(self) -> List[str]:
        return [
            "Check your configuration file syntax",
            "Ensure all required configuration values are set",
        ]


class AdapterNotFoundError(ConfigurationError):
    """No adapter is registered for an object and role."""
    code = "ADAPTER_NOT_FOUND"
    default_message = "Could not find an adapter"

    def __init__(self, obj: Any, role: str, **kwargs):
        self.obj = obj
        self.role = role
        message = f"Could not find {role!r} adapter for {type(obj).__name__}"
        super().__init__(message, **kwargs)

    def get_suggestions(self) -> List[str]:
        return [
            f"Register an adapter factory for {type(self.obj).__name__} with role {self.role!r}",
        ]


# Network Errors

class NetworkError(SyncError):
    """Network-related errors."""
    code = "NETWORK_ERROR"
    default_message = "Network error occurred"
    category = ErrorCategory.NETWORK
    is_retryable = True


class TransportError(NetworkError):
    """A request could not be delivered or was rejected by the peer."""
    code = "TRANSPORT_ERROR"
    default_message = "Transport request failed"

    def __init__(self, message: Optional[str] = None, status: Optional[int] = None, **kwargs):
        self.status = status
        super().__init__(message, **kwargs)


class PatchSubmissionError(TransportError):
    """A patch round-trip to the remote peer failed."""
    code = "PATCH_SUBMISSION_ERROR"
    default_message = "Patch submission failed"

    def get_suggestions(self) -> List[str]:
        return [
            "The local shadow still holds the unconfirmed edit",
            "Re-fetch the document or re-apply the patch to recover",
        ]


# Patch Errors

class PatchError(SyncError):
    """Patch-related errors."""
    code = "PATCH_ERROR"
    default_message = "Patch error"
    category = ErrorCategory.PATCH


class PatchApplicationError(PatchError):
    """A patch could not be applied to a document."""
    code = "PATCH_APPLICATION_ERROR"
    default_message = "Patch could not be applied"


# Validation Errors

class ValidationError(SyncError):
    """Input validation errors."""
    code = "VALIDATION_ERROR"
    default_message = "Validation error"
    category = ErrorCategory.VALIDATION
    severity = ErrorSeverity.WARNING

    def __init__(self, field: str, value: Any, constraint: str, **kwargs):
        self.field = field
        self.value = value
        self.constraint = constraint
        message = f"Validation failed for field '{field}': {constraint}"
        super().__init__(message, **kwargs)

    def get_suggestions(self) -> List[str]:
        return [
            f"Check the value of field '{self.field}'",
            f"Ensure it meets the constraint: {self.constraint}"
        ]


# Error Context Manager

@contextmanager
def error_context(component: str, operation: str, **metadata):
    """
    Context manager that enriches and logs errors raised inside it.

    SyncErrors get the component/operation filled in; any other exception is
    wrapped in a SyncError chained to the original.

    Args:
        component: Component name
        operation: Operation name
        **metadata: Additional context metadata
    """
    context = ErrorContext(
        component=component,
        operation=operation,
        metadata=metadata
    )

    try:
        yield context
    except SyncError as e:
        e.context.component = e.context.component or component
        e.context.operation = e.context.operation or operation
        e.context.metadata.update(metadata)
        logger.error("sync_error_in_context", error=e.to_dict())
        raise
    except Exception as e:
        wrapped = SyncError(message=str(e), context=context, cause=e)
        logger.error("unexpected_error_in_context", error=wrapped.to_dict(), exc_info=True)
        raise wrapped from e


__all__ = [
    'SyncError',
    'ErrorContext',
    'ErrorSeverity',
    'ErrorCategory',
    'ConfigurationError',
    'AdapterNotFoundError',
    'NetworkError',
    'TransportError',
    'PatchSubmissionError',
    'PatchError',
    'PatchApplicationError',
    'ValidationError',
    'error_context',
]
