"""Shared utilities: logging, errors, configuration and deferred helpers."""

from .logging import get_logger, setup_logging, setup_logging_from_config
from .errors import (
    SyncError,
    ConfigurationError,
    AdapterNotFoundError,
    NetworkError,
    TransportError,
    PatchSubmissionError,
    PatchError,
    PatchApplicationError,
    ValidationError,
)
from .deferred import resolve, when

__all__ = [
    'get_logger',
    'setup_logging',
    'setup_logging_from_config',
    'SyncError',
    'ConfigurationError',
    'AdapterNotFoundError',
    'NetworkError',
    'TransportError',
    'PatchSubmissionError',
    'PatchError',
    'PatchApplicationError',
    'ValidationError',
    'resolve',
    'when',
]
