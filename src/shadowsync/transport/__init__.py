"""Transports that carry requests to a remote peer."""

from .base import Request, Transport, CallableTransport
from .http import HttpTransport, DEFAULT_MIME_TYPE

__all__ = [
    'Request',
    'Transport',
    'CallableTransport',
    'HttpTransport',
    'DEFAULT_MIME_TYPE',
]
