"""Base transport implementation for talking to a remote peer"""

import uuid
from abc import ABC, abstractmethod
from typing import Any, Awaitable, Callable, Dict, Optional

from ..utils.logging import get_logger
from ..utils.errors import TransportError

logger = get_logger(__name__)

Request = Dict[str, Any]


class Transport(ABC):
    """Abstract base class for request/response transports

    A request is a dict with at least ``method``; ``entity`` carries the
    payload. ``send`` resolves to the peer's decoded response entity.
    """

    def __init__(self, name: Optional[str] = None):
        self.name = name or f"{self.__class__.__name__}_{uuid.uuid4().hex[:8]}"
        self._stats = {
            "requests_sent": 0,
            "responses_received": 0,
            "errors": 0,
        }

    @abstractmethod
    async def _send(self, request: Request) -> Any:
        """Deliver one request and return the response entity"""

    async def send(self, request: Request) -> Any:
        """Send a request and wait for its response"""
        if "method" not in request:
            raise TransportError("Request has no method")

        self._stats["requests_sent"] += 1
        try:
            response = await self._send(request)
        except Exception as e:
            self._stats["errors"] += 1
            logger.warning(
                "transport_request_failed",
                transport=self.name,
                method=request["method"],
                error=str(e),
                error_type=type(e).__name__,
            )
            if isinstance(e, TransportError):
                raise
            raise TransportError(f"Request failed: {e}", cause=e) from e

        self._stats["responses_received"] += 1
        return response

    async def __call__(self, request: Request) -> Any:
        return await self.send(request)

    async def close(self) -> None:
        """Release transport resources"""

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    def get_stats(self) -> Dict[str, Any]:
        """Get transport statistics"""
        return {"name": self.name, **self._stats}


class CallableTransport(Transport):
    """Transport backed by a coroutine function ``handler(request) -> response``"""

    def __init__(self, handler: Callable[[Request], Awaitable[Any]], name: Optional[str] = None):
        super().__init__(name)
        self.handler = handler

    async def _send(self, request: Request) -> Any:
        return await self.handler(request)


__all__ = ['Request', 'Transport', 'CallableTransport']
