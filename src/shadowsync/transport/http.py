"""HTTP transport over aiohttp"""

import json
from typing import Any, Dict, Optional

import aiohttp

from .base import Request, Transport
from ..utils.config import TransportConfig
from ..utils.errors import ConfigurationError, TransportError
from ..utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_MIME_TYPE = "application/json-patch+json"


class HttpTransport(Transport):
    """Send requests to a REST resource at ``base_url``

    ``entity`` is serialized as JSON with ``mime_type`` as its content type.
    Responses are decoded as JSON; an empty body decodes to ``None``.
    """

    def __init__(
        self,
        base_url: str,
        mime_type: str = DEFAULT_MIME_TYPE,
        timeout: float = 30.0,
        headers: Optional[Dict[str, str]] = None,
        session: Optional[aiohttp.ClientSession] = None,
        name: Optional[str] = None,
    ):
        super().__init__(name)
        if not base_url:
            raise ConfigurationError("HttpTransport requires a base_url")

        self.base_url = base_url
        self.mime_type = mime_type
        self.timeout = aiohttp.ClientTimeout(total=timeout)
        self.headers = dict(headers or {})
        self._session = session
        self._owns_session = session is None

    @classmethod
    def from_config(cls, config: TransportConfig) -> "HttpTransport":
        return cls(
            config.base_url,
            mime_type=config.mime_type,
            timeout=config.timeout,
            headers=config.headers,
        )

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self.timeout)
            self._owns_session = True
        return self._session

    async def _send(self, request: Request) -> Any:
        method = request["method"].upper()
        url = self.base_url
        if request.get("path"):
            url = url.rstrip("/") + "/" + request["path"].lstrip("/")

        headers = {"Accept": "application/json", **self.headers, **request.get("headers", {})}
        data = None
        if request.get("entity") is not None:
            headers["Content-Type"] = self.mime_type
            data = json.dumps(request["entity"])

        logger.debug("http_request", method=method, url=url)

        try:
            async with self._get_session().request(method, url, data=data, headers=headers) as response:
                text = await response.text()
                if response.status >= 400:
                    raise TransportError(
                        f"{method} {url} failed with status {response.status}",
                        status=response.status,
                        body=text,
                    )
        except aiohttp.ClientError as e:
            raise TransportError(f"{method} {url} failed: {e}", cause=e) from e

        if not text:
            return None
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise TransportError(f"Invalid JSON response from {url}", status=response.status, cause=e) from e

    async def close(self) -> None:
        if self._session is not None and self._owns_session and not self._session.closed:
            await self._session.close()


__all__ = ['HttpTransport', 'DEFAULT_MIME_TYPE']
