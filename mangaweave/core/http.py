"""
HTTP Client - Shared aiohttp transport for all site plugins.

This module wraps one ``aiohttp.ClientSession`` and maps transport failures
and HTTP status codes onto the typed error taxonomy. It never retries: retry
policy belongs to the caller.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping, Optional, Union

import aiohttp

from mangaweave.core.config_schemas import DEFAULT_USER_AGENT
from mangaweave.core.exceptions import NotFoundError, OperationTimeoutError, ParseError, UnreachableError


logger = logging.getLogger(__name__)

RequestData = Union[str, bytes, Mapping[str, Any], None]


@dataclass(frozen=True)
class HttpResponse:
    """A fully read HTTP response."""

    url: str
    status: int
    content: bytes = b""
    headers: Mapping[str, str] = field(default_factory=dict)
    redirected: bool = False
    request_url: str = ""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    @property
    def media_type(self) -> str:
        """Get the media type without parameters (e.g. 'text/html')."""
        value = self._header("content-type")
        return value.split(';', 1)[0].strip().lower()

    @property
    def charset(self) -> str:
        for parameter in self._header("content-type").split(';')[1:]:
            name, _, value = parameter.partition('=')
            if name.strip().lower() == 'charset' and value.strip():
                return value.strip().strip('"')
        return 'utf-8'

    def _header(self, name: str) -> str:
        for key, value in self.headers.items():
            if key.lower() == name:
                return value
        return ""

    def text(self) -> str:
        """Decode the body as text."""
        try:
            return self.content.decode(self.charset, errors='replace')
        except LookupError:
            return self.content.decode('utf-8', errors='replace')

    def json(self) -> Any:
        """Decode the body as JSON."""
        try:
            return json.loads(self.text())
        except json.JSONDecodeError as e:
            raise ParseError(f"Invalid JSON response from {self.url}", url=self.url, details=str(e))


def raise_for_status(response: HttpResponse) -> HttpResponse:
    """
    Map a non-success status onto a typed error.

    4xx answers mean the resource is not available at the site (NotFoundError),
    5xx answers are server-side failures eligible for caller retry
    (UnreachableError).
    """
    if response.ok or 300 <= response.status < 400:
        return response
    if 400 <= response.status < 500:
        raise NotFoundError(
            f"HTTP {response.status} error for {response.url}",
            url=response.url,
            status_code=response.status,
        )
    raise UnreachableError(
        f"HTTP {response.status} error for {response.url}",
        url=response.url,
        status_code=response.status,
    )


class HttpClient:
    """
    Thin asynchronous HTTP client shared by all plugins of a registry.

    The session is created lazily on first use and closed by ``close()``.
    """

    def __init__(
        self,
        timeout: float = 30.0,
        user_agent: str = DEFAULT_USER_AGENT,
        connection_limit: int = 16,
        headers: Optional[Dict[str, str]] = None,
    ):
        """
        Initialize the client.

        Args:
            timeout: Default per-request timeout in seconds
            user_agent: User agent sent with every request
            connection_limit: Maximum simultaneous connections
            headers: Extra default headers
        """
        self.timeout = timeout
        self.user_agent = user_agent
        self.connection_limit = connection_limit
        self.default_headers = {
            'User-Agent': user_agent,
            'Accept': 'text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8',
            'Accept-Language': 'en-US,en;q=0.5',
            **(headers or {}),
        }
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def session(self) -> aiohttp.ClientSession:
        """Get or create HTTP session with proper configuration."""
        if self._session is None or self._session.closed:
            connector = aiohttp.TCPConnector(
                limit=self.connection_limit,
                ttl_dns_cache=300,
                use_dns_cache=True,
            )
            self._session = aiohttp.ClientSession(
                connector=connector,
                timeout=aiohttp.ClientTimeout(total=self.timeout),
                headers=self.default_headers,
            )
        return self._session

    async def request(
        self,
        url: str,
        method: str = 'GET',
        headers: Optional[Mapping[str, str]] = None,
        data: RequestData = None,
        timeout: Optional[float] = None,
        allow_redirects: bool = True,
    ) -> HttpResponse:
        """
        Issue one request and read the whole body.

        The status code is not checked; see ``fetch`` for that.

        Raises:
            OperationTimeoutError: If the request exceeds its timeout
            UnreachableError: If the connection cannot be completed
        """
        bound = timeout or self.timeout
        logger.debug(f"{method} {url}")

        try:
            async with self.session.request(
                method,
                url,
                headers=dict(headers or {}),
                data=data,
                timeout=aiohttp.ClientTimeout(total=bound),
                allow_redirects=allow_redirects,
            ) as response:
                content = await response.read()
                return HttpResponse(
                    url=str(response.url),
                    status=response.status,
                    content=content,
                    headers=dict(response.headers),
                    redirected=bool(response.history),
                    request_url=url,
                )
        except asyncio.TimeoutError as e:
            raise OperationTimeoutError(f"Request to {url} timed out after {bound}s", timeout=bound, url=url) from e
        except aiohttp.ClientError as e:
            raise UnreachableError(f"Network error for {url}: {e}", url=url, details=str(e)) from e

    async def fetch(self, url: str, **kwargs: Any) -> HttpResponse:
        """Issue a request and raise a typed error on non-success status."""
        return raise_for_status(await self.request(url, **kwargs))

    async def close(self) -> None:
        """Close the underlying session."""
        if self._session and not self._session.closed:
            await self._session.close()
            logger.debug("HTTP session closed")
        self._session = None

    async def __aenter__(self) -> "HttpClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()


__all__ = ["HttpClient", "HttpResponse", "raise_for_status"]
