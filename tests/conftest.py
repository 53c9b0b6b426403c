"""Pytest fixtures for MangaWeave tests."""

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple, Union

import pytest

from mangaweave.core.config_manager import ConfigManager
from mangaweave.core.config_schemas import PluginSettings
from mangaweave.core.http import HttpClient, HttpResponse
from mangaweave.core.scripting import ScriptRunner
from mangaweave.plugins import common
from mangaweave.plugins.base import SitePlugin


@dataclass
class RecordedRequest:
    """A request seen by the fake HTTP client."""

    method: str
    url: str
    headers: Dict[str, str] = field(default_factory=dict)
    data: Any = None


Route = Union[HttpResponse, Exception, Callable[[RecordedRequest], HttpResponse]]


def html_response(url: str, body: str, status: int = 200, **kwargs: Any) -> HttpResponse:
    """Build an HTML response for ``url``."""
    return HttpResponse(
        url=kwargs.pop("final_url", url),
        status=status,
        content=body.encode("utf-8"),
        headers={"Content-Type": "text/html; charset=utf-8"},
        request_url=url,
        **kwargs,
    )


class FakeHttpClient(HttpClient):
    """HTTP client answering from an in-memory route table and recording every request.

    Unknown routes answer with an empty 404.
    """

    def __init__(self) -> None:
        super().__init__(timeout=5.0)
        self.routes: Dict[Tuple[str, str], Route] = {}
        self.requests: List[RecordedRequest] = []

    def add(
        self,
        url: str,
        body: Union[str, bytes] = "",
        status: int = 200,
        method: str = "GET",
        content_type: str = "text/html; charset=utf-8",
        final_url: Optional[str] = None,
    ) -> None:
        """Register a static response."""
        content = body.encode("utf-8") if isinstance(body, str) else body
        self.routes[(method, url)] = HttpResponse(
            url=final_url or url,
            status=status,
            content=content,
            headers={"Content-Type": content_type} if content_type else {},
            redirected=final_url is not None,
            request_url=url,
        )

    def route(self, url: str, handler: Union[Exception, Callable[[RecordedRequest], HttpResponse]], method: str = "GET") -> None:
        """Register an exception or a dynamic handler."""
        self.routes[(method, url)] = handler

    def requested(self, method: str = "GET") -> List[str]:
        """URLs requested with ``method``, in order."""
        return [request.url for request in self.requests if request.method == method]

    async def request(
        self,
        url: str,
        method: str = "GET",
        headers: Optional[Mapping[str, str]] = None,
        data: Any = None,
        timeout: Optional[float] = None,
        allow_redirects: bool = True,
    ) -> HttpResponse:
        recorded = RecordedRequest(method=method, url=url, headers=dict(headers or {}), data=data)
        self.requests.append(recorded)

        route = self.routes.get((method, url))
        if route is None:
            return HttpResponse(url=url, status=404, request_url=url)
        if isinstance(route, Exception):
            raise route
        if isinstance(route, HttpResponse):
            return route
        return route(recorded)


class FakeScriptRunner(ScriptRunner):
    """Script runner returning canned results keyed by URL."""

    def __init__(self, results: Optional[Dict[str, Any]] = None, timeout: float = 5.0):
        super().__init__(timeout=timeout, max_sessions=1)
        self.results = dict(results or {})
        self.executions: List[Tuple[str, str, float, float]] = []

    async def _evaluate(self, url: str, script: str, timeout: float, delay: float) -> Any:
        self.executions.append((url, script, timeout, delay))
        return self.results.get(url)


class NeverResolvingScriptRunner(ScriptRunner):
    """Script runner whose scripts never resolve."""

    def __init__(self, timeout: float = 5.0):
        super().__init__(timeout=timeout, max_sessions=1)
        self.cancelled = False

    async def _evaluate(self, url: str, script: str, timeout: float, delay: float) -> Any:
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise


EXAMPLE_ORIGIN = "https://example.test"

EXAMPLE_INDEX = """
<html><body>
  <div class="page-item"><div class="post-title"><h3><a href="/manga/sample/">  Sample   Manga </a></h3></div></div>
</body></html>
"""

EXAMPLE_CONTAINER = """
<html><body>
  <div class="post-title"><h1>Sample Manga</h1></div>
  <ul class="main">
    <li class="wp-manga-chapter"><a href="https://example.test/manga/sample/ch-1/">Chapter 1</a></li>
    <li class="wp-manga-chapter"><a href="/manga/sample/ch-2/">Chapter 2</a></li>
  </ul>
</body></html>
"""

EXAMPLE_CHAPTER = """
<html><body>
  <div class="reading-content">
    <div class="page-break"><img src="https://cdn.example.test/sample/1/001.jpg"></div>
    <div class="page-break"><img data-src="/images/sample/1/002.jpg" src="data:image/gif;base64,R0lGOD"></div>
  </div>
</body></html>
"""

JPEG_BYTES = b"\xff\xd8\xff\xe0" + b"\x00" * 16


@common.MangaCSS(r"^{origin}/manga/[^/]+/$", "div.post-title h1")
@common.MangasSinglePageCSS("/manga/", "div.post-title h3 a")
@common.ChaptersSinglePageCSS("li.wp-manga-chapter > a")
@common.PagesSinglePageCSS("div.page-break img")
@common.ImageAjax()
class ExampleSite(SitePlugin):
    """Fixture plugin for the static example.test website."""

    identifier = "example"
    title = "Example"
    uri = "https://example.test/"


@pytest.fixture
def http() -> FakeHttpClient:
    """Create an empty fake HTTP client."""
    return FakeHttpClient()


@pytest.fixture
def example_http(http: FakeHttpClient) -> FakeHttpClient:
    """Fake HTTP client serving the example.test fixture website."""
    http.add(f"{EXAMPLE_ORIGIN}/manga/", EXAMPLE_INDEX)
    http.add(f"{EXAMPLE_ORIGIN}/manga/sample/", EXAMPLE_CONTAINER)
    http.add(f"{EXAMPLE_ORIGIN}/manga/sample/ch-1/", EXAMPLE_CHAPTER)
    http.add("https://cdn.example.test/sample/1/001.jpg", JPEG_BYTES, content_type="image/jpeg")
    return http


@pytest.fixture
def example_site(example_http: FakeHttpClient) -> ExampleSite:
    """Composed fixture plugin bound to the example.test website."""
    return ExampleSite(example_http, settings=PluginSettings())


@pytest.fixture
def config_manager(tmp_path: Path) -> ConfigManager:
    """Configuration manager working in a temporary directory."""
    return ConfigManager(tmp_path / "config")
