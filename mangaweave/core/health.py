"""
Website Health - Liveness check of every registered website.

The checker only consumes the registry enumeration: it sends one request to
each plugin's base URI, classifies the outcome and writes an aggregate
report. It never invokes a listing or fetch capability.
"""

import asyncio
import html
import json
import logging
import re
from datetime import datetime, timezone
from enum import IntEnum
from pathlib import Path
from typing import Dict, Iterable, List, Mapping, Optional, Pattern, Tuple
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field

from mangaweave.core.exceptions import MangaWeaveError
from mangaweave.core.http import HttpClient
from mangaweave.core.models import PluginDescriptor


logger = logging.getLogger(__name__)


class StatusCode(IntEnum):
    """Severity of a website check, lowest first."""

    OK = 0
    WARNING = 1
    ERROR = 2

    @property
    def symbol(self) -> str:
        return _SYMBOLS[self]


_SYMBOLS = {
    StatusCode.OK: "✅",
    StatusCode.WARNING: "⚠️",
    StatusCode.ERROR: "❌",
}


# Redirect targets that are not a sign of a moved website, keyed by request URL
EXPECTED_REDIRECT_PATTERNS: Dict[str, Tuple[Pattern[str], ...]] = {
    # rotating (sub-)domains
    "https://holymanga.net/": (re.compile(r"^https://w+\d*\.holymanga\.net/$"),),
    "https://mangafreak.me/": (re.compile(r"^https://w+\d*\.mangafreak\.me/$"),),
    "https://mintmanga.live/": (re.compile(r"^https://\d+\.mintmanga\.one/$"),),
    # the root path only redirects to the www sub-domain
    "https://pijamalikoi.com/": (re.compile(r"^https://www\.pijamalikoi\.com/$"),),
    # redirects until a region cookie is set
    "https://www.toomics.com/": (re.compile(r"^https://global\.toomics\.com/en$"),),
    "https://web.6parkbbs.com/": (re.compile(r"^https://club\.6parkbbs\.com/index.php$"),),
}


class WebsiteStatus(BaseModel):
    """Outcome of one website check."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Plugin identifier")
    title: str = Field(..., description="Plugin title")
    url: str = Field(..., description="Checked base URI")
    code: StatusCode = Field(default=StatusCode.ERROR, description="Severity")
    info: str = Field(default="Not Processed", description="Failure or redirect details")
    visitors: int = Field(default=0, ge=0, description="Popularity signal (estimated monthly visitors)")


def normalize_uri(uri: str) -> str:
    """Give a bare origin the trailing slash browsers send."""
    parsed = urlparse(uri)
    return uri if parsed.path else f"{uri}/"


def is_unexpected_redirect(
    request_url: str,
    response_url: str,
    redirected: bool,
    patterns: Optional[Mapping[str, Iterable[Pattern[str]]]] = None,
) -> bool:
    """
    Check whether a response ended on another origin without being allow-listed.

    Args:
        request_url: URL that was requested
        response_url: Final URL after redirects
        redirected: Whether any redirect happened
        patterns: Allow-list of expected targets keyed by request URL
    """
    if not redirected:
        return False
    allowed = (patterns if patterns is not None else EXPECTED_REDIRECT_PATTERNS).get(request_url, ())
    if any(pattern.match(response_url) for pattern in allowed):
        return False
    source, target = urlparse(request_url), urlparse(response_url)
    return (source.scheme, source.netloc) != (target.scheme, target.netloc)


def _natural_key(text: str) -> Tuple:
    return tuple(int(part) if part.isdigit() else part for part in re.split(r"(\d+)", text.casefold()))


def sort_results(results: Iterable[WebsiteStatus]) -> List[WebsiteStatus]:
    """Order by severity, then popularity (descending), then title."""
    return sorted(results, key=lambda result: (result.code, -result.visitors, _natural_key(result.title)))


class WebsiteHealthChecker:
    """Classifies the liveness of registered websites and writes reports."""

    def __init__(
        self,
        http: Optional[HttpClient] = None,
        timeout: float = 30.0,
        max_concurrent: int = 8,
        popularity: Optional[Mapping[str, int]] = None,
    ):
        """
        Initialize the checker.

        Args:
            http: HTTP client (a dedicated one is created when omitted)
            timeout: Bound for each liveness request in seconds
            max_concurrent: Maximum number of simultaneous checks
            popularity: Visitor estimates keyed by plugin identifier
        """
        self.http = http or HttpClient(timeout=timeout)
        self.timeout = timeout
        self.max_concurrent = max_concurrent
        self.popularity = dict(popularity or {})

    async def check(self, descriptor: PluginDescriptor) -> WebsiteStatus:
        """Check one website; failures are reported, never raised."""
        url = normalize_uri(descriptor.uri)
        code, info = StatusCode.ERROR, "Not Processed"

        try:
            response = await self.http.request(url, timeout=self.timeout)
            if is_unexpected_redirect(url, response.url, response.redirected):
                code, info = StatusCode.WARNING, f"Redirected: {response.url}"
            elif not response.ok:
                code, info = StatusCode.ERROR, f"HTTP {response.status}"
            else:
                code, info = StatusCode.OK, ""
        except MangaWeaveError as e:
            code, info = StatusCode.ERROR, e.message

        logger.debug(f"{descriptor.identifier}: {code.name} {info}")
        return WebsiteStatus(
            id=descriptor.identifier,
            title=descriptor.title,
            url=url,
            code=code,
            info=info,
            visitors=self.popularity.get(descriptor.identifier, 0),
        )

    async def check_all(self, descriptors: Iterable[PluginDescriptor]) -> List[WebsiteStatus]:
        """Check all websites concurrently and return the sorted results."""
        semaphore = asyncio.Semaphore(self.max_concurrent)

        async def bounded(descriptor: PluginDescriptor) -> WebsiteStatus:
            async with semaphore:
                return await self.check(descriptor)

        results = await asyncio.gather(*(bounded(descriptor) for descriptor in descriptors))
        return sort_results(results)

    async def close(self) -> None:
        await self.http.close()


def render_markdown(results: Iterable[WebsiteStatus]) -> str:
    """Summarize the websites that are not OK as a Markdown table."""
    lines = [
        "| Status | Website | URL | Info |",
        "| :---: | :---- | :---- | :---- |",
    ]
    for result in results:
        if result.code != StatusCode.OK:
            lines.append(f"| {result.code.symbol} | **{result.title}** | {result.url} | {result.info} |")
    return "\n".join(lines)


def render_html(results: Iterable[WebsiteStatus], generated: Optional[datetime] = None) -> str:
    """Render all results as an HTML table with a popularity bar."""
    results = list(results)
    generated = generated or datetime.now(timezone.utc)
    maximum = max((result.visitors for result in results), default=0)

    rows = "".join(
        "<tr>"
        f'<td style="white-space: nowrap;" title="{html.escape(result.info)}">{result.code.symbol}</td>'
        f'<td style="white-space: nowrap;"><a href="{html.escape(result.url)}" target="_blank">'
        f"{html.escape(result.title)}</a></td>"
        f'<td><progress value="{result.visitors}" max="{maximum}" style="width: 100%;"></progress></td>'
        "</tr>"
        for result in results
    )
    head = (
        '<thead style="background-color: lightgray;"><tr>'
        '<th width="1">Status</th><th width="1">Website</th><th>Estimated Popularity</th>'
        "</tr></thead>"
    )
    return (
        f"<h2>Website Status {generated.isoformat()}</h2>"
        f'<table width="100%">{head}<tbody>{rows}</tbody></table>'
    )


def write_reports(results: Iterable[WebsiteStatus], directory: Path, name: str = "website-metrics") -> Dict[str, Path]:
    """
    Write the JSON, Markdown and HTML reports.

    Returns:
        Written paths keyed by format
    """
    results = sort_results(results)
    directory.mkdir(parents=True, exist_ok=True)
    paths = {
        "json": directory / f"{name}.json",
        "markdown": directory / f"{name}.md",
        "html": directory / f"{name}.html",
    }

    with open(paths["json"], "w", encoding="utf-8") as f:
        json.dump([result.model_dump(mode="json") for result in results], f, indent=2, ensure_ascii=False)
    paths["markdown"].write_text(render_markdown(results), encoding="utf-8")
    paths["html"].write_text(render_html(results), encoding="utf-8")

    logger.info(f"Health reports written to {directory}")
    return paths


__all__ = [
    "StatusCode",
    "WebsiteStatus",
    "EXPECTED_REDIRECT_PATTERNS",
    "WebsiteHealthChecker",
    "is_unexpected_redirect",
    "normalize_uri",
    "sort_results",
    "render_markdown",
    "render_html",
    "write_reports",
]
