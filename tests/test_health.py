"""Tests for the website liveness check and its reports."""

import json
import re
from datetime import datetime, timezone
from pathlib import Path

import pytest

from mangaweave.core.exceptions import OperationTimeoutError, UnreachableError
from mangaweave.core.health import (
    StatusCode,
    WebsiteHealthChecker,
    WebsiteStatus,
    is_unexpected_redirect,
    normalize_uri,
    render_html,
    render_markdown,
    sort_results,
    write_reports,
)
from mangaweave.core.models import PluginDescriptor

from conftest import FakeHttpClient


def descriptor(identifier: str, uri: str, title: str = "") -> PluginDescriptor:
    return PluginDescriptor(identifier=identifier, title=title or identifier.title(), uri=uri)


def status(title: str, code: StatusCode, visitors: int = 0) -> WebsiteStatus:
    return WebsiteStatus(id=title.lower(), title=title, url=f"https://{title.lower()}.test/", code=code, visitors=visitors)


def test_normalize_uri_adds_root_slash() -> None:
    assert normalize_uri("https://a.test") == "https://a.test/"
    assert normalize_uri("https://a.test/") == "https://a.test/"
    assert normalize_uri("https://a.test/en") == "https://a.test/en"


def test_same_origin_redirect_is_expected() -> None:
    assert not is_unexpected_redirect("https://a.test/", "https://a.test/home/", True)


def test_cross_origin_redirect_is_unexpected() -> None:
    assert is_unexpected_redirect("https://a.test/", "https://b.test/", True)
    assert is_unexpected_redirect("http://a.test/", "https://a.test/", True)
    assert not is_unexpected_redirect("https://a.test/", "https://b.test/", False)


def test_allow_listed_redirects() -> None:
    """Test allow-list patterns are keyed by the requested URL."""
    patterns = {"https://a.test/": (re.compile(r"^https://w+\d*\.a\.test/$"),)}

    assert not is_unexpected_redirect("https://a.test/", "https://www2.a.test/", True, patterns)
    assert is_unexpected_redirect("https://a.test/", "https://evil.test/", True, patterns)
    assert not is_unexpected_redirect("https://holymanga.net/", "https://w34.holymanga.net/", True)


def test_sort_by_severity_popularity_and_title() -> None:
    """Test errors first, then busier websites, then natural title order."""
    results = [
        status("Site 10", StatusCode.OK),
        status("Popular", StatusCode.OK, visitors=900),
        status("site 2", StatusCode.OK),
        status("Broken", StatusCode.ERROR),
        status("Moved", StatusCode.WARNING, visitors=5),
    ]

    ordered = [result.title for result in sort_results(results)]

    assert ordered == ["Popular", "site 2", "Site 10", "Moved", "Broken"]


@pytest.mark.asyncio
async def test_check_classifies_outcomes(http: FakeHttpClient) -> None:
    """Test OK, warning and error outcomes, each with its info text."""
    http.add("https://ok.test/", "<html></html>")
    http.add("https://moved.test/", "<html></html>", final_url="https://elsewhere.test/")
    http.add("https://gone.test/", "", status=503)
    http.route("https://down.test/", UnreachableError("Cannot connect to host down.test"))
    http.route("https://slow.test/", OperationTimeoutError("Request timed out after 1s", timeout=1))
    checker = WebsiteHealthChecker(http=http, popularity={"ok": 10})

    results = await checker.check_all([
        descriptor("ok", "https://ok.test"),
        descriptor("moved", "https://moved.test"),
        descriptor("gone", "https://gone.test/"),
        descriptor("down", "https://down.test"),
        descriptor("slow", "https://slow.test"),
    ])

    by_id = {result.id: result for result in results}
    assert by_id["ok"].code == StatusCode.OK
    assert by_id["ok"].info == ""
    assert by_id["ok"].visitors == 10
    assert by_id["moved"].code == StatusCode.WARNING
    assert by_id["moved"].info == "Redirected: https://elsewhere.test/"
    assert by_id["gone"].code == StatusCode.ERROR
    assert by_id["gone"].info == "HTTP 503"
    assert by_id["down"].info == "Cannot connect to host down.test"
    assert by_id["slow"].code == StatusCode.ERROR
    assert [result.code for result in results] == sorted(result.code for result in results)


@pytest.mark.asyncio
async def test_check_requests_normalized_uri(http: FakeHttpClient) -> None:
    http.add("https://ok.test/", "")

    result = await WebsiteHealthChecker(http=http).check(descriptor("ok", "https://ok.test"))

    assert result.url == "https://ok.test/"
    assert http.requested() == ["https://ok.test/"]


def test_markdown_lists_only_problems() -> None:
    markdown = render_markdown([
        status("Fine", StatusCode.OK),
        WebsiteStatus(id="b", title="Broken", url="https://b.test/", code=StatusCode.ERROR, info="HTTP 500"),
    ])

    lines = markdown.splitlines()
    assert lines[0] == "| Status | Website | URL | Info |"
    assert len(lines) == 3
    assert lines[2] == "| ❌ | **Broken** | https://b.test/ | HTTP 500 |"


def test_html_escapes_and_scales_popularity() -> None:
    generated = datetime(2024, 1, 2, tzinfo=timezone.utc)
    document = render_html([
        WebsiteStatus(id="a", title="A <&> B", url="https://a.test/", code=StatusCode.OK, visitors=50),
        status("Other", StatusCode.OK, visitors=100),
    ], generated=generated)

    assert "A &lt;&amp;&gt; B" in document
    assert '<progress value="50" max="100"' in document
    assert "2024-01-02T00:00:00+00:00" in document


def test_write_reports(tmp_path: Path) -> None:
    """Test the three report formats are written with sorted JSON content."""
    paths = write_reports([status("Fine", StatusCode.OK), status("Broken", StatusCode.ERROR)], tmp_path / "out")

    assert sorted(paths) == ["html", "json", "markdown"]
    assert paths["json"].name == "website-metrics.json"
    data = json.loads(paths["json"].read_text(encoding="utf-8"))
    assert [entry["title"] for entry in data] == ["Fine", "Broken"]
    assert data[1]["code"] == 2
    assert "**Broken**" in paths["markdown"].read_text(encoding="utf-8")
    assert paths["html"].read_text(encoding="utf-8").startswith("<h2>Website Status")
