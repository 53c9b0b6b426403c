"""Tests for image fetching with and without the Referer workaround."""

import pytest

from mangaweave.core.config_schemas import PluginSettings
from mangaweave.core.exceptions import NotFoundError, UnreachableError
from mangaweave.core.models import Chapter, Container, Page
from mangaweave.plugins import common

from conftest import EXAMPLE_ORIGIN, JPEG_BYTES, ExampleSite, FakeHttpClient

IMAGE = "https://cdn.example.test/sample/1/001.jpg"
READER = f"{EXAMPLE_ORIGIN}/manga/sample/ch-1/"


@common.ImageAjax(detect_mime=True)
class SniffingSite(ExampleSite):
    identifier = "sniffing"
    title = "Sniffing"


@pytest.fixture
def chapter() -> Chapter:
    container = Container(plugin_id="example", identifier="/manga/sample/", title="Sample Manga")
    return Chapter(container=container, identifier="/manga/sample/ch-1/", title="Chapter 1")


def page_of(chapter: Chapter, **kwargs) -> Page:
    return Page(chapter=chapter, index=0, link=kwargs.pop("link", IMAGE), **kwargs)


@pytest.mark.asyncio
async def test_image_request_carries_page_referer(http: FakeHttpClient, chapter: Chapter) -> None:
    """Test the Referer is the page that linked the image."""
    http.add(IMAGE, JPEG_BYTES, content_type="image/jpeg")

    image = await ExampleSite(http).fetch_image(page_of(chapter, referer=READER))

    assert image.content == JPEG_BYTES
    assert image.media_type == "image/jpeg"
    assert http.requests[0].headers == {"Referer": READER}


@pytest.mark.asyncio
async def test_referer_falls_back_to_chapter_link(http: FakeHttpClient, chapter: Chapter) -> None:
    http.add(IMAGE, JPEG_BYTES, content_type="image/jpeg")

    await ExampleSite(http).fetch_image(page_of(chapter))

    assert http.requests[0].headers["Referer"] == READER


@pytest.mark.asyncio
async def test_disabled_anti_hotlink_falls_through(http: FakeHttpClient, chapter: Chapter) -> None:
    """Test the setting hands the fetch to the plain base implementation."""
    http.add(IMAGE, JPEG_BYTES, content_type="image/jpeg")
    plugin = ExampleSite(http, settings=PluginSettings(anti_hotlink=False))

    image = await plugin.fetch_image(page_of(chapter, referer=READER))

    assert image.content == JPEG_BYTES
    assert "Referer" not in http.requests[0].headers


@pytest.mark.asyncio
async def test_rejected_image_is_not_found(http: FakeHttpClient, chapter: Chapter) -> None:
    """Test any non-success status of the image host is a typed failure."""
    http.add(IMAGE, b"denied", status=403, content_type="text/plain")

    with pytest.raises(NotFoundError) as exc_info:
        await ExampleSite(http).fetch_image(page_of(chapter, referer=READER))

    assert exc_info.value.status_code == 403
    assert exc_info.value.url == IMAGE


@pytest.mark.asyncio
async def test_server_error_is_not_found_too(http: FakeHttpClient, chapter: Chapter) -> None:
    http.add(IMAGE, b"", status=502, content_type="")

    with pytest.raises(NotFoundError):
        await ExampleSite(http).fetch_image(page_of(chapter))


@pytest.mark.asyncio
async def test_transport_failure_propagates(http: FakeHttpClient, chapter: Chapter) -> None:
    http.route(IMAGE, UnreachableError("connection reset", url=IMAGE))

    with pytest.raises(UnreachableError):
        await ExampleSite(http).fetch_image(page_of(chapter))


@pytest.mark.asyncio
async def test_generic_content_type_is_sniffed(http: FakeHttpClient, chapter: Chapter) -> None:
    http.add(IMAGE, JPEG_BYTES, content_type="application/octet-stream")

    image = await ExampleSite(http).fetch_image(page_of(chapter))

    assert image.media_type == "image/jpeg"


@pytest.mark.asyncio
async def test_detect_mime_overrides_declared_type(http: FakeHttpClient, chapter: Chapter) -> None:
    """Test detect_mime trusts the payload over a wrong header."""
    http.add(IMAGE, JPEG_BYTES, content_type="image/png")

    image = await SniffingSite(http).fetch_image(page_of(chapter))

    assert image.media_type == "image/jpeg"


@pytest.mark.asyncio
async def test_prefetched_page_data_is_returned_without_request(http: FakeHttpClient, chapter: Chapter) -> None:
    page = page_of(chapter, data=b"inline", media_type="image/png")

    image = await ExampleSite(http).fetch_image(page)

    assert image.content == b"inline"
    assert image.media_type == "image/png"
    assert http.requests == []
