"""End-to-end walk through the capability contract of a composed plugin."""

import pytest

from mangaweave.core.config_manager import ConfigManager
from mangaweave.core.exceptions import NotFoundError
from mangaweave.core.registry import PluginRegistry

from conftest import EXAMPLE_ORIGIN, JPEG_BYTES, ExampleSite, FakeHttpClient


@pytest.mark.asyncio
async def test_containers_chapters_pages_image(example_site: ExampleSite, example_http: FakeHttpClient) -> None:
    """Test a consumer can go from the index down to image bytes."""
    containers = await example_site.list_containers()
    assert [(c.identifier, c.title) for c in containers] == [("/manga/sample/", "Sample Manga")]

    chapters = await example_site.list_chapters(containers[0])
    assert [c.identifier for c in chapters] == ["/manga/sample/ch-1/", "/manga/sample/ch-2/"]

    pages = await example_site.list_pages(chapters[0])
    assert [(p.index, p.media_type) for p in pages] == [(0, "image/jpeg"), (1, "image/jpeg")]

    image = await example_site.fetch_image(pages[0])
    assert image.content == JPEG_BYTES
    assert image.media_type == "image/jpeg"
    assert example_http.requests[-1].headers["Referer"] == f"{EXAMPLE_ORIGIN}/manga/sample/ch-1/"


@pytest.mark.asyncio
async def test_identifiers_round_trip_to_urls(example_site: ExampleSite) -> None:
    """Test identifiers handed back to the plugin re-derive the same URLs."""
    container = (await example_site.list_containers())[0]
    chapter = (await example_site.list_chapters(container))[1]

    assert example_site.link_for(container) == f"{EXAMPLE_ORIGIN}/manga/sample/"
    assert example_site.link_for(chapter) == f"{EXAMPLE_ORIGIN}/manga/sample/ch-2/"
    assert (await example_site.container_from_url(example_site.link_for(container))) == container


@pytest.mark.asyncio
async def test_missing_chapter_document_is_typed_failure(example_site: ExampleSite) -> None:
    """Test a listing never fails silently when the document is gone."""
    container = (await example_site.list_containers())[0]
    chapter = (await example_site.list_chapters(container))[1]

    with pytest.raises(NotFoundError):
        await example_site.list_pages(chapter)


@pytest.mark.asyncio
async def test_registry_lookup_drives_same_plugin(config_manager: ConfigManager, example_http: FakeHttpClient) -> None:
    registry = PluginRegistry(config_manager, example_http)
    registry.load([ExampleSite])

    plugin = registry.get_plugin("example")
    containers = await plugin.list_containers()

    assert containers[0].plugin_id == plugin.descriptor.identifier
    await registry.close()
