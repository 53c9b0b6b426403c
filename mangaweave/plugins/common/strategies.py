"""
Common Strategies - Reusable capability overrides for generic websites.

Each strategy is a frozen dataclass applied to a site plugin class as a
decorator. Strategies read everything they need from the plugin they are
bound to (``plugin.http``, ``plugin.scripts``, ``plugin.settings``) and never
keep state of their own.

Example::

    @MangasMultiPageCSS('/page/{page}/?s&post_type=wp-manga', 'div.post-title h2 > a')
    @ChaptersSinglePageCSS('li.chapter > a')
    @PagesSinglePageCSS('div.reader img')
    @ImageAjax()
    class Example(SitePlugin):
        ...
"""

import re
from dataclasses import dataclass
from typing import Any, List, Optional

from mangaweave.core.exceptions import NotFoundError, ParseError
from mangaweave.core.models import Capability, Chapter, Container, ImageData, Page
from mangaweave.plugins.common.fetch import (
    element_path,
    element_text,
    expand_template,
    fetch_css,
    fetch_json,
    fetch_script,
    guess_media_type,
    image_source,
    relative_path,
    sniff_media_type,
    unpack_identifier,
)
from mangaweave.plugins.common.pagination import deduplicate, paginate
from mangaweave.plugins.composition import Strategy


def _identity(entity: Any) -> str:
    return entity.identifier


def _field(value: Any) -> str:
    return '' if value is None else str(value).strip()


def _containers_from(plugin: Any, elements: List[Any], base: str) -> List[Container]:
    containers = []
    for element in elements:
        identifier = element_path(element, base)
        title = element_text(element)
        if identifier and title:
            containers.append(plugin.create_container(identifier, title))
    return containers


def _chapters_from(container: Container, elements: List[Any], base: str) -> List[Chapter]:
    chapters = []
    for element in elements:
        identifier = element_path(element, base)
        title = element_text(element)
        if identifier and title:
            chapters.append(Chapter(container=container, identifier=identifier, title=title))
    return chapters


def pages_from_links(chapter: Chapter, links: List[str], referer: str) -> List[Page]:
    """Build contiguously indexed pages from image links, skipping blanks."""
    return [
        Page(chapter=chapter, index=index, link=link, media_type=guess_media_type(link), referer=referer)
        for index, link in enumerate(link for link in links if link)
    ]


def _member(data: Any, path: str) -> Any:
    """Walk a dot path ('data.items') into decoded JSON."""
    for name in filter(None, path.split('.')):
        if not isinstance(data, dict) or name not in data:
            raise ParseError(f"JSON member '{path}' is missing")
        data = data[name]
    return data


def _script_records(result: Any, url: str) -> List[dict]:
    if not isinstance(result, list) or not all(isinstance(record, dict) for record in result):
        raise ParseError(f"Script for {url} must resolve to a list of objects", url=url)
    return result


@dataclass(frozen=True)
class MangaCSS(Strategy):
    """
    Resolve a container from a pasted URL.

    Args:
        pattern: Regular expression the URL must match; ``{origin}`` is replaced
            by the escaped plugin origin
        query: Selector of the element holding the title
    """

    pattern: str
    query: str

    capabilities = (Capability.CONTAINER,)

    def matches(self, plugin: Any, url: str) -> bool:
        return re.match(expand_template(self.pattern, origin=re.escape(plugin.origin)), url) is not None

    async def container_from_url(self, plugin: Any, proceed: Any, url: str) -> Optional[Container]:
        if not self.matches(plugin, url):
            return await proceed(url)
        elements = await fetch_css(plugin.http, url, self.query, required=True)
        title = element_text(elements[0])
        if not title:
            raise ParseError(f"Empty container title at {url}", url=url, selector=self.query)
        return plugin.create_container(relative_path(url, plugin.uri), title)


@dataclass(frozen=True)
class MangasSinglePageCSS(Strategy):
    """List all containers from one index page."""

    path: str
    query: str

    capabilities = (Capability.CONTAINERS,)

    async def list_containers(self, plugin: Any, proceed: Any) -> List[Container]:
        url = plugin.resolve(expand_template(self.path, origin=plugin.origin))
        elements = await fetch_css(plugin.http, url, self.query)
        return deduplicate(_containers_from(plugin, elements, url), _identity)


@dataclass(frozen=True)
class MangasMultiPageCSS(Strategy):
    """
    List containers from successive index pages.

    The path template receives the current value as ``{page}`` and ``{offset}``;
    offset-based sites use ``start=0`` and ``step`` equal to the page size.
    """

    path: str
    query: str
    start: int = 1
    step: int = 1

    capabilities = (Capability.CONTAINERS,)

    async def list_containers(self, plugin: Any, proceed: Any) -> List[Container]:
        async def fetch_page(page: int) -> List[Container]:
            url = plugin.resolve(expand_template(self.path, page=page, offset=page, origin=plugin.origin))
            return _containers_from(plugin, await fetch_css(plugin.http, url, self.query), url)

        return await paginate(fetch_page, _identity, self.start, self.step, plugin.settings.max_pages)


@dataclass(frozen=True)
class MangasMultiPageJSON(Strategy):
    """
    List containers from a paged JSON endpoint.

    Args:
        path: Endpoint template with ``{page}`` or ``{offset}``
        items: Dot path of the item array in the response ('' for the root)
        id_key: Item member used as identifier
        title_key: Item member used as title
    """

    path: str
    items: str = ''
    id_key: str = 'id'
    title_key: str = 'title'
    start: int = 1
    step: int = 1

    capabilities = (Capability.CONTAINERS,)

    async def list_containers(self, plugin: Any, proceed: Any) -> List[Container]:
        async def fetch_page(page: int) -> List[Container]:
            url = plugin.resolve(expand_template(self.path, page=page, offset=page, origin=plugin.origin))
            records = _member(await fetch_json(plugin.http, url), self.items)
            if not isinstance(records, list):
                raise ParseError(f"Expected a JSON array at {url}", url=url)
            containers = []
            for record in records:
                if not isinstance(record, dict) or self.id_key not in record or self.title_key not in record:
                    raise ParseError(f"Unexpected item shape at {url}", url=url, details=str(record)[:200])
                identifier = _field(record[self.id_key])
                title = _field(record[self.title_key])
                if identifier and title:
                    containers.append(plugin.create_container(identifier, title))
            return containers

        return await paginate(fetch_page, _identity, self.start, self.step, plugin.settings.max_pages)


@dataclass(frozen=True)
class ChaptersSinglePageCSS(Strategy):
    """List the chapters linked from the container page."""

    query: str

    capabilities = (Capability.CHAPTERS,)

    async def list_chapters(self, plugin: Any, proceed: Any, container: Container) -> List[Chapter]:
        url = plugin.link_for(container)
        elements = await fetch_css(plugin.http, url, self.query)
        return deduplicate(_chapters_from(container, elements, url), _identity)


@dataclass(frozen=True)
class ChaptersMultiPageCSS(Strategy):
    """
    List chapters spread over several pages of the container.

    The path template receives ``{id}`` (the container path) and ``{page}``.
    """

    path: str
    query: str
    start: int = 1
    step: int = 1

    capabilities = (Capability.CHAPTERS,)

    async def list_chapters(self, plugin: Any, proceed: Any, container: Container) -> List[Chapter]:
        slug = unpack_identifier(container.identifier).get('slug', container.identifier)

        async def fetch_page(page: int) -> List[Chapter]:
            url = plugin.resolve(expand_template(self.path, id=slug, page=page, offset=page, origin=plugin.origin))
            return _chapters_from(container, await fetch_css(plugin.http, url, self.query), url)

        return await paginate(fetch_page, _identity, self.start, self.step, plugin.settings.max_pages)


@dataclass(frozen=True)
class ChaptersSinglePageJS(Strategy):
    """
    List chapters built client-side, by evaluating a script in the container page.

    The script must resolve to a list of ``{id, title}`` objects.

    Args:
        script: JavaScript expression (value or promise)
        delay: Seconds to wait after page load before evaluating
    """

    script: str
    delay: float = 0.0

    capabilities = (Capability.CHAPTERS,)

    async def list_chapters(self, plugin: Any, proceed: Any, container: Container) -> List[Chapter]:
        url = plugin.link_for(container)
        result = await fetch_script(plugin.scripts, url, self.script, plugin.settings.script_timeout, self.delay)
        chapters = []
        for record in _script_records(result, url):
            identifier = _field(record.get('id'))
            title = _field(record.get('title'))
            if identifier and title:
                chapters.append(Chapter(container=container, identifier=identifier, title=title))
        return deduplicate(chapters, _identity)


@dataclass(frozen=True)
class PagesSinglePageCSS(Strategy):
    """List the images embedded in the chapter page."""

    query: str

    capabilities = (Capability.PAGES,)

    async def list_pages(self, plugin: Any, proceed: Any, chapter: Chapter) -> List[Page]:
        url = plugin.link_for(chapter)
        elements = await fetch_css(plugin.http, url, self.query)
        return pages_from_links(chapter, [image_source(element, url) for element in elements], url)


@dataclass(frozen=True)
class PagesSinglePageJS(Strategy):
    """
    List images collected by a script evaluated in the chapter page.

    The script must resolve to a list of image URLs.
    """

    script: str
    delay: float = 0.0

    capabilities = (Capability.PAGES,)

    async def list_pages(self, plugin: Any, proceed: Any, chapter: Chapter) -> List[Page]:
        url = plugin.link_for(chapter)
        result = await fetch_script(plugin.scripts, url, self.script, plugin.settings.script_timeout, self.delay)
        if not isinstance(result, list):
            raise ParseError(f"Script for {url} must resolve to a list of links", url=url)
        return pages_from_links(chapter, [plugin.resolve(str(link), url) for link in result if link], url)


@dataclass(frozen=True)
class ImageAjax(Strategy):
    """
    Fetch images with the Referer of the page that linked them.

    Hosts rejecting hot-linked requests serve the asset once the Referer
    points at the reading page. Plugins whose resolved ``anti_hotlink``
    setting is off fall through to the layer below.

    Args:
        detect_mime: Detect the media type from the payload instead of the
            response headers
    """

    detect_mime: bool = False

    capabilities = (Capability.IMAGE,)

    async def fetch_image(self, plugin: Any, proceed: Any, page: Page) -> ImageData:
        if not plugin.settings.anti_hotlink or page.data is not None:
            return await proceed(page)

        referer = page.referer or plugin.link_for(page.chapter)
        response = await plugin.http.request(page.link, headers={'Referer': referer})
        if not response.ok:
            raise NotFoundError(
                f"HTTP {response.status} for image {page.link}",
                url=page.link,
                status_code=response.status,
            )

        media_type = response.media_type or page.media_type
        if self.detect_mime or not media_type.startswith('image/'):
            media_type = sniff_media_type(response.content, default=media_type)
        return ImageData(content=response.content, media_type=media_type, url=response.url)


__all__ = [
    "MangaCSS",
    "MangasSinglePageCSS",
    "MangasMultiPageCSS",
    "MangasMultiPageJSON",
    "ChaptersSinglePageCSS",
    "ChaptersMultiPageCSS",
    "ChaptersSinglePageJS",
    "PagesSinglePageCSS",
    "PagesSinglePageJS",
    "ImageAjax",
    "pages_from_links",
]
