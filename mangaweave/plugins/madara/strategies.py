"""
Madara Strategies - Overrides for websites running the WordPress Madara theme.

Madara sites share their markup and their admin-ajax endpoints, so a site
plugin usually needs nothing but a stack of these strategies. Containers
are identified by ``{"slug": ...}``, the container path, whether they were
listed or resolved from a URL. The WordPress post id needed by the v1
chapter endpoint is looked up in the container page when chapters are listed.
"""

import logging
import re
from dataclasses import dataclass
from typing import Any, List, Optional
from urllib.parse import parse_qsl, urlencode, urljoin, urlsplit, urlunsplit

from mangaweave.core.exceptions import ParseError
from mangaweave.core.models import Capability, Chapter, Container, Page
from mangaweave.plugins.common.fetch import (
    element_attribute,
    element_path,
    element_text,
    expand_template,
    fetch_css,
    fetch_document,
    image_source,
    pack_identifier,
    relative_path,
    select,
)
from mangaweave.plugins.common.pagination import deduplicate, paginate
from mangaweave.plugins.common.strategies import pages_from_links
from mangaweave.plugins.composition import Strategy


logger = logging.getLogger(__name__)

AJAX_PATH = '/wp-admin/admin-ajax.php'

DEFAULT_CONTAINER_TITLE = 'div.post-title h1, div.post-title h3, #manga-title h1'
DEFAULT_CONTAINER_LINKS = 'div.post-title h3 a, div.post-title h5 a'
DEFAULT_CHAPTER_LINKS = 'li.wp-manga-chapter > a'
DEFAULT_PAGE_IMAGES = 'div.page-break img'

# Places where Madara exposes the WordPress post id of a container
_POST_ID_SOURCES = (
    ('input.rating-post-id', 'value'),
    ('div#manga-chapters-holder', 'data-id'),
    ('a.wp-manga-action-button', 'data-post'),
)

_AJAX_HEADERS = {
    'Content-Type': 'application/x-www-form-urlencoded',
    'X-Requested-With': 'XMLHttpRequest',
}


def extract_post_id(document: Any) -> Optional[str]:
    """Find the WordPress post id in a container page."""
    for selector, attribute in _POST_ID_SOURCES:
        for element in select(document, selector):
            value = element_attribute(element, attribute)
            if value:
                return value
    return None


def chapters_from(container: Container, elements: List[Any], base: str) -> List[Chapter]:
    chapters = []
    for element in elements:
        identifier = element_path(element, base)
        if not identifier:
            continue
        # Some themes nest the release date inside the chapter link
        for date in element.select('span, i'):
            date.extract()
        title = element_text(element) or identifier
        chapters.append(Chapter(container=container, identifier=identifier, title=title))
    return deduplicate(chapters, lambda chapter: chapter.identifier)


def with_query(url: str, **parameters: str) -> str:
    parts = urlsplit(url)
    query = dict(parse_qsl(parts.query))
    query.update(parameters)
    return urlunsplit((parts.scheme, parts.netloc, parts.path, urlencode(query), parts.fragment))


@dataclass(frozen=True)
class MangaCSS(Strategy):
    """Resolve a container from a pasted URL."""

    pattern: str
    query: str = DEFAULT_CONTAINER_TITLE

    capabilities = (Capability.CONTAINER,)

    async def container_from_url(self, plugin: Any, proceed: Any, url: str) -> Optional[Container]:
        if not re.match(expand_template(self.pattern, origin=re.escape(plugin.origin)), url):
            return await proceed(url)

        document = await fetch_document(plugin.http, url)
        title = element_text(select(document, self.query, required=True, url=url)[0])
        if not title:
            raise ParseError(f"Empty container title at {url}", url=url, selector=self.query)
        return plugin.create_container(pack_identifier(slug=relative_path(url, plugin.uri)), title)


@dataclass(frozen=True)
class MangasMultiPageAJAX(Strategy):
    """List containers through the theme's ``madara_load_more`` endpoint (pages start at 0)."""

    query: str = DEFAULT_CONTAINER_LINKS
    path: str = AJAX_PATH
    per_page: int = 250

    capabilities = (Capability.CONTAINERS,)

    async def list_containers(self, plugin: Any, proceed: Any) -> List[Container]:
        url = plugin.resolve(self.path)

        async def fetch_page(page: int) -> List[Container]:
            form = {
                'action': 'madara_load_more',
                'template': 'madara-core/content/content-archive',
                'page': str(page),
                'vars[paged]': '0',
                'vars[post_type]': 'wp-manga',
                'vars[posts_per_page]': str(self.per_page),
            }
            elements = await fetch_css(plugin.http, url, self.query, method='POST', headers=_AJAX_HEADERS, data=form)
            containers = []
            for element in elements:
                slug = element_path(element, plugin.uri)
                title = element_text(element)
                if slug and title:
                    containers.append(plugin.create_container(pack_identifier(slug=slug), title))
            return containers

        return await paginate(fetch_page, lambda container: container.identifier, 0, 1, plugin.settings.max_pages)


@dataclass(frozen=True)
class ChaptersSinglePageAJAXv1(Strategy):
    """List chapters through ``action=manga_get_chapters``, keyed by the post id of the container page."""

    query: str = DEFAULT_CHAPTER_LINKS
    path: str = AJAX_PATH

    capabilities = (Capability.CHAPTERS,)

    async def list_chapters(self, plugin: Any, proceed: Any, container: Container) -> List[Chapter]:
        link = plugin.link_for(container)
        post = extract_post_id(await fetch_document(plugin.http, link))
        if not post:
            raise ParseError(f"No post id found at {link}", url=link, selector='input.rating-post-id')

        url = plugin.resolve(self.path)
        form = {'action': 'manga_get_chapters', 'manga': str(post)}
        elements = await fetch_css(plugin.http, url, self.query, method='POST', headers=_AJAX_HEADERS, data=form)
        return chapters_from(container, elements, plugin.uri)


@dataclass(frozen=True)
class ChaptersSinglePageAJAXv2(Strategy):
    """List chapters through the ``<container>/ajax/chapters/`` endpoint."""

    query: str = DEFAULT_CHAPTER_LINKS

    capabilities = (Capability.CHAPTERS,)

    async def list_chapters(self, plugin: Any, proceed: Any, container: Container) -> List[Chapter]:
        link = plugin.link_for(container)
        url = urljoin(link if link.endswith('/') else link + '/', 'ajax/chapters/')
        elements = await fetch_css(plugin.http, url, self.query, method='POST', headers=_AJAX_HEADERS)
        return chapters_from(container, elements, plugin.uri)


@dataclass(frozen=True)
class PagesSinglePageCSS(Strategy):
    """List the images of a chapter rendered in list style."""

    query: str = DEFAULT_PAGE_IMAGES

    capabilities = (Capability.PAGES,)

    async def list_pages(self, plugin: Any, proceed: Any, chapter: Chapter) -> List[Page]:
        url = with_query(plugin.link_for(chapter), style='list')
        elements = await fetch_css(plugin.http, url, self.query)
        return pages_from_links(chapter, [image_source(element, url) for element in elements], url)


__all__ = [
    "AJAX_PATH",
    "MangaCSS",
    "MangasMultiPageAJAX",
    "ChaptersSinglePageAJAXv1",
    "ChaptersSinglePageAJAXv2",
    "PagesSinglePageCSS",
    "extract_post_id",
]
