"""
Fetch Primitives - Low-level extraction helpers shared by all strategies.

This module provides the three ways a strategy obtains raw data from a
website: CSS extraction from a fetched document, AJAX retrieval of JSON or
HTML fragments, and sandboxed script execution for client-side rendered
content. It also provides the small element helpers used to turn matched
markup into identifiers, titles and links.
"""

import json
import logging
from typing import Any, List, Mapping, Optional
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup
from bs4 import Tag as Element

from mangaweave.core.exceptions import ConfigurationError, ParseError
from mangaweave.core.http import HttpClient, RequestData
from mangaweave.core.scripting import ScriptRunner


logger = logging.getLogger(__name__)

# Attributes checked, in order, for the source of lazily loaded images
IMAGE_SOURCE_ATTRIBUTES = ('data-src', 'data-lazy-src', 'data-original', 'src')

# Leading bytes of the image formats served by comic websites
_SIGNATURES = (
    (b'\xff\xd8\xff', 'image/jpeg'),
    (b'\x89PNG\r\n\x1a\n', 'image/png'),
    (b'GIF87a', 'image/gif'),
    (b'GIF89a', 'image/gif'),
    (b'BM', 'image/bmp'),
)

_EXTENSIONS = {
    '.jpg': 'image/jpeg',
    '.jpeg': 'image/jpeg',
    '.png': 'image/png',
    '.gif': 'image/gif',
    '.webp': 'image/webp',
    '.avif': 'image/avif',
    '.bmp': 'image/bmp',
}


def parse_document(markup: str) -> BeautifulSoup:
    """Parse HTML markup into a document."""
    return BeautifulSoup(markup, 'html.parser')


def select(document: Any, selector: str, required: bool = False, url: str = "") -> List[Element]:
    """
    Select elements from a parsed document or element.

    Args:
        document: Document or element to query
        selector: CSS selector string
        required: Raise when nothing matches
        url: Source URL, for error reporting

    Raises:
        ParseError: If ``required`` and the selector matches nothing
    """
    elements = document.select(selector)
    if required and not elements:
        raise ParseError(f"No element matches '{selector}' at {url or 'document'}", url=url, selector=selector)
    return elements


async def fetch_document(
    http: HttpClient,
    url: str,
    method: str = 'GET',
    headers: Optional[Mapping[str, str]] = None,
    data: RequestData = None,
) -> BeautifulSoup:
    """Fetch a URL and parse the response as HTML."""
    response = await http.fetch(url, method=method, headers=headers, data=data)
    return parse_document(response.text())


async def fetch_css(
    http: HttpClient,
    url: str,
    selector: str,
    required: bool = False,
    method: str = 'GET',
    headers: Optional[Mapping[str, str]] = None,
    data: RequestData = None,
) -> List[Element]:
    """
    Fetch a document (or HTML fragment) and return the elements matching a selector.

    Raises:
        NotFoundError: On 4xx status
        UnreachableError: On transport failure or 5xx status
        ParseError: If ``required`` and the selector matches nothing
    """
    document = await fetch_document(http, url, method=method, headers=headers, data=data)
    elements = select(document, selector, required=required, url=url)
    logger.debug(f"'{selector}' matched {len(elements)} element(s) at {url}")
    return elements


async def fetch_json(
    http: HttpClient,
    url: str,
    method: str = 'GET',
    headers: Optional[Mapping[str, str]] = None,
    data: RequestData = None,
) -> Any:
    """Fetch a URL and decode the response as JSON."""
    response = await http.fetch(
        url,
        method=method,
        headers={'Accept': 'application/json, text/javascript, */*', **(headers or {})},
        data=data,
    )
    return response.json()


async def fetch_script(
    scripts: Optional[ScriptRunner],
    url: str,
    script: str,
    timeout: Optional[float] = None,
    delay: float = 0.0,
) -> Any:
    """
    Evaluate a script inside the document at ``url``.

    Raises:
        ConfigurationError: If no script runner is configured
        OperationTimeoutError: If the script does not resolve in time
    """
    if scripts is None:
        raise ConfigurationError(f"Script extraction for {url} requires a script runner")
    return await scripts.execute(url, script, timeout=timeout, delay=delay)


def expand_template(template: str, **values: Any) -> str:
    """
    Substitute ``{page}``, ``{offset}``, ``{origin}`` and ``{id}`` placeholders.

    Unknown placeholders are left untouched so templates may carry literal
    braces used by the website itself.
    """
    result = template
    for key, value in values.items():
        result = result.replace('{' + key + '}', str(value))
    return result


def element_text(element: Element) -> str:
    """Get the normalized text content of an element."""
    return " ".join(element.get_text(" ", strip=True).split())


def element_attribute(element: Element, name: str, default: str = "") -> str:
    """Get an attribute value, collapsing multi-valued attributes."""
    value = element.get(name)
    if value is None:
        return default
    if isinstance(value, list):
        return " ".join(value)
    return str(value).strip()


def element_link(element: Element, base: str, attribute: str = 'href') -> str:
    """Get the absolute URL an element links to."""
    return urljoin(base, element_attribute(element, attribute))


def element_path(element: Element, base: str, attribute: str = 'href') -> str:
    """
    Get the origin-relative path (with query) an element links to.

    Absolute links to another host are returned unchanged.
    """
    return relative_path(element_link(element, base, attribute), base)


def relative_path(url: str, base: str) -> str:
    """Strip the origin of ``base`` from ``url`` when they share it."""
    target = urlparse(url)
    origin = urlparse(base)
    if target.netloc and target.netloc != origin.netloc:
        return url
    path = target.path or '/'
    return f"{path}?{target.query}" if target.query else path


def image_source(element: Element, base: str) -> str:
    """Get the absolute source URL of an image, honouring lazy-load attributes."""
    for attribute in IMAGE_SOURCE_ATTRIBUTES:
        value = element_attribute(element, attribute)
        if value and not value.startswith('data:'):
            return urljoin(base, value)
    return ""


def guess_media_type(url: str, default: str = 'image/jpeg') -> str:
    """Guess an image media type from the URL extension."""
    path = urlparse(url).path.lower()
    for extension, media_type in _EXTENSIONS.items():
        if path.endswith(extension):
            return media_type
    return default


def sniff_media_type(content: bytes, default: str = 'application/octet-stream') -> str:
    """Detect an image media type from its leading bytes."""
    if content[:4] == b'RIFF' and content[8:12] == b'WEBP':
        return 'image/webp'
    if content[4:12] in (b'ftypavif', b'ftypavis'):
        return 'image/avif'
    for signature, media_type in _SIGNATURES:
        if content.startswith(signature):
            return media_type
    return default


def pack_identifier(**members: Any) -> str:
    """Serialize a composite identifier as compact JSON."""
    return json.dumps(members, separators=(',', ':'), ensure_ascii=False)


def unpack_identifier(identifier: str) -> dict:
    """
    Decode a composite JSON identifier.

    Plain identifiers are returned as ``{'slug': identifier}``.
    """
    if identifier.startswith('{'):
        try:
            data = json.loads(identifier)
        except json.JSONDecodeError as e:
            raise ParseError(f"Malformed identifier: {identifier}", details=str(e))
        if isinstance(data, dict):
            return data
    return {'slug': identifier}


__all__ = [
    "Element",
    "parse_document",
    "select",
    "fetch_document",
    "fetch_css",
    "fetch_json",
    "fetch_script",
    "expand_template",
    "element_text",
    "element_attribute",
    "element_link",
    "element_path",
    "relative_path",
    "image_source",
    "guess_media_type",
    "sniff_media_type",
    "pack_identifier",
    "unpack_identifier",
]
