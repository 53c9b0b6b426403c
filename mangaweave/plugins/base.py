"""
Base Plugin Interface - The capability contract every site plugin satisfies.

A site plugin describes one website (identifier, title, base URI, tags) and
exposes the capability contract: list containers, list chapters of a
container, list pages of a chapter and fetch the image of a page. The
implementation of each capability comes from the plugin's decoration chain
(see ``mangaweave.plugins.composition``), which is composed once when the
plugin is constructed.
"""

import asyncio
import logging
from typing import Any, ClassVar, Dict, List, Optional, Tuple
from urllib.parse import urljoin, urlparse

from mangaweave.core.config_schemas import PluginSettings
from mangaweave.core.exceptions import OperationTimeoutError, ParseError, PluginError
from mangaweave.core.http import HttpClient, raise_for_status
from mangaweave.core.models import (
    REQUIRED_CAPABILITIES,
    Capability,
    Chapter,
    Container,
    ImageData,
    Page,
    PluginDescriptor,
)
from mangaweave.core.scripting import ScriptRunner
from mangaweave.core.tags import Tag
from mangaweave.plugins.common.fetch import unpack_identifier
from mangaweave.plugins.composition import DecorationChain, Strategy, compose, provides


logger = logging.getLogger(__name__)


class SitePlugin:
    """
    Base class for site plugins.

    Subclasses declare the class attributes below and stack strategies on top
    of the class as decorators. Capabilities a plugin implements by hand are
    marked with ``@provides``.
    """

    identifier: ClassVar[str] = ""
    title: ClassVar[str] = ""
    uri: ClassVar[str] = ""
    icon: ClassVar[Optional[str]] = None
    tags: ClassVar[Tuple[Tag, ...]] = ()
    strategies: ClassVar[Tuple[Strategy, ...]] = ()
    default_settings: ClassVar[Dict[str, Any]] = {}

    def __init__(
        self,
        http: HttpClient,
        scripts: Optional[ScriptRunner] = None,
        settings: Optional[PluginSettings] = None,
    ):
        """
        Initialize and compose the plugin.

        Args:
            http: Shared HTTP client
            scripts: Script runner for dynamic extraction strategies
            settings: Resolved plugin settings

        Raises:
            PluginError: If the class is incomplete or a required capability is unbound
        """
        if not self.identifier or not self.title or not self.uri:
            raise PluginError(f"{type(self).__name__} must declare identifier, title and uri")

        self.http = http
        self.scripts = scripts
        self.settings = settings or PluginSettings(**self.default_settings)

        # Set up logging for this plugin
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")

        self._chain = compose(self, type(self).strategies)
        missing = self._chain.missing(REQUIRED_CAPABILITIES)
        if missing:
            raise PluginError(
                f"Plugin '{self.identifier}' does not bind: {', '.join(c.value for c in missing)}",
                plugin_name=self.identifier,
            )

    @property
    def origin(self) -> str:
        """Get scheme and host of the website (without trailing slash)."""
        parsed = urlparse(self.uri)
        return f"{parsed.scheme}://{parsed.netloc}"

    @property
    def descriptor(self) -> PluginDescriptor:
        """Get the public description of this plugin."""
        return PluginDescriptor(
            identifier=self.identifier,
            title=self.title,
            uri=self.uri,
            icon=self.icon,
            tags=tuple(self.tags),
        )

    @property
    def chain(self) -> DecorationChain:
        return self._chain

    def supports(self, capability: Capability) -> bool:
        """Check whether some layer binds a capability."""
        return capability in self._chain

    def resolve(self, link: str, base: Optional[str] = None) -> str:
        """Resolve a possibly relative link against ``base`` or the plugin URI."""
        return urljoin(base or self.uri, link.strip())

    def link_for(self, entity: Any) -> str:
        """
        Re-derive the absolute URL of a container or chapter from its identifier.

        Composite JSON identifiers use their ``slug`` (or ``id``) member.
        """
        members = unpack_identifier(entity.identifier)
        return self.resolve(str(members.get("slug") or members.get("id") or entity.identifier))

    def create_container(self, identifier: str, title: str) -> Container:
        if not identifier.strip() or not title.strip():
            raise ParseError(
                f"Container on '{self.identifier}' has no identifier or title",
                details=f"identifier={identifier!r} title={title!r}",
            )
        return Container(plugin_id=self.identifier, identifier=identifier, title=title)

    async def container_from_url(self, url: str, timeout: Optional[float] = None) -> Optional[Container]:
        """
        Resolve a container from a website URL.

        Returns:
            The container, or None when no layer recognises the URL
        """
        if not self.supports(Capability.CONTAINER):
            return None
        return await self._invoke(Capability.CONTAINER, url, timeout=timeout)

    async def list_containers(self, timeout: Optional[float] = None) -> List[Container]:
        """List all discoverable containers of the website."""
        return await self._invoke(Capability.CONTAINERS, timeout=timeout)

    async def list_chapters(self, container: Container, timeout: Optional[float] = None) -> List[Chapter]:
        """List the chapters of a container in the order retrieved."""
        return await self._invoke(Capability.CHAPTERS, container, timeout=timeout)

    async def list_pages(self, chapter: Chapter, timeout: Optional[float] = None) -> List[Page]:
        """List the ordered pages of a chapter."""
        return await self._invoke(Capability.PAGES, chapter, timeout=timeout)

    async def fetch_image(self, page: Page, timeout: Optional[float] = None) -> ImageData:
        """Fetch the binary payload of a page."""
        return await self._invoke(Capability.IMAGE, page, timeout=timeout)

    async def _invoke(self, capability: Capability, *args: Any, timeout: Optional[float] = None) -> Any:
        """Dispatch a capability to its outermost layer, bounded by the operation timeout."""
        handler = self._chain.handler(capability)
        bound = timeout if timeout is not None else self.settings.timeout
        if bound is None:
            return await handler(*args)

        try:
            return await asyncio.wait_for(handler(*args), bound)
        except asyncio.TimeoutError as e:
            self.logger.warning(f"{capability} for '{self.identifier}' exceeded {bound}s")
            raise OperationTimeoutError(
                f"{capability} for plugin '{self.identifier}' exceeded {bound}s",
                timeout=bound,
            ) from e

    @provides(Capability.IMAGE)
    async def _fetch_image_direct(self, page: Page) -> ImageData:
        """Fetch the image without any header workaround."""
        if page.data is not None:
            return ImageData(content=page.data, media_type=page.media_type, url=page.link)
        response = raise_for_status(await self.http.request(page.link))
        return ImageData(
            content=response.content,
            media_type=response.media_type or page.media_type,
            url=response.url,
        )

    def __str__(self) -> str:
        return f"{self.title} ({self.identifier})"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(identifier='{self.identifier}')"


# Export base plugin class
__all__ = ["SitePlugin"]
