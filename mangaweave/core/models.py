"""
Core Data Models - Pydantic models for type safety and validation.

This module defines the entities produced by site plugins: containers (a
listable series or work), chapters, pages and fetched image data, together
with the capability names that make up the plugin contract.
All entity models are frozen so they can be shared between concurrent callers.
"""

from enum import Enum
from typing import List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator

from mangaweave.core.tags import Tag


class Capability(str, Enum):
    """Operations of the plugin capability contract."""

    CONTAINER = "container_from_url"
    CONTAINERS = "list_containers"
    CHAPTERS = "list_chapters"
    PAGES = "list_pages"
    IMAGE = "fetch_image"

    def __str__(self) -> str:
        return self.value


# Operations every plugin must bind before it is admitted to a registry
REQUIRED_CAPABILITIES = frozenset({
    Capability.CONTAINERS,
    Capability.CHAPTERS,
    Capability.PAGES,
    Capability.IMAGE,
})


class PluginDescriptor(BaseModel):
    """Public description of a registered plugin."""

    model_config = ConfigDict(frozen=True)

    identifier: str = Field(..., min_length=1, description="Stable plugin identifier")
    title: str = Field(..., min_length=1, description="Display title")
    uri: str = Field(..., description="Base URI of the website")
    icon: Optional[str] = Field(None, description="Icon reference")
    tags: Tuple[Tag, ...] = Field(default=(), description="Classification tags")

    def __str__(self) -> str:
        return f"{self.title} ({self.identifier})"


class Container(BaseModel):
    """
    A listable series or work on a website.

    The identifier is opaque to the framework. It may be a URL path, a numeric
    id or a JSON-encoded composite key, but it must always re-derive the same
    URL when handed back to the owning plugin.
    """

    model_config = ConfigDict(frozen=True)

    plugin_id: str = Field(..., min_length=1, description="Identifier of the owning plugin")
    identifier: str = Field(..., min_length=1, description="Site-defined identifier")
    title: str = Field(..., min_length=1, description="Container title")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Ensure title is properly formatted."""
        return " ".join(v.split())

    def __str__(self) -> str:
        return f"{self.title} ({self.plugin_id})"


class Chapter(BaseModel):
    """A chapter of a container, in site publication order."""

    model_config = ConfigDict(frozen=True)

    container: Container = Field(..., description="Owning container")
    identifier: str = Field(..., min_length=1, description="Site-defined identifier")
    title: str = Field(..., min_length=1, description="Chapter title")

    @field_validator('title')
    @classmethod
    def validate_title(cls, v: str) -> str:
        """Ensure title is properly formatted."""
        return " ".join(v.split())

    def __str__(self) -> str:
        return self.title


class Page(BaseModel):
    """One image entry of a chapter."""

    model_config = ConfigDict(frozen=True)

    chapter: Chapter = Field(..., description="Owning chapter")
    index: int = Field(..., ge=0, description="Zero-based position within the chapter")
    link: str = Field(..., min_length=1, description="Absolute URL of the image")
    media_type: str = Field(default="image/jpeg", description="Declared media type")
    referer: Optional[str] = Field(None, description="Page that linked the image")
    data: Optional[bytes] = Field(None, description="Pre-fetched image content")

    def __str__(self) -> str:
        return f"Page {self.index}: {self.link}"


class ImageData(BaseModel):
    """Binary payload of a fetched page."""

    model_config = ConfigDict(frozen=True)

    content: bytes = Field(..., description="Raw image bytes")
    media_type: str = Field(..., description="Media type of the content")
    url: str = Field(..., description="URL the content was served from")

    @property
    def size(self) -> int:
        """Get the payload size in bytes."""
        return len(self.content)

    def __repr__(self) -> str:
        return f"ImageData(media_type='{self.media_type}', size={self.size})"


# Type aliases for better code readability
ContainerList = List[Container]
ChapterList = List[Chapter]
PageList = List[Page]

# Export all models and types
__all__ = [
    "Capability",
    "REQUIRED_CAPABILITIES",
    "PluginDescriptor",
    "Container",
    "Chapter",
    "Page",
    "ImageData",
    "ContainerList",
    "ChapterList",
    "PageList",
]
