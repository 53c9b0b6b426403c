"""
MangaWeave - Composable content extraction from comic websites.

Site plugins are assembled from reusable fetching strategies and expose one
uniform capability contract: list containers, list chapters, list pages and
fetch images.
"""

__version__ = "0.1.0"
__author__ = "MangaWeave Team"

# Package metadata
__title__ = "mangaweave"
__description__ = "Composable content extraction from comic websites"
__license__ = "MIT"

# Version info tuple for programmatic access
VERSION_INFO = tuple(map(int, __version__.split(".")))

# Export main components for easy importing
from mangaweave.core.models import Capability, Chapter, Container, ImageData, Page, PluginDescriptor

__all__ = [
    "__version__",
    "__author__",
    "Capability",
    "Container",
    "Chapter",
    "Page",
    "ImageData",
    "PluginDescriptor",
]
