"""Strategies for websites built on the WordPress Madara theme."""

from .strategies import (
    ChaptersSinglePageAJAXv1,
    ChaptersSinglePageAJAXv2,
    MangaCSS,
    MangasMultiPageAJAX,
    PagesSinglePageCSS,
    extract_post_id,
)

__all__ = [
    "MangaCSS",
    "MangasMultiPageAJAX",
    "ChaptersSinglePageAJAXv1",
    "ChaptersSinglePageAJAXv2",
    "PagesSinglePageCSS",
    "extract_post_id",
]
