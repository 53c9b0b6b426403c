"""
Common building blocks for site plugins.

This package contains the fetch primitives, the pagination loop and the
strategies shared by websites that run no particular CMS theme.
"""

from .fetch import (
    expand_template,
    fetch_css,
    fetch_document,
    fetch_json,
    fetch_script,
    pack_identifier,
    unpack_identifier,
)
from .pagination import deduplicate, paginate
from .strategies import (
    ChaptersMultiPageCSS,
    ChaptersSinglePageCSS,
    ChaptersSinglePageJS,
    ImageAjax,
    MangaCSS,
    MangasMultiPageCSS,
    MangasMultiPageJSON,
    MangasSinglePageCSS,
    PagesSinglePageCSS,
    PagesSinglePageJS,
)

__all__ = [
    "expand_template",
    "fetch_css",
    "fetch_document",
    "fetch_json",
    "fetch_script",
    "pack_identifier",
    "unpack_identifier",
    "deduplicate",
    "paginate",
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
]
