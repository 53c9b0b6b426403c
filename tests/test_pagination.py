"""Tests for the generic multi-page listing loop."""

import logging
from typing import Dict, List

import pytest

from mangaweave.core.exceptions import NotFoundError, UnreachableError
from mangaweave.plugins.common.pagination import deduplicate, paginate


class PagedSource:
    """In-memory paged source counting its fetches."""

    def __init__(self, pages: Dict[int, List[str]]):
        self.pages = pages
        self.fetched: List[int] = []

    async def __call__(self, page: int) -> List[str]:
        self.fetched.append(page)
        return self.pages.get(page, [])


def identity(item: str) -> str:
    return item


@pytest.mark.asyncio
async def test_terminates_after_first_empty_page() -> None:
    """Test k non-empty pages followed by an empty one take k+1 fetches."""
    source = PagedSource({1: ["a", "b"], 2: ["c"], 3: ["d", "e"]})

    result = await paginate(source, identity)

    assert result == ["a", "b", "c", "d", "e"]
    assert source.fetched == [1, 2, 3, 4]


@pytest.mark.asyncio
async def test_repeated_identifier_kept_at_first_position() -> None:
    """Test a duplicate on a later page appears once, where first seen."""
    source = PagedSource({1: ["a", "b"], 2: ["b", "c"]})

    result = await paginate(source, identity)

    assert result == ["a", "b", "c"]
    assert source.fetched == [1, 2, 3]


@pytest.mark.asyncio
async def test_page_of_known_items_terminates() -> None:
    """Test a page repeating only seen items ends pagination (sites echoing their last page)."""
    source = PagedSource({page: ["a", "b"] for page in range(1, 100)})

    result = await paginate(source, identity)

    assert result == ["a", "b"]
    assert source.fetched == [1, 2]


@pytest.mark.asyncio
async def test_page_cap_stops_silently_with_warning(caplog: pytest.LogCaptureFixture) -> None:
    """Test hitting the cap returns what was collected and logs a warning."""
    source = PagedSource({page: [f"item-{page}"] for page in range(1, 100)})

    with caplog.at_level(logging.WARNING, logger="mangaweave.plugins.common.pagination"):
        result = await paginate(source, identity, max_pages=3)

    assert result == ["item-1", "item-2", "item-3"]
    assert source.fetched == [1, 2, 3]
    assert "cap of 3" in caplog.text


@pytest.mark.asyncio
async def test_offset_pagination() -> None:
    """Test start and step drive offset-based sources."""
    source = PagedSource({0: ["a"], 20: ["b"]})

    result = await paginate(source, identity, start=0, step=20)

    assert result == ["a", "b"]
    assert source.fetched == [0, 20, 40]


@pytest.mark.asyncio
async def test_missing_later_page_is_end_of_data() -> None:
    """Test a 404 after the first page ends pagination."""
    calls: List[int] = []

    async def fetch_page(page: int) -> List[str]:
        calls.append(page)
        if page > 2:
            raise NotFoundError("gone", status_code=404)
        return [f"item-{page}"]

    assert await paginate(fetch_page, identity) == ["item-1", "item-2"]
    assert calls == [1, 2, 3]


@pytest.mark.asyncio
async def test_missing_first_page_raises() -> None:
    """Test a 404 on the first page is a real failure."""

    async def fetch_page(page: int) -> List[str]:
        raise NotFoundError("gone", status_code=404)

    with pytest.raises(NotFoundError):
        await paginate(fetch_page, identity)


@pytest.mark.asyncio
async def test_other_failures_discard_partial_result() -> None:
    """Test a transport failure mid-run surfaces instead of a partial listing."""

    async def fetch_page(page: int) -> List[str]:
        if page == 2:
            raise UnreachableError("reset")
        return ["a"]

    with pytest.raises(UnreachableError):
        await paginate(fetch_page, identity)


def test_deduplicate_keeps_first_seen_order() -> None:
    """Test single-page deduplication."""
    assert deduplicate(["b", "a", "b", "c", "a"], identity) == ["b", "a", "c"]


def test_deduplicate_uses_key() -> None:
    """Test deduplication compares keys, not items."""
    items = [("1", "first"), ("2", "second"), ("1", "again")]

    assert deduplicate(items, lambda item: item[0]) == [("1", "first"), ("2", "second")]
