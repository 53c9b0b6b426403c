"""
Pagination - The generic multi-page listing loop.

Every "MultiPage" strategy runs the same loop and only substitutes the page
fetch primitive, the item extraction rule and the URL template:

1. start at ``start`` with an empty ``seen`` set
2. fetch one page and extract candidate items
3. append candidates whose key was not seen before
4. stop when a page yields no new items or the page cap is reached

Reaching the end of data is never an error.
"""

import logging
from typing import Awaitable, Callable, Hashable, Iterable, List, Set, TypeVar

from mangaweave.core.exceptions import NotFoundError


logger = logging.getLogger(__name__)

Item = TypeVar("Item")

PageFetcher = Callable[[int], Awaitable[Iterable[Item]]]


def deduplicate(items: Iterable[Item], key: Callable[[Item], Hashable]) -> List[Item]:
    """Drop repeated items, keeping each one at its first-seen position."""
    seen: Set[Hashable] = set()
    result: List[Item] = []
    for item in items:
        marker = key(item)
        if marker not in seen:
            seen.add(marker)
            result.append(item)
    return result


async def paginate(
    fetch_page: PageFetcher,
    key: Callable[[Item], Hashable],
    start: int = 1,
    step: int = 1,
    max_pages: int = 1000,
) -> List[Item]:
    """
    Collect items from successive pages until the source is exhausted.

    Args:
        fetch_page: Coroutine function returning the candidates of one page
        key: Identity of an item for deduplication
        start: Number of the first page (or first offset)
        step: Increment between pages (page size for offset pagination)
        max_pages: Hard cap on the number of fetched pages

    Returns:
        Deduplicated items in page order

    Raises:
        NotFoundError: If the first page does not exist
        UnreachableError, ParseError, OperationTimeoutError: Propagated from ``fetch_page``
    """
    seen: Set[Hashable] = set()
    result: List[Item] = []
    page = start

    for fetched in range(1, max_pages + 1):
        try:
            candidates = await fetch_page(page)
        except NotFoundError:
            # WordPress themes answer out-of-range pages with 404
            if fetched == 1:
                raise
            logger.debug(f"Page {page} not found, treating as end of data")
            return result

        added = 0
        for candidate in candidates:
            marker = key(candidate)
            if marker not in seen:
                seen.add(marker)
                result.append(candidate)
                added += 1

        logger.debug(f"Page {page}: {added} new item(s), {len(result)} total")
        if added == 0:
            return result
        page += step

    logger.warning(f"Pagination stopped at the cap of {max_pages} page(s) with {len(result)} item(s)")
    return result


__all__ = ["deduplicate", "paginate"]
