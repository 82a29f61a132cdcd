"""Page-by-page collection of list endpoints."""

from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import Any

from glprovider.core.exceptions import PaginationError
from glprovider.utils.logging import get_logger

logger = get_logger(__name__)


@dataclass
class Page:
    """One page of a list endpoint.

    ``next_page`` is None on the last page, as reported by GitLab.
    """

    items: list[Any] = field(default_factory=list)
    next_page: int | None = None


def collect_pages(
    fetch_page: Callable[[int], Page],
    key: Callable[[Any], Hashable] | None = None,
    max_pages: int = 10_000,
) -> list[Any]:
    """Fetch every page of a list endpoint and return all items.

    Args:
        fetch_page: Called with a 1-based page number
        key: Identity of an item; later duplicates (items shifting across a
            page boundary between requests) are dropped
        max_pages: Upper bound on pages fetched from a server that never stops paginating

    Returns:
        Items of all pages, in order

    Raises:
        PaginationError: If the server keeps paginating past max_pages or
            points back at a page already fetched
    """
    items: list[Any] = []
    seen: set[Hashable] = set()
    page_number: int | None = 1
    pages = 0

    while page_number is not None:
        if pages >= max_pages:
            raise PaginationError(f"pagination did not terminate after {max_pages} pages")

        page = fetch_page(page_number)
        pages += 1

        for item in page.items:
            if key is not None:
                item_key = key(item)
                if item_key in seen:
                    continue
                seen.add(item_key)
            items.append(item)

        if page.next_page is not None and page.next_page <= page_number:
            raise PaginationError(
                f"page {page_number} points back to page {page.next_page} as its next page"
            )
        page_number = page.next_page

    logger.debug("pages_collected", pages=pages, count=len(items))
    return items
