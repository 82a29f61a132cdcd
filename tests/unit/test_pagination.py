"""Tests for page-by-page collection."""

import pytest

from glprovider.clients.pagination import Page, collect_pages
from glprovider.core.exceptions import PaginationError, ProviderError


class TestCollectPages:
    """Tests for collect_pages."""

    def test_follows_next_page(self) -> None:
        pages = {1: Page([1, 2], next_page=2), 2: Page([3, 4], next_page=3), 3: Page([5])}
        requested = []

        def fetch(page: int) -> Page:
            requested.append(page)
            return pages[page]

        assert collect_pages(fetch) == [1, 2, 3, 4, 5]
        assert requested == [1, 2, 3]

    def test_empty_first_page(self) -> None:
        assert collect_pages(lambda page: Page()) == []

    def test_drops_items_shifted_across_pages(self) -> None:
        """An item repeated at the start of the next page is kept once."""
        pages = {
            1: Page([{"id": 1}, {"id": 2}], next_page=2),
            2: Page([{"id": 2}, {"id": 3}]),
        }

        items = collect_pages(lambda page: pages[page], key=lambda item: item["id"])

        assert [item["id"] for item in items] == [1, 2, 3]

    def test_without_key_keeps_duplicates(self) -> None:
        pages = {1: Page(["a"], next_page=2), 2: Page(["a"])}

        assert collect_pages(lambda page: pages[page]) == ["a", "a"]

    def test_max_pages_guard(self) -> None:
        with pytest.raises(PaginationError, match="did not terminate"):
            collect_pages(lambda page: Page([page], next_page=page + 1), max_pages=5)

    def test_repeated_page_without_next_page_stops(self) -> None:
        requested = []

        def fetch(page: int) -> Page:
            requested.append(page)
            return Page(list(range(100)))

        assert len(collect_pages(fetch)) == 100
        assert requested == [1]

    def test_next_page_pointing_back(self) -> None:
        with pytest.raises(PaginationError, match="points back") as exc_info:
            collect_pages(lambda page: Page(["a"], next_page=1))

        assert isinstance(exc_info.value, ProviderError)
