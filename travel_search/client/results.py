from __future__ import annotations

import logging
import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from pydantic import ValidationError

from travel_search.search.schemas import Pagination, SearchQuery

from .state import SearchStore


logger = logging.getLogger(__name__)

CATEGORIES: Tuple[str, ...] = (
    "Wine & Dine",
    "Cultural",
    "Adventure",
    "Nature",
    "Heritage",
    "Beach",
    "Food",
)

MAX_VISIBLE_PAGES = 5

INVALID_QUERY_MESSAGE = "Invalid request data"


@dataclass(frozen=True)
class PageWindow:
    total_pages: int
    current_page: int
    pages: List[int]
    has_prev: bool
    has_next: bool
    offset: int
    limit: int

    def offset_for(self, page: int) -> int:
        return (page - 1) * self.limit


def page_window(pagination: Pagination, max_visible: int = MAX_VISIBLE_PAGES) -> Optional[PageWindow]:
    """Page numbers to render around the current page.

    Returns None when every result fits on one page. Otherwise at most
    ``max_visible`` consecutive pages, centred on the current one and shifted
    to stay inside ``1..total_pages``.
    """
    if pagination.total <= pagination.limit:
        return None

    total_pages = math.ceil(pagination.total / pagination.limit)
    current_page = pagination.offset // pagination.limit + 1

    start = max(1, current_page - max_visible // 2)
    end = min(total_pages, start + max_visible - 1)
    if end - start + 1 < max_visible:
        start = max(1, end - max_visible + 1)

    return PageWindow(
        total_pages=total_pages,
        current_page=current_page,
        pages=list(range(start, end + 1)),
        has_prev=pagination.has_prev,
        has_next=pagination.has_next,
        offset=pagination.offset,
        limit=pagination.limit,
    )


class ResultsNavigator:
    """Re-issues the current search for page changes and category toggles."""

    def __init__(self, store: SearchStore) -> None:
        self.store = store
        self.selected_category = ""

    @property
    def categories(self) -> Tuple[str, ...]:
        return CATEGORIES

    def page_window(self) -> Optional[PageWindow]:
        return page_window(self.store.state.pagination)

    async def _run(self, query: str, *, limit: int, offset: int) -> None:
        try:
            params = SearchQuery(
                q=query,
                limit=limit,
                offset=offset,
                category=self.selected_category or None,
            )
        except ValidationError:
            # Same outcome as the server's 400 for this query.
            logger.warning("Search not sent, invalid query %r", query[:40])
            self.store.search_failed(INVALID_QUERY_MESSAGE)
            return
        await self.store.search(params)

    async def change_page(self, new_offset: int) -> None:
        state = self.store.state
        await self._run(state.query, limit=state.pagination.limit, offset=new_offset)

    async def toggle_category(self, category: str) -> None:
        """Select ``category``, or clear it when it is already selected; back to page 1."""
        self.selected_category = "" if category == self.selected_category else category
        await self._run(self.store.state.query, limit=10, offset=0)

    async def search(self, query: str) -> None:
        await self._run(query, limit=10, offset=0)
