"""Client-side search state.

``SearchStore`` is an explicit container passed to whoever needs it (no
module-level singleton). Actions replace the whole ``SearchState`` and notify
subscribers with the action name.

Each network action tags its request with a generation number; a response is
applied only if no newer request of the same kind started in the meantime, so
a slow, stale autocomplete can no longer overwrite fresher suggestions.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Callable, List, Optional, Tuple

from pydantic import ValidationError

from travel_search.search.schemas import ExperienceOut, Pagination, SearchQuery

from .api import ApiClient, ApiClientError


logger = logging.getLogger(__name__)

MIN_AUTOCOMPLETE_CHARS = 2

Listener = Callable[["SearchState", str], None]


def error_message(exc: Exception, fallback: str) -> str:
    if isinstance(exc, ApiClientError):
        return exc.message
    if isinstance(exc, ValidationError):
        return fallback
    return "An unexpected error occurred"


def initial_pagination() -> Pagination:
    return Pagination(total=0, limit=10, offset=0, has_next=False, has_prev=False)


@dataclass(frozen=True)
class SearchState:
    query: str = ""
    results: Tuple[ExperienceOut, ...] = ()
    suggestions: Tuple[str, ...] = ()
    pagination: Pagination = field(default_factory=initial_pagination)
    is_loading: bool = False
    is_loading_suggestions: bool = False
    error: Optional[str] = None


class SearchStore:
    def __init__(self, api: ApiClient, state: Optional[SearchState] = None) -> None:
        self.api = api
        self.state = state or SearchState()
        self._listeners: List[Listener] = []
        self._search_generation = 0
        self._autocomplete_generation = 0

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener``; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, action: str, **changes: Any) -> None:
        self.state = replace(self.state, **changes)
        logger.debug("store action %s", action)
        for listener in list(self._listeners):
            listener(self.state, action)

    # -- actions ------------------------------------------------------------

    def set_query(self, query: str) -> None:
        self._set("setQuery", query=query)

    async def search(self, params: SearchQuery) -> None:
        self._search_generation += 1
        generation = self._search_generation
        self._set("search/start", is_loading=True, error=None)

        try:
            response = await self.api.search(params)
            if not response.success:
                raise ApiClientError("Search failed")
        except Exception as e:
            if isinstance(e, ApiClientError):
                logger.error("Search error: %s", e)
            else:
                logger.exception("Search failed for q=%r", params.q)
            if generation == self._search_generation:
                self.search_failed(error_message(e, "Search failed"))
            return

        if generation != self._search_generation:
            logger.debug("Dropping stale search response for q=%r", params.q)
            return
        self._set(
            "search/success",
            results=tuple(response.data.results),
            pagination=response.data.pagination,
            is_loading=False,
            query=params.q,
        )

    async def autocomplete(self, query: str) -> None:
        self._autocomplete_generation += 1
        generation = self._autocomplete_generation

        if len(query) < MIN_AUTOCOMPLETE_CHARS:
            self._set("autocomplete/clear", suggestions=(), is_loading_suggestions=False)
            return

        self._set("autocomplete/start", is_loading_suggestions=True)
        try:
            response = await self.api.autocomplete(query)
            if not response.success:
                raise ApiClientError("Autocomplete failed")
        except Exception as e:
            if isinstance(e, ApiClientError):
                logger.error("Autocomplete error: %s", e)
            else:
                logger.exception("Autocomplete failed for %r", query)
            if generation == self._autocomplete_generation:
                self._set("autocomplete/error", suggestions=(), is_loading_suggestions=False)
            return

        if generation != self._autocomplete_generation:
            logger.debug("Dropping stale suggestions for %r", query)
            return
        self._set(
            "autocomplete/success",
            suggestions=tuple(response.data.suggestions),
            is_loading_suggestions=False,
        )

    def search_failed(self, message: str) -> None:
        """Record a failed search: results reset, ``message`` shown to the user."""
        self._search_generation += 1
        self._set(
            "search/error",
            error=message,
            is_loading=False,
            results=(),
            pagination=initial_pagination(),
        )

    def clear_results(self) -> None:
        self._search_generation += 1
        self._autocomplete_generation += 1
        self._set(
            "clearResults",
            results=(),
            suggestions=(),
            pagination=initial_pagination(),
            query="",
            error=None,
            is_loading=False,
            is_loading_suggestions=False,
        )

    def clear_error(self) -> None:
        self._set("clearError", error=None)
