from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple

from pydantic import ValidationError

from travel_search.config import get_settings
from travel_search.search.schemas import SearchQuery

from .state import MIN_AUTOCOMPLETE_CHARS, SearchStore


logger = logging.getLogger(__name__)

SEARCH_PAGE_SIZE = 10


class SuggestionState(str, Enum):
    idle = "idle"
    debouncing = "debouncing"
    suggestions_visible = "suggestions-visible"
    navigating = "navigating"


class KeyAction(str, Enum):
    none = "none"
    navigate = "navigate"
    select = "select"
    search = "search"
    close = "close"


@dataclass(frozen=True)
class KeyResult:
    action: KeyAction
    value: Optional[str] = None


class AutocompleteController:
    """Debounced autocomplete with keyboard navigation for one search input.

    Call the ``handle_*`` methods from inside a running event loop. At most one
    debounce timer exists at a time: every keystroke cancels the pending timer
    before arming a new one. When the timer fires, the store fetches
    suggestions; they are shown once the response arrives, unless the input
    session changed meanwhile (new keystroke, Escape, selection, click outside).
    """

    def __init__(
        self,
        store: SearchStore,
        *,
        debounce_ms: Optional[int] = None,
        page_size: int = SEARCH_PAGE_SIZE,
    ) -> None:
        self.store = store
        self.debounce_sec = (
            debounce_ms if debounce_ms is not None else get_settings().client.debounce_ms
        ) / 1000.0
        self.page_size = page_size

        self.input_value = ""
        self.show_suggestions = False
        self.highlighted_index = -1

        self._timer: Optional[asyncio.TimerHandle] = None
        self._fetch: Optional[asyncio.Task] = None
        self._session = 0

    # -- derived state -------------------------------------------------------

    @property
    def suggestions(self) -> Tuple[str, ...]:
        return self.store.state.suggestions

    @property
    def is_loading_suggestions(self) -> bool:
        return self.store.state.is_loading_suggestions

    @property
    def state(self) -> SuggestionState:
        if self.show_suggestions:
            if self.highlighted_index >= 0:
                return SuggestionState.navigating
            return SuggestionState.suggestions_visible
        if self._timer is not None or (self._fetch is not None and not self._fetch.done()):
            return SuggestionState.debouncing
        return SuggestionState.idle

    # -- timer -----------------------------------------------------------------

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    def _hide(self, *, reset_index: bool = True) -> None:
        self._session += 1
        self._cancel_timer()
        self.show_suggestions = False
        if reset_index:
            self.highlighted_index = -1

    def _on_timer(self, query: str, session: int) -> None:
        self._timer = None
        self._fetch = asyncio.ensure_future(self._fetch_suggestions(query, session))

    async def _fetch_suggestions(self, query: str, session: int) -> None:
        await self.store.autocomplete(query)
        if session == self._session:
            self.show_suggestions = True
            self.highlighted_index = -1

    async def wait_for_suggestions(self) -> None:
        """Await the in-flight suggestion fetch, if any."""
        if self._fetch is not None:
            await self._fetch

    # -- events ------------------------------------------------------------------

    def handle_input_change(self, value: str) -> None:
        self.input_value = value
        self._hide()
        if len(value) < MIN_AUTOCOMPLETE_CHARS:
            return
        loop = asyncio.get_running_loop()
        self._timer = loop.call_later(self.debounce_sec, self._on_timer, value, self._session)

    async def handle_key_down(self, key: str) -> KeyResult:
        if key == "Enter":
            if self.show_suggestions and 0 <= self.highlighted_index < len(self.suggestions):
                selected = self.suggestions[self.highlighted_index]
                await self.select_suggestion(selected)
                return KeyResult(KeyAction.select, selected)
            value = self.input_value
            self._hide()
            await self._search(value)
            return KeyResult(KeyAction.search, value)

        if key == "Escape":
            was_open = self.show_suggestions
            self._hide()
            return KeyResult(KeyAction.close if was_open else KeyAction.none)

        if not self.show_suggestions or not self.suggestions:
            return KeyResult(KeyAction.none)

        if key == "ArrowDown":
            self.highlighted_index = min(self.highlighted_index + 1, len(self.suggestions) - 1)
            return KeyResult(KeyAction.navigate)
        if key == "ArrowUp":
            self.highlighted_index = max(self.highlighted_index - 1, -1)
            return KeyResult(KeyAction.navigate)

        return KeyResult(KeyAction.none)

    async def select_suggestion(self, suggestion: str) -> str:
        self.input_value = suggestion
        self._hide()
        await self._search(suggestion)
        return suggestion

    def click_outside(self) -> None:
        """Pointer went down outside the input and the suggestion list."""
        self._hide(reset_index=False)

    def close(self) -> None:
        self._hide()

    def clear_input(self) -> None:
        self.input_value = ""
        self._hide()

    def dispose(self) -> None:
        self._hide()
        if self._fetch is not None and not self._fetch.done():
            self._fetch.cancel()

    async def _search(self, text: str) -> None:
        trimmed = text.strip()
        if not trimmed:
            return
        try:
            params = SearchQuery(q=trimmed, limit=self.page_size, offset=0)
        except ValidationError:
            logger.warning("Ignoring search with invalid query %r", trimmed[:40])
            return
        self.store.set_query(trimmed)
        await self.store.search(params)
