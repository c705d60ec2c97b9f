"""Client-side search logic: API client, state container, autocomplete and results navigation."""

from .api import ApiClient, ApiClientError
from .autocomplete import AutocompleteController, KeyAction, KeyResult, SuggestionState
from .results import ResultsNavigator, page_window
from .state import SearchState, SearchStore

__all__ = [
    "ApiClient",
    "ApiClientError",
    "AutocompleteController",
    "KeyAction",
    "KeyResult",
    "ResultsNavigator",
    "SearchState",
    "SearchStore",
    "SuggestionState",
    "page_window",
]
