"""Search application layer.

This package provides the two operations used by the API:
- Keyword search with pagination and category/featured filters
- Autocomplete suggestions for a partial query

Queries are delegated to the relational store (``travel_search.store``).
"""

from .errors import ApiError, AutocompleteExecutionError, SearchExecutionError
from .service import SearchService, SearchServiceConfig

__all__ = [
    "ApiError",
    "AutocompleteExecutionError",
    "SearchExecutionError",
    "SearchService",
    "SearchServiceConfig",
]
