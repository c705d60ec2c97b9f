from __future__ import annotations

from typing import Any, Optional


class ApiError(Exception):
    """Error with an HTTP status and a stable machine-readable code."""

    status_code: int = 500
    code: str = "INTERNAL_ERROR"
    message: str = "An unexpected error occurred"

    def __init__(
        self,
        status_code: Optional[int] = None,
        code: Optional[str] = None,
        message: Optional[str] = None,
        *,
        details: Any = None,
    ) -> None:
        self.status_code = status_code or self.status_code
        self.code = code or self.code
        self.message = message or self.message
        self.details = details
        super().__init__(self.message)


class SearchExecutionError(ApiError):
    code = "SEARCH_ERROR"
    message = "Failed to perform search"


class AutocompleteExecutionError(ApiError):
    code = "AUTOCOMPLETE_ERROR"
    message = "Failed to get autocomplete suggestions"


class RouteNotFoundError(ApiError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Route not found"
