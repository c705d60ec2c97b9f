from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

from travel_search.config import get_settings
from travel_search.search.schemas import (
    AutocompleteResponse,
    HealthData,
    HealthResponse,
    SearchQuery,
    SearchResponse,
)


logger = logging.getLogger(__name__)


class ApiClientError(Exception):
    """A failed API call, carrying a message fit for display."""

    def __init__(self, message: str, *, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def error_message_for(response: httpx.Response) -> str:
    """Human-readable message for a non-2xx response."""
    if response.status_code == 429:
        return "Too many requests. Please try again later."
    if response.status_code >= 500:
        return "Server error. Please try again later."
    try:
        body = response.json()
    except ValueError:
        body = None
    if isinstance(body, dict):
        error = body.get("error")
        if isinstance(error, dict) and error.get("message"):
            return str(error["message"])
    return "An unexpected error occurred"


class ApiClient:
    """Async client for the travel search API.

    Base URL and timeout default to settings (``API_BASE_URL``,
    ``API_TIMEOUT_SEC``). Pass ``transport`` to route requests elsewhere,
    e.g. ``httpx.MockTransport`` or ``httpx.ASGITransport(app)``.
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        client_settings = get_settings().client
        self.base_url = (base_url or client_settings.api_base_url).rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout or client_settings.timeout_sec),
            headers={"Accept": "application/json", "Content-Type": "application/json"},
            transport=transport,
        )

    async def __aenter__(self) -> "ApiClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _get(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        logger.debug("API Request: GET %s %s", path, params or {})
        try:
            r = await self._client.get(path, params=params)
            r.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "API Response Error: %s %s", e.response.status_code, e.response.text[:200]
            )
            raise ApiClientError(
                error_message_for(e.response), status_code=e.response.status_code
            ) from e
        except httpx.RequestError as e:
            logger.error("API Request Error on %s: %s", path, e)
            raise ApiClientError("An unexpected error occurred") from e

        logger.debug("API Response: %s %s", r.status_code, path)
        try:
            return r.json()
        except ValueError as e:
            logger.error("API Response Error: non-JSON body from %s: %s", path, r.text[:200])
            raise ApiClientError("An unexpected error occurred", status_code=r.status_code) from e

    async def search(self, params: SearchQuery) -> SearchResponse:
        payload = await self._get("/search", params=params.to_params())
        return SearchResponse.model_validate(payload)

    async def autocomplete(self, query: str, limit: int = 5) -> AutocompleteResponse:
        payload = await self._get("/search/autocomplete", params={"q": query, "limit": limit})
        return AutocompleteResponse.model_validate(payload)

    async def health_check(self) -> HealthData:
        payload = await self._get("/health")
        return HealthResponse.model_validate(payload).data
