from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from travel_search.search import SearchService
from travel_search.search.schemas import (
    AutocompleteQuery,
    AutocompleteResponse,
    SearchQuery,
    SearchResponse,
)
from travel_search.store.database import get_db
from travel_search.store.repository import ExperienceRepository


router = APIRouter(prefix="/search", tags=["search"])


def get_search_service(db: Session = Depends(get_db)) -> SearchService:
    return SearchService(ExperienceRepository(db))


@router.get(
    "",
    summary="Keyword search over experiences",
    response_model=SearchResponse,
)
def search(
    query: Annotated[SearchQuery, Query()],
    service: SearchService = Depends(get_search_service),
) -> SearchResponse:
    """Search by free-text query.

    - **q**: 1-100 characters, split on whitespace; any term may match
    - **limit**: page size (default: 10, max: 50)
    - **offset**: rows to skip (default: 0)
    - **category**: optional case-insensitive category substring
    - **featured**: optional true/false
    """
    return service.search(query)


@router.get(
    "/autocomplete",
    summary="Autocomplete suggestions",
    response_model=AutocompleteResponse,
)
def autocomplete(
    query: Annotated[AutocompleteQuery, Query()],
    service: SearchService = Depends(get_search_service),
) -> AutocompleteResponse:
    """Unique titles, destinations and categories containing **q** (default limit 5, max 10)."""
    return service.autocomplete(query)
