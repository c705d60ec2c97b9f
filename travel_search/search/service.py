from __future__ import annotations

import logging
from dataclasses import dataclass

from travel_search.store.filters import SearchFilter
from travel_search.store.repository import ExperienceRepository

from .errors import AutocompleteExecutionError, SearchExecutionError
from .pagination import build_pagination
from .schemas import (
    AutocompleteData,
    AutocompleteQuery,
    AutocompleteResponse,
    ExperienceOut,
    SearchData,
    SearchQuery,
    SearchResponse,
)


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchServiceConfig:
    # autocomplete reads at most limit * factor candidate rows
    suggestion_candidate_factor: int = 2


class SearchService:
    """Application-layer search service.

    Implements:
      1) Keyword search with pagination and optional category/featured filters
      2) Autocomplete suggestions for a partial query

    Store failures are logged and re-raised as ``SearchExecutionError`` /
    ``AutocompleteExecutionError``; the original error is never exposed to
    callers. Each store call is attempted once.
    """

    def __init__(self, repository: ExperienceRepository, config: SearchServiceConfig | None = None):
        self.repository = repository
        self.config = config or SearchServiceConfig()

    def search(self, query: SearchQuery) -> SearchResponse:
        search_filter = SearchFilter.build(query.q, category=query.category, featured=query.featured)
        try:
            rows = self.repository.find_by_query(search_filter, limit=query.limit, offset=query.offset)
            total = self.repository.count_by_query(search_filter)
            results = [ExperienceOut.model_validate(row) for row in rows]
        except Exception as exc:
            logger.exception("Search failed for q=%r", query.q)
            raise SearchExecutionError() from exc

        logger.debug(
            "Search q=%r limit=%d offset=%d -> %d of %d",
            query.q, query.limit, query.offset, len(results), total,
        )
        return SearchResponse(
            data=SearchData(
                results=results,
                pagination=build_pagination(total, limit=query.limit, offset=query.offset),
            )
        )

    def autocomplete(self, query: AutocompleteQuery) -> AutocompleteResponse:
        try:
            suggestions = self.repository.get_suggestions(
                query.q,
                query.limit,
                candidate_factor=self.config.suggestion_candidate_factor,
            )
        except Exception as exc:
            logger.exception("Autocomplete failed for q=%r", query.q)
            raise AutocompleteExecutionError() from exc

        return AutocompleteResponse(data=AutocompleteData(suggestions=suggestions))
