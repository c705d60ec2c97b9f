from __future__ import annotations

import logging
from typing import Dict, List

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from .filters import SearchFilter, SuggestionFilter
from .models import Experience


logger = logging.getLogger(__name__)

# featured first, then newest first; id keeps equal timestamps in insertion order
SEARCH_ORDER = (Experience.featured.desc(), Experience.created_at.desc(), Experience.id.asc())


class ExperienceRepository:
    """Read-only queries over the experiences table.

    ``find_by_query`` and ``count_by_query`` take the same ``SearchFilter`` so a
    page and its total are always computed from one predicate.
    """

    def __init__(self, db: Session) -> None:
        self.db = db

    def find_by_query(self, search_filter: SearchFilter, *, limit: int, offset: int) -> List[Experience]:
        stmt = (
            select(Experience)
            .where(search_filter.to_clause())
            .order_by(*SEARCH_ORDER)
            .offset(offset)
            .limit(limit)
        )
        return list(self.db.scalars(stmt))

    def count_by_query(self, search_filter: SearchFilter) -> int:
        stmt = select(func.count()).select_from(Experience).where(search_filter.to_clause())
        return int(self.db.scalar(stmt) or 0)

    def get_suggestions(self, query: str, limit: int, *, candidate_factor: int = 2) -> List[str]:
        """Unique titles/destinations/categories containing ``query``.

        At most ``candidate_factor * limit`` candidate rows are read before de-duplication, so
        fewer than ``limit`` suggestions can come back even when more rows match.
        """
        suggestion_filter = SuggestionFilter(query.lower())
        stmt = (
            select(Experience.title, Experience.destination, Experience.category)
            .where(suggestion_filter.to_clause())
            .order_by(Experience.id.asc())
            .limit(limit * candidate_factor)
        )
        candidates = self.db.execute(stmt).all()
        logger.debug("Autocomplete %r: %d candidate rows", query, len(candidates))

        # dict keeps first-insertion order
        suggestions: Dict[str, None] = {}
        for row in candidates:
            for value in suggestion_filter.values_from(row):
                suggestions.setdefault(value, None)
        return list(suggestions)[:limit]
