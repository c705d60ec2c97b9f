from __future__ import annotations

from .schemas import Pagination


def build_pagination(total: int, *, limit: int, offset: int) -> Pagination:
    """Window metadata for a page of ``limit`` rows starting at ``offset``."""
    return Pagination(
        total=total,
        limit=limit,
        offset=offset,
        has_next=offset + limit < total,
        has_prev=offset > 0,
    )
