"""Typed predicate clauses for experience search.

A search request is turned into a ``SearchFilter`` made of small clauses. Each
clause renders itself as a SQLAlchemy expression (for the store) and can also
be evaluated against an in-memory record, which keeps the two interpretations
in one place.

Matching rules:
  - ``q`` is split on whitespace, empty pieces dropped, each lowercased.
  - A token matches when title, description, destination or category contains
    it, ignoring case.
  - Tokens are OR-ed: one matching token is enough.
  - ``category`` (substring, ignoring case) and ``featured`` (exact) are AND-ed
    on top.
  - A query with no tokens matches nothing.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Tuple

from sqlalchemy import String, and_, false, func, or_
from sqlalchemy.sql.elements import ColumnElement

from .models import Experience


SEARCH_FIELDS: Tuple[str, ...] = ("title", "description", "destination", "category")
SUGGESTION_FIELDS: Tuple[str, ...] = ("title", "destination", "category")


def tokenize(text: str | None) -> List[str]:
    """Split a free-text query into lowercase terms."""
    if not text:
        return []
    return [t.lower() for t in text.split() if t]


def contains_ci(field_name: str, needle: str) -> ColumnElement[bool]:
    """Case-insensitive literal substring match on an Experience column."""
    column = getattr(Experience, field_name)
    return func.lower(column, type_=String).contains(needle.lower(), autoescape=True)


def _value_contains(value: Any, needle: str) -> bool:
    return isinstance(value, str) and needle.lower() in value.lower()


@dataclass(frozen=True)
class TokenMatch:
    """One term that must appear in at least one of ``fields``."""

    token: str
    fields: Tuple[str, ...] = SEARCH_FIELDS

    def to_clause(self) -> ColumnElement[bool]:
        return or_(*(contains_ci(name, self.token) for name in self.fields))

    def matches(self, record: Any) -> bool:
        return any(_value_contains(getattr(record, name, None), self.token) for name in self.fields)


@dataclass(frozen=True)
class CategoryMatch:
    category: str

    def to_clause(self) -> ColumnElement[bool]:
        return contains_ci("category", self.category)

    def matches(self, record: Any) -> bool:
        return _value_contains(getattr(record, "category", None), self.category)


@dataclass(frozen=True)
class FeaturedMatch:
    featured: bool

    def to_clause(self) -> ColumnElement[bool]:
        return Experience.featured == self.featured

    def matches(self, record: Any) -> bool:
        return bool(getattr(record, "featured", False)) is self.featured


@dataclass(frozen=True)
class SearchFilter:
    """Composed predicate: (any token) AND category AND featured."""

    tokens: Tuple[TokenMatch, ...] = ()
    category: Optional[CategoryMatch] = None
    featured: Optional[FeaturedMatch] = None

    @classmethod
    def build(
        cls,
        q: str | None,
        *,
        category: Optional[str] = None,
        featured: Optional[bool] = None,
    ) -> "SearchFilter":
        return cls(
            tokens=tuple(TokenMatch(t) for t in tokenize(q)),
            category=CategoryMatch(category) if category else None,
            featured=FeaturedMatch(featured) if featured is not None else None,
        )

    @property
    def is_empty(self) -> bool:
        return not self.tokens

    def _extra(self) -> List[Any]:
        return [c for c in (self.category, self.featured) if c is not None]

    def to_clause(self) -> ColumnElement[bool]:
        if self.is_empty:
            return false()
        clauses = [or_(*(t.to_clause() for t in self.tokens))]
        clauses.extend(c.to_clause() for c in self._extra())
        return and_(*clauses)

    def matches(self, record: Any) -> bool:
        if self.is_empty:
            return False
        if not any(t.matches(record) for t in self.tokens):
            return False
        return all(c.matches(record) for c in self._extra())


@dataclass(frozen=True)
class SuggestionFilter:
    """Candidate predicate for autocomplete: substring in title/destination/category."""

    term: str
    fields: Tuple[str, ...] = SUGGESTION_FIELDS

    def to_clause(self) -> ColumnElement[bool]:
        return or_(*(contains_ci(name, self.term) for name in self.fields))

    def values_from(self, record: Any) -> Sequence[str]:
        """Field values of ``record`` that themselves contain the term, in field order."""
        return [
            getattr(record, name)
            for name in self.fields
            if _value_contains(getattr(record, name, None), self.term)
        ]
