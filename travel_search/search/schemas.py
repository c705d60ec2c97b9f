from __future__ import annotations

from datetime import datetime
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

from travel_search.utils.text_cleaning import clean_text


class CamelModel(BaseModel):
    """Wire models use camelCase names; Python code uses snake_case."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


# ---------------------------------------------------------------------------
# Requests
# ---------------------------------------------------------------------------


class SearchQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    q: str = Field(..., min_length=1, max_length=100, description="Free-text search query.")
    limit: int = Field(10, ge=1, le=50, description="Page size.")
    offset: int = Field(0, ge=0, description="Rows to skip.")
    category: Optional[str] = Field(None, description="Case-insensitive category substring.")
    featured: Optional[bool] = Field(None, description="Only featured / non-featured experiences.")

    @field_validator("q", mode="before")
    @classmethod
    def _sanitize_q(cls, value: Any) -> Any:
        return clean_text(value) if isinstance(value, str) else value

    @field_validator("category", mode="before")
    @classmethod
    def _sanitize_category(cls, value: Any) -> Any:
        if isinstance(value, str):
            return clean_text(value) or None
        return value

    def to_params(self) -> dict:
        """Query-string parameters, omitting unset optional filters."""
        params = self.model_dump(exclude_none=True)
        if "featured" in params:
            params["featured"] = "true" if params["featured"] else "false"
        return params


class AutocompleteQuery(BaseModel):
    model_config = ConfigDict(extra="ignore")

    q: str = Field(..., min_length=1, max_length=100, description="Partial query.")
    limit: int = Field(5, ge=1, le=10, description="Maximum number of suggestions.")

    @field_validator("q", mode="before")
    @classmethod
    def _sanitize_q(cls, value: Any) -> Any:
        return clean_text(value) if isinstance(value, str) else value


# ---------------------------------------------------------------------------
# Responses
# ---------------------------------------------------------------------------


class ExperienceOut(CamelModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    description: str
    image_url: str
    destination: str
    category: str
    price: Optional[float] = None
    duration: Optional[str] = None
    featured: bool = False
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class Pagination(CamelModel):
    total: int = 0
    limit: int = 10
    offset: int = 0
    has_next: bool = False
    has_prev: bool = False


class SearchData(CamelModel):
    results: List[ExperienceOut] = Field(default_factory=list)
    pagination: Pagination = Field(default_factory=Pagination)


class SearchResponse(CamelModel):
    success: bool = True
    data: SearchData


class AutocompleteData(CamelModel):
    suggestions: List[str] = Field(default_factory=list)


class AutocompleteResponse(CamelModel):
    success: bool = True
    data: AutocompleteData


class HealthData(CamelModel):
    status: str = "ok"
    timestamp: datetime
    environment: str


class HealthResponse(CamelModel):
    success: bool = True
    data: HealthData


class ErrorBody(CamelModel):
    code: str
    message: str
    timestamp: str
    path: str
    details: Optional[Any] = None


class ErrorResponse(CamelModel):
    success: bool = False
    error: ErrorBody
