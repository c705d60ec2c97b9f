"""
Pytest configuration and shared fixtures for travel search tests.
"""

import os
from datetime import datetime, timedelta, timezone
from typing import Dict, List, Optional

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

# Set test environment variables before importing app
os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["API_BASE_URL"] = "http://testserver/api/v1"

from travel_search.api.app import app as fastapi_app  # noqa: E402
from travel_search.search.schemas import (  # noqa: E402
    AutocompleteData,
    AutocompleteResponse,
    ExperienceOut,
    SearchData,
    SearchQuery,
    SearchResponse,
)
from travel_search.search.pagination import build_pagination  # noqa: E402
from travel_search.store.database import Base, get_db, make_engine  # noqa: E402
from travel_search.store.models import Experience  # noqa: E402


BASE_TIME = datetime(2024, 1, 1, 12, 0, tzinfo=timezone.utc)

SEED_EXPERIENCES: List[Dict] = [
    {
        "title": "Eat. Stay. Love.",
        "description": "An all-in-one Experience at Fratelli Vineyards awaits when you book a flight to Pune",
        "destination": "Pune",
        "category": "Wine & Dine",
        "price": 299.99,
        "duration": "3 days",
        "featured": True,
    },
    {
        "title": "Sun Set Savour",
        "description": "Enjoy an exclusive Experience at Sula Vineyards when you book a flight to Nashik",
        "destination": "Nashik",
        "category": "Wine & Dine",
        "price": 249.99,
        "duration": "2 days",
        "featured": True,
    },
    {
        "title": "Festivals From India",
        "description": "Explore arts and culture festivals across India.",
        "destination": "India",
        "category": "Cultural",
        "price": 199.99,
        "duration": "5 days",
        "featured": True,
    },
    {
        "title": "Travel wanderlust",
        "description": "Travel to your next destination based on how you feel and what you like.",
        "destination": "Multiple",
        "category": "Adventure",
        "price": 599.99,
        "duration": "7 days",
        "featured": True,
    },
    {
        "title": "Kerala Backwaters",
        "description": "Experience the serene backwaters of Kerala with traditional houseboat stays.",
        "destination": "Kerala",
        "category": "Nature",
        "price": 449.99,
        "duration": "4 days",
        "featured": False,
    },
    {
        "title": "Rajasthan Heritage",
        "description": "Discover the royal heritage of Rajasthan with palace tours and cultural experiences.",
        "destination": "Rajasthan",
        "category": "Heritage",
        "price": 699.99,
        "duration": "6 days",
        "featured": False,
    },
    {
        "title": "Goa Beach Paradise",
        "description": "Relax on pristine beaches with water sports and vibrant nightlife.",
        "destination": "Goa",
        "category": "Beach",
        "price": 349.99,
        "duration": "4 days",
        "featured": False,
    },
    {
        "title": "Himalayan Adventure",
        "description": "Trek through the majestic Himalayas with professional guides.",
        "destination": "Himachal Pradesh",
        "category": "Adventure",
        "price": 899.99,
        "duration": "8 days",
        "featured": False,
    },
    {
        "title": "Mumbai Street Food Tour",
        "description": "Explore the bustling streets of Mumbai with local food guides.",
        "destination": "Mumbai",
        "category": "Food",
        "price": 149.99,
        "duration": "1 day",
        "featured": False,
    },
    {
        "title": "Delhi Historical Walk",
        "description": "Walk through centuries of history in India's capital city.",
        "destination": "Delhi",
        "category": "Heritage",
        "price": 99.99,
        "duration": "1 day",
        "featured": False,
    },
]


def add_experience(session, minutes: int = 0, **fields) -> Experience:
    """Insert one experience; ``minutes`` after BASE_TIME sets created_at."""
    values = {
        "title": "Untitled",
        "description": "",
        "image_url": "https://images.example.com/placeholder.jpg",
        "destination": "Nowhere",
        "category": "Misc",
        "featured": False,
        "created_at": BASE_TIME + timedelta(minutes=minutes),
    }
    values.update(fields)
    values.setdefault("updated_at", values["created_at"])
    experience = Experience(**values)
    session.add(experience)
    session.commit()
    session.refresh(experience)
    return experience


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    # Create an in-memory SQLite database
    engine = make_engine("sqlite:///:memory:", poolclass=StaticPool)

    # Create all tables
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def seeded_session(db_session):
    """Session with the seed experiences; later rows are newer."""
    for i, data in enumerate(SEED_EXPERIENCES):
        add_experience(db_session, minutes=i, **data)
    return db_session


@pytest.fixture(scope="function")
def client(seeded_session) -> TestClient:
    """Create a test client backed by the seeded database."""

    def override_get_db():
        try:
            yield seeded_session
        finally:
            pass

    fastapi_app.dependency_overrides[get_db] = override_get_db

    # No context manager: startup (init_db on the configured engine) is not needed here.
    test_client = TestClient(fastapi_app)
    yield test_client

    fastapi_app.dependency_overrides.clear()


# ---------------------------------------------------------------------------
# Client-side fakes
# ---------------------------------------------------------------------------


def make_result(id: int, title: str, featured: bool = False) -> ExperienceOut:
    return ExperienceOut(
        id=id,
        title=title,
        description=f"{title} description",
        image_url="https://images.example.com/x.jpg",
        destination="Somewhere",
        category="Misc",
        featured=featured,
    )


class FakeApi:
    """Stands in for ApiClient; records calls and returns canned responses."""

    def __init__(
        self,
        suggestions: Optional[Dict[str, List[str]]] = None,
        results: Optional[List[ExperienceOut]] = None,
        total: Optional[int] = None,
    ) -> None:
        self.suggestions = suggestions or {}
        self.results = results if results is not None else [make_result(1, "Kerala Backwaters")]
        self.total = total
        self.search_calls: List[SearchQuery] = []
        self.autocomplete_calls: List[str] = []
        self.search_error: Optional[Exception] = None
        self.autocomplete_error: Optional[Exception] = None

    async def search(self, params: SearchQuery) -> SearchResponse:
        self.search_calls.append(params)
        if self.search_error is not None:
            raise self.search_error
        total = self.total if self.total is not None else len(self.results)
        return SearchResponse(
            data=SearchData(
                results=self.results,
                pagination=build_pagination(total, limit=params.limit, offset=params.offset),
            )
        )

    async def autocomplete(self, query: str, limit: int = 5) -> AutocompleteResponse:
        self.autocomplete_calls.append(query)
        if self.autocomplete_error is not None:
            raise self.autocomplete_error
        return AutocompleteResponse(
            data=AutocompleteData(suggestions=self.suggestions.get(query, [])[:limit])
        )


@pytest.fixture
def fake_api() -> FakeApi:
    return FakeApi(
        suggestions={
            "ke": ["Kerala Backwaters", "Kerala"],
            "ker": ["Kerala Backwaters", "Kerala"],
            "kerala": ["Kerala Backwaters", "Kerala"],
            "go": ["Goa Beach Paradise", "Goa"],
        }
    )
