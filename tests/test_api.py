"""HTTP tests for the search, autocomplete and health endpoints."""

from dataclasses import replace

from fastapi.testclient import TestClient

from conftest import add_experience

from travel_search.api.app import app as fastapi_app, create_app
from travel_search.api.routers.search import get_search_service
from travel_search.config import get_settings
from travel_search.search import SearchService


SEARCH = "/api/v1/search"
AUTOCOMPLETE = "/api/v1/search/autocomplete"


def _assert_error(response, status, code, path):
    assert response.status_code == status
    body = response.json()
    assert body["success"] is False
    assert body["error"]["code"] == code
    assert body["error"]["path"] == path
    assert body["error"]["timestamp"].endswith("Z")
    return body["error"]


def test_search_wine_featured_first(client, seeded_session):
    add_experience(
        seeded_session,
        minutes=100,
        title="Wine Tasting Walk",
        destination="Bengaluru",
        category="Food",
        featured=False,
    )

    response = client.get(SEARCH, params={"q": "wine", "limit": 10, "offset": 0})
    assert response.status_code == 200
    body = response.json()

    assert body["success"] is True
    titles = [r["title"] for r in body["data"]["results"]]
    assert titles[:2] == ["Sun Set Savour", "Eat. Stay. Love."]
    assert titles[2] == "Wine Tasting Walk"
    assert body["data"]["pagination"] == {
        "total": 3,
        "limit": 10,
        "offset": 0,
        "hasNext": False,
        "hasPrev": False,
    }


def test_search_response_uses_camel_case(client):
    body = client.get(SEARCH, params={"q": "goa"}).json()
    item = body["data"]["results"][0]
    assert {"id", "title", "imageUrl", "createdAt", "updatedAt", "featured", "price", "duration"} <= set(item)
    assert "image_url" not in item


def test_search_no_match(client):
    body = client.get(SEARCH, params={"q": "zzz-no-match"}).json()
    assert body["data"]["results"] == []
    assert body["data"]["pagination"]["total"] == 0
    assert body["data"]["pagination"]["hasNext"] is False
    assert body["data"]["pagination"]["hasPrev"] is False


def test_search_pagination_window(client):
    first = client.get(SEARCH, params={"q": "a", "limit": 2, "offset": 0}).json()["data"]
    second = client.get(SEARCH, params={"q": "a", "limit": 2, "offset": 2}).json()["data"]

    assert len(first["results"]) == 2
    assert first["pagination"]["hasNext"] is True
    assert first["pagination"]["hasPrev"] is False
    assert second["pagination"]["hasPrev"] is True
    assert second["pagination"]["total"] == first["pagination"]["total"]
    assert {r["id"] for r in first["results"]}.isdisjoint(r["id"] for r in second["results"])


def test_search_category_and_featured_filters(client):
    heritage = client.get(SEARCH, params={"q": "india", "category": "heritage"}).json()
    assert [r["title"] for r in heritage["data"]["results"]] == ["Delhi Historical Walk"]

    not_featured = client.get(SEARCH, params={"q": "india", "featured": "false"}).json()
    assert [r["title"] for r in not_featured["data"]["results"]] == ["Delhi Historical Walk"]

    featured = client.get(SEARCH, params={"q": "india", "featured": "true"}).json()
    assert [r["title"] for r in featured["data"]["results"]] == ["Festivals From India"]


def test_search_query_is_sanitized(client):
    body = client.get(SEARCH, params={"q": "<script>alert(1)</script><b>wine</b>"}).json()
    assert body["data"]["pagination"]["total"] == 2


def test_search_requires_q(client):
    error = _assert_error(client.get(SEARCH), 400, "VALIDATION_ERROR", SEARCH)
    assert error["message"] == "Invalid request data"
    assert error["details"][0]["loc"] == ["q"]


def test_search_rejects_markup_only_q(client):
    _assert_error(client.get(SEARCH, params={"q": "<b></b>"}), 400, "VALIDATION_ERROR", SEARCH)


def test_search_rejects_long_q(client):
    _assert_error(client.get(SEARCH, params={"q": "x" * 101}), 400, "VALIDATION_ERROR", SEARCH)


def test_search_rejects_bad_window(client):
    for params in ({"limit": 0}, {"limit": 51}, {"offset": -1}, {"limit": "ten"}):
        response = client.get(SEARCH, params={"q": "goa", **params})
        _assert_error(response, 400, "VALIDATION_ERROR", SEARCH)


def test_autocomplete(client):
    response = client.get(AUTOCOMPLETE, params={"q": "ke", "limit": 5})
    assert response.status_code == 200
    assert response.json() == {
        "success": True,
        "data": {"suggestions": ["Kerala Backwaters", "Kerala"]},
    }


def test_autocomplete_validation(client):
    _assert_error(client.get(AUTOCOMPLETE), 400, "VALIDATION_ERROR", AUTOCOMPLETE)
    _assert_error(client.get(AUTOCOMPLETE, params={"q": "ke", "limit": 11}), 400, "VALIDATION_ERROR", AUTOCOMPLETE)
    _assert_error(client.get(AUTOCOMPLETE, params={"q": "ke", "limit": 0}), 400, "VALIDATION_ERROR", AUTOCOMPLETE)


def test_store_failure_returns_generic_500(client):
    class BrokenRepository:
        def find_by_query(self, *args, **kwargs):
            raise RuntimeError("password authentication failed for user admin")

        def count_by_query(self, *args, **kwargs):
            raise RuntimeError("password authentication failed for user admin")

    fastapi_app.dependency_overrides[get_search_service] = lambda: SearchService(BrokenRepository())
    response = client.get(SEARCH, params={"q": "goa"})

    error = _assert_error(response, 500, "SEARCH_ERROR", SEARCH)
    assert error["message"] == "Failed to perform search"
    assert "password" not in response.text


def test_malformed_store_row_returns_search_error(client):
    class MalformedRepository:
        def find_by_query(self, *args, **kwargs):
            return [object()]

        def count_by_query(self, *args, **kwargs):
            return 1

    fastapi_app.dependency_overrides[get_search_service] = lambda: SearchService(MalformedRepository())
    response = client.get(SEARCH, params={"q": "goa"})

    error = _assert_error(response, 500, "SEARCH_ERROR", SEARCH)
    assert "details" not in error


def test_unexpected_error_returns_internal_error(seeded_session):
    def explode():
        raise RuntimeError("boom")

    fastapi_app.dependency_overrides[get_search_service] = explode
    try:
        response = TestClient(fastapi_app, raise_server_exceptions=False).get(SEARCH, params={"q": "goa"})
    finally:
        fastapi_app.dependency_overrides.clear()

    error = _assert_error(response, 500, "INTERNAL_ERROR", SEARCH)
    assert error["message"] == "An unexpected error occurred"


def test_unknown_route(client):
    error = _assert_error(client.get("/api/v1/nope"), 404, "NOT_FOUND", "/api/v1/nope")
    assert error["message"] == "Route not found"


def test_health(client):
    body = client.get("/api/v1/health").json()
    assert body["success"] is True
    assert body["data"]["status"] == "ok"
    assert body["data"]["environment"] == "test"


def test_openapi_documents_query_parameters(client):
    schema = client.get("/openapi.json").json()

    search_params = {p["name"] for p in schema["paths"][SEARCH]["get"]["parameters"]}
    assert {"q", "limit", "offset", "category", "featured"} <= search_params
    autocomplete_params = {p["name"] for p in schema["paths"][AUTOCOMPLETE]["get"]["parameters"]}
    assert {"q", "limit"} <= autocomplete_params


def test_app_uses_database_from_given_settings(tmp_path):
    settings = replace(get_settings(), database_url=f"sqlite:///{tmp_path / 'other.db'}")
    app = create_app(settings)

    with TestClient(app) as other_client:
        with app.state.session_factory() as session:
            add_experience(session, title="Lisbon Tram Ride", destination="Lisbon", category="Cultural")

        body = other_client.get(SEARCH, params={"q": "lisbon"}).json()

    assert app.state.engine.url.database.endswith("other.db")
    assert [r["title"] for r in body["data"]["results"]] == ["Lisbon Tram Ride"]
