import pytest

from maps_leads.core import config
from maps_leads.core.errors import CollaboratorError
from maps_leads.jobs import scrape_server


@pytest.fixture
def client():
    return scrape_server.app.test_client()


@pytest.fixture
def captured(monkeypatch):
    calls = {}

    def fake_scrape(query, limit, filters):
        calls.update(query=query, limit=limit, filters=filters)
        return {"businesses": [], "stats": {"total": 0}, "query": query, "extractedAt": "2024-05-01T12:00:00+00:00"}

    monkeypatch.setattr(scrape_server.service, "scrape", fake_scrape)
    return calls


def test_root_and_health(client, monkeypatch):
    monkeypatch.delenv("STAGNATION_MODE", raising=False)
    config.get_settings.cache_clear()

    assert client.get("/").status_code == 200
    response = client.get("/healthz")
    assert response.status_code == 200
    assert response.get_json()["status"] == "ok"

    config.get_settings.cache_clear()


def test_scrape_requires_query(client):
    response = client.post("/api/scrape", json={})
    assert response.status_code == 400
    assert response.get_json()["error"] == "query is required"

    assert client.post("/api/scrape", json={"query": "   "}).status_code == 400


def test_scrape_rejects_bad_filters_and_limit(client):
    assert client.post("/api/scrape", json={"query": "dentist", "filters": {"minRating": "high"}}).status_code == 400
    assert client.post("/api/scrape", json={"query": "dentist", "limit": "bad"}).status_code == 400
    assert client.post("/api/scrape", json={"query": "dentist", "limit": -5}).status_code == 400


def test_scrape_passes_params(client, captured):
    response = client.post(
        "/api/scrape",
        json={"query": "dentist downtown", "limit": 5, "filters": {"needsWebsite": True, "categories": ["dent"]}},
    )

    assert response.status_code == 200
    assert response.get_json()["query"] == "dentist downtown"
    assert captured["limit"] == 5
    assert captured["filters"].needs_website is True
    assert captured["filters"].categories == ("dent",)


def test_scrape_defaults_limit(client, captured):
    client.post("/api/scrape", json={"query": "plumber"})
    assert captured["limit"] == 100


def test_scrape_collaborator_failure_is_server_error(client, monkeypatch):
    def failing_scrape(query, limit, filters):
        raise CollaboratorError("Failed to open Maps results: timeout")

    monkeypatch.setattr(scrape_server.service, "scrape", failing_scrape)

    response = client.post("/api/scrape", json={"query": "dentist"})

    assert response.status_code == 500
    assert "timeout" in response.get_json()["error"]


def test_analyze_endpoint(client):
    businesses = [
        {"title": "A", "category": "Dentist", "opportunityScore": 90, "webPresence": {"type": "none", "needsWebsite": True, "priority": "high"}},
        {"title": "B", "category": "Bakery", "opportunityScore": 10},
    ]

    response = client.post("/api/analyze", json={"businesses": businesses})

    assert response.status_code == 200
    analysis = response.get_json()["analysis"]
    assert analysis["total"] == 1
    assert analysis["byPriority"] == {"high": 1, "medium": 0, "low": 0}


def test_analyze_validates_payload(client):
    assert client.post("/api/analyze", json={}).status_code == 400
    assert client.post("/api/analyze", json={"businesses": {"title": "A"}}).status_code == 400
    assert client.post("/api/analyze", json=[1, 2]).status_code == 400
    assert client.post("/api/analyze", data="not json").status_code == 400
