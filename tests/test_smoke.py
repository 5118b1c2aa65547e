# 📦 /tests/test_smoke.py

from fastapi.testclient import TestClient
import pytest

from api import handlers
from main import app
from schemas.schemas import SavedPreferences
from services import matcher_service
from supabase_client import get_supabase
from utils.errors import MatchingConfigurationError, PreferenceStoreError
from tests.utils.dummies import DummySupabase, make_candidate

client = TestClient(app)


@pytest.fixture(autouse=True)
def dummy_supabase():
    app.dependency_overrides[get_supabase] = lambda: DummySupabase()
    yield
    app.dependency_overrides.clear()


@pytest.fixture
def pool(monkeypatch):
    candidates = [make_candidate(f"t-{i}") for i in range(4)]

    async def fake_fetch(supabase):
        return candidates

    def fake_save(supabase, preferences, user_id=None):
        return SavedPreferences(id="pref-1", session_id="sess-1")

    monkeypatch.setattr(matcher_service, "fetch_candidates", fake_fetch)
    monkeypatch.setattr(matcher_service, "save_matching_preferences", fake_save)
    return candidates


def test_healthcheck():
    response = client.get("/")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_match_info_lists_fields():
    body = client.get("/match").json()
    assert body["requiredFields"] == ["problemAreas"]
    assert "maxDistanceKm" in body["optionalFields"]


def test_match_success_uses_camel_case(pool):
    response = client.post("/match", json={"problemAreas": ["Angst"], "limit": 2})
    assert response.status_code == 200
    body = response.json()
    assert body["total"] == 4
    assert len(body["matches"]) == 2
    assert body["preferences"] == {"id": "pref-1", "sessionId": "sess-1"}
    assert body["zeroResultsAnalysis"] is None
    first = body["matches"][0]
    assert {"therapist", "score", "scoreBreakdown", "explanation", "distanceKm"} <= set(first)
    assert first["therapist"]["displayName"] == "Dr. Test Therapeut"


def test_match_without_results_explains_why(pool):
    response = client.post("/match", json={"problemAreas": ["Angst"], "languages": ["Arabisch"]})
    assert response.status_code == 200
    body = response.json()
    assert body["matches"] == []
    assert body["zeroResultsAnalysis"]["failedFilter"] == "language"
    assert body["zeroResultsAnalysis"]["candidatesWithoutFilter"] == 4


def test_match_requires_problem_areas():
    assert client.post("/match", json={"problemAreas": []}).status_code == 422
    assert client.post("/match", json={"languages": ["Deutsch"]}).status_code == 422


def test_match_rejects_invalid_limit():
    assert client.post("/match", json={"problemAreas": ["Angst"], "limit": 0}).status_code == 422


def test_match_store_unavailable_returns_500(monkeypatch):
    async def broken_fetch(supabase):
        raise MatchingConfigurationError("relation does not exist")

    monkeypatch.setattr(matcher_service, "fetch_candidates", broken_fetch)
    response = client.post("/match", json={"problemAreas": ["Angst"]})
    assert response.status_code == 500
    assert response.json()["status"] == "error"
    assert "relation does not exist" in response.json()["info"]


def test_match_preferences_not_saved_returns_500(pool, monkeypatch):
    def broken_save(supabase, preferences, user_id=None):
        raise PreferenceStoreError("insert failed")

    monkeypatch.setattr(matcher_service, "save_matching_preferences", broken_save)
    response = client.post("/match", json={"problemAreas": ["Angst"]})
    assert response.status_code == 500
    assert response.json()["message"] == "Failed to save matching preferences."


def test_cleanup_preferences(monkeypatch):
    monkeypatch.setattr(handlers, "cleanup_expired_preferences", lambda supabase: 3)
    response = client.post("/admin/cleanup-preferences")
    assert response.status_code == 200
    assert response.json() == {"status": "success", "deleted": 3}


def test_filter_options(pool):
    response = client.get("/match/filter-options", params={"languages": ["Deutsch"], "insuranceType": "PUBLIC"})
    assert response.status_code == 200
    body = response.json()
    assert set(body) == {"languages", "insuranceTypes", "problemAreas", "formats"}
    public = next(o for o in body["insuranceTypes"] if o["value"] == "PUBLIC")
    assert public == {"value": "PUBLIC", "label": "Krankenkasse", "count": 4, "available": True}


def test_filter_options_store_unavailable_returns_500(monkeypatch):
    async def broken_fetch(supabase):
        raise MatchingConfigurationError("timeout")

    monkeypatch.setattr(matcher_service, "fetch_candidates", broken_fetch)
    response = client.get("/match/filter-options")
    assert response.status_code == 500
    assert response.json()["message"] == "Failed to fetch filter options."
