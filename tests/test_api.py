"""Test API routes with fake upstreams"""

import json

import spotipy

from moodtrack.config.settings import settings
from moodtrack.mood_mappings import MOOD_ACTIVITIES, MoodKey
from moodtrack.services.mood_log_store import MoodLogStore


def test_health(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_moods(client):
    response = client.get("/api/moods")

    assert response.status_code == 200
    assert response.json()["moods"]["happy"]["seed_genres"] == "pop,indie-pop,electro-pop"


# ==================== Search ====================

def test_search(client, fake_spotify):
    response = client.get("/api/search", params={"q": "comfort"})

    assert response.status_code == 200
    assert response.json()["tracks"][0]["name"] == "Walking on Sunshine"
    assert fake_spotify.calls[0][1]["limit"] == settings.search_limit


def test_search_requires_query(client):
    assert client.get("/api/search").status_code == 400
    assert client.get("/api/search", params={"q": "  "}).status_code == 400


def test_search_relays_upstream_status(client, fake_spotify):
    fake_spotify.error = spotipy.SpotifyException(429, -1, "rate limited")

    response = client.get("/api/search", params={"q": "comfort"})

    assert response.status_code == 429
    assert response.json()["detail"] == "rate limited"


# ==================== Recommendations ====================

def test_recommendations(client, fake_spotify):
    response = client.post("/api/recommendations", json={"mood": "sad", "age_group": "13-17"})

    assert response.status_code == 200
    data = response.json()
    assert data["features"] == {
        "valence": 0.2,
        "energy": 0.28,
        "danceability": 0.3,
        "acousticness": 0.8,
        "tempo": 70,
    }
    assert data["seed_genres"] == "indie,alternative,folk"
    assert data["activity"] in MOOD_ACTIVITIES[MoodKey.SAD]
    assert data["age_group"] == "13-17"
    assert fake_spotify.calls[0][1]["target_tempo"] == 70
    assert fake_spotify.calls[0][1]["limit"] == settings.recommendation_limit


def test_recommendations_default_age_group(client):
    response = client.post("/api/recommendations", json={"mood": "calm"})

    assert response.status_code == 200
    assert response.json()["age_group"] == "18-25"


def test_recommendations_unknown_mood_uses_happy(client):
    response = client.post("/api/recommendations", json={"mood": "furious", "age_group": "90+"})

    data = response.json()
    assert data["seed_genres"] == "pop"
    assert data["features"]["tempo"] == 120
    assert data["activity"] == "Take a break"


def test_recommendations_requires_mood(client):
    assert client.post("/api/recommendations", json={}).status_code == 400
    assert client.post("/api/recommendations", json={"mood": " "}).status_code == 400


def test_recommendations_upstream_failure(client, fake_spotify):
    fake_spotify.error = spotipy.SpotifyException(404, -1, "Not found")

    response = client.post("/api/recommendations", json={"mood": "happy"})

    assert response.status_code == 404


# ==================== Mood Logs ====================

def test_create_log(client, supabase):
    payload = {"mood": "happy", "age_group": "18-25", "spotify_id": "t1", "listened": True, "play_seconds": 0}

    response = client.post("/api/log", json=payload)

    assert response.status_code == 200
    assert response.json()["inserted"][0]["id"] == 42
    assert supabase.last_json() == {**payload, "user_id": "guest"}


def test_create_log_drops_unknown_fields(client, supabase):
    client.post("/api/log", json={"mood": "calm", "user_id": "sam", "role": "admin"})

    assert supabase.last_json() == {"mood": "calm", "user_id": "sam"}


def test_create_log_requires_mood(client, supabase):
    response = client.post("/api/log", json={"user_id": "sam"})

    assert response.status_code == 400
    assert supabase.requests == []


def test_create_log_relays_supabase_error(client, supabase):
    supabase.status_code = 409
    supabase.body = "duplicate key"

    response = client.post("/api/log", json={"mood": "sad"})

    assert response.status_code == 409
    assert response.json()["detail"] == "duplicate key"


def test_create_log_without_supabase(client, monkeypatch):
    from moodtrack.main import app, get_mood_log_store

    monkeypatch.setattr(settings, "supabase_url", None)
    monkeypatch.setattr(settings, "supabase_service_role_key", None)
    app.dependency_overrides[get_mood_log_store] = lambda: MoodLogStore()

    response = client.post("/api/log", json={"mood": "sad"})

    assert response.status_code == 500
    assert "not configured" in response.json()["detail"]


def test_patch_log(client, supabase):
    supabase.status_code = 200

    response = client.patch("/api/log/42", json={"play_seconds": 30, "listened": False})

    assert response.status_code == 200
    assert supabase.last.method == "PATCH"
    assert supabase.last.url.params["id"] == "eq.42"
    assert supabase.last_json() == {"play_seconds": 30, "listened": False}
    assert response.json()["updated"][0]["play_seconds"] == 30


def test_patch_log_requires_changes(client, supabase):
    response = client.patch("/api/log/42", json={})

    assert response.status_code == 400
    assert supabase.requests == []


def test_beacon_update_accepts_text_plain(client, supabase):
    supabase.status_code = 200

    response = client.post(
        "/api/log/42",
        content=json.dumps({"play_seconds": 12}),
        headers={"Content-Type": "text/plain;charset=UTF-8"},
    )

    assert response.status_code == 200
    assert supabase.last.method == "PATCH"
    assert supabase.last_json() == {"play_seconds": 12}


def test_beacon_update_rejects_bad_json(client, supabase):
    response = client.post("/api/log/42", content="not json", headers={"Content-Type": "text/plain"})

    assert response.status_code == 400
    assert supabase.requests == []


def test_recommendations_accept_long_unknown_age_group(client):
    response = client.post("/api/recommendations", json={"mood": "sad", "age_group": "not-a-bracket"})

    assert response.status_code == 200
    assert response.json()["features"]["tempo"] == 60


def test_recommendations_accept_long_unknown_mood(client):
    response = client.post("/api/recommendations", json={"mood": "x" * 60, "age_group": "26-35"})

    assert response.status_code == 200
    assert response.json()["seed_genres"] == "pop"


def test_recommendations_blank_age_group_reports_default(client):
    response = client.post("/api/recommendations", json={"mood": "calm", "age_group": "   "})

    assert response.status_code == 200
    assert response.json()["age_group"] == "18-25"


# ==================== CORS ====================

def test_cors_allows_pages_opened_from_disk(client):
    response = client.get("/api/search", params={"q": "comfort"}, headers={"Origin": "null"})

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"


def test_cors_preflight_from_other_port(client):
    response = client.options(
        "/api/recommendations",
        headers={
            "Origin": "http://localhost:8080",
            "Access-Control-Request-Method": "POST",
            "Access-Control-Request-Headers": "content-type",
        },
    )

    assert response.status_code == 200
    assert response.headers["access-control-allow-origin"] == "*"
