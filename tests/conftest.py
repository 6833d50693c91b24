"""Shared fixtures: fake Spotify, mocked Supabase, API test client"""

import json

import httpx
import pytest
from fastapi.testclient import TestClient

from moodtrack.main import app, get_mood_log_store, get_spotify_client
from moodtrack.services.mood_log_store import MoodLogStore
from moodtrack.services.spotify_client import SpotifyClient

SUPABASE_URL = "https://example.supabase.co/"
SERVICE_KEY = "service-role-key"


def make_track(track_id="t1", name="Walking on Sunshine", artists=("Katrina and the Waves",), preview=True):
    return {
        "id": track_id,
        "name": name,
        "artists": [{"id": f"a{i}", "name": artist} for i, artist in enumerate(artists)],
        "album": {"name": "Album", "images": [{"url": "https://img.example/cover.jpg"}]},
        "uri": f"spotify:track:{track_id}",
        "external_urls": {"spotify": f"https://open.spotify.com/track/{track_id}"},
        "preview_url": "https://p.scdn.co/preview.mp3" if preview else None,
        "duration_ms": 200000,
        "popularity": 70,
    }


class FakeSpotify:
    """Stands in for spotipy.Spotify and records calls"""

    def __init__(self, tracks=None, error=None):
        self.tracks = tracks if tracks is not None else [make_track()]
        self.error = error
        self.calls = []

    def search(self, q, type, limit):
        self.calls.append(("search", {"q": q, "type": type, "limit": limit}))
        if self.error:
            raise self.error
        return {"tracks": {"items": self.tracks}}

    def recommendations(self, **params):
        self.calls.append(("recommendations", params))
        if self.error:
            raise self.error
        return {"tracks": self.tracks}


class SupabaseRecorder:
    """httpx.MockTransport handler that remembers requests"""

    def __init__(self, status_code=201, body=None):
        self.status_code = status_code
        self.body = body
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.body is not None:
            return httpx.Response(self.status_code, text=self.body)
        rows = json.loads(request.content or b"{}")
        return httpx.Response(self.status_code, json=[{"id": 42, **rows}])

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def last_json(self):
        return json.loads(self.last.content)


@pytest.fixture
def fake_spotify():
    return FakeSpotify()


@pytest.fixture
def supabase():
    return SupabaseRecorder()


@pytest.fixture
def store(supabase):
    return MoodLogStore(SUPABASE_URL, SERVICE_KEY, transport=httpx.MockTransport(supabase))


@pytest.fixture
def client(fake_spotify, store):
    app.dependency_overrides[get_spotify_client] = lambda: SpotifyClient(sp=fake_spotify)
    app.dependency_overrides[get_mood_log_store] = lambda: store
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
