"""
MoodTrack API

Thin proxy between the mood front-end and its two upstreams:
1. Spotify Web API - track search and mood/age based recommendations
2. Supabase REST - mood log persistence
"""
import json
import logging
from contextlib import asynccontextmanager
from typing import Optional

import spotipy
import uvicorn
from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.staticfiles import StaticFiles
from pydantic import ValidationError
from spotipy.oauth2 import SpotifyOauthError

from moodtrack.config.settings import settings
from moodtrack.models.schemas import (
    MoodCatalog,
    MoodLogCreate,
    MoodLogInserted,
    MoodLogUpdate,
    MoodLogUpdated,
    RecommendationRequest,
    RecommendationResponse,
    SearchResponse,
)
from moodtrack.mood_mappings import DEFAULT_AGE_GROUP, describe_moods, suggest_activity
from moodtrack.services.mood_log_store import (
    MoodLogStore,
    MoodLogStoreError,
    MoodLogStoreNotConfigured,
    filter_log_fields,
    mood_log_store,
)
from moodtrack.services.spotify_client import SpotifyClient, SpotifyNotConfiguredError, spotify_client

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings.log_configuration()
    yield


# Initialize FastAPI
app = FastAPI(
    title="MoodTrack API",
    version=settings.server_version,
    description="Mood-based Spotify recommendations and mood logging",
    lifespan=lifespan
)

# Configure CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ==================== Dependencies ====================

def get_spotify_client() -> SpotifyClient:
    return spotify_client


def get_mood_log_store() -> MoodLogStore:
    return mood_log_store


def spotify_http_error(e: Exception) -> HTTPException:
    """Translate a Spotify failure into an HTTP error for the front-end"""
    if isinstance(e, SpotifyNotConfiguredError):
        return HTTPException(status_code=500, detail=str(e))
    if isinstance(e, SpotifyOauthError):
        return HTTPException(status_code=500, detail=f"Token request failed: {e}")
    if isinstance(e, spotipy.SpotifyException):
        status = e.http_status if e.http_status and e.http_status >= 400 else 502
        return HTTPException(status_code=status, detail=e.msg)
    return HTTPException(status_code=500, detail=str(e))


def store_http_error(e: Exception) -> HTTPException:
    """Translate a Supabase failure into an HTTP error for the front-end"""
    if isinstance(e, MoodLogStoreNotConfigured):
        return HTTPException(status_code=500, detail=str(e))
    if isinstance(e, MoodLogStoreError):
        return HTTPException(status_code=e.status_code, detail=e.body)
    return HTTPException(status_code=500, detail=str(e))


# ==================== Health Check ====================

@app.get("/")
def root():
    """Health check endpoint"""
    return {
        "service": settings.server_name,
        "version": settings.server_version,
        "status": "healthy",
        "spotify_configured": settings.spotify_configured,
        "supabase_configured": settings.supabase_configured
    }


# ==================== Moods ====================

@app.get("/api/moods", response_model=MoodCatalog)
def list_moods():
    """Known moods with their base audio features, genre seeds and activities"""
    return describe_moods()


# ==================== Spotify Proxy ====================

@app.get("/api/search", response_model=SearchResponse)
def search(
    q: Optional[str] = Query(None, description="Search query, e.g. 'comfort'"),
    client: SpotifyClient = Depends(get_spotify_client)
):
    """Search Spotify tracks"""
    if not q or not q.strip():
        raise HTTPException(status_code=400, detail="Missing q query parameter")

    try:
        tracks = client.search_tracks(q.strip(), limit=settings.search_limit)
    except Exception as e:
        logger.error(f"❌ Error in /api/search: {e}")
        raise spotify_http_error(e)

    return {"tracks": tracks}


@app.post("/api/recommendations", response_model=RecommendationResponse)
def recommendations(
    request: RecommendationRequest,
    client: SpotifyClient = Depends(get_spotify_client)
):
    """
    Mood + age group recommendations

    Flow:
    1. Map mood and age group to target audio features and genre seeds
    2. Query Spotify /recommendations with those targets
    3. Return tracks, the targets used and an activity suggestion
    """
    if not request.mood or not request.mood.strip():
        raise HTTPException(status_code=400, detail="Missing mood in body")

    mood = request.mood.strip()
    age_group = (request.age_group or "").strip() or DEFAULT_AGE_GROUP.value
    limit = request.limit or settings.recommendation_limit

    try:
        result = client.recommend_for_mood(mood, age_group, limit=limit)
    except Exception as e:
        logger.error(f"❌ Error in /api/recommendations: {e}")
        raise spotify_http_error(e)

    return {
        "tracks": result["tracks"],
        "mood": mood,
        "age_group": age_group,
        "features": result["features"],
        "seed_genres": result["seed_genres"],
        "activity": suggest_activity(mood)
    }


# ==================== Mood Logs ====================

@app.post("/api/log", response_model=MoodLogInserted)
async def create_log(body: MoodLogCreate, store: MoodLogStore = Depends(get_mood_log_store)):
    """Save a mood log to Supabase"""
    if not store.is_configured:
        raise store_http_error(MoodLogStoreNotConfigured(
            "SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not configured on server."
        ))

    payload = filter_log_fields(body.model_dump())
    if not payload.get("user_id"):
        payload["user_id"] = "guest"
    if not payload.get("mood"):
        raise HTTPException(status_code=400, detail="Missing mood in payload")

    try:
        inserted = await store.insert(payload)
    except Exception as e:
        logger.error(f"❌ Error in /api/log: {e}")
        raise store_http_error(e)

    return {"inserted": inserted}


async def _update_log(log_id: str, changes: MoodLogUpdate, store: MoodLogStore):
    if not log_id.strip():
        raise HTTPException(status_code=400, detail="Missing id param")
    if not store.is_configured:
        raise store_http_error(MoodLogStoreNotConfigured(
            "SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not configured on server."
        ))

    payload = filter_log_fields(changes.model_dump())
    if not payload:
        raise HTTPException(status_code=400, detail="No fields to update")

    try:
        updated = await store.update(log_id, payload)
    except Exception as e:
        logger.error(f"❌ Error updating log {log_id}: {e}")
        raise store_http_error(e)

    return {"updated": updated}


@app.patch("/api/log/{log_id}", response_model=MoodLogUpdated)
async def update_log(log_id: str, body: MoodLogUpdate, store: MoodLogStore = Depends(get_mood_log_store)):
    """Update an existing mood log (e.g. play_seconds)"""
    return await _update_log(log_id, body, store)


@app.post("/api/log/{log_id}", response_model=MoodLogUpdated)
async def beacon_update_log(log_id: str, request: Request, store: MoodLogStore = Depends(get_mood_log_store)):
    """
    Same as PATCH, for navigator.sendBeacon

    Beacons can only POST and send the JSON as text/plain, so the body is
    parsed by hand.
    """
    raw = await request.body()
    try:
        changes = MoodLogUpdate.model_validate(json.loads(raw or b"{}"))
    except (ValueError, ValidationError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid body: {e}")

    return await _update_log(log_id, changes, store)


# Serve static files AFTER API routes
if settings.static_dir:
    app.mount("/", StaticFiles(directory=settings.static_dir, html=True), name="static")


# ==================== Server Startup ====================

def start_server():
    logger.info(f"🎵 Starting MoodTrack server on http://localhost:{settings.port}")
    logger.info(f"📚 API Docs: http://localhost:{settings.port}/docs")

    uvicorn.run(
        "moodtrack.main:app",
        host=settings.host,
        port=settings.port,
        log_level="info"
    )


if __name__ == "__main__":
    start_server()
