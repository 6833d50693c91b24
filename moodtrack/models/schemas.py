"""Pydantic models for API request/response validation"""

from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class RecommendationRequest(BaseModel):
    """
    Request model for mood-based recommendations
    The front-end sends the selected mood and age group to /api/recommendations
    """
    mood: Optional[str] = Field(None, description="Selected mood (happy, energetic, calm, sad, stressed)")
    age_group: Optional[str] = Field(None, description="Age bracket, defaults to 18-25")
    limit: Optional[int] = Field(None, ge=1, le=100, description="Number of tracks")

    class Config:
        json_schema_extra = {
            "example": {"mood": "calm", "age_group": "26-35"}
        }


class MoodLogCreate(BaseModel):
    """A mood event to store in mood_logs"""
    user_id: Optional[str] = None
    mood: Optional[str] = None
    age_group: Optional[str] = None
    note: Optional[str] = None
    spotify_id: Optional[str] = None
    listened: Optional[bool] = None
    play_seconds: Optional[int] = Field(None, ge=0)

    class Config:
        json_schema_extra = {
            "example": {
                "user_id": "guest",
                "mood": "happy",
                "age_group": "18-25",
                "spotify_id": "4uLU6hMCjMI75M1A2tKUQC",
                "listened": True,
                "play_seconds": 0
            }
        }


class MoodLogUpdate(BaseModel):
    """Changes to an existing mood log, usually playback progress"""
    user_id: Optional[str] = None
    mood: Optional[str] = None
    age_group: Optional[str] = None
    spotify_id: Optional[str] = None
    note: Optional[str] = None
    listened: Optional[bool] = None
    play_seconds: Optional[int] = Field(None, ge=0)


class Artist(BaseModel):
    id: Optional[str] = None
    name: str


class Track(BaseModel):
    """Spotify track information"""
    id: str
    name: str
    artists: List[Artist] = []
    artist: str = ""
    album: Optional[str] = None
    uri: Optional[str] = None
    external_url: Optional[str] = None
    album_art: Optional[str] = None
    preview_url: Optional[str] = None
    duration_ms: Optional[int] = None
    popularity: Optional[int] = None


class AudioFeatures(BaseModel):
    """Rounded target audio features sent to Spotify"""
    valence: float
    energy: float
    danceability: float
    acousticness: float
    tempo: int


class SearchResponse(BaseModel):
    tracks: List[Track]


class RecommendationResponse(BaseModel):
    """Tracks plus the parameters used to find them"""
    tracks: List[Track]
    mood: str
    age_group: str
    features: AudioFeatures
    seed_genres: str
    activity: str


class MoodLogInserted(BaseModel):
    inserted: Any


class MoodLogUpdated(BaseModel):
    updated: Any


class MoodCatalog(BaseModel):
    """Known moods, their base features and the selectable age groups"""
    moods: Dict[str, Dict[str, Any]]
    age_groups: List[str]
    default_age_group: str
