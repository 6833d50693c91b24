"""
Spotify Client - Client Credentials only

Public endpoints (search, recommendations) are all this service needs, so the
client-credentials flow is used. Spotipy exchanges the client id/secret for
an access token and refreshes it when it expires.
"""

import logging
from typing import List, Dict, Any, Optional

import spotipy
from spotipy.oauth2 import SpotifyClientCredentials

from moodtrack.config.settings import settings
from moodtrack.mood_mappings import resolve_features

logger = logging.getLogger(__name__)


class SpotifyNotConfiguredError(RuntimeError):
    """Raised when Spotify credentials are missing"""


class SpotifyClient:
    """
    Spotify REST API wrapper using Spotipy.

    The underlying spotipy client is created on first use, so the server can
    start (and serve mood logging) without Spotify credentials.
    """

    def __init__(
        self,
        sp: Optional[spotipy.Spotify] = None,
        client_id: Optional[str] = None,
        client_secret: Optional[str] = None,
    ):
        self._sp = sp
        self._client_id = client_id
        self._client_secret = client_secret

    @property
    def sp(self) -> spotipy.Spotify:
        if self._sp is None:
            self._sp = self._connect()
        return self._sp

    def _connect(self) -> spotipy.Spotify:
        """Initialize the Client Credentials client"""
        client_id = self._client_id or settings.spotify_client_id
        client_secret = self._client_secret or settings.spotify_client_secret
        if not client_id or not client_secret:
            raise SpotifyNotConfiguredError(
                "SPOTIFY_CLIENT_ID and SPOTIFY_CLIENT_SECRET environment variables are required."
            )

        auth_manager = SpotifyClientCredentials(
            client_id=client_id,
            client_secret=client_secret,
        )
        logger.info("✅ Spotify Client Credentials initialized")
        return spotipy.Spotify(
            auth_manager=auth_manager,
            requests_timeout=settings.request_timeout,
        )

    # ==================== Search & Recommendations ====================

    def search_tracks(self, query: str, limit: int = 8) -> List[Dict[str, Any]]:
        """Search for tracks on Spotify"""
        try:
            results = self.sp.search(q=query, type='track', limit=limit)
        except spotipy.SpotifyException as e:
            logger.error(f"Search error: {e}")
            raise

        tracks = results.get('tracks') or {}
        return [self.format_track(item) for item in tracks.get('items') or [] if item]

    def get_recommendations(
        self,
        seed_genres: Optional[List[str]] = None,
        limit: int = 8,
        **audio_features
    ) -> List[Dict[str, Any]]:
        """Get song recommendations based on genre seeds and target audio features"""
        params: Dict[str, Any] = {'limit': limit}
        if seed_genres:
            params['seed_genres'] = seed_genres[:5]

        # target_valence, target_energy, ...
        params.update(audio_features)

        try:
            results = self.sp.recommendations(**params)
        except spotipy.SpotifyException as e:
            logger.error(f"Recommendations error: {e}")
            raise

        return [self.format_track(item) for item in results.get('tracks') or [] if item]

    def recommend_for_mood(
        self,
        mood: str,
        age_group: Optional[str] = None,
        limit: int = 8
    ) -> Dict[str, Any]:
        """
        Recommend tracks for a mood and age group.

        Returns:
            Dict with tracks, the rounded target features and the genre seeds used
        """
        resolved = resolve_features(mood, age_group)
        params = resolved.to_query_params()
        params.pop('seed_genres')
        logger.info(f"🎯 Recommending for mood='{mood}' age_group='{age_group}' seeds={resolved.seed_genres}")

        tracks = self.get_recommendations(
            seed_genres=resolved.genre_list,
            limit=limit,
            **params
        )
        return {
            'tracks': tracks,
            'features': resolved.profile.to_dict(),
            'seed_genres': resolved.seed_genres,
        }

    # ==================== Helper Methods ====================

    @staticmethod
    def format_track(track: Dict[str, Any]) -> Dict[str, Any]:
        """Format track data for API response"""
        artists = [{'id': artist.get('id'), 'name': artist['name']} for artist in track.get('artists') or []]
        album = track.get('album') or {}
        images = album.get('images') or []
        return {
            'id': track['id'],
            'name': track['name'],
            'artists': artists,
            'artist': ', '.join(artist['name'] for artist in artists),
            'album': album.get('name'),
            'uri': track.get('uri'),
            'external_url': (track.get('external_urls') or {}).get('spotify'),
            'album_art': images[0]['url'] if images else None,
            'preview_url': track.get('preview_url'),
            'duration_ms': track.get('duration_ms'),
            'popularity': track.get('popularity')
        }


# Singleton instance
spotify_client = SpotifyClient()
