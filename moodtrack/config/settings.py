import logging
from typing import List, Optional

from pydantic_settings import BaseSettings

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """MoodTrack server settings"""

    # Spotify API - Client Credentials
    spotify_client_id: Optional[str] = None
    spotify_client_secret: Optional[str] = None

    # Supabase REST (PostgREST) - mood log persistence
    supabase_url: Optional[str] = None
    supabase_service_role_key: Optional[str] = None

    # Server settings
    server_name: str = "moodtrack"
    server_version: str = "1.0.0"
    host: str = "0.0.0.0"
    port: int = 3001
    allowed_origins: List[str] = ["*"]  # Narrow via ALLOWED_ORIGINS, e.g. '["http://localhost:3001"]'
    static_dir: Optional[str] = None  # Front-end files, mounted after API routes

    # Upstream calls
    search_limit: int = 8
    recommendation_limit: int = 8
    request_timeout: float = 10.0

    class Config:
        env_file = ".env"
        case_sensitive = False
        extra = "ignore"

    @property
    def spotify_configured(self) -> bool:
        return bool(self.spotify_client_id and self.spotify_client_secret)

    @property
    def supabase_configured(self) -> bool:
        return bool(self.supabase_url and self.supabase_service_role_key)

    def log_configuration(self):
        """Report which credentials are present without echoing secrets"""
        logger.info("=== Server Configuration ===")
        logger.info(f"SPOTIFY_CLIENT_ID: {'set' if self.spotify_client_id else 'missing'}")
        logger.info(f"SPOTIFY_CLIENT_SECRET: {'set' if self.spotify_client_secret else 'missing'}")
        logger.info(f"SUPABASE_URL: {self.supabase_url or 'missing'}")
        logger.info(f"SUPABASE_SERVICE_ROLE_KEY: {'set' if self.supabase_service_role_key else 'missing'}")
        logger.info(f"PORT: {self.port}")

        if not self.spotify_configured:
            logger.warning(
                "⚠️ SPOTIFY_CLIENT_ID or SPOTIFY_CLIENT_SECRET not set. "
                "Search and recommendations will fail until provided."
            )
        if not self.supabase_configured:
            logger.warning("⚠️ SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not set. Mood logging is disabled.")


settings = Settings()
