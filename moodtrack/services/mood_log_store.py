"""
Mood Log Store

Persists mood events to the Supabase `mood_logs` table through its REST
(PostgREST) interface, authenticated with the service-role key.
"""

import json
import logging
from typing import Any, Dict, Optional

import httpx

from moodtrack.config.settings import settings

logger = logging.getLogger(__name__)

TABLE = "mood_logs"

# Columns clients are allowed to write
LOG_FIELDS = ("user_id", "mood", "age_group", "note", "spotify_id", "listened", "play_seconds")


class MoodLogStoreNotConfigured(RuntimeError):
    """Raised when the Supabase URL or service-role key is missing"""


class MoodLogStoreError(Exception):
    """Supabase answered with a non-2xx status"""

    def __init__(self, status_code: int, body: str):
        super().__init__(f"Supabase request failed: {status_code} {body}")
        self.status_code = status_code
        self.body = body


class MoodLogStore:
    """Insert and update rows in `mood_logs`"""

    def __init__(
        self,
        base_url: Optional[str] = None,
        service_role_key: Optional[str] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self._base_url = base_url
        self._service_role_key = service_role_key
        self._transport = transport  # Tests swap in httpx.MockTransport

    @property
    def base_url(self) -> Optional[str]:
        return self._base_url or settings.supabase_url

    @property
    def service_role_key(self) -> Optional[str]:
        return self._service_role_key or settings.supabase_service_role_key

    @property
    def is_configured(self) -> bool:
        return bool(self.base_url and self.service_role_key)

    def _table_url(self) -> str:
        if not self.is_configured:
            raise MoodLogStoreNotConfigured(
                "SUPABASE_URL or SUPABASE_SERVICE_ROLE_KEY not configured on server."
            )
        return f"{self.base_url.rstrip('/')}/rest/v1/{TABLE}"

    def _headers(self) -> Dict[str, str]:
        return {
            "Content-Type": "application/json",
            "apikey": self.service_role_key,
            "Authorization": f"Bearer {self.service_role_key}",
            "Prefer": "return=representation",
        }

    async def insert(self, payload: Dict[str, Any]) -> Any:
        """
        Insert one mood log row.

        Returns:
            The inserted rows as returned by Supabase
        """
        url = self._table_url()
        logger.info(f"📝 Inserting mood log: {payload}")
        return await self._send("POST", url, payload)

    async def update(self, log_id: str, changes: Dict[str, Any]) -> Any:
        """Update the row with the given id (e.g. play_seconds)"""
        url = self._table_url()
        logger.info(f"✏️ Updating mood log {log_id}: {changes}")
        return await self._send("PATCH", url, changes, params={"id": f"eq.{log_id}"})

    async def _send(
        self,
        method: str,
        url: str,
        body: Dict[str, Any],
        params: Optional[Dict[str, str]] = None,
    ) -> Any:
        async with httpx.AsyncClient(timeout=settings.request_timeout, transport=self._transport) as client:
            response = await client.request(method, url, json=body, params=params, headers=self._headers())

        text = response.text
        logger.debug(f"Supabase response status: {response.status_code} body: {text}")

        if not response.is_success:
            logger.error(f"❌ Supabase {method} failed: {response.status_code} {text}")
            raise MoodLogStoreError(response.status_code, text)

        # return=representation gives a JSON array of affected rows
        try:
            return json.loads(text)
        except ValueError:
            return text


def filter_log_fields(body: Dict[str, Any]) -> Dict[str, Any]:
    """Keep only writable columns that were actually provided"""
    return {key: body[key] for key in LOG_FIELDS if body.get(key) is not None}


# Singleton instance
mood_log_store = MoodLogStore()
