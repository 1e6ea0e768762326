"""Minimal Supabase PostgREST client for inserting connection rows."""

from __future__ import annotations

from typing import Any, Dict, Optional

import httpx

from gmail_connect.core.config import SupabaseSettings
from gmail_connect.core.errors import RecorderError


class SupabaseRestClient:
    """Insert rows into a Supabase table through the REST endpoint."""

    def __init__(
        self,
        settings: SupabaseSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not settings.is_configured:
            raise ValueError("Supabase URL and service role key must be provided.")
        self._settings = settings
        self._base_url = str(settings.url).rstrip("/")
        self._transport = transport

    @property
    def table_url(self) -> str:
        return f"{self._base_url}/rest/v1/{self._settings.table}"

    def _headers(self) -> Dict[str, str]:
        key = self._settings.service_role_key or ""
        return {
            "apikey": key,
            "Authorization": f"Bearer {key}",
            "Content-Type": "application/json",
            "Prefer": "return=minimal",
        }

    async def insert_row(self, row: Dict[str, Any]) -> None:
        """POST a single row; raise ``RecorderError`` on any failure."""
        try:
            async with httpx.AsyncClient(
                timeout=self._settings.timeout_seconds, transport=self._transport
            ) as client:
                response = await client.post(self.table_url, json=row, headers=self._headers())
        except httpx.HTTPError as exc:
            raise RecorderError(f"Supabase request failed: {exc}") from exc

        if not response.is_success:
            raise RecorderError(f"Supabase returned {response.status_code}: {response.text}")


__all__ = ["SupabaseRestClient"]
