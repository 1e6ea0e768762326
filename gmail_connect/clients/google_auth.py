"""
Google OAuth utilities.

These helpers build the Gmail consent URL, exchange the authorization code
returned to the callback and look up the Google account that granted access.
"""

from __future__ import annotations

import asyncio
from typing import Optional, Tuple
from urllib.parse import urlencode

import httplib2
import httpx
from fastapi import status
from google.auth.exceptions import GoogleAuthError
from google.oauth2.credentials import Credentials
from googleapiclient.discovery import build
from googleapiclient.errors import Error as GoogleApiClientError

from gmail_connect.core.config import GoogleSettings, OAuthSettings
from gmail_connect.schemas import GoogleProfile


class OAuthTokenExchangeError(Exception):
    """Raised when the token endpoint returns an error."""


class OAuthProfileError(Exception):
    """Raised when the authenticated user's profile cannot be fetched."""


class GoogleOAuthClient:
    """Build Google authorization URLs and exchange authorization codes."""

    AUTH_BASE_URL = "https://accounts.google.com/o/oauth2/v2/auth"
    TOKEN_URL = "https://oauth2.googleapis.com/token"

    def __init__(
        self,
        google_settings: GoogleSettings,
        oauth_settings: OAuthSettings,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        if not google_settings.is_configured:
            raise ValueError("Google client id and secret must be provided.")
        self._google = google_settings
        self._oauth = oauth_settings
        self._transport = transport

    def build_authorization_url(self, state: str, access_type: str = "offline") -> str:
        """Construct the Google OAuth consent URL."""
        params = {
            "client_id": self._google.client_id,
            "redirect_uri": str(self._google.redirect_uri),
            "response_type": "code",
            "scope": " ".join(self._oauth.scopes),
            "access_type": access_type,
            "include_granted_scopes": "true",
            # Forces a refresh token even when the user consented before.
            "prompt": "consent",
            "state": state,
        }
        query = urlencode(params)
        return f"{self.AUTH_BASE_URL}?{query}"

    async def exchange_authorization_code(
        self, code: str
    ) -> Tuple[str, Optional[str], Optional[int]]:
        """
        Exchange an authorization code for tokens.

        Returns a tuple of (access_token, refresh_token, expires_in_seconds).
        Google omits the refresh token when the grant already has one.
        """
        payload = {
            "code": code,
            "client_id": self._google.client_id,
            "client_secret": self._google.client_secret,
            "redirect_uri": str(self._google.redirect_uri),
            "grant_type": "authorization_code",
        }

        try:
            async with httpx.AsyncClient(timeout=10.0, transport=self._transport) as client:
                response = await client.post(self.TOKEN_URL, data=payload)
        except httpx.HTTPError as exc:
            raise OAuthTokenExchangeError(f"Token endpoint unreachable: {exc}") from exc

        if response.status_code != status.HTTP_200_OK:
            raise OAuthTokenExchangeError(response.text)

        try:
            token_payload = response.json()
        except ValueError as exc:
            raise OAuthTokenExchangeError("Token endpoint returned invalid JSON.") from exc

        access_token = token_payload.get("access_token")
        refresh_token = token_payload.get("refresh_token")
        expires_in = token_payload.get("expires_in")

        if not access_token:
            raise OAuthTokenExchangeError("Incomplete token payload returned from Google.")

        return access_token, refresh_token, int(expires_in) if expires_in else None

    async def fetch_user_profile(self, access_token: str) -> GoogleProfile:
        """Return the Google account id and email for ``access_token``."""
        credentials = Credentials(token=access_token)

        def _execute_fetch() -> dict:
            service = build("oauth2", "v2", credentials=credentials, cache_discovery=False)
            return service.userinfo().get().execute()

        try:
            user_info = await asyncio.to_thread(_execute_fetch)
        except (
            GoogleApiClientError,
            httplib2.HttpLib2Error,
            GoogleAuthError,
            OSError,
        ) as exc:
            raise OAuthProfileError(f"Userinfo request failed: {exc}") from exc

        if not user_info.get("id"):
            raise OAuthProfileError("Userinfo response did not include an account id.")
        return GoogleProfile(id=str(user_info["id"]), email=user_info.get("email"))


__all__ = [
    "GoogleOAuthClient",
    "OAuthProfileError",
    "OAuthTokenExchangeError",
]
