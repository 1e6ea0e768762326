"""
Orchestrates the Google OAuth round trip for a company signup.

``begin_auth`` turns a signup into a consent URL whose ``state`` parameter
is a signed token; ``complete_auth`` trusts the callback only once that token
verifies, then exchanges the code and identifies the Google account.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from gmail_connect.clients import (
    GoogleOAuthClient,
    OAuthProfileError,
    OAuthTokenExchangeError,
)
from gmail_connect.core.errors import (
    InvalidOrExpiredStateError,
    MissingAuthorizationCodeError,
    MissingStateError,
    ProviderExchangeFailedError,
    ProviderNotConfiguredError,
)
from gmail_connect.schemas import CompletedSignup, OAuthGrant, SignupIntent
from gmail_connect.services.state_tokens import StateTokenSigner, now_ms

logger = logging.getLogger(__name__)


class SignupFlowService:
    """Mint state for new signups and complete verified OAuth callbacks."""

    def __init__(
        self,
        signer: StateTokenSigner,
        oauth_client: Optional[GoogleOAuthClient],
        *,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        self._signer = signer
        self._oauth = oauth_client
        self._clock = clock

    def _require_client(self) -> GoogleOAuthClient:
        if self._oauth is None:
            raise ProviderNotConfiguredError()
        return self._oauth

    def mint_state(self, intent: SignupIntent) -> str:
        return self._signer.mint(intent)

    def begin_auth(self, intent: SignupIntent) -> str:
        """Return the Google consent URL for a freshly minted signup state."""
        client = self._require_client()
        return client.build_authorization_url(state=self.mint_state(intent))

    def authorization_url(self, state: Optional[str]) -> str:
        """Return the consent URL for a state minted earlier by ``/register``."""
        client = self._require_client()
        if not state:
            raise MissingStateError()
        if self._signer.verify(state) is None:
            raise InvalidOrExpiredStateError()
        return client.build_authorization_url(state=state)

    async def complete_auth(
        self,
        code: Optional[str],
        state: Optional[str],
        error: Optional[str] = None,
    ) -> CompletedSignup:
        client = self._require_client()

        if error or not code:
            logger.info("OAuth callback without authorization code (error=%s).", error)
            raise MissingAuthorizationCodeError(error)

        intent = self._signer.verify(state)
        if intent is None:
            raise InvalidOrExpiredStateError()

        exchanged_at_ms = self._clock()
        try:
            access_token, refresh_token, expires_in = await client.exchange_authorization_code(
                code
            )
            profile = await client.fetch_user_profile(access_token)
        except (OAuthTokenExchangeError, OAuthProfileError) as exc:
            logger.error("Google OAuth exchange failed for %s: %s", intent.company_name, exc)
            raise ProviderExchangeFailedError(str(exc)) from exc

        if refresh_token is None:
            logger.warning("Google returned no refresh token for %s.", profile.email)

        grant = OAuthGrant(
            access_token=access_token,
            refresh_token=refresh_token,
            expiry_date=exchanged_at_ms + expires_in * 1000 if expires_in else None,
            google_user_id=profile.id,
            google_email=profile.email,
        )
        return CompletedSignup(intent=intent, grant=grant)


__all__ = ["SignupFlowService"]
