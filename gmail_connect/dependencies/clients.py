"""
Factory functions to provide shared clients and services as FastAPI dependencies.
"""

import logging
from functools import lru_cache
from typing import Optional

from gmail_connect.clients import GoogleOAuthClient, SupabaseRestClient
from gmail_connect.core.config import get_settings
from gmail_connect.core.errors import ConfigurationError
from gmail_connect.services import (
    ConnectionRecorder,
    SignupFlowService,
    StateTokenSigner,
    TokenCipherService,
)

logger = logging.getLogger(__name__)

DEVELOPMENT_STATE_SECRET = "change-this-secret"


@lru_cache()
def _settings():
    """Internal helper to cache settings for client factories."""
    return get_settings()


@lru_cache()
def get_state_signer() -> StateTokenSigner:
    """Provide the state token signer, preferring a dedicated secret."""
    settings = _settings()
    secret = settings.signing_secret
    if not secret:
        if not settings.is_development:
            raise ConfigurationError("STATE_SECRET is not configured.")
        logger.warning("STATE_SECRET is not set; using the development signing secret.")
        secret = DEVELOPMENT_STATE_SECRET
    return StateTokenSigner(secret_key=secret, max_age_ms=settings.oauth.state_ttl_ms)


@lru_cache()
def get_google_oauth_client() -> Optional[GoogleOAuthClient]:
    """Create a singleton Google OAuth client, or ``None`` when unconfigured."""
    settings = _settings()
    if not settings.google.is_configured:
        return None
    return GoogleOAuthClient(settings.google, settings.oauth)


@lru_cache()
def get_supabase_client() -> Optional[SupabaseRestClient]:
    """Provide the Supabase REST client when the store is configured."""
    settings = _settings()
    if not settings.supabase.is_configured:
        return None
    return SupabaseRestClient(settings.supabase)


@lru_cache()
def get_token_cipher_service() -> Optional[TokenCipherService]:
    """Provide token encryption when a dedicated secret is configured."""
    secret = _settings().security.token_encryption_secret
    if not secret:
        return None
    return TokenCipherService(secret=secret)


def get_signup_flow_service() -> SignupFlowService:
    """Build the OAuth orchestrator from the shared signer and client."""
    return SignupFlowService(
        signer=get_state_signer(),
        oauth_client=get_google_oauth_client(),
    )


def get_connection_recorder() -> ConnectionRecorder:
    """Build the recorder forwarding completed connections to Supabase."""
    return ConnectionRecorder(
        store=get_supabase_client(),
        token_cipher=get_token_cipher_service(),
    )


__all__ = [
    "get_connection_recorder",
    "get_google_oauth_client",
    "get_signup_flow_service",
    "get_state_signer",
    "get_supabase_client",
    "get_token_cipher_service",
]
