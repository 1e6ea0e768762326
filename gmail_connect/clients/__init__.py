"""Expose constructed client wrappers."""

from .google_auth import GoogleOAuthClient, OAuthProfileError, OAuthTokenExchangeError
from .supabase_rest import SupabaseRestClient

__all__ = [
    "GoogleOAuthClient",
    "OAuthProfileError",
    "OAuthTokenExchangeError",
    "SupabaseRestClient",
]
