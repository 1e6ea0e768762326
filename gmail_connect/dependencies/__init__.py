"""Expose dependency helpers for FastAPI routers."""

from .clients import (
    get_connection_recorder,
    get_google_oauth_client,
    get_signup_flow_service,
    get_state_signer,
    get_supabase_client,
    get_token_cipher_service,
)
from .config import SettingsDependency, get_app_settings

__all__ = [
    "SettingsDependency",
    "get_app_settings",
    "get_connection_recorder",
    "get_google_oauth_client",
    "get_signup_flow_service",
    "get_state_signer",
    "get_supabase_client",
    "get_token_cipher_service",
]
