"""
Application configuration models and helpers.

Centralizes settings management so the web app, the signup flow and the
maintenance scripts share a consistent configuration surface.
"""

from functools import lru_cache
from pathlib import Path
from typing import Annotated, Optional

import os

from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict

DEFAULT_REDIRECT_URI = "http://localhost:3000/auth/google/callback"

GMAIL_SCOPES: tuple[str, ...] = (
    "https://www.googleapis.com/auth/gmail.modify",
    "https://www.googleapis.com/auth/userinfo.email",
    "https://www.googleapis.com/auth/userinfo.profile",
    "openid",
)


def _load_env_file(path: str = ".env") -> None:
    """Copy key=value pairs from an explicit .env file into ``os.environ``.

    The running app reads ``.env`` through ``env_file`` on each settings
    model, so this is not called at import. ``scripts/check_env.py`` uses it
    to validate an arbitrary ``--env-file`` path, which the nested settings
    models would otherwise never see. Variables already set win.
    """
    env_path = Path(path)
    if not env_path.exists():
        return
    for raw_line in env_path.read_text().splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        key, sep, value = line.partition("=")
        if not sep:
            continue
        key = key.strip()
        if not key or key in os.environ:
            continue
        cleaned = value.strip().strip('"').strip("'")
        os.environ[key] = cleaned


# Fields load only from their env aliases.
_BASE_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    extra="ignore",
)


class GoogleSettings(BaseSettings):
    """OAuth client credentials registered in the Google Cloud console."""

    model_config = _BASE_CONFIG

    client_id: Optional[str] = Field(None, validation_alias="GOOGLE_CLIENT_ID")
    client_secret: Optional[str] = Field(None, validation_alias="GOOGLE_CLIENT_SECRET")
    redirect_uri: str = Field(DEFAULT_REDIRECT_URI, validation_alias="GOOGLE_REDIRECT_URI")

    @property
    def is_configured(self) -> bool:
        return bool(self.client_id and self.client_secret)


class OAuthSettings(BaseSettings):
    """OAuth flow configuration."""

    model_config = _BASE_CONFIG

    state_ttl_seconds: int = Field(600, validation_alias="OAUTH_STATE_TTL_SECONDS", gt=0)
    scopes: Annotated[tuple[str, ...], NoDecode] = Field(
        GMAIL_SCOPES, validation_alias="OAUTH_SCOPES"
    )

    @field_validator("scopes", mode="before")
    @classmethod
    def _split_scopes(
        cls, value: str | tuple[str, ...] | list[str]
    ) -> tuple[str, ...]:
        """Support providing scopes as a comma-separated string."""
        if isinstance(value, tuple):
            return value
        if isinstance(value, list):
            return tuple(value)
        return tuple(scope.strip() for scope in value.split(",") if scope.strip())

    @property
    def state_ttl_ms(self) -> int:
        return self.state_ttl_seconds * 1000


class SecuritySettings(BaseSettings):
    """Secrets used to sign signup state and protect forwarded tokens."""

    model_config = _BASE_CONFIG

    state_secret: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("STATE_SECRET", "SESSION_SECRET"),
        description="HMAC key for signup state tokens.",
    )
    token_encryption_secret: Optional[str] = Field(
        None,
        validation_alias="TOKEN_ENCRYPTION_SECRET",
        description=(
            "When set, OAuth tokens are encrypted before being sent to the store."
        ),
    )


class SupabaseSettings(BaseSettings):
    """Supabase PostgREST endpoint receiving completed connections."""

    model_config = _BASE_CONFIG

    url: Optional[str] = Field(None, validation_alias="SUPABASE_URL")
    service_role_key: Optional[str] = Field(
        None, validation_alias="SUPABASE_SERVICE_ROLE_KEY"
    )
    table: str = Field("gmail_agent_connections", validation_alias="SUPABASE_TABLE")
    timeout_seconds: float = Field(10.0, validation_alias="SUPABASE_TIMEOUT_SECONDS")

    @property
    def is_configured(self) -> bool:
        return bool(self.url and self.service_role_key)


class AppSettings(BaseSettings):
    """Root settings object for the web application."""

    model_config = _BASE_CONFIG

    environment: str = Field("production", validation_alias="APP_ENV")
    log_level: str = Field("INFO", validation_alias="APP_LOG_LEVEL")
    host: str = Field("0.0.0.0", validation_alias="HOST")
    port: int = Field(3000, validation_alias="PORT")
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    oauth: OAuthSettings = Field(default_factory=OAuthSettings)
    google: GoogleSettings = Field(default_factory=GoogleSettings)
    supabase: SupabaseSettings = Field(default_factory=SupabaseSettings)

    @property
    def is_development(self) -> bool:
        return self.environment.lower() == "development"

    @property
    def signing_secret(self) -> Optional[str]:
        """State signing key: the dedicated secret, else the Google client secret."""
        return self.security.state_secret or self.google.client_secret


@lru_cache()
def get_settings() -> AppSettings:
    """Return a cached settings object."""
    return AppSettings()


__all__ = [
    "AppSettings",
    "GMAIL_SCOPES",
    "GoogleSettings",
    "OAuthSettings",
    "SecuritySettings",
    "SupabaseSettings",
    "get_settings",
]
