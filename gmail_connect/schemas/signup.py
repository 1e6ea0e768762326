"""Schemas describing a company signup and the Gmail grant it produces."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SignupIntent(BaseModel):
    """Registration details carried through the OAuth redirect."""

    model_config = ConfigDict(frozen=True, populate_by_name=True, str_strip_whitespace=True)

    company_name: str = Field(..., alias="companyName", min_length=1)
    contact_email: str = Field(..., alias="contactEmail", min_length=1)


class GoogleProfile(BaseModel):
    """Subset of the Google userinfo response the service needs."""

    id: str
    email: Optional[str] = None


class OAuthGrant(BaseModel):
    """Tokens issued by Google plus the identity they belong to."""

    access_token: str
    refresh_token: Optional[str] = None
    expiry_date: Optional[int] = Field(
        None, description="Access token expiry as epoch milliseconds."
    )
    google_user_id: str
    google_email: Optional[str] = None


class CompletedSignup(BaseModel):
    """Result of a verified callback and successful code exchange."""

    intent: SignupIntent
    grant: OAuthGrant


class ConnectionRecord(BaseModel):
    """Row written to the external connections table."""

    company_name: str
    contact_email: str
    google_user_id: str
    google_email: Optional[str] = None
    access_token: str
    refresh_token: Optional[str] = None
    expiry_date: Optional[int] = None

    @classmethod
    def from_signup(cls, intent: SignupIntent, grant: OAuthGrant) -> "ConnectionRecord":
        return cls(
            company_name=intent.company_name,
            contact_email=intent.contact_email,
            google_user_id=grant.google_user_id,
            google_email=grant.google_email,
            access_token=grant.access_token,
            refresh_token=grant.refresh_token,
            expiry_date=grant.expiry_date,
        )


class RecordResult(BaseModel):
    """Outcome of forwarding a connection to the external store."""

    saved: bool
    error: Optional[str] = None


__all__ = [
    "CompletedSignup",
    "ConnectionRecord",
    "GoogleProfile",
    "OAuthGrant",
    "RecordResult",
    "SignupIntent",
]
