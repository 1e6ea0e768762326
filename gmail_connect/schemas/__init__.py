"""Public schema exports."""

from .signup import (
    CompletedSignup,
    ConnectionRecord,
    GoogleProfile,
    OAuthGrant,
    RecordResult,
    SignupIntent,
)

__all__ = [
    "CompletedSignup",
    "ConnectionRecord",
    "GoogleProfile",
    "OAuthGrant",
    "RecordResult",
    "SignupIntent",
]
