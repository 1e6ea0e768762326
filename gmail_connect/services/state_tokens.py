"""
Signed, time-bound state tokens for the Google OAuth redirect.

A token carries the signup intent through Google's consent screen and back
without any server-side session storage::

    base64url(json payload) + "." + base64url(hmac-sha256(encoded payload))

The payload is readable by anyone holding the token. The signature only
guarantees it was issued by this server and has not been altered.
"""

from __future__ import annotations

import hmac
import json
import logging
import time
from hashlib import sha256
from typing import Any, Callable, Dict, Optional

from pydantic import ValidationError

from gmail_connect.schemas import SignupIntent
from gmail_connect.utils import codec

logger = logging.getLogger(__name__)

DEFAULT_MAX_AGE_MS = 10 * 60 * 1000
SEPARATOR = "."
ISSUED_AT_FIELD = "t"


def now_ms() -> int:
    return int(time.time() * 1000)


class StateTokenSigner:
    """Mint and verify signup state tokens with a server-held HMAC key."""

    def __init__(
        self,
        secret_key: str | bytes,
        *,
        max_age_ms: int = DEFAULT_MAX_AGE_MS,
        clock: Callable[[], int] = now_ms,
    ) -> None:
        if not secret_key:
            raise ValueError("State signing secret must be provided.")
        if isinstance(secret_key, str):
            secret_key = secret_key.encode("utf-8")
        self._secret_key = secret_key
        self._max_age_ms = max_age_ms
        self._clock = clock

    def _sign(self, encoded_payload: str) -> bytes:
        return hmac.new(self._secret_key, encoded_payload.encode("ascii"), sha256).digest()

    def mint(self, intent: SignupIntent) -> str:
        """Return an opaque token embedding ``intent`` and the issue time."""
        payload: Dict[str, Any] = intent.model_dump(by_alias=True)
        payload[ISSUED_AT_FIELD] = self._clock()
        serialized = json.dumps(payload, separators=(",", ":"), sort_keys=True)
        encoded_payload = codec.encode(serialized)
        signature = codec.encode(self._sign(encoded_payload))
        return f"{encoded_payload}{SEPARATOR}{signature}"

    def verify(
        self, token: Optional[str], max_age_ms: Optional[int] = None
    ) -> Optional[SignupIntent]:
        """
        Return the signup intent carried by ``token``, or ``None``.

        Never raises: forged, tampered, malformed and expired tokens all
        verify to ``None``.
        """
        if not token or not isinstance(token, str):
            return None

        parts = token.split(SEPARATOR)
        if len(parts) != 2:
            return None
        encoded_payload, encoded_signature = parts

        try:
            provided_signature = codec.decode(encoded_signature)
            expected_signature = self._sign(encoded_payload)
        except (codec.MalformedEncodingError, UnicodeEncodeError):
            return None

        if len(provided_signature) != len(expected_signature):
            return None
        if not hmac.compare_digest(provided_signature, expected_signature):
            logger.info("Rejected state token with an invalid signature.")
            return None

        try:
            payload = json.loads(codec.decode_text(encoded_payload))
        except (codec.MalformedEncodingError, ValueError):
            return None
        if not isinstance(payload, dict):
            return None

        issued_at = payload.get(ISSUED_AT_FIELD)
        if isinstance(issued_at, bool) or not isinstance(issued_at, int) or issued_at <= 0:
            return None

        window = self._max_age_ms if max_age_ms is None else max_age_ms
        if self._clock() - issued_at > window:
            logger.info("Rejected expired state token.")
            return None

        try:
            return SignupIntent.model_validate(
                {key: value for key, value in payload.items() if key != ISSUED_AT_FIELD}
            )
        except ValidationError:
            return None


__all__ = ["DEFAULT_MAX_AGE_MS", "StateTokenSigner", "now_ms"]
