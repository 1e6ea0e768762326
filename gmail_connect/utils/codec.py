"""URL-safe base64 helpers used by the signup state tokens."""

from __future__ import annotations

import base64
import binascii
import re

_ALPHABET = re.compile(r"[A-Za-z0-9_-]*")


class MalformedEncodingError(ValueError):
    """Raised when a value is not valid unpadded base64url."""


def encode(data: bytes | str) -> str:
    """Encode bytes (or UTF-8 text) as base64url without padding."""
    if isinstance(data, str):
        data = data.encode("utf-8")
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def decode(value: str) -> bytes:
    """Decode an unpadded base64url string back to bytes."""
    if not isinstance(value, str) or not _ALPHABET.fullmatch(value):
        raise MalformedEncodingError("Value contains characters outside base64url.")
    if len(value) % 4 == 1:
        raise MalformedEncodingError("Value has an impossible base64 length.")
    padded = value + "=" * (-len(value) % 4)
    try:
        raw = base64.urlsafe_b64decode(padded)
    except (binascii.Error, ValueError) as exc:
        raise MalformedEncodingError(str(exc)) from exc
    # Unused trailing bits must be zero so each value has a single encoding.
    if encode(raw) != value:
        raise MalformedEncodingError("Value is not canonically encoded.")
    return raw


def decode_text(value: str) -> str:
    """Decode a base64url string that wraps UTF-8 text."""
    raw = decode(value)
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise MalformedEncodingError("Decoded value is not valid UTF-8.") from exc


__all__ = ["MalformedEncodingError", "decode", "decode_text", "encode"]
