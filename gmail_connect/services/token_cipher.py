"""Symmetric encryption for OAuth tokens forwarded to the connection store."""

from __future__ import annotations

import base64
import hashlib

from cryptography.fernet import Fernet, InvalidToken


class TokenCipherService:
    """Encrypt and decrypt OAuth tokens using a Fernet key derived from a secret."""

    def __init__(self, *, secret: str) -> None:
        if not secret:
            raise ValueError("Token encryption secret must be provided.")
        digest = hashlib.sha256(secret.encode("utf-8")).digest()
        self._fernet = Fernet(base64.urlsafe_b64encode(digest))

    def encrypt(self, plaintext: str) -> str:
        return self._fernet.encrypt(plaintext.encode("utf-8")).decode("utf-8")

    def encrypt_optional(self, plaintext: str | None) -> str | None:
        """Encrypt ``plaintext`` when present; Google may omit refresh tokens."""
        if plaintext is None:
            return None
        return self.encrypt(plaintext)

    def decrypt(self, ciphertext: str) -> str:
        """Decrypt a value previously produced by :meth:`encrypt`."""
        try:
            plaintext = self._fernet.decrypt(ciphertext.encode("utf-8"))
        except InvalidToken as exc:
            raise ValueError("Failed to decrypt token; invalid ciphertext provided.") from exc
        return plaintext.decode("utf-8")


__all__ = ["TokenCipherService"]
