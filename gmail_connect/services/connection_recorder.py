"""
Forward completed Gmail connections to the external datastore.

Recording is best effort: the user has already granted access by the time a
connection reaches this service, so store failures are logged and reported
in the result instead of being raised.
"""

from __future__ import annotations

import logging
from typing import Optional

from gmail_connect.clients import SupabaseRestClient
from gmail_connect.core.errors import RecorderError
from gmail_connect.schemas import ConnectionRecord, OAuthGrant, RecordResult, SignupIntent
from gmail_connect.services.token_cipher import TokenCipherService

logger = logging.getLogger(__name__)


class ConnectionRecorder:
    """Flatten a signup and its grant into a row and send it to the store."""

    def __init__(
        self,
        store: Optional[SupabaseRestClient],
        token_cipher: Optional[TokenCipherService] = None,
    ) -> None:
        self._store = store
        self._cipher = token_cipher

    @property
    def is_configured(self) -> bool:
        return self._store is not None

    def build_record(self, intent: SignupIntent, grant: OAuthGrant) -> ConnectionRecord:
        record = ConnectionRecord.from_signup(intent, grant)
        if self._cipher is None:
            return record
        return record.model_copy(
            update={
                "access_token": self._cipher.encrypt(record.access_token),
                "refresh_token": self._cipher.encrypt_optional(record.refresh_token),
            }
        )

    async def record(self, intent: SignupIntent, grant: OAuthGrant) -> RecordResult:
        if self._store is None:
            logger.info(
                "Connection store not configured; skipping record for %s.",
                intent.company_name,
            )
            return RecordResult(saved=False)

        row = self.build_record(intent, grant).model_dump()
        try:
            await self._store.insert_row(row)
        except RecorderError as exc:
            logger.error(
                "Failed to record Gmail connection for %s: %s", intent.company_name, exc
            )
            return RecordResult(saved=False, error=str(exc))

        logger.info(
            "Recorded Gmail connection for %s (%s).",
            intent.company_name,
            grant.google_email,
        )
        return RecordResult(saved=True)


__all__ = ["ConnectionRecorder"]
