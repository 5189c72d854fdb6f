"""Result store: sanitized outcomes, readable until they expire."""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Literal

from closingtable.backend.models import Outcome, Result, StoredEntry
from closingtable.backend.reaper import Clock, is_live, utc_now
from closingtable.backend.security import generate_id, hash_token, log_ref
from closingtable.backend.store import EntryStore

logger = logging.getLogger(__name__)

RESULT_ID_PREFIX = "r"


class ResultStore:
    def __init__(
        self,
        entries: EntryStore,
        ttl_seconds: float,
        server_salt: str,
        clock: Clock = utc_now,
    ) -> None:
        self._entries = entries
        self._ttl = timedelta(seconds=ttl_seconds)
        self._server_salt = server_salt
        self._clock = clock

    def _key(self, result_id: str) -> str:
        return hash_token(result_id, self._server_salt)

    def create(self, outcome: Outcome) -> str:
        """Store only what may be shown to both parties and return its id."""
        result_id = generate_id(RESULT_ID_PREFIX)
        now = self._clock()
        result = Result(
            result_id=result_id,
            status=outcome.status,
            final=outcome.final if outcome.status == "success" else None,
            suggested=outcome.suggested if outcome.status == "close" else None,
            created_at=now,
            expires_at=now + self._ttl,
        )
        key = self._key(result_id)
        self._entries.put(key, StoredEntry(payload=result.to_payload(), expires_at=result.expires_at))
        logger.info("result created", extra={"result_ref": log_ref(key), "status": result.status})
        return result_id

    def get(self, result_id: str) -> Result | Literal["invalid", "expired"]:
        key = self._key(result_id)
        entry = self._entries.get(key)
        if entry is None:
            return "invalid"
        if not is_live(entry.expires_at, self._clock()):
            self._entries.compare_and_remove(key, entry)
            return "expired"
        return Result.from_payload(result_id, entry.payload, entry.expires_at)

    def discard(self, result_id: str) -> None:
        """Withdraw a result whose id was never handed out."""
        self._entries.delete(self._key(result_id))

    def remove_expired(self) -> int:
        return self._entries.remove_expired(self._clock())
