"""Offer store: single-use postings of a private ceiling."""

from __future__ import annotations

from datetime import timedelta
import logging
from typing import Any

from closingtable.backend.mechanism import MechanismConfig, compute_outcome, validate_amount
from closingtable.backend.models import ConsumeResult, LookupStatus, Offer, StoredEntry
from closingtable.backend.reaper import Clock, is_live, utc_now
from closingtable.backend.results import ResultStore
from closingtable.backend.security import generate_id, hash_token, log_ref
from closingtable.backend.store import EntryStore

logger = logging.getLogger(__name__)

OFFER_ID_PREFIX = "o"


class OfferStore:
    """Holds live offers until they are consumed once or expire.

    Consumption is settled by ``compare_and_remove`` on the backing store:
    of any number of concurrent consumers only the one that removes the
    offer keeps its result, the rest withdraw theirs and see ``invalid``.
    """

    def __init__(
        self,
        entries: EntryStore,
        results: ResultStore,
        config: MechanismConfig,
        ttl_seconds: float,
        server_salt: str,
        clock: Clock = utc_now,
    ) -> None:
        self._entries = entries
        self._results = results
        self._config = config
        self._ttl = timedelta(seconds=ttl_seconds)
        self._server_salt = server_salt
        self._clock = clock

    def _key(self, offer_id: str) -> str:
        return hash_token(offer_id, self._server_salt)

    def create(self, ceiling: Any) -> str:
        validate_amount(ceiling, "ceiling", self._config)
        offer_id = generate_id(OFFER_ID_PREFIX)
        now = self._clock()
        # Stored payloads must be JSON-encodable, so rationals become floats.
        amount = ceiling if isinstance(ceiling, (int, float)) else float(ceiling)
        offer = Offer(offer_id=offer_id, ceiling=amount, created_at=now, expires_at=now + self._ttl)
        key = self._key(offer_id)
        self._entries.put(key, StoredEntry(payload=offer.to_payload(), expires_at=offer.expires_at))
        logger.info("offer created", extra={"offer_ref": log_ref(key)})
        return offer_id

    def peek(self, offer_id: str) -> LookupStatus:
        key = self._key(offer_id)
        entry = self._entries.get(key)
        if entry is None:
            return "invalid"
        if not is_live(entry.expires_at, self._clock()):
            self._entries.compare_and_remove(key, entry)
            return "expired"
        return "ok"

    def consume(self, offer_id: str, floor: Any) -> ConsumeResult:
        key = self._key(offer_id)
        entry = self._entries.get(key)
        if entry is None:
            return ConsumeResult(status="invalid")
        if not is_live(entry.expires_at, self._clock()):
            self._entries.compare_and_remove(key, entry)
            logger.info("offer expired before submission", extra={"offer_ref": log_ref(key)})
            return ConsumeResult(status="expired")

        # Raises InvalidInput with the offer left in place.
        validate_amount(floor, "floor", self._config)
        offer = Offer.from_payload(offer_id, entry.payload, entry.expires_at)
        outcome = compute_outcome(offer.ceiling, floor, self._config)

        result_id = self._results.create(outcome)
        if not self._entries.compare_and_remove(key, entry):
            self._results.discard(result_id)
            logger.info("offer already consumed", extra={"offer_ref": log_ref(key)})
            return ConsumeResult(status="invalid")

        logger.info(
            "offer consumed",
            extra={"offer_ref": log_ref(key), "status": outcome.status},
        )
        return ConsumeResult(status=outcome.status, outcome=outcome, result_id=result_id)

    def remove_expired(self) -> int:
        return self._entries.remove_expired(self._clock())
