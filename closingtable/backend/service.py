"""The four operations exposed to the HTTP layer."""

from __future__ import annotations

from typing import Any

from closingtable.backend.config import BackendSettings
from closingtable.backend.mechanism import MechanismConfig
from closingtable.backend.offers import OfferStore
from closingtable.backend.reaper import Clock, Reaper, utc_now
from closingtable.backend.results import ResultStore
from closingtable.backend.store import EntryStore, InMemoryEntryStore, create_entry_store


class NegotiationService:
    """Wires the offer and result stores together behind plain dict payloads.

    Payloads never carry a ceiling, a floor, a gap or a surplus.
    """

    def __init__(
        self,
        offer_entries: EntryStore,
        result_entries: EntryStore,
        config: MechanismConfig,
        offer_ttl_seconds: float,
        result_ttl_seconds: float,
        server_salt: str,
        sweep_interval_seconds: float = 0,
        clock: Clock = utc_now,
    ) -> None:
        self.results = ResultStore(
            entries=result_entries,
            ttl_seconds=result_ttl_seconds,
            server_salt=server_salt,
            clock=clock,
        )
        self.offers = OfferStore(
            entries=offer_entries,
            results=self.results,
            config=config,
            ttl_seconds=offer_ttl_seconds,
            server_salt=server_salt,
            clock=clock,
        )
        self.reaper = Reaper(offers=self.offers, results=self.results, interval_seconds=sweep_interval_seconds)

    def create_offer(self, ceiling: Any) -> dict[str, Any]:
        return {"offerId": self.offers.create(ceiling)}

    def get_offer_status(self, offer_id: str) -> dict[str, Any]:
        return {"status": self.offers.peek(offer_id)}

    def submit_offer(self, offer_id: str, floor: Any) -> dict[str, Any]:
        consumed = self.offers.consume(offer_id, floor)
        if consumed.outcome is None:
            return {"status": consumed.status}

        payload: dict[str, Any] = {"status": consumed.status}
        if consumed.status == "success":
            payload["final"] = consumed.outcome.final
        if consumed.status == "close":
            payload["suggested"] = consumed.outcome.suggested
        payload["resultId"] = consumed.result_id
        return payload

    def get_result(self, result_id: str) -> dict[str, Any]:
        found = self.results.get(result_id)
        if isinstance(found, str):
            return {"status": found}
        return {"status": "ok", "result": found.to_public()}


def create_service(settings: BackendSettings, clock: Clock = utc_now) -> NegotiationService:
    return NegotiationService(
        offer_entries=create_entry_store(settings.database_url, namespace="offers"),
        result_entries=create_entry_store(settings.database_url, namespace="results"),
        config=settings.mechanism_config(),
        offer_ttl_seconds=settings.offer_ttl_seconds,
        result_ttl_seconds=settings.result_ttl_seconds,
        server_salt=settings.server_salt,
        sweep_interval_seconds=settings.sweep_interval_seconds,
        clock=clock,
    )


def create_in_memory_service(
    config: MechanismConfig | None = None,
    offer_ttl_seconds: float = 24 * 60 * 60,
    result_ttl_seconds: float = 7 * 24 * 60 * 60,
    server_salt: str = "dev-salt",
    clock: Clock = utc_now,
) -> NegotiationService:
    return NegotiationService(
        offer_entries=InMemoryEntryStore(namespace="offers"),
        result_entries=InMemoryEntryStore(namespace="results"),
        config=config if config is not None else MechanismConfig(),
        offer_ttl_seconds=offer_ttl_seconds,
        result_ttl_seconds=result_ttl_seconds,
        server_salt=server_salt,
        clock=clock,
    )
