"""Expiry enforcement: the read-time liveness check and the periodic sweep."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
import logging
import threading
from typing import Callable, Protocol

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_live(expires_at: datetime, now: datetime) -> bool:
    """An entry is live up to and including its expiry instant."""
    return now <= expires_at


class Sweepable(Protocol):
    def remove_expired(self) -> int:
        """Evict every expired entry and return how many were removed."""


@dataclass(frozen=True)
class ReapReport:
    offers: int
    results: int


class Reaper:
    """Removes expired offers and results.

    ``reap`` only bounds memory. Every store checks ``is_live`` on its own
    before serving an entry, so a missed or late sweep never resurrects one.
    """

    def __init__(self, offers: Sweepable, results: Sweepable, interval_seconds: float = 900.0) -> None:
        self._offers = offers
        self._results = results
        self._interval_seconds = interval_seconds
        self._stop = threading.Event()
        self._thread: threading.Thread | None = None

    def reap(self) -> ReapReport:
        report = ReapReport(offers=self._offers.remove_expired(), results=self._results.remove_expired())
        if report.offers or report.results:
            logger.info("reaped expired entries", extra={"offers": report.offers, "results": report.results})
        return report

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self._interval_seconds <= 0 or self.running:
            return
        self._stop.clear()
        self._thread = threading.Thread(target=self._run, name="closingtable-reaper", daemon=True)
        self._thread.start()
        logger.info("reaper started", extra={"interval_seconds": self._interval_seconds})

    def stop(self, timeout: float | None = 5.0) -> None:
        self._stop.set()
        if self._thread is not None:
            self._thread.join(timeout)
            self._thread = None

    def _run(self) -> None:
        while not self._stop.wait(self._interval_seconds):
            try:
                self.reap()
            except Exception:
                logger.exception("reaper sweep failed")
