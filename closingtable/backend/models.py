"""Domain models for offers, results and mechanism outcomes."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Literal

OutcomeStatus = Literal["success", "close", "fail"]
LookupStatus = Literal["ok", "invalid", "expired"]


@dataclass(frozen=True)
class Outcome:
    """Raw mechanism output. ``surplus`` and ``gap`` never leave the core."""

    status: OutcomeStatus
    final: int | None = None
    suggested: int | None = None
    surplus: float | None = None
    gap: float | None = None


@dataclass(frozen=True)
class Offer:
    offer_id: str
    ceiling: float
    created_at: datetime
    expires_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "ceiling": self.ceiling,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_payload(cls, offer_id: str, payload: dict[str, Any], expires_at: datetime) -> "Offer":
        return cls(
            offer_id=offer_id,
            ceiling=payload["ceiling"],
            created_at=datetime.fromisoformat(payload["createdAt"]),
            expires_at=expires_at,
        )


@dataclass(frozen=True)
class Result:
    """Sanitized outcome record. Holds no ceiling, floor or contact data."""

    result_id: str
    status: OutcomeStatus
    final: int | None
    suggested: int | None
    created_at: datetime
    expires_at: datetime

    def to_payload(self) -> dict[str, Any]:
        return {
            "status": self.status,
            "final": self.final,
            "suggested": self.suggested,
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_payload(cls, result_id: str, payload: dict[str, Any], expires_at: datetime) -> "Result":
        return cls(
            result_id=result_id,
            status=payload["status"],
            final=payload.get("final"),
            suggested=payload.get("suggested"),
            created_at=datetime.fromisoformat(payload["createdAt"]),
            expires_at=expires_at,
        )

    def to_public(self) -> dict[str, Any]:
        """Shape handed to callers: inapplicable fields are omitted."""
        public: dict[str, Any] = {"status": self.status}
        if self.status == "success" and self.final is not None:
            public["final"] = self.final
        if self.status == "close" and self.suggested is not None:
            public["suggested"] = self.suggested
        public["createdAt"] = self.created_at.isoformat()
        return public


@dataclass(frozen=True)
class ConsumeResult:
    status: OutcomeStatus | Literal["invalid", "expired"]
    outcome: Outcome | None = None
    result_id: str | None = None


@dataclass(frozen=True)
class StoredEntry:
    """Opaque payload held by a backing entry store until ``expires_at``."""

    payload: dict[str, Any]
    expires_at: datetime
