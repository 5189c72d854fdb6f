"""Backing entry stores shared by the offer and result stores."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import json
import threading
from typing import Any, Protocol

from closingtable.backend.models import StoredEntry


class EntryStore(Protocol):
    def put(self, key: str, entry: StoredEntry) -> None:
        """Insert a new entry under ``key``."""

    def get(self, key: str) -> StoredEntry | None:
        """Return the entry without removing it."""

    def get_and_delete(self, key: str) -> StoredEntry | None:
        """Atomically remove and return the entry."""

    def compare_and_remove(self, key: str, expected: StoredEntry) -> bool:
        """Atomically remove the entry if it still equals ``expected``."""

    def delete(self, key: str) -> None:
        """Remove the entry if present."""

    def remove_expired(self, now: datetime) -> int:
        """Remove every entry whose expiry lies before ``now``."""


@dataclass
class InMemoryEntryStore:
    namespace: str

    def __post_init__(self) -> None:
        self._entries: dict[str, StoredEntry] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def put(self, key: str, entry: StoredEntry) -> None:
        with self._lock:
            self._entries[key] = entry

    def get(self, key: str) -> StoredEntry | None:
        with self._lock:
            return self._entries.get(key)

    def get_and_delete(self, key: str) -> StoredEntry | None:
        with self._lock:
            return self._entries.pop(key, None)

    def compare_and_remove(self, key: str, expected: StoredEntry) -> bool:
        with self._lock:
            if self._entries.get(key) != expected:
                return False
            del self._entries[key]
            return True

    def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def remove_expired(self, now: datetime) -> int:
        with self._lock:
            expired = [key for key, entry in self._entries.items() if now > entry.expires_at]
            for key in expired:
                del self._entries[key]
            return len(expired)


@dataclass
class PostgresEntryStore:
    """Entry store over one ``ephemeral_entries`` table.

    Every removal is a single ``DELETE ... RETURNING`` statement, which makes
    get-and-delete and compare-and-remove atomic across processes.
    """

    database_url: str
    namespace: str

    def _connect(self) -> Any:
        import psycopg

        return psycopg.connect(self.database_url)

    def put(self, key: str, entry: StoredEntry) -> None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO ephemeral_entries (namespace, key, payload, expires_at)
                    VALUES (%s, %s, %s::jsonb, %s)
                    """,
                    (self.namespace, key, json.dumps(entry.payload), entry.expires_at),
                )
            conn.commit()

    def get(self, key: str) -> StoredEntry | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    SELECT payload, expires_at
                    FROM ephemeral_entries
                    WHERE namespace = %s AND key = %s
                    """,
                    (self.namespace, key),
                )
                row = cur.fetchone()
        return _entry_from_row(row)

    def get_and_delete(self, key: str) -> StoredEntry | None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    DELETE FROM ephemeral_entries
                    WHERE namespace = %s AND key = %s
                    RETURNING payload, expires_at
                    """,
                    (self.namespace, key),
                )
                row = cur.fetchone()
            conn.commit()
        return _entry_from_row(row)

    def compare_and_remove(self, key: str, expected: StoredEntry) -> bool:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    DELETE FROM ephemeral_entries
                    WHERE namespace = %s AND key = %s
                      AND payload = %s::jsonb AND expires_at = %s
                    RETURNING key
                    """,
                    (self.namespace, key, json.dumps(expected.payload), expected.expires_at),
                )
                row = cur.fetchone()
            conn.commit()
        return row is not None

    def delete(self, key: str) -> None:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM ephemeral_entries WHERE namespace = %s AND key = %s",
                    (self.namespace, key),
                )
            conn.commit()

    def remove_expired(self, now: datetime) -> int:
        with self._connect() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    "DELETE FROM ephemeral_entries WHERE namespace = %s AND expires_at < %s",
                    (self.namespace, now),
                )
                removed = cur.rowcount
            conn.commit()
        return max(removed, 0)


def _entry_from_row(row: Any) -> StoredEntry | None:
    if row is None:
        return None
    payload, expires_at = row
    payload = payload if isinstance(payload, dict) else json.loads(payload)
    return StoredEntry(payload=payload, expires_at=expires_at)


def create_entry_store(database_url: str | None, namespace: str) -> EntryStore:
    if database_url:
        return PostgresEntryStore(database_url=database_url, namespace=namespace)
    return InMemoryEntryStore(namespace=namespace)
