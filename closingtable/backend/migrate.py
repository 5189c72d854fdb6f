"""Create the ``ephemeral_entries`` table behind ``PostgresEntryStore``.

Only needed when offers and results are shared across processes through
``CLOSINGTABLE_DATABASE_URL``; the in-memory store has no schema.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

from closingtable.backend.config import load_settings
from closingtable.backend.observability import setup_logging

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).with_name("db_schema.sql")


def apply_schema(connect: Callable[[], Any]) -> int:
    """Run every statement of the entry-store schema in one transaction.

    Returns the number of statements executed.
    """
    statements = [part.strip() for part in SCHEMA_PATH.read_text(encoding="utf-8").split(";") if part.strip()]
    with connect() as conn:
        with conn.cursor() as cur:
            for statement in statements:
                cur.execute(statement)
        conn.commit()
    return len(statements)


def main() -> None:
    settings = load_settings()
    setup_logging(settings.log_level, settings.log_format)
    if not settings.database_url:
        raise RuntimeError(
            "CLOSINGTABLE_DATABASE_URL is not set; the in-memory entry store needs no migration"
        )

    import psycopg

    executed = apply_schema(lambda: psycopg.connect(settings.database_url))
    logger.info("entry store schema applied (%d statements)", executed)


if __name__ == "__main__":
    main()
