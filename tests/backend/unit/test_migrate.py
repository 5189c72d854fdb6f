import pytest

from closingtable.backend import migrate


class _FakeCursor:
    def __init__(self) -> None:
        self.statements: list[str] = []

    def execute(self, sql: str) -> None:
        self.statements.append(sql)

    def __enter__(self) -> "_FakeCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


class _FakeConnection:
    def __init__(self) -> None:
        self.cursor_instance = _FakeCursor()
        self.committed = False

    def cursor(self) -> _FakeCursor:
        return self.cursor_instance

    def commit(self) -> None:
        self.committed = True

    def __enter__(self) -> "_FakeConnection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        return None


def test_apply_schema_creates_entry_table_and_expiry_index() -> None:
    connection = _FakeConnection()

    executed = migrate.apply_schema(lambda: connection)

    statements = connection.cursor_instance.statements
    assert executed == len(statements) == 2
    assert statements[0].startswith("CREATE TABLE IF NOT EXISTS ephemeral_entries")
    assert "PRIMARY KEY (namespace, key)" in statements[0]
    assert "ON ephemeral_entries (namespace, expires_at)" in statements[1]
    assert connection.committed is True


def test_main_refuses_to_run_without_database_url(monkeypatch) -> None:
    monkeypatch.delenv("CLOSINGTABLE_DATABASE_URL", raising=False)
    monkeypatch.setattr(migrate, "setup_logging", lambda level, fmt: None)

    with pytest.raises(RuntimeError, match="in-memory entry store needs no migration"):
        migrate.main()
