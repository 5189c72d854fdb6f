from closingtable.backend.models import Outcome, Result
from closingtable.backend.results import ResultStore
from closingtable.backend.store import InMemoryEntryStore

FORBIDDEN_KEYS = {"ceiling", "floor", "gap", "surplus", "email", "min", "max"}


def _store(clock) -> ResultStore:
    return ResultStore(entries=InMemoryEntryStore(namespace="results"), ttl_seconds=60, server_salt="salt", clock=clock)


def test_create_and_get_success_result(clock) -> None:
    store = _store(clock)

    result_id = store.create(Outcome(status="success", final=175000, surplus=50000))
    result = store.get(result_id)

    assert result_id.startswith("r_")
    assert isinstance(result, Result)
    assert result.final == 175000
    assert result.suggested is None
    assert result.to_public() == {"status": "success", "final": 175000, "createdAt": clock.now.isoformat()}


def test_close_result_keeps_only_suggestion(clock) -> None:
    store = _store(clock)

    result = store.get(store.create(Outcome(status="close", suggested=105000, gap=10000)))

    assert result.to_public() == {"status": "close", "suggested": 105000, "createdAt": clock.now.isoformat()}


def test_fail_result_omits_final_and_suggested(clock) -> None:
    store = _store(clock)

    public = store.get(store.create(Outcome(status="fail", gap=50000))).to_public()

    assert public == {"status": "fail", "createdAt": clock.now.isoformat()}


def test_stored_payload_never_holds_private_values(clock) -> None:
    entries = InMemoryEntryStore(namespace="results")
    store = ResultStore(entries=entries, ttl_seconds=60, server_salt="salt", clock=clock)

    for outcome in (
        Outcome(status="success", final=175000, surplus=50000),
        Outcome(status="close", suggested=105000, gap=10000),
        Outcome(status="fail", gap=50000),
    ):
        result_id = store.create(outcome)
        stored = entries.get(store._key(result_id))
        assert FORBIDDEN_KEYS.isdisjoint(stored.payload)
        assert FORBIDDEN_KEYS.isdisjoint(store.get(result_id).to_public())


def test_results_are_keyed_by_hash_not_raw_id(clock) -> None:
    entries = InMemoryEntryStore(namespace="results")
    store = ResultStore(entries=entries, ttl_seconds=60, server_salt="salt", clock=clock)

    result_id = store.create(Outcome(status="fail"))

    assert entries.get(result_id) is None


def test_result_is_readable_many_times_until_expiry(clock) -> None:
    store = _store(clock)
    result_id = store.create(Outcome(status="success", final=100000))

    assert isinstance(store.get(result_id), Result)
    clock.advance(60)
    assert isinstance(store.get(result_id), Result)


def test_expired_result_reports_expired_once_then_invalid(clock) -> None:
    store = _store(clock)
    result_id = store.create(Outcome(status="success", final=100000))

    clock.advance(61)

    assert store.get(result_id) == "expired"
    assert store.get(result_id) == "invalid"
    assert store.get(result_id) == "invalid"


def test_unknown_result_is_invalid(clock) -> None:
    assert _store(clock).get("r_missing") == "invalid"


def test_discard_withdraws_result(clock) -> None:
    store = _store(clock)
    result_id = store.create(Outcome(status="fail"))

    store.discard(result_id)

    assert store.get(result_id) == "invalid"
