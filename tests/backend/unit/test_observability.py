import io
import json
import logging

from closingtable.backend.observability import JSONFormatter, setup_logging
from closingtable.backend.service import create_in_memory_service


def test_json_formatter_includes_known_extra_fields() -> None:
    record = logging.LogRecord("closingtable.offers", logging.INFO, __file__, 1, "offer consumed", None, None)
    record.offer_ref = "3f9a1c0b2d4e"
    record.offer_id = "o_abc"
    record.status = "success"
    record.ceiling = 200000

    line = json.loads(JSONFormatter().format(record))

    assert line["message"] == "offer consumed"
    assert line["offer_ref"] == "3f9a1c0b2d4e"
    assert "offer_id" not in line
    assert line["status"] == "success"
    assert "ceiling" not in line


def test_setup_logging_attaches_handler() -> None:
    previous_level = logging.root.level
    handler = setup_logging("warning", "json")
    try:
        assert handler in logging.root.handlers
        assert isinstance(handler.formatter, JSONFormatter)
        assert logging.root.level == logging.WARNING
    finally:
        logging.root.removeHandler(handler)
        logging.root.setLevel(previous_level)


def test_negotiation_logs_never_contain_raw_ids(clock) -> None:
    stream = io.StringIO()
    handler = logging.StreamHandler(stream)
    handler.setFormatter(JSONFormatter())
    previous_level = logging.root.level
    logging.root.addHandler(handler)
    logging.root.setLevel(logging.DEBUG)
    try:
        service = create_in_memory_service(clock=clock)
        offer_id = service.create_offer(200000)["offerId"]
        result_id = service.submit_offer(offer_id, 150000)["resultId"]
        service.get_result(result_id)
        service.submit_offer(offer_id, 150000)
    finally:
        logging.root.removeHandler(handler)
        logging.root.setLevel(previous_level)

    output = stream.getvalue()
    lines = [json.loads(line) for line in output.splitlines()]
    assert any(line["message"] == "offer consumed" for line in lines)
    assert offer_id not in output
    assert result_id not in output
    assert offer_id[2:12] not in output
    assert all("offer_id" not in line and "result_id" not in line for line in lines)
    assert all({"ceiling", "floor", "final", "suggested"}.isdisjoint(line) for line in lines)
