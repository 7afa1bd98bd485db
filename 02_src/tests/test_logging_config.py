"""Tests for the JSON log formatter."""

import json
import logging

from lobby_events.logging_config import JSONFormatter


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord("lobby_events.test", logging.WARNING, __file__, 10, "Failed %d", (3,), None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_formats_one_json_line():
    entry = json.loads(JSONFormatter().format(_record()))

    assert entry["level"] == "WARNING"
    assert entry["logger"] == "lobby_events.test"
    assert entry["msg"] == "Failed 3"
    assert "exception" not in entry


def test_pipeline_fields_lifted():
    entry = json.loads(JSONFormatter().format(_record(session_id="session_1", batch_size=4)))

    assert entry["session_id"] == "session_1"
    assert entry["batch_size"] == 4
    assert "event_type" not in entry
