import json
import logging
import sys

from app.logging_config import JSONFormatter, setup_logging


def _record(**extra):
    record = logging.LogRecord("app.test", logging.INFO, __file__, 1, "moment created", None, None)
    record.__dict__.update(extra)
    return record


def test_json_formatter_includes_known_extra_fields():
    out = json.loads(JSONFormatter().format(_record(moment_id=7, user_id="alice", secret="x")))

    assert out["message"] == "moment created"
    assert out["level"] == "INFO"
    assert out["moment_id"] == 7
    assert out["user_id"] == "alice"
    assert "secret" not in out


def test_json_formatter_uses_record_time_and_skips_none_extras():
    record = _record(match_id=None, status="accepted")
    record.created = 0.0
    out = json.loads(JSONFormatter().format(record))

    assert out["timestamp"] == "1970-01-01T00:00:00+00:00"
    assert out["status"] == "accepted"
    assert "match_id" not in out


def test_json_formatter_attaches_exception_text():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = logging.LogRecord("app.test", logging.ERROR, __file__, 1, "failed", None, sys.exc_info())
    out = json.loads(JSONFormatter().format(record))

    assert "RuntimeError: boom" in out["exception"]


def test_setup_logging_is_idempotent():
    root = logging.getLogger()
    before = list(root.handlers)
    try:
        setup_logging("DEBUG")
        setup_logging("INFO")
        ours = [h for h in root.handlers if getattr(h, "_vibelink", False)]
        assert len(ours) == 1
        assert isinstance(ours[0].formatter, JSONFormatter)
        assert root.level == logging.INFO
    finally:
        for h in root.handlers[:]:
            if h not in before:
                root.removeHandler(h)
