import logging
from pathlib import Path

import pytest

from dbaccess import Connection
from dbaccess.infra.logging.setup import EnsureFieldsFilter, closeLogger, createCommandLogger, mapLogLevel


def test_map_log_level():
    assert mapLogLevel("warn") == logging.WARNING
    assert mapLogLevel("DEBUG") == logging.DEBUG
    with pytest.raises(ValueError):
        mapLogLevel("loud")


def test_ensure_fields_filter_sets_defaults():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)
    assert EnsureFieldsFilter(runId="r-1").filter(record)
    assert record.runId == "r-1"
    assert record.component == "core"


def test_connection_writes_session_events(tmp_path: Path):
    logger, log_path = createCommandLogger("test", str(tmp_path / "logs"), "sess-1", "DEBUG")
    try:
        with Connection(":memory:", logger=logger, session_id="sess-1") as conn:
            conn.execute("SELECT 1;")
            conn.execute("SELECT * FROM nowhere;")
    finally:
        closeLogger(logger)

    text = Path(log_path).read_text(encoding="utf-8")
    assert "runId=sess-1 comp=connection" in text
    assert "Successfully opened database [:memory:]" in text
    assert "Statement failed" in text
    assert "no such table: nowhere" in text
