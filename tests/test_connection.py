from pathlib import Path

import pytest

from dbaccess import Connection, ConnectionOpenError, StatusCode
from dbaccess.config import Settings
from dbaccess.domain.error_codes import ErrorCode


def _empty_db(tmp_path: Path) -> str:
    db_path = tmp_path / "app.sqlite3"
    db_path.touch()
    return str(db_path)


def test_create_insert_select_scenario(tmp_path: Path):
    with Connection(_empty_db(tmp_path)) as conn:
        created = conn.execute("CREATE TABLE t(id INTEGER PRIMARY KEY, name TEXT);")
        assert created.status == StatusCode.SUCCESS
        assert created.result_set is not None
        assert len(created.result_set) == 0

        inserted = conn.execute("INSERT INTO t(name) VALUES ('a');")
        assert inserted.ok
        assert inserted.last_inserted_id == 1
        assert inserted.rows_affected == 1

        selected = conn.execute("SELECT id, name FROM t;")

    assert selected.ok
    rows = list(selected.result_set)
    assert len(rows) == 1
    assert rows[0].to_dict() == {"id": "1", "name": "a"}
    assert rows[0]["id"].as_uint32() == 1
    assert rows[0]["name"].as_text() == "a"
    assert "SELECT id, name FROM t;" in selected.message


def test_rows_follow_engine_order(tmp_path: Path):
    with Connection(_empty_db(tmp_path)) as conn:
        conn.execute("CREATE TABLE t(id INTEGER PRIMARY KEY, name TEXT);")
        conn.execute("INSERT INTO t(name) VALUES ('c'), ('a'), ('b');")
        outcome = conn.execute("SELECT name FROM t ORDER BY id DESC;")

    assert [row["name"].as_text() for row in outcome.rows] == ["b", "a", "c"]


def test_rows_affected_reports_connection_changes(tmp_path: Path):
    with Connection(_empty_db(tmp_path)) as conn:
        conn.execute("CREATE TABLE t(id INTEGER PRIMARY KEY, name TEXT);")
        conn.execute("INSERT INTO t(name) VALUES ('a'), ('b'), ('c');")
        updated = conn.execute("UPDATE t SET name = 'z' WHERE id > 1;")
        # SELECT does not reset the connection counters
        selected = conn.execute("SELECT count(*) AS n FROM t;")

    assert updated.rows_affected == 2
    assert updated.last_inserted_id == 3
    assert selected.rows_affected == 2
    assert selected.rows.first()["n"].as_uint64() == 3


def test_execute_failure_is_error_outcome_with_engine_message(tmp_path: Path):
    with Connection(_empty_db(tmp_path)) as conn:
        outcome = conn.execute("INSERT INTO t_nonexistent(x) VALUES (1);")

    assert outcome.status == StatusCode.ERROR
    assert outcome.result_set is None
    assert "no such table: t_nonexistent" in outcome.message
    assert len(outcome.rows) == 0


def test_open_missing_target_raises_access_failed(tmp_path: Path):
    with pytest.raises(ConnectionOpenError) as exc_info:
        Connection(str(tmp_path / "missing" / "db.sqlite3"))
    err = exc_info.value
    assert err.status == StatusCode.ACCESS_FAILED
    assert err.code == ErrorCode.ACCESS_FAILED.value
    assert err.outcome.message


def test_open_garbage_file_raises_error_status(tmp_path: Path):
    db_path = tmp_path / "garbage.sqlite3"
    db_path.write_bytes(b"this is definitely not a sqlite database file" * 20)
    with pytest.raises(ConnectionOpenError) as exc_info:
        Connection(str(db_path))
    assert exc_info.value.status == StatusCode.ERROR
    assert exc_info.value.code == ErrorCode.OPEN_FAILED.value


def test_create_if_missing_from_settings(tmp_path: Path):
    db_path = tmp_path / "created.sqlite3"
    settings = Settings(database=str(db_path), create_if_missing=True)
    conn = Connection.from_settings(settings)
    try:
        assert conn.open_outcome.ok
        assert str(db_path) in conn.open_outcome.message
    finally:
        conn.close()
    assert db_path.exists()


def test_from_settings_requires_database():
    with pytest.raises(ValueError):
        Connection.from_settings(Settings())


def test_close_is_idempotent_and_blocks_execute(tmp_path: Path):
    conn = Connection(_empty_db(tmp_path))
    first = conn.close()
    second = conn.close()

    assert first.ok
    assert "Successfully closed" in first.message
    assert second.ok
    assert not conn.is_open

    outcome = conn.execute("SELECT 1;")
    assert outcome.status == StatusCode.ERROR
    assert "closed" in outcome.message


def test_multiple_statements_in_one_execute():
    with Connection(":memory:") as conn:
        outcome = conn.execute(
            "CREATE TABLE t(id INTEGER PRIMARY KEY, name TEXT);"
            "INSERT INTO t(name) VALUES ('a');"
            "INSERT INTO t(name) VALUES ('b');"
            "SELECT name FROM t ORDER BY id;"
        )

    assert outcome.ok
    assert outcome.last_inserted_id == 2
    assert [row["name"].as_text() for row in outcome.rows] == ["a", "b"]


def test_null_values_are_null_cells():
    with Connection(":memory:") as conn:
        outcome = conn.execute("SELECT NULL AS missing, 5 AS present;")
    row = outcome.rows.first()
    assert row["missing"].is_null
    assert row["present"].as_uint32() == 5


@pytest.mark.parametrize(
    "sql, fragment",
    [
        ("SELECT '\ud800';", "surrogates not allowed"),
        ("SELECT 'a\x00b';", "null character"),
    ],
)
def test_unencodable_sql_is_error_outcome(sql, fragment):
    with Connection(":memory:") as conn:
        outcome = conn.execute(sql)
        still_usable = conn.execute("SELECT 1 AS one;")

    assert outcome.status == StatusCode.ERROR
    assert outcome.result_set is None
    assert fragment in outcome.message
    assert still_usable.rows.first()["one"].as_uint32() == 1


def test_empty_connection_string_opens_private_temporary_database():
    with Connection("") as conn:
        assert conn.execute("CREATE TABLE t(id INTEGER PRIMARY KEY, name TEXT);").ok
        inserted = conn.execute("INSERT INTO t(name) VALUES ('a');")

    assert inserted.ok
    assert inserted.last_inserted_id == 1


def test_foreign_keys_not_enforced_by_default():
    with Connection(":memory:") as conn:
        conn.execute("CREATE TABLE parent(id INTEGER PRIMARY KEY);")
        conn.execute("CREATE TABLE child(id INTEGER PRIMARY KEY, parent_id INTEGER REFERENCES parent(id));")
        orphan = conn.execute("INSERT INTO child(parent_id) VALUES (42);")

    assert orphan.ok


def test_foreign_keys_enforced_when_configured():
    settings = Settings(database=":memory:", foreign_keys=True)
    with Connection.from_settings(settings) as conn:
        conn.execute("CREATE TABLE parent(id INTEGER PRIMARY KEY);")
        conn.execute("CREATE TABLE child(id INTEGER PRIMARY KEY, parent_id INTEGER REFERENCES parent(id));")
        orphan = conn.execute("INSERT INTO child(parent_id) VALUES (42);")

    assert orphan.status == StatusCode.ERROR
    assert "FOREIGN KEY constraint failed" in orphan.message
