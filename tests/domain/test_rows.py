import pytest

from dbaccess.domain.rows import ResultSet, Row, RowBuilder
from dbaccess.errors import ColumnNotFoundError


def test_row_lookup_and_column_order():
    row = Row().add("id", "1").add("name", "a")
    assert row.columns == ["id", "name"]
    assert row["name"].as_text() == "a"
    assert row.to_dict() == {"id": "1", "name": "a"}
    assert "id" in row
    assert len(row) == 2


def test_missing_column_raises_not_found():
    row = Row().add("id", "1")
    with pytest.raises(ColumnNotFoundError) as exc_info:
        row["missing"]
    assert exc_info.value.column == "missing"
    assert exc_info.value.details["available"] == ["id"]
    assert row.get("missing") is None


def test_missing_column_is_also_a_key_error():
    with pytest.raises(KeyError):
        Row()["x"]


def test_row_builder_preserves_invocation_order():
    builder = RowBuilder()
    builder(["id", "name"], ["1", "a"])
    builder(["id", "name"], ["2", None])
    builder(["id", "name"], ["3", "c"])

    result_set = builder.build()

    assert builder.calls == 3
    assert len(result_set) == 3
    assert [row["id"].as_text() for row in result_set] == ["1", "2", "3"]
    assert result_set[1]["name"].is_null


def test_row_builder_rejects_mismatched_arrays():
    builder = RowBuilder()
    with pytest.raises(ValueError):
        builder(["id", "name"], ["1"])


def test_result_set_is_read_only_after_build():
    result_set = ResultSet()
    result_set.append(Row().add("x", "1"))
    result_set.freeze()
    with pytest.raises(RuntimeError):
        result_set.append(Row())
    assert result_set.first() == Row().add("x", "1")
    assert result_set.to_dicts() == [{"x": "1"}]
