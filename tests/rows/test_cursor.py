import logging

import pytest

from tabrows.domain.error_codes import ErrorCode
from tabrows.domain.exceptions import RowsError
from tabrows.domain.ports.sources import QuotingMode
from tabrows.domain.rows import Rows
from tabrows.infra.sources.memory_reader import MemoryRowSource


class _CountingSource:
    def __init__(self, rows, errors=None, quoting=QuotingMode.LAZY):
        self.rows = list(rows)
        self.errors = dict(errors or {})
        self.quoting = quoting
        self.reads = 0
        self.closes = 0

    def read_row(self):
        self.reads += 1
        if self.reads in self.errors:
            raise self.errors[self.reads]
        if not self.rows:
            return None
        return self.rows.pop(0)

    def close(self):
        self.closes += 1

    def quoting_mode(self):
        return self.quoting


def _codes(exc_info) -> ErrorCode:
    return exc_info.value.code


def test_column_index_is_case_and_space_insensitive():
    rows = Rows(MemoryRowSource([["order", " name ", "mass"], ["1", "Mercury", "0.055"]]), has_header=True)
    rows.next()

    assert rows.column_index("NAME") == 1
    assert rows.column_index("  Mass ") == 2
    assert rows.header() == ["order", "name", "mass"]


def test_duplicate_header_names_last_wins(caplog):
    logger = logging.getLogger("tabrows.test.cursor")
    rows = Rows(MemoryRowSource([["a", "b", "a"], ["1", "2", "3"]]), has_header=True, logger=logger)

    with caplog.at_level(logging.WARNING, logger="tabrows.test.cursor"):
        rows.next()

    assert rows.column_index("a") == 2
    assert rows.header_map() == {"a": 2, "b": 1}
    assert rows.get(rows.column_index("a")) == "3"
    assert any("duplicate header" in record.getMessage() for record in caplog.records)


def test_header_without_header_mode_is_empty_and_reads_nothing():
    source = _CountingSource([["1", "2"]])
    rows = Rows(source, has_header=False)

    assert rows.header() == []
    assert source.reads == 0
    with pytest.raises(RowsError) as exc:
        rows.column_index("a")
    assert _codes(exc) is ErrorCode.UNKNOWN_COLUMN


def test_header_is_consumed_once_before_first_row():
    source = _CountingSource([["a", "b"], ["1", "2"], ["3", "4"]])
    rows = Rows(source, has_header=True)

    assert rows.header() == ["a", "b"]
    assert rows.header() == ["a", "b"]
    assert source.reads == 1

    rows.next()
    assert rows.row() == ["1", "2"]
    assert rows.row_no == 1


def test_unknown_column_before_header_established():
    rows = Rows(MemoryRowSource([["a"], ["1"]]), has_header=True)

    with pytest.raises(RowsError) as exc:
        rows.column_index("a")
    assert _codes(exc) is ErrorCode.UNKNOWN_COLUMN
    assert exc.value.column == "a"


def test_source_exhausted_before_header():
    rows = Rows(MemoryRowSource([]), has_header=True)

    assert rows.header() == []
    with pytest.raises(RowsError) as exc:
        rows.next()
    assert _codes(exc) is ErrorCode.END_OF_DATA
    assert rows.row() == []


def test_cursor_without_source():
    rows = Rows(None, has_header=True)

    with pytest.raises(RowsError) as exc:
        rows.next()
    assert _codes(exc) is ErrorCode.NULL_CURSOR
    assert rows.header() == []
    assert rows.row() == []
    with pytest.raises(RowsError) as exc:
        rows.get_string(0)
    assert _codes(exc) is ErrorCode.NULL_CURSOR
    with pytest.raises(RowsError) as exc:
        rows.column_index("foo")
    assert _codes(exc) is ErrorCode.NULL_CURSOR
    with pytest.raises(RowsError) as exc:
        rows.column_null_int8("foo")
    assert _codes(exc) is ErrorCode.NULL_CURSOR
    with pytest.raises(RowsError) as exc:
        rows.get_null_string(0)
    assert _codes(exc) is ErrorCode.NULL_CURSOR
    assert rows.get(0) == ""
    assert rows.column("foo") == ""
    rows.close()


def test_end_of_data_is_terminal_and_keeps_last_row():
    source = _CountingSource([["h"], ["last"]])
    rows = Rows(source, has_header=True)
    rows.next()

    for _ in range(3):
        with pytest.raises(RowsError) as exc:
            rows.next()
        assert _codes(exc) is ErrorCode.END_OF_DATA

    assert rows.is_terminal
    assert rows.row() == ["last"]
    assert source.reads == 3


def test_row_is_empty_when_nothing_was_fetched():
    rows = Rows(MemoryRowSource([]), has_header=False)

    with pytest.raises(RowsError):
        rows.next()
    assert rows.row() == []


def test_source_error_is_wrapped_and_not_terminal():
    fault = ValueError("broken record")
    source = _CountingSource([["1"], ["2"], ["3"]], errors={2: fault})
    rows = Rows(source, has_header=False)
    rows.next()

    with pytest.raises(RowsError) as exc:
        rows.next()
    assert _codes(exc) is ErrorCode.SOURCE_ERROR
    assert exc.value.__cause__ is fault
    assert rows.row() == []
    assert not rows.is_terminal

    rows.next()
    assert rows.row() == ["2"]


def test_source_error_during_header_keeps_header_pending():
    source = _CountingSource([["a", "b"], ["1", "2"]], errors={1: OSError("io")})
    rows = Rows(source, has_header=True)

    with pytest.raises(RowsError) as exc:
        rows.next()
    assert _codes(exc) is ErrorCode.SOURCE_ERROR

    rows.next()
    assert rows.header() == ["a", "b"]
    assert rows.column_string("b") == "2"


def test_row_returns_copy():
    rows = Rows(MemoryRowSource([["1", "2"]]))
    rows.next()

    rows.row().append("x")
    assert rows.row() == ["1", "2"]


def test_close_is_idempotent_and_context_manager_closes():
    source = _CountingSource([])
    with Rows(source) as rows:
        rows.close()
    rows.close()

    assert source.closes == 1


def test_iteration_stops_at_end_of_data():
    rows = Rows(MemoryRowSource([["n"], ["1"], ["2"], ["3"]]), has_header=True)

    values = [r.column_int64("n") for r in rows]

    assert values == [1, 2, 3]
    assert rows.row_no == 3


def test_iteration_propagates_source_error():
    source = _CountingSource([["1"], ["2"]], errors={2: RuntimeError("boom")})
    rows = Rows(source)

    with pytest.raises(RowsError) as exc:
        for _ in rows:
            pass
    assert _codes(exc) is ErrorCode.SOURCE_ERROR
