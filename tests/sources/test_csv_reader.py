import io

import pytest

from tabrows.domain.error_codes import ErrorCode
from tabrows.domain.exceptions import RowsError
from tabrows.domain.ports.sources import QuotingMode
from tabrows.domain.rows import Rows
from tabrows.infra.sources.csv_reader import CsvRowSource, open_csv
from tabrows.infra.sources.factory import open_rows

CSV1 = """"order", name ,"mass","distance","habitable","note"
1, Mercury, 0.055, 0.4,false,""
2, Venus, 0.815, 0.7,false,""
3, Earth, 1.0, 1.0,true,""
4, Mars, 0.107, 1.5,false,""
"""

TSV1 = """1\t Mercury\t 0.055\t 0.4\tfalse\t""
2\t Venus\t 0.815\t 0.7\tfalse\t""
3\t Earth\t 1.0\t 1.0\ttrue\t""
4\t Mars\t 0.107\t 1.5\tfalse\t""
"""


class _ErrStream:
    def __iter__(self):
        return self

    def __next__(self):
        raise OSError("test")


@pytest.mark.parametrize("quoting", [QuotingMode.LAZY, QuotingMode.STRICT])
def test_csv_with_header(quoting):
    rows = Rows(CsvRowSource(io.StringIO(CSV1), quoting=quoting), has_header=True)
    rows.next()

    assert rows.header() == ["order", "name", "mass", "distance", "habitable", "note"]
    assert len(rows.row()) == 6
    assert rows.column_string("name") == "Mercury"
    assert rows.column_bool("habitable") is False
    assert rows.column_float64("mass") == 0.055
    assert rows.column_int8("order") == 1
    assert rows.column_null_string("note").valid is False
    assert rows.quoting_mode() is quoting

    names = [rows.column("name")] + [r.column("name") for r in rows]
    assert names == ["Mercury", "Venus", "Earth", "Mars"]


def test_tsv_without_header():
    rows = Rows(CsvRowSource(io.StringIO(TSV1), delimiter="\t"), has_header=False)
    rows.next()

    assert rows.get(1) == "Mercury"
    assert rows.column("name") == ""
    with pytest.raises(RowsError) as exc:
        rows.column_string("name")
    assert exc.value.code is ErrorCode.UNKNOWN_COLUMN
    assert rows.get_null_string(5).valid is False


def test_blank_input_is_end_of_data():
    rows = Rows(CsvRowSource(io.StringIO("")), has_header=True)

    with pytest.raises(RowsError) as exc:
        rows.next()
    assert exc.value.code is ErrorCode.END_OF_DATA


def test_blank_lines_are_skipped():
    rows = Rows(CsvRowSource(io.StringIO("a,b\n\n1,2\n\n")), has_header=True)
    rows.next()

    assert rows.row() == ["1", "2"]
    with pytest.raises(RowsError):
        rows.next()


def test_stream_error_is_source_error():
    rows = Rows(CsvRowSource(_ErrStream()), has_header=True)

    with pytest.raises(RowsError) as exc:
        rows.next()
    assert exc.value.code is ErrorCode.SOURCE_ERROR
    assert isinstance(exc.value.__cause__, OSError)
    with pytest.raises(RowsError) as exc:
        rows.get_string(0)
    assert exc.value.code is ErrorCode.INDEX_OUT_OF_RANGE


def test_strict_quoting_rejects_broken_quotes():
    rows = Rows(CsvRowSource(io.StringIO('a,"b"x\n'), quoting=QuotingMode.STRICT))

    with pytest.raises(RowsError) as exc:
        rows.next()
    assert exc.value.code is ErrorCode.SOURCE_ERROR
    cause = exc.value.__cause__
    assert isinstance(cause, RowsError)
    assert cause.code is ErrorCode.INVALID_RECORD


def test_lazy_quoting_tolerates_stray_quotes():
    rows = Rows(CsvRowSource(io.StringIO('a,b"c\n')))
    rows.next()

    assert rows.row() == ["a", 'b"c']
    assert rows.get_string(1) == 'b"c'


def test_column_count_is_fixed_by_first_record():
    rows = Rows(CsvRowSource(io.StringIO("a,b\n1,2,3\n4,5\n")), has_header=True)

    with pytest.raises(RowsError) as exc:
        rows.next()
    cause = exc.value.__cause__
    assert cause.code is ErrorCode.INVALID_RECORD
    assert "Invalid column count at line 2: expected 2, got 3" in str(cause)

    rows.next()
    assert rows.row() == ["4", "5"]


def test_column_count_check_can_be_disabled():
    rows = Rows(CsvRowSource(io.StringIO("a,b\n1,2,3\n"), fields_per_record=-1), has_header=True)
    rows.next()

    assert rows.row() == ["1", "2", "3"]


def test_explicit_fields_per_record():
    source = CsvRowSource(io.StringIO("1,2\n"), fields_per_record=3)

    with pytest.raises(RowsError) as exc:
        source.read_row()
    assert exc.value.details == {"line_no": 1, "expected": 3, "got": 2}


def test_open_csv_strips_bom_and_closes_file(tmp_path):
    path = tmp_path / "planets.csv"
    path.write_text("\ufeff" + CSV1, encoding="utf-8")

    source = open_csv(str(path))
    rows = Rows(source, has_header=True)
    rows.next()
    assert rows.column_index("order") == 0
    rows.close()
    rows.close()

    assert source.stream.closed


def test_open_rows_picks_tab_delimiter_for_tsv(tmp_path):
    path = tmp_path / "planets.tsv"
    path.write_text(TSV1, encoding="utf-8")

    with open_rows(str(path), has_header=False) as rows:
        rows.next()
        assert rows.get(1) == "Mercury"
        assert len(rows.row()) == 6
