from tabrows.domain.error_codes import ErrorCode
from tabrows.domain.exceptions import RowsError, is_end_of_data
from tabrows.domain.ports.sources import QuotingMode, RowSource
from tabrows.domain.rows import Nullable, RowCursor, Rows
from tabrows.infra.sources import (
    CalcRowSource,
    CsvRowSource,
    ExcelRowSource,
    MemoryRowSource,
    open_rows,
)

__all__ = [
    "ErrorCode",
    "RowsError",
    "is_end_of_data",
    "QuotingMode",
    "RowSource",
    "Nullable",
    "RowCursor",
    "Rows",
    "CalcRowSource",
    "CsvRowSource",
    "ExcelRowSource",
    "MemoryRowSource",
    "open_rows",
]
