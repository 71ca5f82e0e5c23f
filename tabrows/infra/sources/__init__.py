from tabrows.infra.sources.calc_reader import CalcRowSource, open_calc
from tabrows.infra.sources.csv_reader import CsvRowSource, open_csv
from tabrows.infra.sources.excel_reader import ExcelRowSource, open_excel
from tabrows.infra.sources.factory import open_rows, open_source, resolve_format
from tabrows.infra.sources.memory_reader import MemoryRowSource

__all__ = [
    "CalcRowSource",
    "CsvRowSource",
    "ExcelRowSource",
    "MemoryRowSource",
    "open_calc",
    "open_csv",
    "open_excel",
    "open_rows",
    "open_source",
    "resolve_format",
]
