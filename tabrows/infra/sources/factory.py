from __future__ import annotations

import logging
from pathlib import Path

from tabrows.domain.ports.sources import QuotingMode, RowSource
from tabrows.domain.rows.accessors import Rows
from tabrows.infra.sources.calc_reader import open_calc
from tabrows.infra.sources.csv_reader import open_csv
from tabrows.infra.sources.excel_reader import open_excel

CSV_SUFFIXES = {".csv", ".tsv", ".txt"}
EXCEL_SUFFIXES = {".xlsx", ".xlsm"}
CALC_SUFFIXES = {".ods"}


def resolve_format(path: str) -> str:
    """
    Назначение:
        Определяет формат источника по расширению файла: csv|excel|calc.
    """
    suffix = Path(path).suffix.lower()
    if suffix in CSV_SUFFIXES:
        return "csv"
    if suffix in EXCEL_SUFFIXES:
        return "excel"
    if suffix in CALC_SUFFIXES:
        return "calc"
    raise ValueError(f"Unsupported tabular file type: {suffix or path}")


def open_source(
    path: str,
    sheet: str = "",
    delimiter: str | None = None,
    quoting: QuotingMode | str = QuotingMode.LAZY,
    encoding: str = "utf-8-sig",
    fields_per_record: int = 0,
) -> RowSource:
    fmt = resolve_format(path)
    if fmt == "excel":
        return open_excel(path, sheet)
    if fmt == "calc":
        return open_calc(path, sheet)
    if delimiter is None:
        delimiter = "\t" if Path(path).suffix.lower() == ".tsv" else ","
    return open_csv(
        path,
        encoding=encoding,
        delimiter=delimiter,
        quoting=quoting,
        fields_per_record=fields_per_record,
    )


def open_rows(
    path: str,
    has_header: bool = True,
    logger: logging.Logger | None = None,
    **source_options,
) -> Rows:
    """
    Назначение:
        Открывает файл подходящим источником и оборачивает его в Rows.
        Закрытие Rows закрывает источник.
    """
    return Rows(open_source(path, **source_options), has_header=has_header, logger=logger)
