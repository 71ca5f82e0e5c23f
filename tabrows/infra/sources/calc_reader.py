from __future__ import annotations

from typing import Iterator

from odf import teletype
from odf.namespaces import TABLENS, TEXTNS
from odf.opendocument import load
from odf.table import Table, TableRow

from tabrows.domain.error_codes import ErrorCode
from tabrows.domain.exceptions import RowsError
from tabrows.domain.ports.sources import QuotingMode

CELL_QNAMES = {(TABLENS, "table-cell"), (TABLENS, "covered-table-cell")}
PARAGRAPH_QNAME = (TEXTNS, "p")


def _repeat(element, attr: str) -> int:
    raw = element.getAttribute(attr)
    if not raw:
        return 1
    try:
        return max(int(raw), 1)
    except ValueError:
        return 1


def _cell_text(cell) -> str:
    paragraphs = [
        teletype.extractText(node)
        for node in cell.childNodes
        if getattr(node, "qname", None) == PARAGRAPH_QNAME
    ]
    return "\n".join(paragraphs)


def _row_cells(row) -> list[str]:
    """
    Назначение:
        Тексты ячеек строки с раскрытием number-columns-repeated.
        Хвостовые пустые ячейки отбрасываются до раскрытия.
    """
    runs: list[tuple[str, int]] = []
    for node in row.childNodes:
        if getattr(node, "qname", None) not in CELL_QNAMES:
            continue
        runs.append((_cell_text(node), _repeat(node, "numbercolumnsrepeated")))
    while runs and runs[-1][0] == "":
        runs.pop()
    cells: list[str] = []
    for text, count in runs:
        cells.extend([text] * count)
    return cells


class CalcRowSource:
    """
    Назначение/ответственность:
        Источник строк одной таблицы документа LibreOffice Calc (ODS, odfpy).

    Поведение:
        - Пустое имя таблицы - первая таблица документа.
        - Неизвестная таблица - INVALID_SHEET_NAME.
        - number-rows-repeated раскрывается в N отдельных строк.
        - Пустые строки в конце таблицы не отдаются.
        - Режим квотирования LAZY.
    """

    def __init__(self, doc, sheet_name: str = "") -> None:
        tables = doc.spreadsheet.getElementsByType(Table) if doc is not None else []
        table = None
        if not sheet_name and tables:
            table = tables[0]
        for candidate in tables:
            if sheet_name and candidate.getAttribute("name") == sheet_name:
                table = candidate
                break
        if table is None:
            raise RowsError(
                ErrorCode.INVALID_SHEET_NAME,
                "invalid sheet name in Calc data",
                details={"sheet_name": sheet_name},
            )
        self.table = table
        self.sheet_name = table.getAttribute("name")
        self._rows = self._iter_rows()

    def read_row(self) -> list[str] | None:
        return next(self._rows, None)

    def close(self) -> None:
        return None

    def quoting_mode(self) -> QuotingMode:
        return QuotingMode.LAZY

    def _iter_rows(self) -> Iterator[list[str]]:
        pending_blank = 0
        for row in self.table.getElementsByType(TableRow):
            cells = _row_cells(row)
            count = _repeat(row, "numberrowsrepeated")
            if not cells:
                pending_blank += count
                continue
            for _ in range(pending_blank):
                yield []
            pending_blank = 0
            for _ in range(count):
                yield list(cells)


def open_calc(path: str, sheet_name: str = "") -> CalcRowSource:
    """
    Назначение:
        Загружает ODS-документ целиком и возвращает источник таблицы.
    """
    return CalcRowSource(load(path), sheet_name)
