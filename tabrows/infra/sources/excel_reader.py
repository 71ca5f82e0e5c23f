from __future__ import annotations

from datetime import date, datetime, time
from typing import Any

import openpyxl

from tabrows.domain.error_codes import ErrorCode
from tabrows.domain.exceptions import RowsError
from tabrows.domain.ports.sources import QuotingMode


def cell_text(value: Any) -> str:
    """
    Назначение:
        Текстовое представление значения ячейки Excel.
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (datetime, date, time)):
        return value.isoformat()
    return str(value)


class ExcelRowSource:
    """
    Назначение/ответственность:
        Источник строк одного листа книги Excel (openpyxl).

    Поведение:
        - Пустое имя листа - первый лист книги.
        - Неизвестный лист - INVALID_SHEET_NAME.
        - Строки прямоугольные в пределах используемого диапазона листа.
        - Ячейки не несут синтаксиса кавычек, режим квотирования LAZY.
    """

    def __init__(self, workbook, sheet_name: str = "", owns_workbook: bool = False) -> None:
        self.workbook = workbook
        self.owns_workbook = owns_workbook
        if not sheet_name:
            if not workbook.sheetnames:
                raise RowsError(ErrorCode.INVALID_SHEET_NAME, "workbook has no sheets")
            sheet_name = workbook.sheetnames[0]
        if sheet_name not in workbook.sheetnames:
            raise RowsError(
                ErrorCode.INVALID_SHEET_NAME,
                "invalid sheet name in Excel data",
                details={"sheet_name": sheet_name},
            )
        self.sheet_name = sheet_name
        self._rows = workbook[sheet_name].iter_rows(values_only=True)
        self._closed = False

    def read_row(self) -> list[str] | None:
        values = next(self._rows, None)
        if values is None:
            return None
        return [cell_text(value) for value in values]

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self.owns_workbook:
            self.workbook.close()

    def quoting_mode(self) -> QuotingMode:
        return QuotingMode.LAZY


def open_excel(path: str, sheet_name: str = "") -> ExcelRowSource:
    """
    Назначение:
        Открывает книгу в режиме read_only/data_only и возвращает источник листа.
    """
    workbook = openpyxl.load_workbook(path, read_only=True, data_only=True)
    try:
        return ExcelRowSource(workbook, sheet_name, owns_workbook=True)
    except RowsError:
        workbook.close()
        raise
