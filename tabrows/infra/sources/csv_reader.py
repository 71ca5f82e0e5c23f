from __future__ import annotations

import csv
from typing import TextIO

from tabrows.domain.error_codes import ErrorCode
from tabrows.domain.exceptions import RowsError
from tabrows.domain.ports.sources import QuotingMode


class CsvRowSource:
    """
    Назначение/ответственность:
        Источник сырых строк из CSV/TSV потока.

    Входные данные:
        stream: TextIO
            Текстовый поток (открытый с newline="").
        delimiter: str
            Разделитель полей.
        quoting: QuotingMode
            LAZY - толерантный парсер (кавычка внутри неквотированного поля остаётся текстом);
            STRICT - строгий парсер, ошибка квотирования = INVALID_RECORD.
        skip_initial_space: bool
            Пропускать пробелы сразу после разделителя.
        fields_per_record: int
            0 - число колонок фиксируется первой записью, >0 - ожидаемое число,
            <0 - без проверки.

    Поведение:
        - Пустые строки файла пропускаются.
        - close() закрывает поток один раз.
    """

    def __init__(
        self,
        stream: TextIO,
        delimiter: str = ",",
        quoting: QuotingMode | str = QuotingMode.LAZY,
        skip_initial_space: bool = True,
        fields_per_record: int = 0,
    ) -> None:
        self.stream = stream
        self.delimiter = delimiter
        self.fields_per_record = fields_per_record
        self._quoting = QuotingMode.parse(quoting)
        self._reader = csv.reader(
            stream,
            delimiter=delimiter,
            skipinitialspace=skip_initial_space,
            strict=self._quoting is QuotingMode.STRICT,
        )
        self._expected_len: int | None = fields_per_record if fields_per_record > 0 else None
        self._closed = False

    def read_row(self) -> list[str] | None:
        while True:
            try:
                row = next(self._reader)
            except StopIteration:
                return None
            except csv.Error as exc:
                line_no = self._reader.line_num
                raise RowsError(
                    ErrorCode.INVALID_RECORD,
                    f"Invalid CSV record at line {line_no}",
                    details={"line_no": line_no},
                ) from exc
            if row:
                break
        self._check_width(row)
        return row

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        close = getattr(self.stream, "close", None)
        if close is not None:
            close()

    def quoting_mode(self) -> QuotingMode:
        return self._quoting

    def _check_width(self, row: list[str]) -> None:
        if self.fields_per_record < 0:
            return
        if self._expected_len is None:
            self._expected_len = len(row)
            return
        if len(row) != self._expected_len:
            line_no = self._reader.line_num
            raise RowsError(
                ErrorCode.INVALID_RECORD,
                f"Invalid column count at line {line_no}: expected {self._expected_len}, got {len(row)}",
                details={"line_no": line_no, "expected": self._expected_len, "got": len(row)},
            )


def open_csv(path: str, encoding: str = "utf-8-sig", **kwargs) -> CsvRowSource:
    """
    Назначение:
        Открывает CSV-файл и возвращает источник, владеющий файловым дескриптором.
    """
    stream = open(path, "r", encoding=encoding, newline="")
    return CsvRowSource(stream, **kwargs)
