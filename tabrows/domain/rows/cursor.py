from __future__ import annotations

import logging
from typing import Iterator, Sequence

from tabrows.domain.error_codes import ErrorCode
from tabrows.domain.exceptions import RowsError, is_end_of_data
from tabrows.domain.ports.sources import QuotingMode, RowSource
from tabrows.domain.rows.coercion import normalize_column_name


class RowCursor:
    """
    Назначение/ответственность:
        Последовательный курсор по сырым строкам RowSource.
        Владеет картой заголовков (имя -> позиция) и текущей строкой.

    Инварианты/гарантии:
        - Заголовок читается один раз, при первом next()/header() в режиме has_header.
        - Ключи карты заголовков: trim + casefold; при дублях выигрывает последний.
        - После END_OF_DATA курсор терминален: next() снова даёт END_OF_DATA,
          row() возвращает последнюю прочитанную строку.
        - SOURCE_ERROR не делает курсор терминальным.
        - close() освобождает источник ровно один раз.
    """

    def __init__(
        self,
        source: RowSource | None,
        has_header: bool = False,
        logger: logging.Logger | None = None,
    ) -> None:
        self.source = source
        self.has_header = has_header
        self.logger = logger
        self._header_pending = has_header
        self._header: list[str] = []
        self._header_map: dict[str, int] = {}
        self._row: list[str] = []
        self._row_no = 0
        self._terminal = False
        self._closed = False

    def __enter__(self) -> "RowCursor":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __iter__(self) -> Iterator["RowCursor"]:
        while True:
            try:
                self.next()
            except RowsError as exc:
                if is_end_of_data(exc):
                    return
                raise
            yield self

    @property
    def row_no(self) -> int:
        """Номер текущей строки данных (1-based), 0 до первого next()."""
        return self._row_no

    @property
    def is_terminal(self) -> bool:
        return self._terminal

    def quoting_mode(self) -> QuotingMode:
        if self.source is None:
            return QuotingMode.LAZY
        return self.source.quoting_mode()

    def header(self) -> list[str]:
        """
        Назначение:
            Значения строки заголовка (после trim) без чтения строки данных.

        Поведение:
            - Без режима заголовка или без источника - пустой список, не ошибка.
            - Если заголовок ещё не прочитан - читает его.
        """
        if self._header_pending and self.source is not None:
            self._consume_header()
        return list(self._header)

    def header_map(self) -> dict[str, int]:
        return dict(self._header_map)

    def next(self) -> None:
        """
        Назначение:
            Переход к следующей строке данных.

        Поведение:
            - NULL_CURSOR, если источник отсутствует.
            - END_OF_DATA при исчерпании данных (и далее при каждом вызове).
            - SOURCE_ERROR с исходной ошибкой в __cause__ при сбое источника;
              текущая строка при этом сбрасывается.
        """
        if self.source is None:
            raise RowsError(ErrorCode.NULL_CURSOR, "cursor has no row source")
        if self._terminal:
            raise RowsError(ErrorCode.END_OF_DATA, "no more rows")
        if self._header_pending:
            self._consume_header()
            if self._terminal:
                raise RowsError(ErrorCode.END_OF_DATA, "no more rows")
        try:
            fields = self._read()
        except RowsError:
            self._row = []
            raise
        if fields is None:
            self._terminal = True
            self._log(logging.DEBUG, f"end of data after rows={self._row_no}")
            raise RowsError(ErrorCode.END_OF_DATA, "no more rows")
        self._row = fields
        self._row_no += 1

    def row(self) -> list[str]:
        return list(self._row)

    def column_index(self, name: str) -> int:
        """
        Назначение:
            Позиция колонки по имени (без учёта регистра и пробелов по краям).

        Поведение:
            - NULL_CURSOR, если источник отсутствует.
            - UNKNOWN_COLUMN, если имени нет в заголовке или заголовок не установлен.
        """
        if self.source is None:
            raise RowsError(ErrorCode.NULL_CURSOR, "cursor has no row source", column=name)
        index = self._header_map.get(normalize_column_name(name))
        if index is None:
            raise RowsError(ErrorCode.UNKNOWN_COLUMN, "column not found in header", column=name)
        return index

    def close(self) -> None:
        if self._closed or self.source is None:
            return
        self._closed = True
        self.source.close()

    def _consume_header(self) -> None:
        fields = self._read()
        self._header_pending = False
        if fields is None:
            self._terminal = True
            self._log(logging.DEBUG, "source exhausted before header row")
            return
        self._header = [name.strip() for name in fields]
        self._header_map = {}
        for index, name in enumerate(self._header):
            self._header_map[normalize_column_name(name)] = index
        if len(self._header_map) != len(self._header):
            self._log(logging.WARNING, f"duplicate header names, last occurrence wins: {self._header}")
        self._log(logging.DEBUG, f"header consumed columns={len(self._header)}")

    def _read(self) -> list[str] | None:
        try:
            fields: Sequence[str] | None = self.source.read_row()
        except Exception as exc:
            self._log(logging.WARNING, f"source error after rows={self._row_no}: {exc}")
            raise RowsError(
                ErrorCode.SOURCE_ERROR,
                "failed to read row from source",
                details={"row_no": self._row_no + 1},
            ) from exc
        if fields is None:
            return None
        return ["" if value is None else str(value) for value in fields]

    def _log(self, level: int, message: str) -> None:
        if self.logger is None:
            return
        self.logger.log(level, message, extra={"component": "rows"})
