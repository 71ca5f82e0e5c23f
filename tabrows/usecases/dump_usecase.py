from __future__ import annotations

import logging
from typing import Any, Iterator

from tabrows.domain.rows.accessors import Rows


class DumpUseCase:
    """
    Назначение/ответственность:
        Выгрузка строк источника в виде записей (dict по заголовку или список полей).

    Поведение:
        - Источник не читается дальше limit строк данных (limit=0 - только заголовок).
        - Значения берутся по имени колонки, поэтому дубли в заголовке
          разрешаются как в курсоре: выигрывает последняя колонка.
    """

    def __init__(
        self,
        columns: list[str] | None = None,
        limit: int | None = None,
        logger: logging.Logger | None = None,
    ) -> None:
        self.columns = columns or []
        self.limit = limit
        self.logger = logger

    def iter_records(self, rows: Rows) -> Iterator[Any]:
        header = rows.header()
        for name in self.columns:
            rows.column_index(name)
        names = self.columns or header
        if not self.columns and len(rows.header_map()) != len(header) and self.logger is not None:
            self.logger.warning(
                f"duplicate header names collapse into one key, last column wins: {header}",
                extra={"component": "dump"},
            )
        if self.limit is not None and self.limit <= 0:
            return
        emitted = 0
        for _ in rows:
            if names:
                yield {name: rows.column(name) for name in names}
            else:
                yield [rows.get(index) for index in range(len(rows.row()))]
            emitted += 1
            if self.limit is not None and emitted >= self.limit:
                return
