from __future__ import annotations

from typing import Iterable, Sequence

from tabrows.domain.ports.sources import QuotingMode


class MemoryRowSource:
    """
    Назначение/ответственность:
        Источник строк из памяти (уже разобранные поля) с заданным режимом квотирования.
    """

    def __init__(self, rows: Iterable[Sequence[str]], quoting: QuotingMode | str = QuotingMode.LAZY) -> None:
        self._rows = iter(list(rows))
        self._quoting = QuotingMode.parse(quoting)

    def read_row(self) -> list[str] | None:
        row = next(self._rows, None)
        if row is None:
            return None
        return list(row)

    def close(self) -> None:
        return None

    def quoting_mode(self) -> QuotingMode:
        return self._quoting
