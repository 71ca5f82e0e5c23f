from __future__ import annotations

from enum import Enum
from typing import Protocol, Sequence


class QuotingMode(str, Enum):
    """
    Назначение:
        Как источник обработал кавычки в сырых полях до передачи курсору.

        LAZY   - кавычки уже разобраны парсером источника (или их нет вовсе,
                 как в ячейках таблиц); поле отдаётся после trim как есть.
        STRICT - стандартное квотирование: пустое поле = NULL,
                 "..." снимается с удвоенными кавычками внутри.
    """

    LAZY = "lazy"
    STRICT = "strict"

    @classmethod
    def parse(cls, value: "str | QuotingMode") -> "QuotingMode":
        if isinstance(value, QuotingMode):
            return value
        normalized = (value or "").strip().lower()
        for mode in cls:
            if mode.value == normalized:
                return mode
        raise ValueError(f"Unsupported quoting mode: {value}")


class RowSource(Protocol):
    """
    Назначение/ответственность:
        Источник сырых строк одного табличного документа/листа (CSV, Excel, Calc).
    Взаимодействия:
        Потребляется Rows; курсор не владеет источником, а только держит ссылку.
    """

    def read_row(self) -> Sequence[str] | None:
        """
        Контракт:
            Возвращает следующую строку как последовательность текстовых полей,
            None при исчерпании данных. Ошибку разбора сигнализирует исключением
            (отдельно от конца данных).
        """
        ...

    def close(self) -> None:
        """
        Контракт:
            Идемпотентное освобождение ресурсов; источники без ресурсов ничего не делают.
        """
        ...

    def quoting_mode(self) -> QuotingMode:
        """
        Контракт:
            Статическая декларация режима квотирования для политики приведения.
        """
        ...
