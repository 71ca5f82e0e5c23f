from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict

from tabrows.domain.error_codes import ErrorCode


@dataclass
class RowsError(Exception):
    """
    Назначение:
        Ошибка курсора/аксессоров с кодом из ErrorCode и контекстом диагностики.
    Инварианты/гарантии:
        - code всегда из закрытого перечисления ErrorCode.
        - Исходная ошибка (если есть) доступна через __cause__ (raise ... from exc).
    """

    code: ErrorCode
    message: str = ""
    column: str | None = None
    index: int | None = None
    base: int | None = None
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not self.message:
            self.message = self.code.value.lower().replace("_", " ")
        super().__init__(self.message)

    def __str__(self) -> str:
        context = []
        if self.column is not None:
            context.append(f"column={self.column!r}")
        if self.index is not None:
            context.append(f"index={self.index}")
        if self.base is not None:
            context.append(f"base={self.base}")
        for key, value in self.details.items():
            context.append(f"{key}={value!r}")
        text = f"{self.code.value}: {self.message}"
        if context:
            text = f"{text} ({', '.join(context)})"
        if self.__cause__ is not None:
            text = f"{text}: {self.__cause__}"
        return text

    def with_column(self, column: str) -> "RowsError":
        """
        Назначение:
            Дополняет ошибку by-index аксессора именем колонки (by-name путь).
        """
        if self.column is None:
            self.column = column
        return self

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code.value,
            "message": self.message,
            "column": self.column,
            "index": self.index,
            "base": self.base,
            "details": self.details or {},
            "cause": str(self.__cause__) if self.__cause__ is not None else None,
        }


def is_end_of_data(exc: BaseException) -> bool:
    return isinstance(exc, RowsError) and exc.code is ErrorCode.END_OF_DATA


__all__ = ["RowsError", "is_end_of_data"]
