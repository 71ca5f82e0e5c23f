from __future__ import annotations

from dataclasses import dataclass
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Nullable(Generic[T]):
    """
    Назначение:
        Результат nullable-аксессора: значение и флаг валидности.

    Поля:
        value: T | None
            Значение, None если valid=False.
        valid: bool
            False - значение отсутствует (пустое/NULL поле), это не ошибка.
    """

    value: T | None = None
    valid: bool = False

    @classmethod
    def of(cls, value: T) -> "Nullable[T]":
        return cls(value=value, valid=True)

    @classmethod
    def null(cls) -> "Nullable[T]":
        return cls(value=None, valid=False)

    def get(self, default: T | None = None) -> T | None:
        return self.value if self.valid else default
