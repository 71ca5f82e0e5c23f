from __future__ import annotations

import math
import re
from typing import Callable, TypeVar

from tabrows.domain.error_codes import ErrorCode
from tabrows.domain.exceptions import RowsError
from tabrows.domain.ports.sources import QuotingMode
from tabrows.domain.rows.coercion import coerce_field
from tabrows.domain.rows.cursor import RowCursor
from tabrows.domain.rows.nullable import Nullable

T = TypeVar("T")

INT64_MIN, INT64_MAX = -(1 << 63), (1 << 63) - 1
INT32_MIN, INT32_MAX = -(1 << 31), (1 << 31) - 1
INT16_MIN, INT16_MAX = -(1 << 15), (1 << 15) - 1
INT8_MIN, INT8_MAX = -(1 << 7), (1 << 7) - 1
BYTE_MIN, BYTE_MAX = 0, (1 << 8) - 1

TRUE_LITERALS = frozenset({"1", "t", "T", "TRUE", "true", "True"})
FALSE_LITERALS = frozenset({"0", "f", "F", "FALSE", "false", "False"})
INF_LITERALS = frozenset({"inf", "infinity"})

DIGITS = "0123456789abcdefghijklmnopqrstuvwxyz"
FLOAT_RE = re.compile(r"[+-]?(?:(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?|inf|infinity|nan)", re.ASCII | re.IGNORECASE)
PREFIXED_INT_RE = re.compile(r"[+-]?(?:0[xX][0-9a-fA-F]+|0[oO]?[0-7]+|0[bB][01]+|[1-9][0-9]*|0)", re.ASCII)


def _parse_float(text: str) -> float:
    if not FLOAT_RE.fullmatch(text):
        raise ValueError(f"invalid float literal: {text!r}")
    return float(text)


def _parse_int(text: str, base: int) -> int:
    """
    Назначение:
        Разбор целого только из ASCII-цифр основания base, без "_" и пробелов.
        Префиксы 0x/0o/0b (и ведущий 0 как восьмеричный) допустимы только при base=0.
    """
    sign = "-" if text.startswith("-") else ""
    digits = text[1:] if text[:1] in ("+", "-") else text
    if base == 0:
        if not PREFIXED_INT_RE.fullmatch(text):
            raise ValueError(f"invalid literal for base 0: {text!r}")
        if len(digits) > 1 and digits[0] == "0" and digits[1].isdigit():
            return int(sign + digits[1:], 8)
        return int(sign + digits, 0)
    if not 2 <= base <= 36:
        raise ValueError(f"unsupported base: {base}")
    allowed = set(DIGITS[:base]) | set(DIGITS[:base].upper())
    if not digits or any(ch not in allowed for ch in digits):
        raise ValueError(f"invalid literal for base {base}: {text!r}")
    return int(sign + digits, base)


def _narrow(value: int, low: int, high: int, type_name: str, index: int, base: int) -> int:
    if value < low or value > high:
        raise RowsError(
            ErrorCode.OUT_OF_RANGE,
            f"value {value} out of {type_name} range [{low}, {high}]",
            index=index,
            base=base,
        )
    return value


class Rows(RowCursor):
    """
    Назначение/ответственность:
        Курсор строк с типизированными аксессорами по позиции (get_*) и по имени колонки (column_*).

    Инварианты/гарантии:
        - column_* = column_index(name) + соответствующий get_*; UNKNOWN_COLUMN
          поднимается до обращения к полю.
        - Узкие целые строятся цепочкой: int32 <- int64, int16 <- int32,
          int8 <- int16, byte <- int16; каждое звено только проверяет диапазон.
        - get_null_* превращают только NULL_VALUE в Nullable(valid=False),
          остальные ошибки пробрасываются.
    """

    # --- string ---

    def get_string(self, index: int) -> str:
        value = self._coerced(index)
        if value is None:
            raise RowsError(ErrorCode.NULL_VALUE, "field is blank", index=index)
        return value

    def get_null_string(self, index: int) -> Nullable[str]:
        try:
            value = self.get_string(index)
        except RowsError as exc:
            if exc.code is ErrorCode.NULL_VALUE:
                return Nullable.null()
            raise
        # в lazy-режиме пустая строка не считается NULL политикой приведения
        if not value and self.quoting_mode() is QuotingMode.LAZY:
            return Nullable.null()
        return Nullable.of(value)

    def get(self, index: int) -> str:
        try:
            return self.get_string(index)
        except RowsError:
            return ""

    def column_null_string(self, name: str) -> Nullable[str]:
        return self._by_name(name, self.get_null_string)

    def column_string(self, name: str) -> str:
        result = self.column_null_string(name)
        return result.value if result.valid else ""

    def column(self, name: str) -> str:
        try:
            return self.column_string(name)
        except RowsError:
            return ""

    # --- bool ---

    def get_bool(self, index: int) -> bool:
        text = self._non_blank(index)
        if text in TRUE_LITERALS:
            return True
        if text in FALSE_LITERALS:
            return False
        raise RowsError(ErrorCode.MALFORMED, f"invalid boolean literal: {text!r}", index=index)

    def get_null_bool(self, index: int) -> Nullable[bool]:
        return self._nullable(self.get_bool, index)

    def column_bool(self, name: str) -> bool:
        return self._by_name(name, self.get_bool)

    def column_null_bool(self, name: str) -> Nullable[bool]:
        return self._by_name(name, self.get_null_bool)

    # --- float ---

    def get_float64(self, index: int) -> float:
        text = self._non_blank(index)
        try:
            value = _parse_float(text)
        except ValueError as exc:
            raise RowsError(ErrorCode.MALFORMED, f"invalid float literal: {text!r}", index=index) from exc
        if math.isinf(value) and text.lstrip("+-").lower() not in INF_LITERALS:
            raise RowsError(ErrorCode.OUT_OF_RANGE, f"value {text!r} out of float64 range", index=index)
        return value

    def get_null_float64(self, index: int) -> Nullable[float]:
        return self._nullable(self.get_float64, index)

    def column_float64(self, name: str) -> float:
        return self._by_name(name, self.get_float64)

    def column_null_float64(self, name: str) -> Nullable[float]:
        return self._by_name(name, self.get_null_float64)

    # --- integers ---

    def get_int64(self, index: int, base: int = 10) -> int:
        text = self._non_blank(index)
        try:
            value = _parse_int(text, base)
        except ValueError as exc:
            raise RowsError(
                ErrorCode.MALFORMED,
                f"invalid integer literal: {text!r}",
                index=index,
                base=base,
            ) from exc
        return _narrow(value, INT64_MIN, INT64_MAX, "int64", index, base)

    def get_int32(self, index: int, base: int = 10) -> int:
        return _narrow(self.get_int64(index, base), INT32_MIN, INT32_MAX, "int32", index, base)

    def get_int16(self, index: int, base: int = 10) -> int:
        return _narrow(self.get_int32(index, base), INT16_MIN, INT16_MAX, "int16", index, base)

    def get_int8(self, index: int, base: int = 10) -> int:
        return _narrow(self.get_int16(index, base), INT8_MIN, INT8_MAX, "int8", index, base)

    def get_byte(self, index: int, base: int = 10) -> int:
        return _narrow(self.get_int16(index, base), BYTE_MIN, BYTE_MAX, "byte", index, base)

    def get_null_int64(self, index: int, base: int = 10) -> Nullable[int]:
        return self._nullable(self.get_int64, index, base)

    def get_null_int32(self, index: int, base: int = 10) -> Nullable[int]:
        return self._nullable(self.get_int32, index, base)

    def get_null_int16(self, index: int, base: int = 10) -> Nullable[int]:
        return self._nullable(self.get_int16, index, base)

    def get_null_int8(self, index: int, base: int = 10) -> Nullable[int]:
        return self._nullable(self.get_int8, index, base)

    def get_null_byte(self, index: int, base: int = 10) -> Nullable[int]:
        return self._nullable(self.get_byte, index, base)

    def column_int64(self, name: str, base: int = 10) -> int:
        return self._by_name(name, self.get_int64, base)

    def column_int32(self, name: str, base: int = 10) -> int:
        return self._by_name(name, self.get_int32, base)

    def column_int16(self, name: str, base: int = 10) -> int:
        return self._by_name(name, self.get_int16, base)

    def column_int8(self, name: str, base: int = 10) -> int:
        return self._by_name(name, self.get_int8, base)

    def column_byte(self, name: str, base: int = 10) -> int:
        return self._by_name(name, self.get_byte, base)

    def column_null_int64(self, name: str, base: int = 10) -> Nullable[int]:
        return self._by_name(name, self.get_null_int64, base)

    def column_null_int32(self, name: str, base: int = 10) -> Nullable[int]:
        return self._by_name(name, self.get_null_int32, base)

    def column_null_int16(self, name: str, base: int = 10) -> Nullable[int]:
        return self._by_name(name, self.get_null_int16, base)

    def column_null_int8(self, name: str, base: int = 10) -> Nullable[int]:
        return self._by_name(name, self.get_null_int8, base)

    def column_null_byte(self, name: str, base: int = 10) -> Nullable[int]:
        return self._by_name(name, self.get_null_byte, base)

    # --- helpers ---

    def _coerced(self, index: int) -> str | None:
        if self.source is None:
            raise RowsError(ErrorCode.NULL_CURSOR, "cursor has no row source", index=index)
        if index < 0 or index >= len(self._row):
            raise RowsError(
                ErrorCode.INDEX_OUT_OF_RANGE,
                f"index out of row bounds (size={len(self._row)})",
                index=index,
            )
        return coerce_field(self._row[index], self.quoting_mode())

    def _non_blank(self, index: int) -> str:
        text = self.get_string(index)
        if not text:
            raise RowsError(ErrorCode.NULL_VALUE, "field is empty", index=index)
        return text

    @staticmethod
    def _nullable(getter: Callable[..., T], *args) -> Nullable[T]:
        try:
            return Nullable.of(getter(*args))
        except RowsError as exc:
            if exc.code is ErrorCode.NULL_VALUE:
                return Nullable.null()
            raise

    def _by_name(self, name: str, getter: Callable[..., T], *args) -> T:
        index = self.column_index(name)
        try:
            return getter(index, *args)
        except RowsError as exc:
            exc.with_column(name)
            raise
