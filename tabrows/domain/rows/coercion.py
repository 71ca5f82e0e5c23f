from __future__ import annotations

from tabrows.domain.ports.sources import QuotingMode

QUOTE_CHARS = ('"', "'")


class UnquoteError(ValueError):
    """
    Назначение:
        Строка не является корректным литералом в кавычках.
    """


def unquote(value: str) -> str:
    """
    Назначение:
        Снимает симметричные кавычки с литерала ("..." или '...'),
        удвоенная кавычка внутри превращается в одиночную.

    Выходные данные:
        str
            Содержимое литерала.

    Поведение:
        - UnquoteError, если кавычки несимметричны или внутри есть неудвоенная кавычка.
    """
    if len(value) < 2 or value[0] not in QUOTE_CHARS or value[-1] != value[0]:
        raise UnquoteError(f"not a quoted literal: {value}")
    quote = value[0]
    doubled = quote * 2
    inner = value[1:-1]
    if quote in inner.replace(doubled, ""):
        raise UnquoteError(f"unescaped quote in literal: {value}")
    return inner.replace(doubled, quote)


def coerce_field(raw: str | None, mode: QuotingMode) -> str | None:
    """
    Назначение:
        Политика приведения сырого поля к строке.

    Алгоритм:
        - trim пробелов по краям;
        - LAZY: вернуть как есть (пустая строка остаётся пустой строкой);
        - STRICT: пустое -> None (значение отсутствует); литерал в кавычках
          раскрывается; при ошибке раскрытия возвращается trimmed-строка.
    """
    value = (raw or "").strip()
    if mode is QuotingMode.LAZY:
        return value
    if not value:
        return None
    try:
        return unquote(value)
    except UnquoteError:
        return value


def normalize_column_name(name: str) -> str:
    """
    Назначение:
        Ключ карты заголовков: trim + casefold.
    """
    return (name or "").strip().casefold()
