def truncateText(value: str | None, limit: int = 200) -> str | None:
    """
    Назначение:
        Ограничивает длину текста, чтобы избежать раздувания логов/отчётов.

    Выходные данные:
        str | None
            Строка, не длиннее limit символов; None, если вход None.
    """
    if value is None:
        return None
    if len(value) <= limit:
        return value
    suffix = "..." if limit > 3 else ""
    head = limit - len(suffix)
    return value[:head] + suffix
