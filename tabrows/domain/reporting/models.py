from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass
class ReportMeta:
    """
    Назначение:
        Метаданные запуска команды.
    """

    run_id: str
    command: str
    started_at: str
    source_path: str | None = None
    sheet: str | None = None
    finished_at: str | None = None
    duration_ms: int | None = None
    items_limit: int | None = None
    items_truncated: bool = False


@dataclass
class ReportSummary:
    """
    Назначение:
        Счётчики выполнения.
    """

    rows_total: int = 0
    rows_passed: int = 0
    rows_failed: int = 0
    errors_total: int = 0
    by_code: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ReportDiagnostic:
    code: str
    column: str | None
    message: str


@dataclass
class ReportItem:
    """
    Назначение:
        Единица отчёта, привязанная к строке данных.
    """

    status: str
    row_no: int | None = None
    payload: Mapping[str, Any] | None = None
    diagnostics: list[ReportDiagnostic] = field(default_factory=list)


@dataclass
class ReportEnvelope:
    """
    Назначение:
        Корневой объект отчёта.
    """

    status: str
    meta: ReportMeta
    summary: ReportSummary
    items: list[ReportItem]
    context: dict[str, Any] = field(default_factory=dict)
