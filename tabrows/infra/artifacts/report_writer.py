from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from tabrows.domain.reporting.collector import ReportCollector, asdict_report
from tabrows.domain.rows.accessors import Rows
from tabrows.infra.sources.factory import resolve_format


def createEmptyReport(
    runId: str,
    command: str,
    configSources: list[str],
    sourcePath: str | None = None,
    sheet: str | None = None,
    itemsLimit: int | None = None,
) -> ReportCollector:
    """
    Назначение:
        Отчёт-скелет команды над табличным файлом: meta с путём, листом и лимитом items.
    """
    collector = ReportCollector(run_id=runId, command=command)
    collector.meta.source_path = sourcePath
    collector.meta.sheet = sheet or None
    collector.meta.items_limit = itemsLimit
    if configSources:
        collector.set_context("config", {"sources": configSources})
    return collector


def describeSource(rows: Rows | None, sourcePath: str | None) -> dict[str, Any]:
    """
    Назначение:
        Состояние источника на момент завершения команды.

    Поведение:
        - format определяется по расширению; неизвестное расширение - None.
        - Без открытого курсора (файл не найден/не открылся) opened=False.
    """
    try:
        fmt = resolve_format(sourcePath) if sourcePath else None
    except ValueError:
        fmt = None
    if rows is None:
        return {"format": fmt, "opened": False}
    return {
        "format": fmt,
        "opened": True,
        "quoting": rows.quoting_mode().value,
        "header_columns": len(rows.header_map()),
        "rows_read": rows.row_no,
        "exhausted": rows.is_terminal,
    }


def finalizeReport(
    report: ReportCollector,
    durationMs: int,
    logFile: str | None,
    reportDir: str,
    rows: Rows | None = None,
) -> None:
    report.set_context("source", describeSource(rows, report.meta.source_path))
    report.set_context("runtime", {"log_file": logFile, "report_dir": reportDir})
    report.finish(duration_ms=durationMs)


def writeReportJson(report: ReportCollector, reportDir: str) -> str:
    """
    Назначение:
        Записывает report_<command>_<run_id>.json.

    Выходные данные:
        str
            Путь к файлу отчёта.
    """
    Path(reportDir).mkdir(parents=True, exist_ok=True)
    reportPath = Path(reportDir) / f"report_{report.meta.command}_{report.meta.run_id}.json"

    data: dict[str, Any] = asdict_report(report.build())
    reportPath.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")

    return str(reportPath)
