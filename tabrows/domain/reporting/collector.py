from __future__ import annotations

from dataclasses import asdict
from typing import Any, Iterable, Mapping

from tabrows.common.sanitize import truncateText
from tabrows.common.time import getNowIso
from tabrows.domain.exceptions import RowsError
from tabrows.domain.reporting.models import (
    ReportDiagnostic,
    ReportEnvelope,
    ReportItem,
    ReportMeta,
    ReportSummary,
)


class ReportCollector:
    """
    Назначение/ответственность:
        Единый сборщик отчётов для всех команд.
    """

    def __init__(self, run_id: str, command: str, started_at: str | None = None) -> None:
        self.meta = ReportMeta(
            run_id=run_id,
            command=command,
            started_at=started_at or getNowIso(),
        )
        self.summary = ReportSummary()
        self.items: list[ReportItem] = []
        self.context: dict[str, Any] = {}
        self.status: str | None = None

    def set_context(self, name: str, value: dict[str, Any]) -> None:
        self.context[name] = value

    def add_item(
        self,
        *,
        status: str,
        row_no: int | None = None,
        payload: Mapping[str, Any] | None = None,
        errors: Iterable[RowsError] | None = None,
        store: bool = True,
    ) -> None:
        error_list = list(errors or [])

        self.summary.rows_total += 1
        if status == "FAILED":
            self.summary.rows_failed += 1
        elif status == "OK":
            self.summary.rows_passed += 1

        self._count_errors(error_list)

        if not store:
            return
        if self._should_store_item():
            self.items.append(
                ReportItem(
                    status=status,
                    row_no=row_no,
                    payload=payload,
                    diagnostics=[self._from_error(err) for err in error_list],
                )
            )
        else:
            self.meta.items_truncated = True

    def add_error(self, error: RowsError) -> None:
        """
        Назначение:
            Ошибка вне строки данных (сбой источника, заголовок).
        """
        self._count_errors([error])
        self.context.setdefault("errors", []).append(error.to_dict())

    def finish(self, finished_at: str | None = None, duration_ms: int | None = None) -> None:
        self.meta.finished_at = finished_at or getNowIso()
        self.meta.duration_ms = duration_ms
        if self.status is None:
            self.status = self._derive_status()

    def build(self) -> ReportEnvelope:
        return ReportEnvelope(
            status=self.status or self._derive_status(),
            meta=self.meta,
            summary=self.summary,
            items=self.items,
            context=self.context,
        )

    def _should_store_item(self) -> bool:
        limit = self.meta.items_limit
        if limit is None:
            return True
        return len(self.items) < limit

    def _derive_status(self) -> str:
        if self.summary.errors_total == 0:
            return "SUCCESS"
        if self.summary.rows_passed > 0:
            return "PARTIAL"
        return "FAILED"

    def _count_errors(self, errors: list[RowsError]) -> None:
        self.summary.errors_total += len(errors)
        for error in errors:
            key = error.code.value
            self.summary.by_code[key] = self.summary.by_code.get(key, 0) + 1

    @staticmethod
    def _from_error(error: RowsError) -> ReportDiagnostic:
        return ReportDiagnostic(
            code=error.code.value,
            column=error.column,
            message=truncateText(str(error)) or "",
        )


def asdict_report(envelope: ReportEnvelope) -> dict[str, Any]:
    return {
        "status": envelope.status,
        "meta": asdict(envelope.meta),
        "summary": asdict(envelope.summary),
        "items": [asdict(item) for item in envelope.items],
        "context": envelope.context,
    }
