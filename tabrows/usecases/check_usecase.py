from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

from tabrows.domain.error_codes import ErrorCode
from tabrows.domain.exceptions import RowsError, is_end_of_data
from tabrows.domain.rows.accessors import Rows
from tabrows.infra.logging.setup import logEvent

# тип колонки -> (обязательный аксессор, nullable-аксессор)
ACCESSORS = {
    "string": ("column_string", "column_null_string"),
    "bool": ("column_bool", "column_null_bool"),
    "float64": ("column_float64", "column_null_float64"),
    "int64": ("column_int64", "column_null_int64"),
    "int32": ("column_int32", "column_null_int32"),
    "int16": ("column_int16", "column_null_int16"),
    "int8": ("column_int8", "column_null_int8"),
    "byte": ("column_byte", "column_null_byte"),
}
INTEGER_TYPES = {"int64", "int32", "int16", "int8", "byte"}


@dataclass(frozen=True)
class ColumnCheck:
    """
    Назначение:
        Правило проверки колонки: имя, тип, допускается ли пустое значение, основание для целых.
    """

    name: str
    type_name: str = "string"
    nullable: bool = False
    base: int = 10

    @classmethod
    def parse(cls, raw: str) -> "ColumnCheck":
        """
        Формат: name[:type[?][/base]], например "order:int8", "note:string?", "mask:int32/16".
        """
        name, _, type_part = raw.partition(":")
        name = name.strip()
        if not name:
            raise ValueError(f"Column name is empty in check: {raw!r}")
        type_part = type_part.strip() or "string"
        base = 10
        if "/" in type_part:
            type_part, _, base_raw = type_part.partition("/")
            base = int(base_raw)
        nullable = type_part.endswith("?")
        type_name = type_part.rstrip("?").lower()
        if type_name not in ACCESSORS:
            raise ValueError(f"Unsupported column type: {type_name}")
        if base != 10 and type_name not in INTEGER_TYPES:
            raise ValueError(f"Base is only allowed for integer types: {raw!r}")
        return cls(name=name, type_name=type_name, nullable=nullable, base=base)

    def read(self, rows: Rows) -> Any:
        required_name, nullable_name = ACCESSORS[self.type_name]
        args = (self.base,) if self.type_name in INTEGER_TYPES else ()
        if self.nullable:
            return getattr(rows, nullable_name)(self.name, *args).get()
        if self.type_name == "string":
            result = rows.column_null_string(self.name)
            if not result.valid:
                raise RowsError(ErrorCode.NULL_VALUE, "field is blank", column=self.name)
            return result.value
        return getattr(rows, required_name)(self.name, *args)


class CheckUseCase:
    """
    Назначение/ответственность:
        Use-case проверки типов колонок по всем строкам источника.
    """

    def __init__(self, checks: list[ColumnCheck], include_valid_items: bool = False) -> None:
        self.checks = checks
        self.include_valid_items = include_valid_items

    def run(self, rows: Rows, logger: logging.Logger, run_id: str, report) -> int:
        """
        Выходные данные:
            int
                0 - все строки прошли, 1 - есть ошибочные строки,
                2 - неизвестная колонка или сбой источника.
        """
        try:
            rows.header()
            for check in self.checks:
                rows.column_index(check.name)
        except RowsError as exc:
            report.add_error(exc)
            logEvent(logger, logging.ERROR, run_id, "check", f"Check aborted: {exc}")
            return 2

        failed_rows = 0
        while True:
            try:
                rows.next()
            except RowsError as exc:
                if is_end_of_data(exc):
                    break
                report.add_error(exc)
                logEvent(logger, logging.ERROR, run_id, "source", f"Source read failed: {exc}", rowNo=rows.row_no + 1)
                return 2

            payload: dict[str, Any] = {}
            errors: list[RowsError] = []
            for check in self.checks:
                try:
                    payload[check.name] = check.read(rows)
                except RowsError as exc:
                    payload[check.name] = rows.column(check.name)
                    errors.append(exc)

            status = "FAILED" if errors else "OK"
            if errors:
                failed_rows += 1
                logEvent(
                    logger,
                    logging.WARNING,
                    run_id,
                    "check",
                    f"errors={[str(e) for e in errors]}",
                    rowNo=rows.row_no,
                )
            report.add_item(
                status=status,
                row_no=rows.row_no,
                payload=payload,
                errors=errors,
                store=bool(errors) or self.include_valid_items,
            )

        logEvent(
            logger,
            logging.INFO,
            run_id,
            "check",
            f"check done rows_total={report.summary.rows_total} failed={failed_rows}",
        )
        return 1 if failed_rows > 0 else 0
