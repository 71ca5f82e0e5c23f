from __future__ import annotations

import json
import logging
import time
from pathlib import Path

import typer

from tabrows.common.run_id import generate_run_id
from tabrows.common.time import getDurationMs
from tabrows.config.config import Settings, load_settings
from tabrows.domain.exceptions import RowsError
from tabrows.domain.ports.sources import QuotingMode
from tabrows.domain.rows.accessors import Rows
from tabrows.infra.artifacts.report_writer import createEmptyReport, finalizeReport, writeReportJson
from tabrows.infra.logging.setup import closeCommandLogger, createCommandLogger, logEvent, mapLogLevel
from tabrows.infra.sources.factory import open_rows
from tabrows.usecases.check_usecase import CheckUseCase, ColumnCheck
from tabrows.usecases.dump_usecase import DumpUseCase

app = typer.Typer(no_args_is_help=True, add_completion=False)

DELIMITER_ALIASES = {"tab": "\t", "\\t": "\t", "comma": ",", "semicolon": ";", "pipe": "|"}


def ensureDir(path: str) -> None:
    Path(path).mkdir(parents=True, exist_ok=True)


def parseDelimiter(value: str | None) -> str | None:
    """
    Назначение:
        Приводит значение --delimiter к одному символу (поддерживает tab, \\t и т.п.).
    """
    if value is None:
        return None
    value = DELIMITER_ALIASES.get(value.lower(), value)
    if len(value) != 1:
        raise typer.BadParameter(f"delimiter must be a single character: {value!r}")
    return value


def requireFile(filePath: str | None) -> None:
    """
    Назначение:
        Базовая проверка наличия входного файла.

    Поведение:
        - Если путь не задан или файл не существует - exit code 2.
    """
    if not filePath:
        typer.echo("ERROR: --file is required", err=True)
        raise typer.Exit(code=2)

    p = Path(filePath)
    if not p.exists() or not p.is_file():
        typer.echo(f"ERROR: file not found: {filePath}", err=True)
        raise typer.Exit(code=2)


def openRows(filePath: str, settings: Settings, logger: logging.Logger) -> Rows:
    return open_rows(
        filePath,
        has_header=settings.has_header,
        logger=logger,
        sheet=settings.sheet,
        delimiter=settings.csv_delimiter,
        quoting=QuotingMode.parse(settings.quoting),
        encoding=settings.encoding,
        fields_per_record=settings.fields_per_record,
    )


def runWithReport(
    ctx: typer.Context,
    commandName: str,
    filePath: str | None,
    runner,
) -> None:
    """
    Назначение:
        Унифицированная обвязка выполнения команд:
        - создаёт логгер + файл лога
        - создаёт report.json skeleton
        - проверяет входной файл и открывает курсор строк
        - гарантирует закрытие источника и запись отчёта в finally
    """
    runId = ctx.obj["runId"]
    settings: Settings = ctx.obj["settings"]
    sources = ctx.obj["sources"]

    startMonotonic = time.monotonic()

    logger, logFilePath = createCommandLogger(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
        sourcePath=filePath,
    )

    report = createEmptyReport(
        runId=runId,
        command=commandName,
        configSources=sources,
        sourcePath=filePath,
        sheet=settings.sheet,
        itemsLimit=settings.report_items_limit,
    )

    exitCode: int | None = None
    rows: Rows | None = None

    try:
        logEvent(logger, logging.INFO, runId, "core", f"Command started file={filePath} sources={sources}")

        try:
            requireFile(filePath)
        except typer.Exit:
            logEvent(logger, logging.ERROR, runId, "source", "Input file is missing or not accessible")
            exitCode = 2
            return

        try:
            rows = openRows(filePath or "", settings, logger)
        except RowsError as exc:
            report.add_error(exc)
            logEvent(logger, logging.ERROR, runId, "source", f"Failed to open source: {exc}")
            typer.echo(f"ERROR: failed to open source: {exc}", err=True)
            exitCode = 2
            return
        except Exception as exc:
            logEvent(logger, logging.ERROR, runId, "source", f"Failed to open source: {exc}")
            typer.echo(f"ERROR: failed to open source: {exc}", err=True)
            exitCode = 2
            return

        exitCode = runner(rows, logger, report)

    finally:
        if rows is not None:
            rows.close()
        durationMs = getDurationMs(startMonotonic, time.monotonic())
        finalizeReport(
            report=report,
            durationMs=durationMs,
            logFile=logFilePath,
            reportDir=settings.report_dir,
            rows=rows,
        )
        reportPath = writeReportJson(report, settings.report_dir)
        logEvent(logger, logging.INFO, runId, "report", f"Report written: {reportPath}")
        closeCommandLogger(logger)

        if exitCode is not None:
            raise typer.Exit(code=exitCode)


def runHeaderCommand(ctx: typer.Context, filePath: str | None) -> None:
    runId = ctx.obj["runId"]

    def execute(rows: Rows, logger, report) -> int:
        try:
            header = rows.header()
        except RowsError as exc:
            report.add_error(exc)
            logEvent(logger, logging.ERROR, runId, "source", f"Header read failed: {exc}")
            typer.echo(f"ERROR: header read failed: {exc}", err=True)
            return 2
        for name in header:
            typer.echo(name)
        report.set_context("header", {"columns": header})
        return 0

    runWithReport(ctx=ctx, commandName="header", filePath=filePath, runner=execute)


def runDumpCommand(ctx: typer.Context, filePath: str | None, columns: list[str] | None, limit: int | None) -> None:
    runId = ctx.obj["runId"]

    def execute(rows: Rows, logger, report) -> int:
        usecase = DumpUseCase(columns=columns, limit=limit, logger=logger)
        try:
            for record in usecase.iter_records(rows):
                typer.echo(json.dumps(record, ensure_ascii=False))
                report.add_item(status="OK", row_no=rows.row_no, store=False)
        except RowsError as exc:
            report.add_error(exc)
            logEvent(logger, logging.ERROR, runId, "dump", f"Dump failed: {exc}")
            typer.echo(f"ERROR: dump failed: {exc}", err=True)
            return 2
        logEvent(logger, logging.INFO, runId, "dump", f"dump done rows_total={report.summary.rows_total}")
        return 0

    runWithReport(ctx=ctx, commandName="dump", filePath=filePath, runner=execute)


def runCheckCommand(ctx: typer.Context, filePath: str | None, columns: list[str] | None, includeValid: bool) -> None:
    runId = ctx.obj["runId"]

    try:
        checks = [ColumnCheck.parse(raw) for raw in columns or []]
    except ValueError as exc:
        typer.echo(f"ERROR: {exc}", err=True)
        raise typer.Exit(code=2)
    if not checks:
        typer.echo("ERROR: at least one --column NAME:TYPE is required", err=True)
        raise typer.Exit(code=2)

    def execute(rows: Rows, logger, report) -> int:
        usecase = CheckUseCase(checks, include_valid_items=includeValid)
        code = usecase.run(rows, logger, runId, report)
        typer.echo(
            f"rows_total={report.summary.rows_total} passed={report.summary.rows_passed} "
            f"failed={report.summary.rows_failed} errors={report.summary.by_code}"
        )
        if code == 2:
            typer.echo("ERROR: check aborted (see logs/report)", err=True)
        return code

    runWithReport(ctx=ctx, commandName="check", filePath=filePath, runner=execute)


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml"),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier (UUID). If omitted, generated."),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    reportDir: str | None = typer.Option(None, "--report-dir", help="Directory for reports."),
    delimiter: str | None = typer.Option(None, "--delimiter", help="CSV field delimiter (',' ';' tab ...)"),
    quoting: str | None = typer.Option(None, "--quoting", help="Quoting mode: lazy|strict"),
    sheet: str | None = typer.Option(None, "--sheet", help="Sheet/table name for Excel/Calc files"),
    encoding: str | None = typer.Option(None, "--encoding", help="Text encoding for CSV files"),
    hasHeader: bool | None = typer.Option(
        None,
        "--has-header/--no-has-header",
        help="First row contains column names",
        show_default=True,
    ),
    fieldsPerRecord: int | None = typer.Option(
        None,
        "--fields-per-record",
        help="Expected CSV columns: 0 = from first record, -1 = unchecked",
    ),
    reportItemsLimit: int | None = typer.Option(None, "--report-items-limit", help="Limit report items stored"),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - создаёт каталоги log/report
        - сохраняет всё в ctx.obj для подкоманд
    """
    if not runId:
        runId = generate_run_id()

    if quoting is not None:
        try:
            quoting = QuotingMode.parse(quoting).value
        except ValueError as exc:
            typer.echo(f"ERROR: {exc}", err=True)
            raise typer.Exit(code=2)

    cliOverrides = {
        "log_level": logLevel,
        "log_dir": logDir,
        "report_dir": reportDir,
        "csv_delimiter": parseDelimiter(delimiter),
        "quoting": quoting,
        "sheet": sheet,
        "encoding": encoding,
        "has_header": hasHeader,
        "fields_per_record": fieldsPerRecord,
        "report_items_limit": reportItemsLimit,
    }
    try:
        loaded = load_settings(config_path=config, cli_overrides=cliOverrides)
        mapLogLevel(loaded.settings.log_level)
    except ValueError as exc:
        typer.echo(f"ERROR: invalid settings: {exc}", err=True)
        raise typer.Exit(code=2)

    ensureDir(loaded.settings.log_dir)
    ensureDir(loaded.settings.report_dir)

    ctx.obj = {
        "runId": runId,
        "settings": loaded.settings,
        "sources": loaded.sources_used,
        "configPath": config,
    }


@app.command()
def header(
    ctx: typer.Context,
    file: str | None = typer.Option(None, "--file", help="Path to CSV/XLSX/ODS file"),
):
    """Print header column names."""
    runHeaderCommand(ctx, file)


@app.command()
def dump(
    ctx: typer.Context,
    file: str | None = typer.Option(None, "--file", help="Path to CSV/XLSX/ODS file"),
    column: list[str] | None = typer.Option(None, "--column", help="Column name to output (repeatable)"),
    limit: int | None = typer.Option(None, "--limit", help="Maximum rows to output"),
):
    """Print rows as JSON lines."""
    runDumpCommand(ctx, file, column, limit)


@app.command()
def check(
    ctx: typer.Context,
    file: str | None = typer.Option(None, "--file", help="Path to CSV/XLSX/ODS file"),
    column: list[str] | None = typer.Option(None, "--column", help="NAME:TYPE[?][/BASE] rule (repeatable)"),
    includeValid: bool = typer.Option(
        False,
        "--include-valid/--no-include-valid",
        help="Store passed rows in report",
    ),
):
    """Check typed columns in every row."""
    runCheckCommand(ctx, file, column, includeValid)


if __name__ == "__main__":
    app()
