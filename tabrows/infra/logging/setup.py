from __future__ import annotations

import logging
from pathlib import Path

LOG_FORMAT = "%(asctime)s %(levelname)s runId=%(runId)s comp=%(component)s src=%(source)s msg=%(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S%z"

LOG_LEVELS = {
    "ERROR": logging.ERROR,
    "WARN": logging.WARNING,
    "WARNING": logging.WARNING,
    "INFO": logging.INFO,
    "DEBUG": logging.DEBUG,
}


class EnsureFieldsFilter(logging.Filter):
    """
    Назначение:
        Дополняет LogRecord полями runId, component и source, которых нет
        у записей курсора строк (он логирует только с component="rows").

    Входные данные:
        runId: str
            Идентификатор запуска.
        sourceName: str
            Имя читаемого файла; "-" если файл ещё не задан.
        defaultComponent: str
            Компонент для записей без явного component.
    """

    def __init__(self, runId: str, sourceName: str = "-", defaultComponent: str = "rows"):
        super().__init__()
        self.runId = runId
        self.sourceName = sourceName
        self.defaultComponent = defaultComponent

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "runId"):
            record.runId = self.runId
        if not hasattr(record, "component"):
            record.component = self.defaultComponent
        if not hasattr(record, "source"):
            record.source = self.sourceName
        return True


def mapLogLevel(levelName: str) -> int:
    """
    Назначение:
        Уровень logging по имени ERROR|WARN|INFO|DEBUG (WARNING - синоним WARN).
    """
    value = (levelName or "").strip().upper()
    if value not in LOG_LEVELS:
        raise ValueError(f"Unsupported log level: {levelName}")
    return LOG_LEVELS[value]


def createCommandLogger(
    commandName: str,
    logDir: str,
    runId: str,
    logLevel: str,
    sourcePath: str | None = None,
) -> tuple[logging.Logger, str]:
    """
    Назначение:
        Логгер одной команды над одним табличным файлом.
        Пишет в <logDir>/<command>_<runId>.log, каждая строка несёт имя файла-источника.

    Выходные данные:
        (logger, logFilePath)
    """
    Path(logDir).mkdir(parents=True, exist_ok=True)
    logFilePath = str(Path(logDir) / f"{commandName}_{runId}.log")

    logger = logging.getLogger(f"tabrows.{commandName}.{runId}")
    closeCommandLogger(logger)
    logger.propagate = False

    level = mapLogLevel(logLevel)
    logger.setLevel(level)

    fileHandler = logging.FileHandler(logFilePath, encoding="utf-8")
    fileHandler.setLevel(level)
    fileHandler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    fileHandler.addFilter(
        EnsureFieldsFilter(runId=runId, sourceName=Path(sourcePath).name if sourcePath else "-")
    )
    logger.addHandler(fileHandler)

    return logger, logFilePath


def closeCommandLogger(logger: logging.Logger) -> None:
    for handler in list(logger.handlers):
        handler.close()
        logger.removeHandler(handler)


def logEvent(
    logger: logging.Logger,
    level: int,
    runId: str,
    component: str,
    message: str,
    rowNo: int | None = None,
) -> None:
    """
    Назначение:
        Событие команды; rowNo (номер строки данных) добавляется в сообщение как row=N.
    """
    if rowNo is not None:
        message = f"row={rowNo} {message}"
    logger.log(level, message, extra={"runId": runId, "component": component})
