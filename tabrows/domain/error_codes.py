from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Назначение:
        Единая таксономия ошибок курсора строк и типизированных аксессоров.
    """

    NULL_CURSOR = "NULL_CURSOR"
    END_OF_DATA = "END_OF_DATA"
    SOURCE_ERROR = "SOURCE_ERROR"
    UNKNOWN_COLUMN = "UNKNOWN_COLUMN"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"
    NULL_VALUE = "NULL_VALUE"
    MALFORMED = "MALFORMED"
    OUT_OF_RANGE = "OUT_OF_RANGE"
    # backend-level
    INVALID_RECORD = "INVALID_RECORD"
    INVALID_SHEET_NAME = "INVALID_SHEET_NAME"

