from __future__ import annotations

from enum import Enum


class ErrorCode(str, Enum):
    """
    Назначение:
        Единая таксономия кодов ошибок слоя доступа к БД.
    """

    ACCESS_FAILED = "ACCESS_FAILED"
    OPEN_FAILED = "OPEN_FAILED"
    COLUMN_NOT_FOUND = "COLUMN_NOT_FOUND"
    CONVERSION_FAILED = "CONVERSION_FAILED"
    UNSUPPORTED_TYPE = "UNSUPPORTED_TYPE"
