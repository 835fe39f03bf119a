from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Dict

from dbaccess.domain.error_codes import ErrorCode

if TYPE_CHECKING:
    from dbaccess.domain.outcome import Outcome


@dataclass(eq=False)
class DbAccessError(Exception):
    """
    Унифицированная ошибка слоя доступа к БД.
    """

    category: str
    code: str
    message: str
    details: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.category,
            "code": self.code,
            "message": self.message,
            "details": self.details or {},
        }


class ConnectionOpenError(DbAccessError):
    def __init__(self, outcome: "Outcome", connection_string: str):
        """
        Назначение:
            Фатальная ошибка конструирования Connection: хэндл движка не открыт.
        Контракт:
            - outcome хранит статус access_failed/error и сообщение движка.
            - code = ACCESS_FAILED для недоступной цели, иначе OPEN_FAILED.
        """
        code = ErrorCode.ACCESS_FAILED if outcome.status == "access_failed" else ErrorCode.OPEN_FAILED
        super().__init__(
            category="connection",
            code=code.value,
            message=outcome.message,
            details={"connection_string": connection_string, "status": outcome.status.value},
        )
        self.outcome = outcome
        self.connection_string = connection_string

    @property
    def status(self):
        return self.outcome.status


class ColumnNotFoundError(DbAccessError, KeyError):
    def __init__(self, column: str, available: list[str]):
        """
        Назначение:
            Запрошенной колонки нет в строке результата.
        """
        super().__init__(
            category="row",
            code=ErrorCode.COLUMN_NOT_FOUND.value,
            message=f"Column '{column}' not found in row (available: {', '.join(available) or '-'})",
            details={"column": column, "available": list(available)},
        )
        self.column = column


class CellConversionError(DbAccessError, ValueError):
    def __init__(self, target: str, raw: str | None, reason: str, code: ErrorCode = ErrorCode.CONVERSION_FAILED):
        """
        Назначение:
            Значение ячейки не может быть представлено в запрошенном типе.
        Контракт:
            - code = UNSUPPORTED_TYPE, если для типа нет конвертера.
            - code = CONVERSION_FAILED, если конвертер есть, но разбор не удался.
        """
        super().__init__(
            category="cell",
            code=code.value,
            message=f"Cannot convert {raw!r} to {target}: {reason}",
            details={"target": target, "raw": raw},
        )
        self.target = target
        self.raw = raw


__all__ = ["DbAccessError", "ConnectionOpenError", "ColumnNotFoundError", "CellConversionError"]
