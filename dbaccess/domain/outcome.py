from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from dbaccess.domain.rows import ResultSet


class StatusCode(str, Enum):
    """
    Назначение:
        Итоговый статус операции над движком.
    """

    SUCCESS = "success"
    ACCESS_FAILED = "access_failed"
    ERROR = "error"


@dataclass
class Outcome:
    """
    Назначение/ответственность:
        Полный результат одного вызова execute/open/close.
    Инварианты/гарантии:
        - result_set присутствует только при status == SUCCESS у execute.
        - message всегда заполнено; при ошибке это текст ошибки движка.
        - rows_affected/last_inserted_id отражают счётчики соединения, а не только этого запроса.
    Взаимодействия:
        Создаётся заново на каждый вызов и передаётся вызывающему, не разделяется.
    """

    status: StatusCode
    message: str
    result_set: ResultSet | None = None
    rows_affected: int = 0
    last_inserted_id: int = 0

    @property
    def ok(self) -> bool:
        return self.status == StatusCode.SUCCESS

    @property
    def rows(self) -> ResultSet:
        """Result Set успешного вызова; пустой набор, если его нет."""
        if self.result_set is None:
            return ResultSet().freeze()
        return self.result_set

    @classmethod
    def success(
        cls,
        message: str,
        result_set: ResultSet | None = None,
        rows_affected: int = 0,
        last_inserted_id: int = 0,
    ) -> "Outcome":
        return cls(StatusCode.SUCCESS, message, result_set, rows_affected, last_inserted_id)

    @classmethod
    def error(cls, message: str) -> "Outcome":
        return cls(StatusCode.ERROR, message)

    @classmethod
    def access_failed(cls, message: str) -> "Outcome":
        return cls(StatusCode.ACCESS_FAILED, message)


__all__ = ["Outcome", "StatusCode"]
