from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Protocol, Sequence

RowVisitor = Callable[[Sequence[str], Sequence["str | None"]], None]


class EngineFailureKind(str, Enum):
    """
    Назначение:
        Классификация отказов движка на границе порта.
    """

    ACCESS_FAILED = "access_failed"
    ERROR = "error"


@dataclass(eq=False)
class EngineError(Exception):
    """
    Назначение:
        Ошибка, которую реализация движка поднимает из open/execute/close.
    Инварианты/гарантии:
        - message содержит исходный текст ошибки движка без изменений.
    """

    message: str
    kind: EngineFailureKind = EngineFailureKind.ERROR

    def __post_init__(self) -> None:
        super().__init__(self.message)

    def __str__(self) -> str:
        return self.message


class EngineProtocol(Protocol):
    """
    Назначение/ответственность:
        Узкий контракт SQL-движка, от которого зависит Connection.
    Взаимодействия:
        Connection владеет хэндлом, полученным из open(), и передаёт его
        во все остальные методы.
    Ограничения:
        Синхронное выполнение; один хэндл не используется из двух потоков одновременно.
    """

    def open(self, path: str, *, create: bool = False, busy_timeout_ms: int = 0, foreign_keys: bool = False) -> Any:
        """
        Контракт (вход/выход):
            - Вход: путь/локатор БД, флаги открытия.
            - Выход: хэндл движка.
        Ошибки/исключения:
            EngineError(kind=ACCESS_FAILED), если цель не открывается;
            EngineError(kind=ERROR) для прочих отказов.
        """
        ...

    def execute(self, handle: Any, statement: str, visitor: RowVisitor) -> None:
        """
        Контракт (вход/выход):
            - Выполняет statement целиком (одну или несколько SQL-инструкций).
            - visitor вызывается один раз на каждую строку результата с параллельными
              последовательностями имён колонок и текстовых значений.
        Ошибки/исключения:
            EngineError с текстом ошибки движка.
        """
        ...

    def changes(self, handle: Any) -> int: ...

    def last_insert_rowid(self, handle: Any) -> int: ...

    def close(self, handle: Any) -> None: ...
