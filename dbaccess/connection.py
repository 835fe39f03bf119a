from __future__ import annotations

import logging
from typing import Any

from dbaccess.common.run_id import generate_run_id
from dbaccess.common.sanitize import oneLine, truncateText
from dbaccess.config import Settings
from dbaccess.domain.outcome import Outcome
from dbaccess.domain.ports.connection import ConnectionProtocol
from dbaccess.domain.ports.engine import EngineError, EngineFailureKind, EngineProtocol
from dbaccess.domain.rows import RowBuilder
from dbaccess.errors import ConnectionOpenError
from dbaccess.infra.logging.setup import getLibraryLogger, logEvent
from dbaccess.infra.sqlite.engine import SqliteEngine
from dbaccess.transaction import Transaction


class Connection(ConnectionProtocol):
    """
    Назначение/ответственность:
        Владеет ровно одним открытым хэндлом движка на всё время жизни.
        Открывает хэндл в конструкторе, закрывает в close() или при выходе из with.
    Инварианты/гарантии:
        - Конструктор либо возвращает открытое соединение, либо поднимает
          ConnectionOpenError; полуоткрытое соединение наружу не попадает.
        - execute() не поднимает ошибки движка: они возвращаются в Outcome.
        - close() идемпотентен и не поднимает исключений.
    Ограничения:
        Внутренней синхронизации нет: соединение используется из одного потока,
        одна транзакция за раз (вложенность не поддерживается).
    """

    def __init__(
        self,
        connection_string: str,
        *,
        engine: EngineProtocol | None = None,
        settings: Settings | None = None,
        logger: logging.Logger | None = None,
        session_id: str | None = None,
    ):
        self._connection_string = connection_string
        self._engine: EngineProtocol = engine if engine is not None else SqliteEngine()
        self._settings = settings if settings is not None else Settings(database=connection_string)
        self._logger = logger if logger is not None else getLibraryLogger()
        self.session_id = session_id or generate_run_id()
        self._handle: Any = None

        outcome = self._open()
        if not outcome.ok:
            self._log(logging.ERROR, f"Open failed status={outcome.status.value} msg={outcome.message}")
            raise ConnectionOpenError(outcome, connection_string)
        self.open_outcome = outcome
        self._log(logging.INFO, outcome.message)

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        *,
        engine: EngineProtocol | None = None,
        logger: logging.Logger | None = None,
        session_id: str | None = None,
    ) -> "Connection":
        if not settings.database:
            raise ValueError("settings.database is required to open a connection")
        return cls(settings.database, engine=engine, settings=settings, logger=logger, session_id=session_id)

    @property
    def connection_string(self) -> str:
        return self._connection_string

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    @property
    def logger(self) -> logging.Logger:
        return self._logger

    def execute(self, statement: str) -> Outcome:
        """
        Контракт (вход/выход):
            - Вход: текст одной или нескольких SQL-инструкций.
            - Выход: Outcome; при успехе с ResultSet (строки в порядке выдачи движком)
              и счётчиками changes()/last_insert_rowid() соединения.
        Ошибки/исключения:
            Ошибки движка не пробрасываются: Outcome(error) с текстом движка.
        """
        if self._handle is None:
            return Outcome.error(f"Connection to database [{self._connection_string}] is closed")

        builder = RowBuilder()
        try:
            self._engine.execute(self._handle, statement, builder)
            rows_affected = self._engine.changes(self._handle)
            last_inserted_id = self._engine.last_insert_rowid(self._handle)
        except EngineError as err:
            self._log(logging.WARNING, f"Statement failed sql={self._sql(statement)} msg={err.message}")
            return Outcome.error(err.message)

        result_set = builder.build()
        self._log(
            logging.DEBUG,
            f"Statement ok sql={self._sql(statement)} rows={len(result_set)} "
            f"changes={rows_affected} last_id={last_inserted_id}",
        )
        return Outcome.success(
            f"Successfully executed SQL statement [{statement}]",
            result_set,
            rows_affected,
            last_inserted_id,
        )

    def transaction(self, *, rollback_on_exception: bool = False) -> Transaction:
        return Transaction(
            self,
            rollback_on_exception=rollback_on_exception,
            logger=self._logger,
            run_id=self.session_id,
        )

    def close(self) -> Outcome:
        if self._handle is None:
            return Outcome.success(f"Database [{self._connection_string}] already closed")
        handle, self._handle = self._handle, None
        try:
            self._engine.close(handle)
        except EngineError as err:
            self._log(logging.ERROR, f"Close failed msg={err.message}")
            return Outcome.error(err.message)
        message = f"Successfully closed database [{self._connection_string}]"
        self._log(logging.INFO, message)
        return Outcome.success(message)

    def __enter__(self) -> "Connection":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def __repr__(self) -> str:
        state = "open" if self.is_open else "closed"
        return f"Connection({self._connection_string!r}, {state})"

    def _open(self) -> Outcome:
        try:
            self._handle = self._engine.open(
                self._connection_string,
                create=self._settings.create_if_missing,
                busy_timeout_ms=self._settings.busy_timeout_ms,
                foreign_keys=self._settings.foreign_keys,
            )
        except EngineError as err:
            if err.kind == EngineFailureKind.ACCESS_FAILED:
                return Outcome.access_failed(err.message)
            return Outcome.error(err.message)
        return Outcome.success(f"Successfully opened database [{self._connection_string}]")

    def _sql(self, statement: str) -> str:
        return truncateText(oneLine(statement)) or ""

    def _log(self, level: int, message: str) -> None:
        logEvent(self._logger, level, self.session_id, "connection", message)


__all__ = ["Connection"]
