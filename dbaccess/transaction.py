from __future__ import annotations

import logging
from enum import Enum
from typing import TYPE_CHECKING

from dbaccess.common.run_id import generate_run_id
from dbaccess.domain.outcome import Outcome
from dbaccess.infra.logging.setup import getLibraryLogger, logEvent

if TYPE_CHECKING:
    from dbaccess.domain.ports.connection import ConnectionProtocol

BEGIN_SQL = "BEGIN TRANSACTION;"
COMMIT_SQL = "COMMIT TRANSACTION;"
ROLLBACK_SQL = "ROLLBACK TRANSACTION;"

COMPLETED_MESSAGE = (
    "Transaction has already been completed or rolled back due to an error. Please start a new one."
)


class TransactionState(str, Enum):
    """
    Назначение:
        Жизненный цикл транзакции: active -> committed | rolled_back.
    """

    ACTIVE = "active"
    COMMITTED = "committed"
    ROLLED_BACK = "rolled_back"


class Transaction:
    """
    Назначение/ответственность:
        Охранник единицы работы поверх одного соединения.
        BEGIN выполняется при создании, COMMIT - при выходе из with (в том числе
        по исключению), ROLLBACK - при первой неуспешной инструкции.
    Инварианты/гарантии:
        - Из active переход ровно один раз; COMMIT/ROLLBACK повторно не выполняются.
        - execute() никогда не пробрасывает исключение нижележащего вызова.
        - После завершения execute() возвращает Outcome(error), не обращаясь к соединению.
    Взаимодействия:
        Хранит ссылку на соединение, но не владеет им; соединение должно жить дольше.
    Ограничения:
        Вложенные транзакции на одном соединении не поддерживаются: движок отвергнет
        второй BEGIN, и новая транзакция сразу окажется в rolled_back.
    """

    def __init__(
        self,
        connection: "ConnectionProtocol",
        *,
        rollback_on_exception: bool = False,
        logger: logging.Logger | None = None,
        run_id: str | None = None,
    ):
        self._connection = connection
        self._rollback_on_exception = rollback_on_exception
        self._logger = logger if logger is not None else getLibraryLogger()
        self._run_id = run_id or generate_run_id()
        self._state = TransactionState.ACTIVE
        self.completion_outcome: Outcome | None = None

        self.begin_outcome = self._issue(BEGIN_SQL)
        if not self.begin_outcome.ok:
            # Транзакция не началась: откатывать нечего.
            self._state = TransactionState.ROLLED_BACK
            self.completion_outcome = self.begin_outcome
            self._log(logging.ERROR, f"BEGIN failed msg={self.begin_outcome.message}")
        else:
            self._log(logging.DEBUG, "Transaction started")

    @property
    def state(self) -> TransactionState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state == TransactionState.ACTIVE

    @property
    def is_completed(self) -> bool:
        return self._state != TransactionState.ACTIVE

    def execute(self, statement: str) -> Outcome:
        """
        Контракт (вход/выход):
            - active: инструкция передаётся соединению; неуспех -> ROLLBACK и rolled_back.
            - не active: Outcome(error) без обращения к соединению.
        Ошибки/исключения:
            Исключение из соединения перехватывается, выполняется ROLLBACK,
            возвращается Outcome(error) с текстом исключения.
        """
        if self._state != TransactionState.ACTIVE:
            if not self.begin_outcome.ok:
                return Outcome.error(f"Transaction was never started: {self.begin_outcome.message}")
            return Outcome.error(COMPLETED_MESSAGE)

        try:
            outcome = self._connection.execute(statement)
        except Exception as exc:
            self._log(logging.ERROR, f"Unexpected fault in transaction: {exc!r}")
            self._finish(ROLLBACK_SQL, TransactionState.ROLLED_BACK)
            return Outcome.error(f"Something went wrong executing statement in transaction: {exc}")

        if not outcome.ok:
            self._log(logging.WARNING, f"Statement failed, rolling back msg={outcome.message}")
            self._finish(ROLLBACK_SQL, TransactionState.ROLLED_BACK)
        return outcome

    def commit(self) -> Outcome:
        """
        Досрочный COMMIT. Повторный вызов ничего не выполняет.
        Если COMMIT не прошёл, выполняется ROLLBACK и транзакция считается откатанной.
        """
        if self._state != TransactionState.ACTIVE:
            return self._already_completed()

        outcome = self._finish(COMMIT_SQL, TransactionState.COMMITTED)
        if not outcome.ok:
            self._log(logging.ERROR, f"COMMIT failed, rolling back msg={outcome.message}")
            self._issue(ROLLBACK_SQL)
            self._state = TransactionState.ROLLED_BACK
            self.completion_outcome = outcome
        return outcome

    def rollback(self) -> Outcome:
        if self._state != TransactionState.ACTIVE:
            return self._already_completed()
        return self._finish(ROLLBACK_SQL, TransactionState.ROLLED_BACK)

    def __enter__(self) -> "Transaction":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._state != TransactionState.ACTIVE:
            return
        if exc_type is not None and self._rollback_on_exception:
            self.rollback()
        else:
            self.commit()

    def __repr__(self) -> str:
        return f"Transaction(state={self._state.value})"

    def _finish(self, sql: str, state: TransactionState) -> Outcome:
        # Состояние меняется до отправки, чтобы завершение не повторилось ни при каком исходе.
        self._state = state
        outcome = self._issue(sql)
        self.completion_outcome = outcome
        if outcome.ok:
            self._log(logging.DEBUG, f"Transaction {state.value}")
        elif state == TransactionState.ROLLED_BACK:
            self._log(logging.WARNING, f"ROLLBACK failed msg={outcome.message}")
        return outcome

    def _issue(self, sql: str) -> Outcome:
        try:
            return self._connection.execute(sql)
        except Exception as exc:
            self._log(logging.ERROR, f"Unexpected fault issuing {sql!r}: {exc!r}")
            return Outcome.error(f"Something went wrong executing {sql}: {exc}")

    def _already_completed(self) -> Outcome:
        if self._state == TransactionState.COMMITTED:
            return Outcome.success("Transaction already committed")
        return Outcome.error(COMPLETED_MESSAGE)

    def _log(self, level: int, message: str) -> None:
        logEvent(self._logger, level, self._run_id, "transaction", message)


__all__ = ["Transaction", "TransactionState", "BEGIN_SQL", "COMMIT_SQL", "ROLLBACK_SQL"]
