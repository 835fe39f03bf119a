from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from dbaccess.domain.outcome import Outcome

if TYPE_CHECKING:
    from dbaccess.transaction import Transaction


class ConnectionProtocol(Protocol):
    """
    Назначение/ответственность:
        Порт соединения, через который Transaction выполняет инструкции.
    Взаимодействия:
        Transaction хранит ссылку, но не владеет соединением; соединение
        должно жить дольше транзакции.
    """

    def execute(self, statement: str) -> Outcome: ...

    def transaction(self, *, rollback_on_exception: bool = False) -> "Transaction": ...
