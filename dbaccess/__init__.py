from dbaccess.domain.cell import Cell, CellKind, ValueType
from dbaccess.domain.outcome import Outcome, StatusCode
from dbaccess.domain.rows import ResultSet, Row, RowBuilder
from dbaccess.errors import CellConversionError, ColumnNotFoundError, ConnectionOpenError, DbAccessError
from dbaccess.transaction import Transaction, TransactionState
from dbaccess.connection import Connection

__all__ = [
    "Cell",
    "CellKind",
    "ValueType",
    "Outcome",
    "StatusCode",
    "ResultSet",
    "Row",
    "RowBuilder",
    "DbAccessError",
    "ConnectionOpenError",
    "ColumnNotFoundError",
    "CellConversionError",
    "Transaction",
    "TransactionState",
    "Connection",
]
