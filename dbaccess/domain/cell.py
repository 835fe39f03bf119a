from __future__ import annotations

import math
import re
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from dbaccess.domain.error_codes import ErrorCode
from dbaccess.errors import CellConversionError

UINT32_MAX = 2**32 - 1
UINT64_MAX = 2**64 - 1
INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

# Десятичная запись с необязательной экспонентой; без "_", nan и inf.
_DECIMAL_RE = re.compile(r"[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")


class CellKind(str, Enum):
    """
    Назначение:
        Представление, в котором движок отдал значение колонки.
    """

    TEXT = "text"
    NULL = "null"


class ValueType(str, Enum):
    """
    Назначение:
        Целевые типы, в которые Cell умеет декодировать сырое значение.
    """

    TEXT = "text"
    UINT32 = "uint32"
    UINT64 = "uint64"
    INT64 = "int64"
    FLOAT = "float"


@dataclass(frozen=True)
class Cell:
    """
    Назначение/ответственность:
        Значение одной колонки строки результата.
    Инварианты/гарантии:
        - raw всегда хранит текст в том виде, в каком его вернул движок.
        - kind == NULL тогда и только тогда, когда raw is None.
        - Декодирование ленивое: ошибки разбора возникают при обращении, а не при построении строки.
    """

    raw: str | None

    @classmethod
    def from_engine(cls, value: str | None) -> "Cell":
        return cls(raw=value)

    @property
    def kind(self) -> CellKind:
        return CellKind.NULL if self.raw is None else CellKind.TEXT

    @property
    def is_null(self) -> bool:
        return self.raw is None

    def as_(self, target: ValueType | str) -> Any:
        """
        Контракт (вход/выход):
            - Вход: ValueType или его строковое имя.
            - Выход: значение в запрошенном типе.
        Ошибки/исключения:
            CellConversionError(UNSUPPORTED_TYPE), если для типа нет конвертера;
            CellConversionError(CONVERSION_FAILED), если разбор не удался.
        """
        try:
            key = ValueType(target)
        except ValueError:
            raise CellConversionError(
                str(target), self.raw, "no conversion registered", code=ErrorCode.UNSUPPORTED_TYPE
            ) from None
        return _CONVERTERS[key](self)

    def as_text(self) -> str | None:
        return self.raw

    def as_uint32(self) -> int:
        return _parse_int(self.raw, ValueType.UINT32, 0, UINT32_MAX)

    def as_uint64(self) -> int:
        return _parse_int(self.raw, ValueType.UINT64, 0, UINT64_MAX)

    def as_int(self) -> int:
        return _parse_int(self.raw, ValueType.INT64, INT64_MIN, INT64_MAX)

    def as_float(self) -> float:
        text = _require_text(self.raw, ValueType.FLOAT).strip()
        if not _DECIMAL_RE.fullmatch(text):
            raise CellConversionError(ValueType.FLOAT.value, self.raw, "not a decimal number")
        value = float(text)
        if math.isinf(value):
            raise CellConversionError(ValueType.FLOAT.value, self.raw, "out of float range")
        return value

    def __str__(self) -> str:
        return "NULL" if self.raw is None else self.raw


def _require_text(raw: str | None, target: ValueType) -> str:
    if raw is None:
        raise CellConversionError(target.value, raw, "value is NULL")
    return raw


def _parse_int(raw: str | None, target: ValueType, low: int, high: int) -> int:
    """
    Алгоритм:
        - Пробелы по краям допускаются, знак '+' допускается, '-' только для знаковых типов.
        - Остальное должно состоять только из десятичных цифр.
        - Результат проверяется на попадание в [low, high].
    """
    text = _require_text(raw, target).strip()
    digits = text
    if digits[:1] in ("+", "-"):
        if digits[0] == "-" and low >= 0:
            raise CellConversionError(target.value, raw, "negative value for unsigned type")
        digits = digits[1:]
    if not digits or not (digits.isascii() and digits.isdigit()):
        raise CellConversionError(target.value, raw, "not a decimal integer")
    value = int(text)
    if value < low or value > high:
        raise CellConversionError(target.value, raw, f"out of range [{low}, {high}]")
    return value


_CONVERTERS: dict[ValueType, Callable[[Cell], Any]] = {
    ValueType.TEXT: Cell.as_text,
    ValueType.UINT32: Cell.as_uint32,
    ValueType.UINT64: Cell.as_uint64,
    ValueType.INT64: Cell.as_int,
    ValueType.FLOAT: Cell.as_float,
}


__all__ = ["Cell", "CellKind", "ValueType"]
