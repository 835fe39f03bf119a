from __future__ import annotations

from typing import Iterator, Sequence

from dbaccess.domain.cell import Cell
from dbaccess.errors import ColumnNotFoundError


class Row:
    """
    Назначение/ответственность:
        Одна строка результата: упорядоченное отображение имя колонки -> Cell.
    Инварианты/гарантии:
        - Порядок колонок совпадает с порядком, в котором их передал движок.
        - Имя колонки уникально в пределах строки; повторная вставка перезаписывает значение.
        - Обращение к отсутствующей колонке -> ColumnNotFoundError, значения по умолчанию нет.
    """

    __slots__ = ("_cells",)

    def __init__(self) -> None:
        self._cells: dict[str, Cell] = {}

    def add(self, column: str, value: str | None) -> "Row":
        self._cells[column] = Cell.from_engine(value)
        return self

    def __getitem__(self, column: str) -> Cell:
        try:
            return self._cells[column]
        except KeyError:
            raise ColumnNotFoundError(column, self.columns) from None

    def get(self, column: str) -> Cell | None:
        return self._cells.get(column)

    def __contains__(self, column: object) -> bool:
        return column in self._cells

    def __len__(self) -> int:
        return len(self._cells)

    def __iter__(self) -> Iterator[str]:
        return iter(self._cells)

    @property
    def columns(self) -> list[str]:
        return list(self._cells)

    def items(self) -> list[tuple[str, Cell]]:
        return list(self._cells.items())

    def to_dict(self) -> dict[str, str | None]:
        return {name: cell.raw for name, cell in self._cells.items()}

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self.items() == other.items()

    def __repr__(self) -> str:
        return f"Row({self.to_dict()!r})"


class ResultSet:
    """
    Назначение/ответственность:
        Упорядоченная последовательность строк, полученных от движка.
    Инварианты/гарантии:
        - Порядок строк = порядок вызовов визитора движком.
        - До freeze() допускается только append; после freeze() набор только читается.
    """

    def __init__(self) -> None:
        self._rows: list[Row] = []
        self._frozen = False

    def append(self, row: Row) -> "ResultSet":
        if self._frozen:
            raise RuntimeError("ResultSet is read-only after materialization")
        self._rows.append(row)
        return self

    def freeze(self) -> "ResultSet":
        self._frozen = True
        return self

    @property
    def frozen(self) -> bool:
        return self._frozen

    def __iter__(self) -> Iterator[Row]:
        return iter(self._rows)

    def __len__(self) -> int:
        return len(self._rows)

    def __getitem__(self, index: int) -> Row:
        return self._rows[index]

    def first(self) -> Row | None:
        return self._rows[0] if self._rows else None

    def to_dicts(self) -> list[dict[str, str | None]]:
        return [row.to_dict() for row in self._rows]

    def __repr__(self) -> str:
        return f"ResultSet(rows={len(self._rows)})"


class RowBuilder:
    """
    Назначение/ответственность:
        Визитор строк движка: превращает каждый вызов (columns, values) в Row
        и добавляет её в ResultSet.
    Ограничения:
        Значения сохраняются текстом, типизированное декодирование отложено до Cell.as_*.
    """

    def __init__(self, result_set: ResultSet | None = None):
        self.result_set = result_set if result_set is not None else ResultSet()
        self.calls = 0

    def __call__(self, columns: Sequence[str], values: Sequence[str | None]) -> None:
        if len(columns) != len(values):
            raise ValueError(f"Column/value count mismatch: {len(columns)} != {len(values)}")
        row = Row()
        for column, value in zip(columns, values):
            row.add(column, value)
        self.result_set.append(row)
        self.calls += 1

    def build(self) -> ResultSet:
        return self.result_set.freeze()


__all__ = ["Row", "ResultSet", "RowBuilder"]
