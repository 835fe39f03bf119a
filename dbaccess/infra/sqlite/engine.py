from __future__ import annotations

import sqlite3
from contextlib import closing
from pathlib import Path
from typing import Any

from dbaccess.domain.ports.engine import EngineError, EngineFailureKind, EngineProtocol, RowVisitor

MEMORY_DATABASE = ":memory:"
# Пустое имя: приватная временная БД, удаляется при закрытии.
TEMPORARY_DATABASE = ""

# Коды, означающие, что цель недоступна (нет файла, нет прав, блокировка).
_ACCESS_FAILED_CODES = ("SQLITE_CANTOPEN", "SQLITE_PERM", "SQLITE_BUSY", "SQLITE_LOCKED", "SQLITE_AUTH")

_STATEMENT_ERRORS = (sqlite3.Error, sqlite3.Warning, ValueError)


class SqliteEngine(EngineProtocol):
    """
    Назначение/ответственность:
        Реализация порта движка поверх стандартного sqlite3.
        Хэндл = sqlite3.Connection в режиме autocommit (isolation_level=None),
        чтобы BEGIN/COMMIT/ROLLBACK управлялись только явными инструкциями.
    Ограничения:
        - Файл открывается на чтение/запись; создаётся только при create=True.
        - Проверка потока sqlite3 не отключается: хэндл принадлежит одному потоку.
    """

    def open(self, path: str, *, create: bool = False, busy_timeout_ms: int = 5000, foreign_keys: bool = False) -> sqlite3.Connection:
        target, uri = _build_target(path, create)
        try:
            conn = sqlite3.connect(target, uri=uri, timeout=busy_timeout_ms / 1000.0, isolation_level=None)
        except (sqlite3.Error, ValueError) as exc:
            raise _to_engine_error(exc) from exc

        try:
            conn.execute(f"PRAGMA busy_timeout = {int(busy_timeout_ms)}")
            conn.execute(f"PRAGMA foreign_keys = {'ON' if foreign_keys else 'OFF'}")
            # Файл читается только при первом обращении: проверяем, что это БД.
            conn.execute("SELECT count(*) FROM sqlite_master").fetchone()
        except sqlite3.Error as exc:
            conn.close()
            raise _to_engine_error(exc) from exc
        return conn

    def execute(self, handle: sqlite3.Connection, statement: str, visitor: RowVisitor) -> None:
        # Текст с NUL или одиночным суррогатом sqlite3 отвергает ValueError/UnicodeError.
        try:
            for sql in split_statements(statement):
                with closing(handle.cursor()) as cur:
                    cur.execute(sql)
                    if cur.description is None:
                        continue
                    columns = [d[0] for d in cur.description]
                    for row in cur:
                        visitor(columns, [_to_text(v) for v in row])
        except _STATEMENT_ERRORS as exc:
            raise _to_engine_error(exc) from exc

    def changes(self, handle: sqlite3.Connection) -> int:
        return int(self._scalar(handle, "SELECT changes()"))

    def last_insert_rowid(self, handle: sqlite3.Connection) -> int:
        return int(self._scalar(handle, "SELECT last_insert_rowid()"))

    def close(self, handle: sqlite3.Connection) -> None:
        try:
            handle.close()
        except sqlite3.Error as exc:
            raise _to_engine_error(exc) from exc

    def _scalar(self, handle: sqlite3.Connection, sql: str) -> Any:
        try:
            row = handle.execute(sql).fetchone()
        except sqlite3.Error as exc:
            raise _to_engine_error(exc) from exc
        return row[0] if row is not None else 0


def split_statements(script: str) -> list[str]:
    """
    Назначение:
        Делит текст на отдельные SQL-инструкции так же, как это делает движок
        при пакетном выполнении: граница определяется sqlite3.complete_statement,
        поэтому ';' внутри строк и тел триггеров не режет инструкцию.

    Выходные данные:
        list[str] - инструкции без пустых (';' без текста).
    """
    statements: list[str] = []
    parts = script.split(";")
    buffer = ""
    for index, part in enumerate(parts):
        buffer += part
        if index == len(parts) - 1:
            break
        buffer += ";"
        if sqlite3.complete_statement(buffer):
            _append_statement(statements, buffer)
            buffer = ""
    _append_statement(statements, buffer)
    return statements


def _append_statement(statements: list[str], text: str) -> None:
    if text.strip().rstrip(";").strip():
        statements.append(text.strip())


def _build_target(path: str, create: bool) -> tuple[str, bool]:
    if path in (MEMORY_DATABASE, TEMPORARY_DATABASE):
        return path, False
    mode = "rwc" if create else "rw"
    if path.startswith("file:"):
        sep = "&" if "?" in path else "?"
        return f"{path}{sep}mode={mode}" if "mode=" not in path else path, True
    return f"{Path(path).absolute().as_uri()}?mode={mode}", True


def _to_text(value: Any) -> str | None:
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, bytes):
        return value.decode("utf-8", errors="replace")
    return str(value)


def _to_engine_error(exc: Exception) -> EngineError:
    name = getattr(exc, "sqlite_errorname", None)
    message = str(exc)
    kind = EngineFailureKind.ERROR
    if name:
        if name.startswith(_ACCESS_FAILED_CODES):
            kind = EngineFailureKind.ACCESS_FAILED
    elif "unable to open database file" in message:
        kind = EngineFailureKind.ACCESS_FAILED
    return EngineError(message=message, kind=kind)


__all__ = ["SqliteEngine", "split_statements", "MEMORY_DATABASE", "TEMPORARY_DATABASE"]
