from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, List

import typer

from dbaccess.common.run_id import generate_run_id
from dbaccess.config import Settings, loadSettings
from dbaccess.connection import Connection
from dbaccess.domain.outcome import Outcome
from dbaccess.errors import ConnectionOpenError
from dbaccess.infra.logging.setup import closeLogger, createCommandLogger, logEvent

app = typer.Typer(no_args_is_help=True, add_completion=False)


def requireDatabase(settings: Settings) -> None:
    """
    Назначение:
        Проверяет, что путь к БД задан (CLI/ENV/config).

    Поведение:
        - Если не задан - завершает процесс с exit code 2.
    """
    if not settings.database:
        typer.echo("ERROR: database is not configured (--database, DBACCESS_DATABASE or config)", err=True)
        raise typer.Exit(code=2)


def printOutcome(outcome: Outcome) -> None:
    """
    Назначение:
        Печатает строки результата (col=value) и итоговую сводку Outcome.
    """
    if outcome.result_set is not None:
        for row in outcome.result_set:
            typer.echo(" ".join(f"{name}={cell}" for name, cell in row.items()))
    typer.echo(
        f"status={outcome.status.value} rows={len(outcome.rows)} "
        f"rows_affected={outcome.rows_affected} last_inserted_id={outcome.last_inserted_id}"
    )
    if not outcome.ok:
        typer.echo(f"ERROR: {outcome.message}", err=True)


def runCommand(ctx: typer.Context, commandName: str, runner: Callable[[logging.Logger, Connection], int]) -> None:
    """
    Назначение:
        Унифицированная обвязка команд:
        - создаёт логгер + файл лога
        - открывает соединение (ошибка открытия -> exit code 2)
        - гарантирует закрытие соединения и логгера в finally

    Входные данные:
        ctx: typer.Context
        commandName: str
        runner: (logger, connection) -> exit code
    """
    settings: Settings = ctx.obj["settings"]
    runId: str = ctx.obj["runId"]
    requireDatabase(settings)

    logger, logFilePath = createCommandLogger(
        commandName=commandName,
        logDir=settings.log_dir,
        runId=runId,
        logLevel=settings.log_level,
    )
    exitCode = 0
    try:
        logEvent(logger, logging.INFO, runId, "core", f"Command started sources={ctx.obj['sources']}")
        try:
            connection = Connection.from_settings(settings, logger=logger, session_id=runId)
        except ConnectionOpenError as err:
            typer.echo(f"ERROR: cannot open database [{settings.database}]: {err.message} (status={err.status.value})", err=True)
            exitCode = 2
            return
        with connection:
            exitCode = runner(logger, connection)
    finally:
        logEvent(logger, logging.INFO, runId, "core", f"Command finished exit_code={exitCode} log={logFilePath}")
        closeLogger(logger)
        if exitCode:
            raise typer.Exit(code=exitCode)


def readStatements(statements: List[str] | None, sqlFile: str | None) -> list[str]:
    collected = list(statements or [])
    if sqlFile:
        p = Path(sqlFile)
        if not p.exists() or not p.is_file():
            typer.echo(f"ERROR: SQL file not found: {sqlFile}", err=True)
            raise typer.Exit(code=2)
        collected.append(p.read_text(encoding="utf-8"))
    if not collected:
        typer.echo("ERROR: no SQL given (pass statements or --file)", err=True)
        raise typer.Exit(code=2)
    return collected


@app.callback()
def main(
    ctx: typer.Context,
    config: str | None = typer.Option(None, "--config", help="Path to config.yml"),
    database: str | None = typer.Option(None, "--database", "-d", help="Database path or SQLite URI"),
    createIfMissing: bool | None = typer.Option(None, "--create-if-missing", help="Create the database file if absent"),
    busyTimeoutMs: int | None = typer.Option(None, "--busy-timeout-ms", help="Engine busy timeout in milliseconds"),
    logLevel: str | None = typer.Option(None, "--log-level", help="Log level: ERROR|WARN|INFO|DEBUG"),
    logDir: str | None = typer.Option(None, "--log-dir", help="Directory for logs."),
    runId: str | None = typer.Option(None, "--run-id", help="Run identifier (UUID). If omitted, generated."),
):
    """
    Назначение:
        Глобальная инициализация CLI:
        - генерирует/принимает run_id
        - загружает настройки (CLI > ENV > config > defaults)
        - сохраняет всё в ctx.obj для подкоманд
    """
    if not runId:
        runId = generate_run_id()

    cliOverrides = {
        "database": database,
        "create_if_missing": createIfMissing,
        "busy_timeout_ms": busyTimeoutMs,
        "log_level": logLevel,
        "log_dir": logDir,
    }
    try:
        loaded = loadSettings(config, cliOverrides)
    except ValueError as exc:
        typer.echo(f"ERROR: invalid settings: {exc}", err=True)
        raise typer.Exit(code=2)

    ctx.obj = {"runId": runId, "settings": loaded.settings, "sources": loaded.sources_used}


@app.command("check")
def check(ctx: typer.Context):
    """Открывает и закрывает БД, печатает результат."""

    def execute(logger: logging.Logger, connection: Connection) -> int:
        typer.echo(connection.open_outcome.message)
        return 0

    runCommand(ctx, "check", execute)


@app.command("exec")
def exec_(
    ctx: typer.Context,
    statements: List[str] = typer.Argument(None, help="SQL statements, executed in order"),
    sqlFile: str | None = typer.Option(None, "--file", "-f", help="Read SQL from file"),
    transaction: bool = typer.Option(False, "--transaction", "-t", help="Run all statements in one transaction"),
):
    """Выполняет SQL и печатает строки результата."""
    collected = readStatements(statements, sqlFile)

    def execute(logger: logging.Logger, connection: Connection) -> int:
        if not transaction:
            for sql in collected:
                outcome = connection.execute(sql)
                printOutcome(outcome)
                if not outcome.ok:
                    return 1
            return 0

        with connection.transaction() as tx:
            for sql in collected:
                outcome = tx.execute(sql)
                printOutcome(outcome)
                if not outcome.ok:
                    return 1
        final = tx.completion_outcome
        typer.echo(f"transaction={tx.state.value}")
        if final is not None and not final.ok:
            typer.echo(f"ERROR: {final.message}", err=True)
            return 1
        return 0

    runCommand(ctx, "exec", execute)
