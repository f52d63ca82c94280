"""Exec command for mintdb CLI."""

from typing import Annotated

import typer
from rich.console import Console

import mintdb
from mintdb.cli.utils.cli_handler import CLIHandler, cli_command

console = Console()


@cli_command
def exec_command(
    sql: Annotated[str, typer.Argument(help="SQL statement with ? placeholders")],
    params: Annotated[
        list[str] | None,
        typer.Option("--param", "-p", help="Value for the next ? placeholder"),
    ] = None,
    json_output: Annotated[
        bool, typer.Option("--json", help="Output in JSON format")
    ] = False,
    no_pool: Annotated[
        bool,
        typer.Option("--no-pool", help="Open a single connection, never a pool"),
    ] = False,
) -> None:
    """Run a statement that returns no rows and report the rows affected."""
    mintdb.connect(use_pool=not no_pool)
    try:
        affected = mintdb.execute(sql, params or [])
    finally:
        mintdb.disconnect()

    CLIHandler(console).handle_success(
        f"Statement executed ({affected} row(s) affected)",
        {"rows_affected": affected},
        json_output=json_output,
    )
