"""Connectivity check command for mintdb CLI."""

from typing import Annotated, Any

import typer
from rich.console import Console

import mintdb
from mintdb.cli.formatters.json_formatter import JsonFormatter
from mintdb.cli.formatters.table_formatter import TableFormatter
from mintdb.cli.utils.cli_handler import cli_command
from mintdb.config import get_logger
from mintdb.database.handle import PooledConnectionHandle

logger = get_logger(__name__)
console = Console()


@cli_command
def check_command(
    no_pool: Annotated[
        bool,
        typer.Option("--no-pool", help="Open a single connection, never a pool"),
    ] = False,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output in JSON format"),
    ] = False,
) -> None:
    """Open a connection with the current settings and verify it works."""
    handle = mintdb.connect(use_pool=not no_pool)
    try:
        ping = mintdb.query("SELECT 1").scalar()
        report: dict[str, Any] = {
            "driver": handle.kind.value,
            "pooled": handle.pooled,
            "valid": mintdb.has_connection(),
            "ping": ping,
        }
        if isinstance(handle, PooledConnectionHandle):
            report["pool"] = handle.pool.get_stats()
    finally:
        mintdb.disconnect()

    logger.info("Connection check passed", driver=report["driver"])

    if json_output:
        print(JsonFormatter().format(report))
        return

    summary = {key: value for key, value in report.items() if key != "pool"}
    for key, value in report.get("pool", {}).items():
        summary[f"pool_{key}"] = value
    console.print(
        TableFormatter().create_summary_table("Connection check", summary), end=""
    )
    console.print("[green]Connection OK[/green]")
