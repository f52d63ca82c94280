"""Config commands for mintdb CLI."""

from typing import Annotated

import typer
from rich.console import Console

from mintdb.cli.formatters.json_formatter import JsonFormatter
from mintdb.cli.formatters.table_formatter import TableFormatter
from mintdb.cli.utils.cli_handler import cli_command
from mintdb.database.connection_manager import get_connection_manager

console = Console()

config_app = typer.Typer(
    name="config",
    help="Inspect mintdb connection settings",
    no_args_is_help=True,
)


@config_app.command(name="show")
@cli_command
def config_show(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output in JSON format"),
    ] = False,
) -> None:
    """Show the effective connection settings.

    Settings come from MINTDB_* environment variables, a .env file, or the
    file given with --config. The password is never shown.
    """
    config = get_connection_manager().load_config()
    values = config.masked()

    if json_output:
        print(JsonFormatter().format(values))
        return

    console.print(
        TableFormatter().create_summary_table("Connection settings", values),
        end="",
    )
