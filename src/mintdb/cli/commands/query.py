"""Query command for mintdb CLI."""

from typing import Annotated

import typer
from rich.console import Console

import mintdb
from mintdb.cli.formatters.base import OutputFormat
from mintdb.cli.formatters.json_formatter import JsonFormatter
from mintdb.cli.formatters.table_formatter import TableFormatter
from mintdb.cli.utils.cli_handler import CLIHandler, cli_command

console = Console()


@cli_command
def query_command(
    sql: Annotated[str, typer.Argument(help="SQL query with ? placeholders")],
    params: Annotated[
        list[str] | None,
        typer.Option("--param", "-p", help="Value for the next ? placeholder"),
    ] = None,
    json_output: Annotated[
        bool, typer.Option("--json", help="Output in JSON format")
    ] = False,
    csv_output: Annotated[
        bool, typer.Option("--csv", help="Output in CSV format")
    ] = False,
    markdown_output: Annotated[
        bool, typer.Option("--markdown", help="Output as a Markdown table")
    ] = False,
    no_pool: Annotated[
        bool,
        typer.Option("--no-pool", help="Open a single connection, never a pool"),
    ] = False,
) -> None:
    """Run a query and print the rows it returns."""
    output_format = CLIHandler(console).get_output_format(
        json=json_output, csv=csv_output, markdown=markdown_output
    )

    mintdb.connect(use_pool=not no_pool)
    try:
        result = mintdb.query(sql, params or [])
    finally:
        mintdb.disconnect()

    if output_format == OutputFormat.JSON:
        print(JsonFormatter().format(result))
    elif output_format == OutputFormat.TABLE:
        console.print(TableFormatter().format(result, output_format), end="")
    else:
        # Plain text so CSV and Markdown can be piped
        print(TableFormatter().format(result, output_format), end="")
        if output_format == OutputFormat.MARKDOWN:
            print()
