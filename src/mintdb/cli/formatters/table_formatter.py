"""Table output formatter for query results."""

import csv
import io
from typing import Any

from rich.console import Console
from rich.table import Table

from mintdb.cli.formatters.base import OutputFormat, OutputFormatter
from mintdb.database.models import QueryResult


class TableFormatter(OutputFormatter[QueryResult]):
    """Formatter for query results and key-value summaries."""

    def format(
        self, data: QueryResult, format_type: OutputFormat = OutputFormat.TABLE
    ) -> str:
        """Format a query result.

        Args:
            data: Query result to format
            format_type: Output format type

        Returns:
            Formatted string
        """
        if not data.columns:
            return "No data to display"

        if format_type == OutputFormat.CSV:
            return self._format_csv(data)
        if format_type == OutputFormat.MARKDOWN:
            return self._format_markdown(data)
        return self._format_table(data)

    def _format_table(self, data: QueryResult) -> str:
        """Format as Rich table."""
        table = Table(show_header=True, header_style="bold magenta")
        for col in data.columns:
            table.add_column(col)
        for row in data.rows:
            table.add_row(*[_cell(value) for value in row])
        table.caption = f"{len(data)} row(s)"
        return _render(table)

    def _format_csv(self, data: QueryResult) -> str:
        """Format as CSV."""
        output = io.StringIO()
        writer = csv.writer(output)
        writer.writerow(data.columns)
        writer.writerows(data.rows)
        return output.getvalue()

    def _format_markdown(self, data: QueryResult) -> str:
        """Format as Markdown table."""
        lines = [
            "| " + " | ".join(_markdown_cell(name) for name in data.columns) + " |",
            "| " + " | ".join(["---"] * len(data.columns)) + " |",
        ]
        for row in data.rows:
            cells = (_markdown_cell(value) for value in row)
            lines.append("| " + " | ".join(cells) + " |")
        return "\n".join(lines)

    def create_summary_table(self, title: str, data: dict[str, Any]) -> str:
        """Create a two-column table from key-value pairs.

        Args:
            title: Table title
            data: Dictionary of key-value pairs

        Returns:
            Formatted string
        """
        table = Table(title=title, show_header=False)
        table.add_column("Property", style="cyan")
        table.add_column("Value", style="white")
        for key, value in data.items():
            table.add_row(key.replace("_", " ").title(), _cell(value))
        return _render(table)


def _cell(value: Any) -> str:
    return "NULL" if value is None else str(value)


def _markdown_cell(value: Any) -> str:
    # A bare pipe would start a new column; line breaks would end the row
    text = _cell(value).replace("|", "\\|")
    return text.replace("\r\n", "<br>").replace("\n", "<br>")


def _render(table: Table) -> str:
    string_io = io.StringIO()
    temp_console = Console(file=string_io, force_terminal=True)
    temp_console.print(table)
    return string_io.getvalue()
