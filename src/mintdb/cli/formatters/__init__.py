"""Output formatters for the mintdb CLI."""

from __future__ import annotations

from mintdb.cli.formatters.base import OutputFormat, OutputFormatter
from mintdb.cli.formatters.json_formatter import JsonFormatter
from mintdb.cli.formatters.table_formatter import TableFormatter

__all__ = [
    "JsonFormatter",
    "OutputFormat",
    "OutputFormatter",
    "TableFormatter",
]
