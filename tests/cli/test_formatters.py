"""Tests for the CLI output formatters."""

from mintdb.cli.formatters.base import OutputFormat
from mintdb.cli.formatters.table_formatter import TableFormatter
from mintdb.database.models import QueryResult


class TestMarkdownFormat:
    """Test Markdown table output."""

    def test_plain_rows(self):
        """Test header, separator and one line per row."""
        result = QueryResult(columns=("id", "name"), rows=[(1, "ada"), (2, None)])
        output = TableFormatter().format(result, OutputFormat.MARKDOWN)
        assert output.splitlines() == [
            "| id | name |",
            "| --- | --- |",
            "| 1 | ada |",
            "| 2 | NULL |",
        ]

    def test_pipe_in_cell_escaped(self):
        """Test a pipe inside a value does not add a column."""
        result = QueryResult(columns=("a",), rows=[("x|y",)])
        output = TableFormatter().format(result, OutputFormat.MARKDOWN)
        assert output.splitlines()[2] == "| x\\|y |"

    def test_pipe_in_column_name_escaped(self):
        """Test column names are escaped like values."""
        result = QueryResult(columns=("a|b",), rows=[(1,)])
        output = TableFormatter().format(result, OutputFormat.MARKDOWN)
        assert output.splitlines()[0] == "| a\\|b |"

    def test_newline_in_cell_kept_on_one_line(self):
        """Test multi-line values stay inside their row."""
        result = QueryResult(columns=("note",), rows=[("first\nsecond",)])
        output = TableFormatter().format(result, OutputFormat.MARKDOWN)
        assert output.splitlines()[2] == "| first<br>second |"
