"""Unified CLI handler for standardized error handling and output."""

from collections.abc import Callable
from functools import wraps
from typing import Any, TypeVar

import typer
from rich.console import Console

from mintdb.cli.formatters.base import OutputFormat
from mintdb.cli.formatters.json_formatter import JsonFormatter
from mintdb.config import get_logger
from mintdb.exceptions import MintDBError

logger = get_logger(__name__)

T = TypeVar("T")


class CLIHandler:
    """Unified handler for CLI commands."""

    def __init__(self, console: Console | None = None) -> None:
        """Initialize CLI handler.

        Args:
            console: Rich console for output
        """
        self.console = console or Console()
        self.json_formatter = JsonFormatter()

    def handle_error(
        self, error: Exception, json_output: bool = False, exit_code: int = 1
    ) -> None:
        """Handle and display errors consistently.

        Args:
            error: Exception to handle
            json_output: Whether to output JSON
            exit_code: Exit code to use

        Raises:
            typer.Exit: Always, with ``exit_code``
        """
        logger.error("Command failed", error=str(error), exc_info=error)

        if json_output:
            print(self.json_formatter.format_error_response(error, exit_code))
        elif isinstance(error, MintDBError):
            # Already formatted as "Error: ...", possibly with hint and details
            self.console.print(str(error), style="red", markup=False)
        else:
            self.console.print(f"Error: {error}", style="red", markup=False)

        raise typer.Exit(exit_code)

    def handle_success(
        self, message: str, data: Any = None, json_output: bool = False
    ) -> None:
        """Handle success responses consistently.

        Args:
            message: Success message
            data: Optional data to include
            json_output: Whether to output JSON
        """
        if json_output:
            print(self.json_formatter.format_success(message, data))
        else:
            self.console.print(message, style="green", markup=False)

    def get_output_format(
        self,
        json: bool = False,
        csv: bool = False,
        markdown: bool = False,
    ) -> OutputFormat:
        """Determine output format from flags.

        Args:
            json: JSON output flag
            csv: CSV output flag
            markdown: Markdown output flag

        Returns:
            Selected output format
        """
        if json:
            return OutputFormat.JSON
        if csv:
            return OutputFormat.CSV
        if markdown:
            return OutputFormat.MARKDOWN
        return OutputFormat.TABLE


def cli_command(func: Callable[..., T]) -> Callable[..., T]:
    """Decorator for CLI commands with standardized error handling.

    Exceptions other than ``typer.Exit`` are reported through ``CLIHandler``;
    the ``json_output`` keyword of the command selects the error format.

    Args:
        func: Command function to wrap

    Returns:
        Wrapped function
    """

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        handler = CLIHandler()
        try:
            return func(*args, **kwargs)
        except typer.Exit:
            raise
        except Exception as e:
            handler.handle_error(e, kwargs.get("json_output", False))
            raise  # handle_error always exits

    return wrapper
