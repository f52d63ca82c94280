"""CLI command modules for mintdb."""

from mintdb.cli.commands.check import check_command
from mintdb.cli.commands.config import config_app
from mintdb.cli.commands.execute import exec_command
from mintdb.cli.commands.query import query_command

__all__ = [
    "check_command",
    "config_app",
    "exec_command",
    "query_command",
]
