"""Main CLI entry point for mintdb."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console

import mintdb
from mintdb.cli.commands import (
    check_command,
    config_app,
    exec_command,
    query_command,
)
from mintdb.cli.formatters.json_formatter import JsonFormatter
from mintdb.cli.utils.cli_handler import CLIHandler
from mintdb.config import (
    MintDBSettings,
    clear_settings_cache,
    configure_logging,
    get_logger,
    get_settings,
)

logger = get_logger(__name__)
console = Console()

app = typer.Typer(
    name="mintdb",
    help="Minimal Integration Toolkit for Databases",
    pretty_exceptions_enable=False,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command(name="check")(check_command)
app.command(name="query")(query_command)
app.command(name="exec")(exec_command)

app.add_typer(config_app, name="config")


@app.command()
def version(
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON")] = False,
) -> None:
    """Show mintdb version."""
    version_info = {
        "name": "mintdb",
        "version": mintdb.__version__,
        "description": "Minimal Integration Toolkit for Databases",
    }

    if json_output:
        # Output pure JSON without ANSI escape codes
        print(JsonFormatter().format(version_info))
    else:
        console.print(f"mintdb v{version_info['version']}")


def _reconfigure_logging(level: str, debug: bool = False) -> None:
    os.environ["MINTDB_LOG_LEVEL"] = level
    if debug:
        os.environ["MINTDB_DEBUG"] = "true"
    clear_settings_cache()
    configure_logging(get_settings())


def _load_config_file(config: Path) -> None:
    """Store the settings found in ``config`` for the commands that follow."""
    settings = MintDBSettings.from_file(config)
    mintdb.configure(**settings.connection_fields())
    # Pool settings are read from the environment when a connection opens
    for name, value in settings.model_dump().items():
        if name.startswith("pool_"):
            os.environ[f"MINTDB_{name.upper()}"] = str(value)
    logger.debug("Loaded configuration file", path=str(config))


@app.callback()
def main_callback(
    config: Annotated[
        Path | None,
        typer.Option(
            "--config",
            "-c",
            help="Path to a YAML, TOML, or JSON settings file",
            envvar="MINTDB_CONFIG",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable verbose logging (INFO level)"),
    ] = False,
    debug: Annotated[
        bool,
        typer.Option("--debug", help="Enable debug logging", envvar="MINTDB_DEBUG"),
    ] = False,
) -> None:
    """Configure global options."""
    if debug:
        _reconfigure_logging("DEBUG", debug=True)
        logger.debug("Debug mode enabled")
    elif verbose:
        _reconfigure_logging("INFO")
        logger.info("Verbose mode enabled")
    else:
        configure_logging(get_settings())

    if config:
        try:
            _load_config_file(config)
        except Exception as e:
            CLIHandler(console).handle_error(e)


def main() -> None:
    """Main CLI entry point."""
    app()


if __name__ == "__main__":
    main()
