"""mintdb command line interface."""

from mintdb.cli.main import app, main

__all__ = ["app", "main"]
