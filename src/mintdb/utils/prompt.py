"""Interactive password prompt."""

from __future__ import annotations

import sys

from rich.console import Console
from rich.prompt import Prompt

PASSWORD_PROMPT = "DB Password"


def prompt_password(label: str = PASSWORD_PROMPT) -> str:
    """Ask the user for a database password.

    Input is masked when stdin is a terminal. Without a terminal there is no
    way to hide what is typed, so a plain prompt is used instead.

    Args:
        label: Prompt text shown before the input

    Returns:
        The password as entered (may be empty)
    """
    if sys.stdin.isatty():
        console = Console(stderr=True)
        return Prompt.ask(label, password=True, console=console)
    return input(f"{label}: ")
