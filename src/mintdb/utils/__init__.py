"""mintdb utilities module."""

from mintdb.utils.prompt import prompt_password

__all__ = ["prompt_password"]
