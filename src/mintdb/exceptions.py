"""Exception hierarchy for mintdb with helpful error messages."""

from __future__ import annotations

from typing import Any


class MintDBError(Exception):
    """Base exception with helpful formatting for all mintdb errors.

    Provides structured error messages with hints and details to help users
    understand and fix problems.
    """

    def __init__(
        self,
        message: str,
        hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize exception with structured error information.

        Args:
            message: Primary error message describing what went wrong
            hint: Optional hint suggesting how to fix the problem
            details: Optional dictionary with additional debugging information
        """
        self.message = message
        self.hint = hint
        self.details = details
        super().__init__(self.format_error())

    def format_error(self) -> str:
        """Format the error message with hint and details.

        Returns:
            Formatted error string with all available information
        """
        output = f"Error: {self.message}"
        if self.hint:
            output += f"\nHint: {self.hint}"
        if self.details:
            details_str = "\n".join(
                f"  {key}: {value}" for key, value in self.details.items()
            )
            output += f"\nDetails:\n{details_str}"
        return output


class ConfigurationError(MintDBError):
    """Configuration errors including invalid settings and config files."""

    pass


class UnsupportedDriverError(ConfigurationError):
    """The configured driver kind is not one mintdb knows how to open."""

    def __init__(self, driver: str) -> None:
        """Initialize with the offending driver name.

        Args:
            driver: Driver string as found in the configuration
        """
        from mintdb.database.drivers import DriverKind

        self.driver = driver
        super().__init__(
            message=f"Unsupported driver: {driver!r}",
            hint="Set MINTDB_DRIVER to one of: "
            + ", ".join(kind.value for kind in DriverKind),
            details={"driver": driver},
        )


class DatabaseError(MintDBError):
    """Database-related errors including connection and pool issues."""

    pass


class DatabaseConnectionError(DatabaseError):
    """The underlying driver failed to open a connection."""

    pass


class NoConnectionError(DatabaseError):
    """An operation needed a connection but none has been opened."""

    def __init__(self) -> None:
        """Initialize with the standard message."""
        super().__init__(
            message="No active database connection found",
            hint="Call mintdb.connect() first",
        )


class InvalidConnectionError(DatabaseError):
    """The current connection (or pool) exists but is closed or broken."""

    def __init__(self, details: dict[str, Any] | None = None) -> None:
        """Initialize with optional diagnostic details.

        Args:
            details: Extra information such as the driver and validity check error
        """
        super().__init__(
            message="Database connection (or pool) is invalid or closed",
            hint="Reconnect with mintdb.connect()",
            details=details,
        )


def check_config_keys(config: dict[str, Any]) -> None:
    """Check for common configuration mistakes.

    Args:
        config: Configuration dictionary to validate

    Raises:
        ConfigurationError: With hints about correct configuration keys
    """
    wrong_keys = {
        "database": "dbname",
        "db": "dbname",
        "username": "user",
        "server": "host",
        "path": "filepath",
        "pwd": "password",  # pragma: allowlist secret
    }

    for wrong, correct in wrong_keys.items():
        if wrong in config:
            raise ConfigurationError(
                message=f"Invalid configuration key '{wrong}'",
                hint=f"Use '{correct}' instead of '{wrong}'",
                details={
                    "found_keys": list(config.keys()),
                    "invalid_key": wrong,
                    "correct_key": correct,
                },
            )
