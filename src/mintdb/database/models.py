"""Value objects passed around by the connection manager."""

from __future__ import annotations

import os
from collections.abc import Iterator, Sequence
from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, field_validator, model_validator

from mintdb.database.drivers import DriverKind, default_port

ENV_PREFIX = "MINTDB_"


class ConnectionConfig(BaseModel):
    """Immutable set of connection parameters.

    A missing port is filled in with the driver's default (3306 for
    MariaDB/MySQL, 5432 for PostgreSQL, none for SQLite and ODBC). The driver
    name itself is not validated here; an unknown driver is reported when a
    connection is opened.
    """

    model_config = ConfigDict(frozen=True)

    driver: str = "mariadb"
    host: str = ""
    dbname: str = ""
    user: str = ""
    password: str = ""
    port: int | None = None
    dsn: str = ""
    filepath: str = ""

    @field_validator("driver", mode="before")
    @classmethod
    def normalize_driver(cls, v: Any) -> str:
        if isinstance(v, DriverKind):
            return v.value
        return str(v).strip().lower()

    @field_validator(
        "host", "dbname", "user", "password", "dsn", "filepath", mode="before"
    )
    @classmethod
    def none_to_empty(cls, v: Any) -> str:
        return "" if v is None else str(v)

    @model_validator(mode="before")
    @classmethod
    def fill_default_port(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        port = data.get("port")
        parsed: int | None
        if port is None or port == "" or isinstance(port, bool):
            parsed = None
        else:
            try:
                parsed = int(port)
            except (TypeError, ValueError):
                parsed = None
        if parsed is None:
            parsed = default_port(data.get("driver", "mariadb"))
        return {**data, "port": parsed}

    @property
    def kind(self) -> DriverKind:
        """Driver kind; raises UnsupportedDriverError for unknown names."""
        return DriverKind.parse(self.driver)

    def to_env(self) -> dict[str, str]:
        """Render the configuration as ``MINTDB_*`` environment variables."""
        values = self.model_dump()
        values["port"] = "" if self.port is None else str(self.port)
        return {
            f"{ENV_PREFIX}{name.upper()}": str(value) for name, value in values.items()
        }

    def apply_to_environ(self) -> None:
        """Write every field to ``os.environ``, replacing any earlier values."""
        os.environ.update(self.to_env())

    def masked(self) -> dict[str, Any]:
        """Fields for display, with the password hidden."""
        values = self.model_dump()
        if values["password"]:
            values["password"] = "********"  # pragma: allowlist secret
        return values


@dataclass(frozen=True)
class QueryResult:
    """Rows returned by a query, in driver order.

    Columns keep the names reported by the driver; rows are tuples ordered
    like ``columns``.
    """

    columns: tuple[str, ...] = ()
    rows: list[tuple[Any, ...]] = field(default_factory=list)
    description: tuple[Any, ...] | None = None

    @classmethod
    def from_cursor(cls, cursor: Any, rows: Sequence[Sequence[Any]]) -> QueryResult:
        """Build a result from a DB-API cursor's description and fetched rows."""
        description = cursor.description
        if not description:
            return cls()
        columns = tuple(str(col[0]) for col in description)
        return cls(
            columns=columns,
            rows=[tuple(row) for row in rows],
            description=tuple(description),
        )

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[tuple[Any, ...]]:
        return iter(self.rows)

    def __getitem__(self, index: int) -> tuple[Any, ...]:
        return self.rows[index]

    def to_dicts(self) -> list[dict[str, Any]]:
        """Rows as dictionaries keyed by column name."""
        return [dict(zip(self.columns, row, strict=True)) for row in self.rows]

    def column(self, name: str) -> list[Any]:
        """All values of one column, in row order.

        Raises:
            KeyError: If the column does not exist
        """
        try:
            index = self.columns.index(name)
        except ValueError:
            raise KeyError(name) from None
        return [row[index] for row in self.rows]

    def first(self) -> dict[str, Any] | None:
        """First row as a dictionary, or None for an empty result."""
        if not self.rows:
            return None
        return dict(zip(self.columns, self.rows[0], strict=True))

    def scalar(self) -> Any:
        """Value of the first column of the first row, or None."""
        if not self.rows:
            return None
        return self.rows[0][0]
