"""Module-level helpers operating on the process-wide connection manager.

Typical use::

    import mintdb

    mintdb.configure(driver="sqlite", filepath="data/app.sqlite")
    mintdb.connect_sqlite()
    mintdb.execute("INSERT INTO logs(message) VALUES (?)", ["start"])
    rows = mintdb.query("SELECT * FROM logs WHERE id = ?", [42])
    mintdb.disconnect()
"""

from __future__ import annotations

import os
from collections.abc import Callable, Generator, Sequence
from contextlib import contextmanager
from typing import Any, TypeVar

from mintdb.database.connection_manager import get_connection_manager
from mintdb.database.drivers import DriverKind
from mintdb.database.handle import ConnectionHandle
from mintdb.database.models import ConnectionConfig, QueryResult

T = TypeVar("T")


def configure(
    config: ConnectionConfig | None = None, **fields: Any
) -> ConnectionConfig:
    """Store connection parameters for later ``connect()`` calls.

    If ``port`` is omitted, the driver's default is used: 3306 for MariaDB and
    MySQL, 5432 for PostgreSQL, none for SQLite and ODBC.
    """
    return get_connection_manager().configure(config, **fields)


def connect(
    use_pool: bool = True, prompt: bool | None = None, **driver_options: Any
) -> ConnectionHandle:
    """Open a connection (or pool) with the stored parameters.

    An empty password is prompted for unless ``prompt=False`` or
    ``MINTDB_PROMPT_PASSWORD=false``.
    """
    return get_connection_manager().open(
        use_pool=use_pool, prompt=prompt, **driver_options
    )


def _connect_as(
    kind: DriverKind,
    use_pool: bool,
    prompt: bool | None,
    driver_options: dict[str, Any],
) -> ConnectionHandle:
    os.environ["MINTDB_DRIVER"] = kind.value
    return connect(use_pool=use_pool, prompt=prompt, **driver_options)


def connect_mariadb(
    use_pool: bool = True, prompt: bool | None = None, **driver_options: Any
) -> ConnectionHandle:
    """Open a MariaDB connection with the stored parameters."""
    return _connect_as(DriverKind.MARIADB, use_pool, prompt, driver_options)


def connect_mysql(
    use_pool: bool = True, prompt: bool | None = None, **driver_options: Any
) -> ConnectionHandle:
    """Open a MySQL connection (served by the MariaDB/MySQL driver)."""
    return _connect_as(DriverKind.MYSQL, use_pool, prompt, driver_options)


def connect_postgres(
    use_pool: bool = True, prompt: bool | None = None, **driver_options: Any
) -> ConnectionHandle:
    """Open a PostgreSQL connection with the stored parameters."""
    return _connect_as(DriverKind.POSTGRES, use_pool, prompt, driver_options)


def connect_sqlite(
    use_pool: bool = False, prompt: bool | None = None, **driver_options: Any
) -> ConnectionHandle:
    """Open a SQLite connection; pooling is off by default for SQLite."""
    return _connect_as(DriverKind.SQLITE, use_pool, prompt, driver_options)


def connect_odbc(
    use_pool: bool = True, prompt: bool | None = None, **driver_options: Any
) -> ConnectionHandle:
    """Open an ODBC connection with the stored parameters."""
    return _connect_as(DriverKind.ODBC, use_pool, prompt, driver_options)


def disconnect() -> None:
    """Close the active connection or pool. Safe to call repeatedly."""
    get_connection_manager().close()


def get_connection() -> ConnectionHandle:
    """Return the active handle, raising if there is none or it is closed."""
    return get_connection_manager().current()


def has_connection() -> bool:
    """Whether a valid connection is currently open."""
    return get_connection_manager().has_connection()


def query(sql: str, params: Sequence[Any] = ()) -> QueryResult:
    """Run a SELECT with optional positional ``?`` parameters."""
    return get_connection_manager().query(sql, params)


def execute(sql: str, params: Sequence[Any] = ()) -> int:
    """Run a statement with optional positional ``?`` parameters."""
    return get_connection_manager().execute(sql, params)


def transaction(body: Callable[[], T]) -> T:
    """Call ``body`` inside a transaction; commit on success, roll back on error."""
    return get_connection_manager().transaction(body)


@contextmanager
def transaction_scope() -> Generator[Any, None, None]:
    """Context-manager form of ``transaction()``."""
    with get_connection_manager().transaction_scope() as conn:
        yield conn
