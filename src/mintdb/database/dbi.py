"""Thin driver-manager layer over DB-API connections.

These helpers hide the few places where DB-API modules disagree: how to tell
whether a connection is still open, how to start a transaction, and which
placeholder style the driver expects.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from mintdb.database.drivers import DRIVER_SPECS, DriverKind, translate_placeholders
from mintdb.database.models import QueryResult

# Backends whose transactions are driven by toggling the autocommit attribute
_AUTOCOMMIT_TOGGLE = (DriverKind.POSTGRES, DriverKind.ODBC)


def prepare_sql(kind: DriverKind, sql: str, params: Sequence[Any]) -> str:
    """Translate ``?`` placeholders when params will be bound."""
    if not params:
        return sql
    return translate_placeholders(sql, DRIVER_SPECS[kind].paramstyle)


def is_valid(kind: DriverKind, conn: Any) -> bool:
    """Report whether a raw connection is still open.

    This is a local check; it does not round-trip to the server.
    """
    if kind in (DriverKind.MARIADB, DriverKind.MYSQL):
        return bool(conn.open)
    if kind is DriverKind.SQLITE:
        try:
            conn.total_changes  # noqa: B018
        except Exception:
            return False
        return True
    return not conn.closed


def ping(conn: Any) -> bool:
    """Round-trip ``SELECT 1``; False on any failure."""
    try:
        cursor = conn.cursor()
        try:
            cursor.execute("SELECT 1")
            cursor.fetchall()
        finally:
            cursor.close()
    except Exception:
        return False
    return True


def disconnect(conn: Any) -> None:
    """Close a raw connection."""
    conn.close()


def fetch_all(
    kind: DriverKind, conn: Any, sql: str, params: Sequence[Any] = ()
) -> QueryResult:
    """Run a query and fetch every row.

    With params, the statement is executed with positional binding; without,
    it is sent as is. The cursor is closed on every exit path.

    Args:
        kind: Driver of ``conn``
        conn: Open DB-API connection
        sql: SQL with ``?`` placeholders
        params: Values bound to the placeholders, in order

    Returns:
        Query result
    """
    cursor = conn.cursor()
    try:
        if params:
            cursor.execute(prepare_sql(kind, sql, params), tuple(params))
        else:
            cursor.execute(sql)
        rows = cursor.fetchall() if cursor.description else []
        return QueryResult.from_cursor(cursor, rows)
    finally:
        cursor.close()


def supports_direct_execute(conn: Any) -> bool:
    """Whether the connection offers a combined ``execute(sql, params)`` call.

    sqlite3, psycopg and pyodbc connections do; pymysql connections do not.
    """
    return callable(getattr(conn, "execute", None))


def execute(kind: DriverKind, conn: Any, sql: str, params: Sequence[Any] = ()) -> int:
    """Run a statement and return the driver-reported rows affected.

    The execution path is picked from the connection's capabilities, never by
    retrying a failed statement.

    Returns:
        Rows affected; -1 when the driver cannot tell
    """
    statement = prepare_sql(kind, sql, params)
    args: tuple[Any, ...] | None = tuple(params) if params else None

    if supports_direct_execute(conn):
        cursor = conn.execute(statement, args) if args else conn.execute(statement)
    else:
        cursor = conn.cursor()
        try:
            if args:
                cursor.execute(statement, args)
            else:
                cursor.execute(statement)
        except BaseException:
            cursor.close()
            raise
    try:
        return int(cursor.rowcount)
    finally:
        cursor.close()


def begin(kind: DriverKind, conn: Any) -> None:
    """Start a transaction on a connection that is in autocommit mode."""
    if kind is DriverKind.SQLITE:
        conn.execute("BEGIN")
    elif kind in _AUTOCOMMIT_TOGGLE:
        conn.autocommit = False
    else:
        conn.begin()


def commit(kind: DriverKind, conn: Any) -> None:
    """Commit the open transaction and return to autocommit mode.

    A failed commit leaves autocommit off; the caller rolls back next.
    """
    conn.commit()
    _restore_autocommit(kind, conn)


def rollback(kind: DriverKind, conn: Any) -> None:
    """Roll back the open transaction and return to autocommit mode."""
    try:
        conn.rollback()
    finally:
        _restore_autocommit(kind, conn)


def _restore_autocommit(kind: DriverKind, conn: Any) -> None:
    if kind in _AUTOCOMMIT_TOGGLE:
        conn.autocommit = True
