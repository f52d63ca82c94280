"""mintdb database package.

Connection handling for MariaDB, MySQL, PostgreSQL, SQLite, and ODBC
backends: driver selection, pooling, and the connection manager that owns
the current connection.
"""

from .connection_manager import (
    ConnectionManager,
    close_connection_manager,
    get_connection_manager,
)
from .drivers import DriverKind, build_connect_args, default_port
from .handle import ConnectionHandle, PooledConnectionHandle, RawConnectionHandle
from .models import ConnectionConfig, QueryResult
from .pool import ConnectionPool

__all__ = [
    "ConnectionConfig",
    "ConnectionHandle",
    "ConnectionManager",
    "ConnectionPool",
    "DriverKind",
    "PooledConnectionHandle",
    "QueryResult",
    "RawConnectionHandle",
    "build_connect_args",
    "close_connection_manager",
    "default_port",
    "get_connection_manager",
]
