"""mintdb: Minimal Integration Toolkit for Databases.

A small, uniform interface for connecting to MariaDB, MySQL, PostgreSQL,
SQLite, and ODBC databases through their DB-API drivers, with optional
connection pooling. Connection settings live in ``MINTDB_*`` environment
variables so they can be shared across scripts and background jobs.
"""

from mintdb.api import (
    configure,
    connect,
    connect_mariadb,
    connect_mysql,
    connect_odbc,
    connect_postgres,
    connect_sqlite,
    disconnect,
    execute,
    get_connection,
    has_connection,
    query,
    transaction,
    transaction_scope,
)
from mintdb.database import (
    ConnectionConfig,
    ConnectionHandle,
    ConnectionManager,
    DriverKind,
    QueryResult,
    close_connection_manager,
    get_connection_manager,
)
from mintdb.exceptions import (
    ConfigurationError,
    DatabaseConnectionError,
    DatabaseError,
    InvalidConnectionError,
    MintDBError,
    NoConnectionError,
    UnsupportedDriverError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "ConnectionConfig",
    "ConnectionHandle",
    "ConnectionManager",
    "DatabaseConnectionError",
    "DatabaseError",
    "DriverKind",
    "InvalidConnectionError",
    "MintDBError",
    "NoConnectionError",
    "QueryResult",
    "UnsupportedDriverError",
    "__version__",
    "close_connection_manager",
    "configure",
    "connect",
    "connect_mariadb",
    "connect_mysql",
    "connect_odbc",
    "connect_postgres",
    "connect_sqlite",
    "disconnect",
    "execute",
    "get_connection",
    "get_connection_manager",
    "has_connection",
    "query",
    "transaction",
    "transaction_scope",
]
