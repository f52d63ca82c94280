"""Driver kinds and the factory that opens DB-API connections for them.

Each backend is served by a DB-API 2.0 module:

* MariaDB / MySQL: ``pymysql``
* PostgreSQL: ``psycopg``
* SQLite: ``sqlite3``
* ODBC: ``pyodbc``

Driver modules are imported lazily so only the one in use must be installed.
"""

from __future__ import annotations

import importlib
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import ModuleType
from typing import TYPE_CHECKING, Any

from mintdb.config import get_logger
from mintdb.exceptions import DatabaseConnectionError, UnsupportedDriverError

if TYPE_CHECKING:
    from mintdb.database.models import ConnectionConfig

logger = get_logger(__name__)


class DriverKind(str, Enum):
    """Supported database backends."""

    MARIADB = "mariadb"
    MYSQL = "mysql"
    POSTGRES = "postgres"
    SQLITE = "sqlite"
    ODBC = "odbc"

    @classmethod
    def parse(cls, value: DriverKind | str) -> DriverKind:
        """Resolve a driver name, raising UnsupportedDriverError when unknown."""
        if isinstance(value, DriverKind):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise UnsupportedDriverError(str(value)) from None

    @property
    def default_port(self) -> int | None:
        """Port used when the configuration does not name one."""
        return DEFAULT_PORTS[self]


DEFAULT_PORTS: dict[DriverKind, int | None] = {
    DriverKind.MARIADB: 3306,
    DriverKind.MYSQL: 3306,
    DriverKind.POSTGRES: 5432,
    DriverKind.SQLITE: None,
    DriverKind.ODBC: None,
}


def default_port(driver: DriverKind | str) -> int | None:
    """Return the default port for a driver name, or None if it has none.

    Unknown driver names also give None; they are rejected later, at open time.
    """
    try:
        return DriverKind.parse(driver).default_port
    except UnsupportedDriverError:
        return None


@dataclass(frozen=True)
class DriverSpec:
    """How mintdb talks to one DB-API module."""

    module: str
    paramstyle: str
    extra: str
    keyword_map: Mapping[str, str] = field(default_factory=dict)
    connect_defaults: Mapping[str, Any] = field(default_factory=dict)
    init_statements: tuple[str, ...] = ()


_MYSQL_SPEC = DriverSpec(
    module="pymysql",
    paramstyle="format",
    extra="mysql",
    keyword_map={"dbname": "database"},
    connect_defaults={"autocommit": True, "charset": "utf8mb4"},
    init_statements=("SET NAMES 'utf8mb4'",),
)

DRIVER_SPECS: dict[DriverKind, DriverSpec] = {
    DriverKind.MARIADB: _MYSQL_SPEC,
    DriverKind.MYSQL: _MYSQL_SPEC,
    DriverKind.POSTGRES: DriverSpec(
        module="psycopg",
        paramstyle="format",
        extra="postgres",
        connect_defaults={"autocommit": True},
    ),
    DriverKind.SQLITE: DriverSpec(
        module="sqlite3",
        paramstyle="qmark",
        extra="",
        keyword_map={"dbname": "database"},
        connect_defaults={"isolation_level": None, "check_same_thread": False},
    ),
    DriverKind.ODBC: DriverSpec(
        module="pyodbc",
        paramstyle="qmark",
        extra="odbc",
        connect_defaults={"autocommit": True},
    ),
}


def _valid_port(port: int | None) -> bool:
    return port is not None and port > 0


def build_connect_args(config: ConnectionConfig) -> dict[str, Any]:
    """Build the driver-level connection arguments for a configuration.

    | Driver                  | Arguments                                   |
    |-------------------------|---------------------------------------------|
    | MariaDB/MySQL/Postgres  | dbname, host, user, password, port if valid |
    | SQLite                  | dbname = filepath if set, else dbname       |
    | ODBC with DSN           | dsn, uid, pwd                               |
    | ODBC without DSN        | UID, PWD, Database, Server, Port if set     |

    Args:
        config: Connection configuration

    Returns:
        Mapping of connection arguments

    Raises:
        UnsupportedDriverError: If the configured driver is unknown
    """
    kind = config.kind
    args: dict[str, Any]

    if kind in (DriverKind.MARIADB, DriverKind.MYSQL, DriverKind.POSTGRES):
        args = {
            "dbname": config.dbname,
            "host": config.host,
            "user": config.user,
            "password": config.password,
        }
        if _valid_port(config.port):
            args["port"] = config.port
    elif kind is DriverKind.SQLITE:
        args = {"dbname": config.filepath or config.dbname}
    else:
        if config.dsn:
            args = {"dsn": config.dsn, "uid": config.user, "pwd": config.password}
        else:
            args = {"UID": config.user, "PWD": config.password}
            if config.dbname:
                args["Database"] = config.dbname
            if config.host:
                args["Server"] = config.host
            if _valid_port(config.port):
                args["Port"] = config.port

    return args


def load_driver_module(kind: DriverKind) -> ModuleType:
    """Import the DB-API module that serves ``kind``.

    Raises:
        DatabaseConnectionError: If the module is not installed
    """
    spec = DRIVER_SPECS[kind]
    try:
        return importlib.import_module(spec.module)
    except ImportError as e:
        hint = (
            f"Install it with: pip install 'mintdb[{spec.extra}]'"
            if spec.extra
            else "Your Python build lacks this standard module"
        )
        raise DatabaseConnectionError(
            message=f"Driver module '{spec.module}' is not available",
            hint=hint,
            details={"driver": kind.value, "module": spec.module},
        ) from e


def translate_placeholders(sql: str, paramstyle: str) -> str:
    """Rewrite ``?`` placeholders for drivers that use ``%s``.

    Quoted literals and quoted identifiers are left alone. Literal ``%`` signs
    are doubled so the driver's own formatting does not consume them.

    Args:
        sql: SQL using ``?`` placeholders
        paramstyle: Driver paramstyle (``qmark`` or ``format``)

    Returns:
        SQL in the driver's paramstyle
    """
    if paramstyle == "qmark":
        return sql

    out: list[str] = []
    quote: str | None = None
    for char in sql:
        if quote:
            if char == quote:
                quote = None
            out.append("%%" if char == "%" else char)
            continue
        if char in ("'", '"', "`"):
            quote = char
            out.append(char)
        elif char == "?":
            out.append("%s")
        elif char == "%":
            out.append("%%")
        else:
            out.append(char)
    return "".join(out)


def connect(kind: DriverKind, args: Mapping[str, Any], **options: Any) -> Any:
    """Open a DB-API connection.

    Connections are opened in autocommit mode; transactions are started
    explicitly by ``dbi.begin()``. MariaDB/MySQL connections get
    ``SET NAMES 'utf8mb4'`` right after connecting.

    Args:
        kind: Driver to use
        args: Connection arguments from ``build_connect_args()``
        **options: Extra driver keyword arguments; they override everything else

    Returns:
        Open DB-API connection

    Raises:
        DatabaseConnectionError: If the driver cannot be loaded or refuses
    """
    spec = DRIVER_SPECS[kind]
    module = load_driver_module(kind)

    kwargs: dict[str, Any] = dict(spec.connect_defaults)
    for key, value in args.items():
        kwargs[spec.keyword_map.get(key, key)] = value
    kwargs.update(options)

    try:
        conn = module.connect(**kwargs)
    except Exception as e:
        raise DatabaseConnectionError(
            message=f"Failed to connect to {kind.value} database: {e}",
            hint="Check host, credentials, and that the server is reachable",
            details={
                "driver": kind.value,
                "host": args.get("host") or args.get("Server") or "",
                "dbname": args.get("dbname") or args.get("Database") or "",
            },
        ) from e

    try:
        for statement in spec.init_statements:
            cursor = conn.cursor()
            try:
                cursor.execute(statement)
            finally:
                cursor.close()
    except Exception:
        conn.close()
        raise

    logger.debug("Opened driver connection", driver=kind.value, module=spec.module)
    return conn

