"""Connection manager owning the current database connection or pool.

The manager keeps at most one handle open. Opening a new connection closes
the previous one first; closing never raises. Every statement helper checks
that the handle is still valid before touching the driver.

A process-wide instance is available through ``get_connection_manager()``
and is closed automatically at interpreter exit. It assumes one logical
session per process: the slot itself is lock-protected, but statements
issued concurrently on one raw connection are left to the driver.
"""

from __future__ import annotations

import atexit
import threading
from collections.abc import Callable, Generator, Mapping, Sequence
from contextlib import contextmanager
from typing import Any, TypeVar

from mintdb.config import MintDBSettings, get_logger
from mintdb.database import dbi, drivers
from mintdb.database.drivers import DriverKind, build_connect_args, default_port
from mintdb.database.handle import (
    ConnectionHandle,
    PooledConnectionHandle,
    RawConnectionHandle,
)
from mintdb.database.models import ConnectionConfig, QueryResult
from mintdb.database.pool import ConnectionPool
from mintdb.exceptions import (
    DatabaseError,
    InvalidConnectionError,
    NoConnectionError,
)
from mintdb.utils.prompt import prompt_password

logger = get_logger(__name__)

T = TypeVar("T")

Connector = Callable[..., Any]

_MEMORY_SQLITE = ("", ":memory:")


class ConnectionManager:
    """Owns the current connection (or pool) and runs statements on it."""

    def __init__(
        self,
        connector: Connector = drivers.connect,
        password_prompt: Callable[[], str] = prompt_password,
        settings_loader: Callable[[], MintDBSettings] = MintDBSettings.from_env,
    ) -> None:
        """Initialize the manager with no open connection.

        Args:
            connector: Callable ``(kind, args, **options)`` opening a connection
            password_prompt: Called when the configured password is empty
            settings_loader: Reads the configuration when a connection is opened
        """
        self._connector = connector
        self._password_prompt = password_prompt
        self._settings_loader = settings_loader
        self._handle: ConnectionHandle | None = None
        self._lock = threading.RLock()
        self._thread_local = threading.local()

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------

    def configure(
        self, config: ConnectionConfig | None = None, **fields: Any
    ) -> ConnectionConfig:
        """Store connection parameters in the process environment.

        The whole configuration is replaced; fields not given are reset to
        their defaults. No connection is opened and an unknown driver is only
        reported by ``open()``.

        Args:
            config: Complete configuration to store
            **fields: Individual fields, applied on top of ``config``

        Returns:
            The configuration that was stored
        """
        if config is None:
            config = ConnectionConfig(**fields)
        elif fields:
            merged = config.model_dump()
            if "port" not in fields and merged["port"] == default_port(config.driver):
                # The old driver's default follows the driver, not the config
                merged.pop("port")
            config = ConnectionConfig(**{**merged, **fields})
        config.apply_to_environ()
        logger.debug("Stored connection settings", driver=config.driver)
        return config

    def load_config(self) -> ConnectionConfig:
        """Read the active configuration from the environment."""
        settings = self._settings_loader()
        return ConnectionConfig(**settings.connection_fields())

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def open(
        self,
        use_pool: bool = True,
        prompt: bool | None = None,
        **driver_options: Any,
    ) -> ConnectionHandle:
        """Open a connection (or pool) from the stored configuration.

        Any current handle is closed first. When the password is empty the
        user is prompted for it, whatever the driver.

        Args:
            use_pool: Create a pool when pooling is available for the target
            prompt: Ask for an empty password; None follows
                ``MINTDB_PROMPT_PASSWORD`` (on by default)
            **driver_options: Extra keyword arguments for the driver's connect

        Returns:
            The new current handle

        Raises:
            UnsupportedDriverError: If the configured driver is unknown
            DatabaseConnectionError: If the driver fails to connect
        """
        with self._lock:
            self.close()

            settings = self._settings_loader()
            config = ConnectionConfig(**settings.connection_fields())
            kind = config.kind

            if prompt is None:
                prompt = settings.prompt_password
            if not config.password and prompt:
                config = ConnectionConfig(
                    **{**config.model_dump(), "password": self._password_prompt()}
                )

            args = build_connect_args(config)

            handle: ConnectionHandle
            if use_pool and self._pooling_available(kind, args, settings):
                logger.info("Using connection pool", driver=kind.value)
                handle = PooledConnectionHandle(
                    kind, self._create_pool(kind, args, settings, driver_options)
                )
            else:
                handle = RawConnectionHandle(
                    kind, self._connector(kind, args, **driver_options)
                )

            self._handle = handle
            logger.info(
                "Opened database connection",
                driver=kind.value,
                host=config.host,
                pooled=handle.pooled,
            )
            return handle

    def _pooling_available(
        self, kind: DriverKind, args: Mapping[str, Any], settings: MintDBSettings
    ) -> bool:
        if not settings.pool_enabled:
            logger.debug("Connection pooling disabled by settings")
            return False
        if kind is DriverKind.SQLITE and str(args.get("dbname", "")) in _MEMORY_SQLITE:
            # Every pooled connection would open its own private database
            logger.info("In-memory SQLite database, not pooling")
            return False
        return True

    def _create_pool(
        self,
        kind: DriverKind,
        args: Mapping[str, Any],
        settings: MintDBSettings,
        driver_options: Mapping[str, Any],
    ) -> ConnectionPool:
        def factory() -> Any:
            return self._connector(kind, args, **driver_options)

        return ConnectionPool(
            factory=factory,
            validator=dbi.ping,
            min_size=min(settings.pool_min_size, settings.pool_max_size),
            max_size=settings.pool_max_size,
            max_idle_time=settings.pool_max_idle_time,
            timeout=settings.pool_timeout,
            health_check_interval=settings.pool_health_check_interval,
            name=f"mintdb-{kind.value}",
        )

    def close(self) -> None:
        """Close the current handle, if any. Never raises."""
        with self._lock:
            handle = self._handle
            if handle is None:
                return
            try:
                self.close_quietly(handle)
            finally:
                self._handle = None

    @staticmethod
    def close_quietly(handle: ConnectionHandle) -> bool:
        """Close a handle, logging instead of raising on failure.

        Returns:
            True if the handle closed cleanly
        """
        try:
            handle.close()
        except Exception as e:
            logger.warning(
                "Failed to close database connection",
                driver=handle.kind.value,
                pooled=handle.pooled,
                error=str(e),
            )
            return False
        logger.debug("Closed database connection", driver=handle.kind.value)
        return True

    def current(self) -> ConnectionHandle:
        """Return the current handle after checking it is usable.

        Raises:
            NoConnectionError: If no connection has been opened
            InvalidConnectionError: If the handle reports itself closed
        """
        with self._lock:
            handle = self._handle
        if handle is None:
            raise NoConnectionError()

        try:
            valid = handle.is_valid()
        except Exception as e:
            raise InvalidConnectionError(
                details={"driver": handle.kind.value, "error": str(e)}
            ) from e
        if not valid:
            raise InvalidConnectionError(details={"driver": handle.kind.value})
        return handle

    def has_connection(self) -> bool:
        """True when ``current()`` would succeed."""
        try:
            self.current()
        except (NoConnectionError, InvalidConnectionError):
            return False
        return True

    # ------------------------------------------------------------------
    # Statements
    # ------------------------------------------------------------------

    @contextmanager
    def _connection(self) -> Generator[tuple[DriverKind, Any], None, None]:
        """Yield the connection statements should run on.

        Inside ``transaction()`` this is the transaction's connection;
        otherwise a pooled handle checks one out for the call.
        """
        handle = self.current()
        active = getattr(self._thread_local, "transaction", None)
        if active is not None and active[0] is handle:
            yield handle.kind, active[1]
        else:
            with handle.checkout() as conn:
                yield handle.kind, conn

    def query(self, sql: str, params: Sequence[Any] = ()) -> QueryResult:
        """Run a query and return all rows.

        Args:
            sql: SQL with ``?`` placeholders
            params: Values bound to the placeholders, in order

        Returns:
            Query result with column names and rows in driver order
        """
        with self._connection() as (kind, conn):
            return dbi.fetch_all(kind, conn, sql, params)

    def execute(self, sql: str, params: Sequence[Any] = ()) -> int:
        """Run a statement that returns no rows.

        Args:
            sql: SQL with ``?`` placeholders
            params: Values bound to the placeholders, in order

        Returns:
            Rows affected as reported by the driver (-1 when unknown)
        """
        with self._connection() as (kind, conn):
            return dbi.execute(kind, conn, sql, params)

    @contextmanager
    def transaction_scope(self) -> Generator[Any, None, None]:
        """Run the block inside a database transaction.

        Commits when the block finishes, rolls back and re-raises when it
        raises (or when the commit fails). A pooled handle checks out one
        connection for the whole block and always returns it.

        Yields:
            The DB-API connection carrying the transaction

        Raises:
            DatabaseError: If a transaction is already open on this manager
        """
        handle = self.current()
        if getattr(self._thread_local, "transaction", None) is not None:
            raise DatabaseError(
                message="A transaction is already in progress",
                hint="Nested transactions are not supported; "
                "run the statements in the outer transaction",
            )

        if handle.pooled:
            logger.debug("Using a pooled connection for transaction")

        with handle.checkout() as conn:
            dbi.begin(handle.kind, conn)
            self._thread_local.transaction = (handle, conn)
            try:
                yield conn
                dbi.commit(handle.kind, conn)
            except BaseException:
                self._rollback_quietly(handle.kind, conn)
                raise
            finally:
                self._thread_local.transaction = None

    def transaction(self, body: Callable[[], T]) -> T:
        """Call ``body`` inside a transaction and return its result.

        Args:
            body: Zero-argument callable; statements it runs through this
                manager join the transaction

        Returns:
            Whatever ``body`` returned, after a successful commit
        """
        with self.transaction_scope():
            return body()

    @staticmethod
    def _rollback_quietly(kind: DriverKind, conn: Any) -> None:
        try:
            dbi.rollback(kind, conn)
        except Exception as e:
            logger.warning("Rollback failed", driver=kind.value, error=str(e))
            return
        logger.info("Transaction rolled back", driver=kind.value)

    def __enter__(self) -> ConnectionManager:
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.close()


# Singleton instance for the process
_manager_instance: ConnectionManager | None = None
_manager_lock = threading.Lock()


def get_connection_manager(force_new: bool = False) -> ConnectionManager:
    """Get or create the process-wide connection manager.

    Args:
        force_new: Close the existing manager and create a new one

    Returns:
        Connection manager instance
    """
    global _manager_instance

    if force_new or _manager_instance is None:
        with _manager_lock:
            if force_new or _manager_instance is None:
                if _manager_instance is not None:
                    _manager_instance.close()
                _manager_instance = ConnectionManager()

    return _manager_instance


def close_connection_manager() -> None:
    """Close the process-wide manager and forget it."""
    global _manager_instance

    with _manager_lock:
        if _manager_instance is not None:
            _manager_instance.close()
            _manager_instance = None


atexit.register(close_connection_manager)
