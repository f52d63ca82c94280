"""Thread-safe connection pool for DB-API connections.

The pool hands out dedicated connections (``acquire``/``release`` or the
``connection()`` context manager), checks their health on the way in and out,
and runs a background thread that evicts idle or broken connections and keeps
the pool at its minimum size.
"""

from __future__ import annotations

import threading
import time
from collections.abc import Callable, Generator
from contextlib import contextmanager
from queue import Empty, Full, LifoQueue
from typing import Any

from mintdb.config import get_logger
from mintdb.exceptions import DatabaseError

logger = get_logger(__name__)


class ConnectionPool:
    """Thread-safe pool of connections produced by a factory."""

    def __init__(
        self,
        factory: Callable[[], Any],
        validator: Callable[[Any], bool],
        min_size: int = 1,
        max_size: int = 10,
        max_idle_time: float = 300,  # 5 minutes
        timeout: float = 30.0,
        health_check_interval: float = 60.0,
        name: str = "mintdb",
    ):
        """Initialize the connection pool.

        Args:
            factory: Callable opening a new connection
            validator: Callable returning True while a connection is usable
            min_size: Minimum number of connections to maintain
            max_size: Maximum number of connections in the pool
            max_idle_time: Maximum idle time before closing a connection (seconds)
            timeout: Default time to wait in ``acquire`` (seconds)
            health_check_interval: Seconds between background health checks
            name: Label used in log events and thread names

        Raises:
            ValueError: If the size limits are inconsistent
        """
        if max_size < 1 or min_size < 0 or min_size > max_size:
            raise ValueError(
                f"Invalid pool size: min_size={min_size}, max_size={max_size}"
            )

        self.factory = factory
        self.validator = validator
        self.min_size = min_size
        self.max_size = max_size
        self.max_idle_time = max_idle_time
        self.timeout = timeout
        self.name = name

        self._pool: LifoQueue[tuple[Any, float]] = LifoQueue(maxsize=max_size)
        self._active_connections = 0
        self._total_connections = 0
        self._close_failures = 0
        self._lock = threading.RLock()
        self._closed = False

        self._health_check_interval = health_check_interval
        self._health_check_thread: threading.Thread | None = None
        self._stop_health_check = threading.Event()

        self._initialize_pool()

    @property
    def closed(self) -> bool:
        """True once ``close()`` has been called."""
        return self._closed

    def _initialize_pool(self) -> None:
        """Open the minimum number of connections and start the health thread.

        The first connection is opened eagerly and its failure is raised, so a
        bad configuration is reported when the pool is created.
        """
        with self._lock:
            try:
                for _ in range(self.min_size):
                    conn = self.factory()
                    self._pool.put((conn, time.time()))
                    self._total_connections += 1
            except Exception:
                self._closed = True
                while not self._pool.empty():
                    self._discard(self._pool.get_nowait()[0])
                raise

            self._health_check_thread = threading.Thread(
                target=self._health_check_loop,
                name=f"{self.name}-pool-health",
                daemon=True,
            )
            self._health_check_thread.start()

    def acquire(self, timeout: float | None = None) -> Any:
        """Acquire a connection from the pool.

        Args:
            timeout: Maximum time to wait for a connection (None = pool default)

        Returns:
            Database connection

        Raises:
            DatabaseError: If the pool is closed or no connection frees up in time
        """
        if self._closed:
            raise DatabaseError(
                message="Connection pool is closed",
                hint="The pool may have been shut down",
            )

        timeout = timeout if timeout is not None else self.timeout
        deadline = time.time() + timeout

        while True:
            with self._lock:
                if self._closed:
                    raise DatabaseError(
                        message="Connection pool is closed",
                        hint="The pool may have been shut down",
                    )

                try:
                    conn, _ = self._pool.get_nowait()
                    if self._is_connection_healthy(conn):
                        self._active_connections += 1
                        return conn
                    self._discard(conn)
                except Empty:
                    pass

                if self._total_connections < self.max_size:
                    conn = self.factory()
                    self._total_connections += 1
                    self._active_connections += 1
                    return conn

            if time.time() > deadline:
                raise DatabaseError(
                    message="Timeout waiting for database connection",
                    hint=f"All {self.max_size} connections are in use",
                    details={
                        "active": self._active_connections,
                        "total": self._total_connections,
                    },
                )

            time.sleep(0.01)

    def release(self, conn: Any) -> None:
        """Release a connection back to the pool.

        Args:
            conn: Connection to release
        """
        with self._lock:
            self._active_connections = max(0, self._active_connections - 1)

            if self._closed or not self._is_connection_healthy(conn):
                self._discard(conn)
                return

            try:
                self._pool.put_nowait((conn, time.time()))
            except Full:
                self._discard(conn)

    @contextmanager
    def connection(self, timeout: float | None = None) -> Generator[Any, None, None]:
        """Check out a connection for the duration of the block."""
        conn = self.acquire(timeout)
        try:
            yield conn
        finally:
            self.release(conn)

    def _is_connection_healthy(self, conn: Any) -> bool:
        try:
            return bool(self.validator(conn))
        except Exception:
            return False

    def _discard(self, conn: Any) -> None:
        """Stop counting a connection and close it.

        A connection that fails to close is gone all the same, so its slot is
        freed either way; failures only show up in the stats.
        """
        self._total_connections = max(0, self._total_connections - 1)
        try:
            conn.close()
        except Exception as e:
            self._close_failures += 1
            logger.warning(
                "Failed to close pooled connection", pool=self.name, error=str(e)
            )

    def _health_check_loop(self) -> None:
        """Background thread that performs periodic health checks."""
        while not self._stop_health_check.wait(self._health_check_interval):
            if self._closed:
                break
            self.run_health_check()

    def run_health_check(self) -> None:
        """Evict idle or unhealthy idle connections and refill to ``min_size``."""
        with self._lock:
            if self._closed:
                return

            current_time = time.time()
            healthy_connections = []

            while True:
                try:
                    conn, last_used = self._pool.get_nowait()
                except Empty:
                    break
                if current_time - last_used > self.max_idle_time:
                    self._discard(conn)
                    logger.debug("Closed idle connection", pool=self.name)
                elif self._is_connection_healthy(conn):
                    healthy_connections.append((conn, last_used))
                else:
                    self._discard(conn)
                    logger.debug("Closed unhealthy connection", pool=self.name)

            for entry in healthy_connections:
                try:
                    self._pool.put_nowait(entry)
                except Full:
                    self._discard(entry[0])

            while self._total_connections < self.min_size:
                try:
                    conn = self.factory()
                except Exception as e:
                    logger.error(
                        "Failed to create connection during health check",
                        pool=self.name,
                        error=str(e),
                    )
                    break
                self._pool.put((conn, current_time))
                self._total_connections += 1

    def get_stats(self) -> dict[str, Any]:
        """Get pool statistics.

        Returns:
            Dictionary with pool statistics
        """
        with self._lock:
            return {
                "total_connections": self._total_connections,
                "active_connections": self._active_connections,
                "idle_connections": self._pool.qsize(),
                "min_size": self.min_size,
                "max_size": self.max_size,
                "close_failures": self._close_failures,
                "closed": self._closed,
            }

    def close(self, force: bool = False) -> None:
        """Close all idle connections and refuse further checkouts.

        Checked-out connections are closed when they are released.

        Args:
            force: Reset the counters even if connections are still checked out
        """
        with self._lock:
            if self._closed:
                return

            self._closed = True
            self._stop_health_check.set()

            while True:
                try:
                    conn, _ = self._pool.get_nowait()
                except Empty:
                    break
                self._discard(conn)

            if force and self._active_connections > 0:
                logger.warning(
                    "Forcefully closing connection pool with active connections",
                    pool=self.name,
                    active=self._active_connections,
                )
                self._active_connections = 0
                self._total_connections = 0

        # Join outside the lock; the health thread may be waiting on it
        thread = self._health_check_thread
        if thread and thread.is_alive() and thread is not threading.current_thread():
            thread.join(timeout=0.5)
            if thread.is_alive():
                logger.warning("Health check thread did not stop within timeout")

        logger.info("Connection pool closed", pool=self.name)
