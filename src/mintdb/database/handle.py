"""Connection handles: either one raw connection or a pool of them."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Generator
from contextlib import contextmanager
from typing import Any

from mintdb.database import dbi
from mintdb.database.drivers import DriverKind
from mintdb.database.pool import ConnectionPool


class ConnectionHandle(ABC):
    """What the connection manager holds as its current connection."""

    pooled: bool = False

    def __init__(self, kind: DriverKind) -> None:
        self.kind = kind

    @abstractmethod
    def is_valid(self) -> bool:
        """Whether the handle can still serve statements."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying connection or pool."""

    @abstractmethod
    @contextmanager
    def checkout(self) -> Generator[Any, None, None]:
        """Yield a DB-API connection for exclusive use within the block."""


class RawConnectionHandle(ConnectionHandle):
    """A single DB-API connection."""

    def __init__(self, kind: DriverKind, connection: Any) -> None:
        super().__init__(kind)
        self.connection = connection

    def is_valid(self) -> bool:
        return dbi.is_valid(self.kind, self.connection)

    def close(self) -> None:
        """Disconnect, unless the connection already reports itself closed."""
        if self.is_valid():
            dbi.disconnect(self.connection)

    @contextmanager
    def checkout(self) -> Generator[Any, None, None]:
        yield self.connection

    def __repr__(self) -> str:
        return f"RawConnectionHandle(kind={self.kind.value!r})"


class PooledConnectionHandle(ConnectionHandle):
    """A connection pool; every checkout gets a dedicated connection."""

    pooled = True

    def __init__(self, kind: DriverKind, pool: ConnectionPool) -> None:
        super().__init__(kind)
        self.pool = pool

    def is_valid(self) -> bool:
        return not self.pool.closed

    def close(self) -> None:
        self.pool.close()

    @contextmanager
    def checkout(self) -> Generator[Any, None, None]:
        with self.pool.connection() as conn:
            yield conn

    def __repr__(self) -> str:
        return f"PooledConnectionHandle(kind={self.kind.value!r})"
