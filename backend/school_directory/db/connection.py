"""Process-wide database connection lifecycle.

The directory service talks to a single relational store through one
shared psycopg2 connection. ConnectionManager opens it lazily on first
use, hands the same connection to every later caller, and replaces it
when the server has closed it. Creation is guarded by a lock so that
concurrent first requests never open duplicate connections.

Example:
    Run a statement inside a transaction:
        >>> from school_directory.db.connection import get_connection_manager
        >>> manager = get_connection_manager()
        >>> with manager.transaction() as cur:
        ...     cur.execute("SELECT 1")
"""

from __future__ import annotations

import contextlib
import logging
import threading
from typing import TYPE_CHECKING, Any

import psycopg2
import psycopg2.extensions

from school_directory.core import config, errors

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

logger = logging.getLogger(__name__)


class ConnectionManager:
    """Owns the single cached connection used by the process.

    The manager performs no retries: a failed handshake is reported to
    the caller as ``errors.ConnectionError`` and the next call starts a
    fresh attempt.

    Args:
        settings: Application settings with the connection options.
        connect: Factory used to open connections. Defaults to
            ``psycopg2.connect``; tests pass a fake.
    """

    def __init__(
        self,
        settings: config.Settings,
        connect: Callable[..., Any] | None = None,
    ) -> None:
        self.settings = settings
        self._connect = connect or psycopg2.connect
        self._connection: psycopg2.extensions.connection | None = None
        self._lock = threading.RLock()

    @property
    def is_connected(self) -> bool:
        conn = self._connection
        return conn is not None and not conn.closed

    def acquire(self) -> psycopg2.extensions.connection:
        """Return the live connection, opening it on first use.

        Returns:
            The cached psycopg2 connection.

        Raises:
            errors.ConnectionError: If the handshake with the server fails.
        """
        conn = self._connection
        if conn is not None and not conn.closed:
            return conn

        with self._lock:
            # Another thread may have connected while we waited.
            conn = self._connection
            if conn is not None and not conn.closed:
                return conn
            if conn is not None:
                logger.warning(
                    "Cached database connection was closed; reconnecting"
                )

            kwargs = self.settings.connection_kwargs()
            try:
                conn = self._connect(**kwargs)
            except psycopg2.Error as exc:
                logger.error(
                    "Could not connect to %s:%s/%s",
                    kwargs["host"],
                    kwargs["port"],
                    kwargs["dbname"],
                    exc_info=True,
                )
                raise errors.ConnectionError(
                    "Database connection error",
                ) from exc

            logger.info(
                "Opened database connection to %s:%s/%s",
                kwargs["host"],
                kwargs["port"],
                kwargs["dbname"],
            )
            self._connection = conn
            return conn

    @contextlib.contextmanager
    def transaction(self) -> Iterator[psycopg2.extensions.cursor]:
        """Yield a cursor inside a transaction on the shared connection.

        Commits when the block exits normally and rolls back when it
        raises. The manager lock is held for the whole block, so
        transactions on the shared connection never interleave.

        Raises:
            errors.ConnectionError: If no connection can be opened.
        """
        with self._lock:
            conn = self.acquire()
            try:
                with conn.cursor() as cur:
                    yield cur
                conn.commit()
            except BaseException:
                if not conn.closed:
                    conn.rollback()
                raise

    def close(self) -> None:
        """Close the cached connection, if any."""
        with self._lock:
            conn, self._connection = self._connection, None
            if conn is not None and not conn.closed:
                conn.close()
                logger.info("Closed database connection")


_manager: ConnectionManager | None = None
_manager_lock = threading.Lock()


def get_connection_manager() -> ConnectionManager:
    """Get the process-wide connection manager, creating it once.

    Returns:
        The ConnectionManager bound to the cached application settings.
    """
    global _manager
    with _manager_lock:
        if _manager is None:
            _manager = ConnectionManager(config.get_settings())
        return _manager


def reset_connection_manager() -> None:
    """Close and forget the process-wide manager."""
    global _manager
    with _manager_lock:
        manager, _manager = _manager, None
    if manager is not None:
        manager.close()
