"""
PostgreSQL client with connection pooling and tenant context.

Uses psycopg2 with ThreadedConnectionPool. The pool is created lazily so the
service can start without a database; every query then fails with
DatabaseUnavailableError, which callers surface as a disabled state.

Each connection checkout sets app.current_organization_id and
app.current_member_id from the identity contextvar, so row level security
policies (if installed) see the same tenant the queries filter on.
"""

import logging
import threading
from contextlib import contextmanager
from typing import Any, Dict, List, Tuple
from uuid import UUID

import psycopg2
import psycopg2.extras
import psycopg2.pool

from utils.identity_context import get_current_identity_or_none

logger = logging.getLogger(__name__)


class DatabaseUnavailableError(Exception):
    """Database is not configured or cannot be reached."""

    def __init__(self, message: str = "Database is not configured. Set DATABASE_URL to enable notes."):
        super().__init__(message)


class PostgresClient:
    """
    PostgreSQL client with tenant context from contextvar.

    Usage:
        db = PostgresClient(database_url)

        with identity_context(identity):
            rows = db.execute("SELECT * FROM notes WHERE organization_id = %s", (org_id,))

        # Not configured: every call raises DatabaseUnavailableError
        db = PostgresClient(None)
        db.is_configured  # False
    """

    # Class-level connection pools shared across instances
    _connection_pools: Dict[str, psycopg2.pool.ThreadedConnectionPool] = {}
    _pools_lock = threading.RLock()

    def __init__(self, database_url: str | None, minconn: int = 1, maxconn: int = 10):
        self._database_url = database_url
        self._minconn = minconn
        self._maxconn = maxconn

    @property
    def is_configured(self) -> bool:
        return bool(self._database_url)

    def _ensure_connection_pool(self) -> psycopg2.pool.ThreadedConnectionPool:
        """Create connection pool if it doesn't exist."""
        if not self._database_url:
            raise DatabaseUnavailableError()

        with self._pools_lock:
            pool = self._connection_pools.get(self._database_url)
            if pool is None:
                try:
                    pool = psycopg2.pool.ThreadedConnectionPool(
                        minconn=self._minconn,
                        maxconn=self._maxconn,
                        dsn=self._database_url,
                        connect_timeout=10,
                    )
                except psycopg2.OperationalError as e:
                    logger.error(f"Could not connect to database: {e}")
                    raise DatabaseUnavailableError("Database is unreachable")

                self._connection_pools[self._database_url] = pool
                logger.info("Connection pool created")
            return pool

    @contextmanager
    def get_connection(self):
        """Get connection with tenant context from contextvar."""
        pool = self._ensure_connection_pool()
        conn = None

        try:
            try:
                conn = pool.getconn()
            except psycopg2.OperationalError as e:
                logger.error(f"Could not get connection from pool: {e}")
                raise DatabaseUnavailableError("Database is unreachable")

            identity = get_current_identity_or_none()

            with conn.cursor() as cur:
                if identity is not None:
                    cur.execute("SET app.current_organization_id = %s", (identity.organization_id,))
                    cur.execute("SET app.current_member_id = %s", (identity.member_id,))
                else:
                    cur.execute("SET app.current_organization_id = ''")
                    cur.execute("SET app.current_member_id = ''")

            try:
                yield conn
            except Exception:
                # Never hand an aborted transaction back to the pool
                conn.rollback()
                raise

        finally:
            if conn:
                pool.putconn(conn)

    def _convert_params(self, params: Tuple | Dict | None) -> Tuple | Dict | None:
        """Convert UUID objects to strings."""
        if params is None:
            return None

        def convert(value: Any) -> Any:
            if isinstance(value, UUID):
                return str(value)
            if isinstance(value, list):
                return [convert(v) for v in value]
            if isinstance(value, tuple):
                return tuple(convert(v) for v in value)
            if isinstance(value, dict):
                return {k: convert(v) for k, v in value.items()}
            return value

        return convert(params)

    def execute(self, query: str, params: Tuple | Dict | None = None) -> List[Dict[str, Any]]:
        """Execute query, return list of row dicts. Empty list if no results."""
        params = self._convert_params(params)
        with self.get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                cur.execute(query, params)
                if cur.description:
                    rows = [dict(row) for row in cur.fetchall()]
                    conn.commit()
                    return rows
                conn.commit()
                return []

    def execute_single(self, query: str, params: Tuple | Dict | None = None) -> Dict[str, Any] | None:
        """Execute query, return first row or None."""
        results = self.execute(query, params)
        return results[0] if results else None

    def execute_returning(self, query: str, params: Tuple | Dict | None = None) -> List[Dict[str, Any]]:
        """Execute INSERT/UPDATE/DELETE with RETURNING, return results."""
        params = self._convert_params(params)
        with self.get_connection() as conn:
            with conn.cursor(cursor_factory=psycopg2.extras.RealDictCursor) as cur:
                cur.execute(query, params)
                conn.commit()
                return [dict(row) for row in cur.fetchall()]

    def close(self) -> None:
        """Close connection pool."""
        with self._pools_lock:
            if self._database_url in self._connection_pools:
                self._connection_pools[self._database_url].closeall()
                del self._connection_pools[self._database_url]

    @classmethod
    def close_all_pools(cls) -> None:
        """Close all connection pools."""
        with cls._pools_lock:
            for pool in cls._connection_pools.values():
                pool.closeall()
            cls._connection_pools.clear()
