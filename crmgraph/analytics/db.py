"""
Database Connection Manager for the Graph Engine
================================================

Provides the storage handle the graph engine reads from. The handle is
explicitly owned and injected: routes and tool executors receive a
``GraphDB`` instance and pass it to the snapshot loader. There is no
module-level pool, so unit tests can point the engine at a throwaway
SQLite file.

Design Goals
------------
    1. **Injected handle** - one GraphDB per process, passed to callers
    2. **Connection per call** - each request opens its own connection
    3. **WAL mode** - analytic readers never block CRUD writers
    4. **Typed failures** - sqlite errors surface as GraphDBError subclasses

Schema
------
The CRUD layer owns these tables; ``init_schema()`` creates them for
development databases and tests:

    - people:             id, user_id, name
    - relationships:      id, user_id, person_a_id, person_b_id,
                          relationship_type, strength (1-5), context
    - events:             id, user_id, title, date
    - event_participants: event_id, person_id
    - favors:             id, user_id, giver_id, receiver_id, date

Usage
-----
    from crmgraph.analytics.db import GraphDB

    db = GraphDB("/var/lib/crmgraph/crm.db")

    with db.connection() as conn:
        rows = conn.execute("SELECT id, name FROM people").fetchall()
"""

import logging
import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, List, Tuple, Union

logger = logging.getLogger("Graph.DB")

SQLITE_PRAGMAS = {
    "journal_mode": "WAL",          # Write-Ahead Logging for concurrency
    "synchronous": "NORMAL",
    "temp_store": "MEMORY",
    "busy_timeout": 30000,          # 30s timeout for locked DB
}

SCHEMA = """
CREATE TABLE IF NOT EXISTS people (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    name TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_people_user ON people(user_id);

CREATE TABLE IF NOT EXISTS relationships (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    person_a_id TEXT NOT NULL REFERENCES people(id) ON DELETE CASCADE,
    person_b_id TEXT NOT NULL REFERENCES people(id) ON DELETE CASCADE,
    relationship_type TEXT NOT NULL DEFAULT 'other',
    strength INTEGER NOT NULL CHECK (strength BETWEEN 1 AND 5),
    context TEXT DEFAULT '',
    CHECK (person_a_id <> person_b_id)
);

CREATE UNIQUE INDEX IF NOT EXISTS idx_relationships_pair ON relationships(
    user_id,
    MIN(person_a_id, person_b_id),
    MAX(person_a_id, person_b_id)
);

CREATE TABLE IF NOT EXISTS events (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    title TEXT DEFAULT '',
    date TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS event_participants (
    event_id INTEGER NOT NULL REFERENCES events(id) ON DELETE CASCADE,
    person_id TEXT NOT NULL REFERENCES people(id) ON DELETE CASCADE,
    PRIMARY KEY (event_id, person_id)
);

CREATE TABLE IF NOT EXISTS favors (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    user_id TEXT NOT NULL,
    giver_id TEXT NOT NULL REFERENCES people(id) ON DELETE CASCADE,
    receiver_id TEXT NOT NULL REFERENCES people(id) ON DELETE CASCADE,
    description TEXT DEFAULT '',
    date TEXT NOT NULL
);
"""


class GraphDBError(Exception):
    """Base exception for graph storage errors."""
    pass


class ConnectionError(GraphDBError):
    """Failed to establish database connection."""
    pass


class QueryError(GraphDBError):
    """Database query failed."""
    pass


class GraphDB:
    """
    Storage handle for the graph engine.

    Attributes:
        db_path: Path to the SQLite database file

    Example:
        >>> db = GraphDB("/tmp/crm.db")
        >>> db.init_schema()
        >>> with db.connection() as conn:
        ...     count = conn.execute("SELECT COUNT(*) FROM people").fetchone()[0]
    """

    def __init__(self, db_path: Union[str, Path]):
        """
        Initialize the storage handle.

        Args:
            db_path: Path to SQLite database file. Parent directories are
                     created if needed.
        """
        self.db_path = Path(db_path)
        self.db_path.parent.mkdir(parents=True, exist_ok=True)

        logger.info(f"GraphDB initialized: {self.db_path}")

    def _configure_connection(self, conn: sqlite3.Connection) -> None:
        """Apply standard pragmas to a new connection."""
        for pragma, value in SQLITE_PRAGMAS.items():
            try:
                conn.execute(f"PRAGMA {pragma} = {value}")
            except sqlite3.Error as e:
                logger.warning(f"Failed to set PRAGMA {pragma}: {e}")

        conn.execute("PRAGMA foreign_keys = ON")
        conn.row_factory = sqlite3.Row

    def get_connection(self) -> sqlite3.Connection:
        """
        Open a configured connection for the calling thread.

        Caller is responsible for closing it; prefer ``connection()``.

        Raises:
            ConnectionError: If connection cannot be established
        """
        try:
            conn = sqlite3.connect(
                str(self.db_path),
                timeout=30.0,
                check_same_thread=False,
            )
            self._configure_connection(conn)
            return conn

        except sqlite3.Error as e:
            logger.error(f"Failed to connect to database: {e}")
            raise ConnectionError(f"Cannot connect to {self.db_path}: {e}") from e

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        """
        Context manager for database connections.

        Commits on success, rolls back on error, always closes.
        """
        conn = self.get_connection()
        try:
            yield conn
            conn.commit()
        except Exception:
            conn.rollback()
            raise
        finally:
            conn.close()

    def init_schema(self) -> None:
        """Create the CRM tables if they do not exist."""
        try:
            with self.connection() as conn:
                conn.executescript(SCHEMA)
            logger.info(f"Schema ready: {self.db_path}")
        except sqlite3.Error as e:
            logger.error(f"Schema creation failed: {e}")
            raise QueryError(f"Schema creation failed: {e}") from e

    @property
    def path(self) -> str:
        """Get database path as string."""
        return str(self.db_path)


# Type alias for functions that accept either connection type
DBConnection = Union[sqlite3.Connection, 'GraphDB']


@contextmanager
def ensure_connection(conn_or_db: DBConnection) -> Iterator[sqlite3.Connection]:
    """
    Context manager that normalizes a connection argument.

    Loaders accept either a raw sqlite3.Connection (caller manages it) or
    a GraphDB instance (a connection is opened and closed here).
    """
    if isinstance(conn_or_db, GraphDB):
        with conn_or_db.connection() as conn:
            yield conn
    else:
        yield conn_or_db


def run_query(
    conn_or_db: DBConnection,
    query: str,
    params: Tuple = (),
) -> List[sqlite3.Row]:
    """
    Run a read query through either connection type.

    Raises:
        QueryError: If the driver reports an error
    """
    try:
        with ensure_connection(conn_or_db) as conn:
            return conn.execute(query, params).fetchall()
    except sqlite3.Error as e:
        logger.error(f"Query failed: {e}\nQuery: {query[:200]}")
        raise QueryError(f"Query execution failed: {e}") from e
