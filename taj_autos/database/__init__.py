# database/__init__.py
from __future__ import annotations

from contextlib import contextmanager
from pathlib import Path
import logging
import sqlite3

from ..config import DB_PATH
from ..constants import SCHEMA_VERSION, TABLE_SCHEMA_VERSION
from ..errors import StorageError
from . import schema as schema_module

_log = logging.getLogger(__name__)

MEMORY = ":memory:"


def _ensure_version_table(conn: sqlite3.Connection) -> None:
    """
    Stamp a fresh file with SCHEMA_VERSION; refuse a file written by a newer
    release, whose tables this code may not understand.
    """
    conn.execute(f"""
        CREATE TABLE IF NOT EXISTS {TABLE_SCHEMA_VERSION}(
            id INTEGER PRIMARY KEY CHECK (id=1),
            version TEXT NOT NULL
        );
    """)
    stored = schema_version(conn)
    if stored is None:
        conn.execute(
            f"INSERT INTO {TABLE_SCHEMA_VERSION}(id, version) VALUES (1, ?);",
            (SCHEMA_VERSION,),
        )
    elif int(stored) > int(SCHEMA_VERSION):
        raise StorageError(
            f"Database schema version {stored} is newer than this program supports "
            f"({SCHEMA_VERSION})."
        )


def schema_version(conn: sqlite3.Connection) -> str | None:
    row = conn.execute(f"SELECT version FROM {TABLE_SCHEMA_VERSION} WHERE id=1;").fetchone()
    return row[0] if row else None


def get_connection(db_path: str | Path | None = None) -> sqlite3.Connection:
    """
    Open the shop database and return the handle every repository/service shares.

    Returns a sqlite3.Connection with:
      - autocommit mode (isolation_level=None); writes go through transaction()
      - foreign_keys ON
      - row_factory = sqlite3.Row (so rows behave like dicts and tuples)
    Ensures schema & version row are applied idempotently; a file stamped
    with a newer schema version raises StorageError.

    Pass ":memory:" for a throwaway database.
    """
    target = str(db_path) if db_path is not None else str(DB_PATH)
    if target != MEMORY:
        Path(target).parent.mkdir(parents=True, exist_ok=True)

    try:
        conn = sqlite3.connect(target, isolation_level=None)
    except sqlite3.Error as e:
        raise StorageError(f"Could not open database at {target}.") from e
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON;")
    if target != MEMORY:
        conn.execute("PRAGMA journal_mode = WAL;")

    try:
        schema_module.init_schema(conn)
        _ensure_version_table(conn)
    except Exception:
        conn.close()
        raise

    _log.debug("opened database %s", target)
    return conn


@contextmanager
def transaction(conn: sqlite3.Connection):
    """
    Start an IMMEDIATE transaction, commit on success, rollback on error.

    Nested use joins the outer transaction, so a service can wrap several
    repository writes into one all-or-nothing unit. sqlite3 errors surface
    as StorageError; everything else propagates unchanged after rollback.
    """
    if conn.in_transaction:
        yield conn
        return

    conn.execute("BEGIN IMMEDIATE")
    try:
        yield conn
        conn.execute("COMMIT")
    except sqlite3.Error as e:
        _rollback(conn)
        _log.error("storage failure, transaction rolled back", exc_info=True)
        raise StorageError("Could not save changes. Nothing was recorded.") from e
    except BaseException:
        _rollback(conn)
        raise


def _rollback(conn: sqlite3.Connection) -> None:
    # sqlite may already have rolled back on some errors (e.g. SQLITE_FULL)
    if conn.in_transaction:
        conn.execute("ROLLBACK")


__all__ = [
    "get_connection",
    "transaction",
    "MEMORY",
    "schema_version",
]
