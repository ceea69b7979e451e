"""
Shared variable store backed by SQLite.

Other processes on the device read the latest sensor values from this
store by name (e.g. ``/CONSUMPTION/L1/V``). The daemon resolves each name
to a handle once at startup and then writes values through the handle.
Every write is a single-row UPDATE committed on its own, so readers never
see a half-written variable.

Operations:
- declare(name): INSERT the variable if it does not exist yet.
- find_by_name(name): return the handle (row id) or ``None``.
- set(handle, value): UPDATE one variable's value and timestamp.
- get(name): read the current value of a variable.
- close(): close the underlying database connection.

CHANGELOG:
- 2026-03-03: Initial creation (STORY-106)
- 2026-03-09: Bind values as floats; oversized numbers raise StoreError (STORY-111)

TODO:
- None
"""

import sqlite3
from pathlib import Path

from neurio.src.errors import StoreError

_CREATE_TABLE_SQL = """\
CREATE TABLE IF NOT EXISTS vars (
    handle INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL UNIQUE,
    value REAL,
    updated_at TEXT
);
"""

_DECLARE_SQL = "INSERT OR IGNORE INTO vars (name) VALUES (:name);"

_FIND_SQL = "SELECT handle FROM vars WHERE name = :name;"

_SET_SQL = """\
UPDATE vars
SET value = :value, updated_at = datetime('now')
WHERE handle = :handle;
"""

_GET_SQL = "SELECT value FROM vars WHERE name = :name;"


class VarStore:
    """Name-addressed numeric variables persisted in a SQLite file.

    Uses WAL journal mode so reader processes are not blocked while the
    daemon writes.

    Args:
        path: Filesystem path for the SQLite database file.
              Accepts ``str`` or ``pathlib.Path``.

    Raises:
        StoreError: If the database cannot be opened or initialised.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        try:
            self._conn = sqlite3.connect(str(self._path))
            self._conn.execute("PRAGMA journal_mode=WAL;")
            self._conn.execute(_CREATE_TABLE_SQL)
            self._conn.commit()
        except sqlite3.Error as exc:
            raise StoreError(
                f"Cannot open variable store at {self._path}: {exc}"
            ) from exc

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def declare(self, name: str) -> None:
        """Create variable *name* with no value if it does not exist."""
        self._execute(_DECLARE_SQL, {"name": name})
        self._conn.commit()

    def find_by_name(self, name: str) -> int | None:
        """Look up the handle of variable *name*.

        Returns:
            The integer handle, or ``None`` if no such variable exists.
        """
        row = self._execute(_FIND_SQL, {"name": name}).fetchone()
        return None if row is None else row[0]

    def set(self, handle: int, value: float) -> None:
        """Write *value* to the variable identified by *handle*.

        Raises:
            StoreError: If *handle* is unknown or the write fails.
        """
        try:
            # The column is REAL; bind a float so huge counters never hit
            # the 64-bit INTEGER binding path.
            value = float(value)
        except (OverflowError, TypeError, ValueError) as exc:
            raise StoreError(f"Cannot store {value!r} as a number: {exc}") from exc

        cursor = self._execute(_SET_SQL, {"handle": handle, "value": value})
        if cursor.rowcount != 1:
            self._conn.rollback()
            raise StoreError(f"Unknown variable handle {handle}")
        self._conn.commit()

    def get(self, name: str) -> float | None:
        """Return the current value of variable *name*.

        ``None`` is returned both for unknown names and for variables that
        have been declared but never written.
        """
        row = self._execute(_GET_SQL, {"name": name}).fetchone()
        return None if row is None else row[0]

    def close(self) -> None:
        """Close the underlying SQLite connection."""
        self._conn.close()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _execute(self, sql: str, params: dict) -> sqlite3.Cursor:
        try:
            return self._conn.execute(sql, params)
        except (sqlite3.Error, OverflowError, ValueError) as exc:
            raise StoreError(f"Variable store error: {exc}") from exc
