"""SQLite connection helpers for the record store."""

from __future__ import annotations

import sqlite3


def create_sqlite_connection(path: str, *, timeout_seconds: float = 5.0) -> sqlite3.Connection:
    """Create a SQLite connection with foreign keys on and autocommit off.

    ``isolation_level=None`` leaves transaction control to explicit
    ``BEGIN``/``commit`` calls in the store.
    """
    conn = sqlite3.connect(path, timeout=timeout_seconds, isolation_level=None)
    conn.execute("PRAGMA foreign_keys=ON")
    return conn
