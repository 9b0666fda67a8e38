"""Schema bootstrap for room and player tables."""

from __future__ import annotations

from revelax.core.config import Settings
from revelax.core.db import create_sqlite_connection


CREATE_ROOMS_SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS rooms (
    id INTEGER PRIMARY KEY,
    code TEXT NOT NULL UNIQUE,
    name TEXT NOT NULL,
    admin_id TEXT NULL,
    state TEXT NOT NULL DEFAULT 'waiting'
        CHECK (state IN ('waiting', 'active', 'completed')),
    created_at TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS players (
    id TEXT NOT NULL,
    room_id INTEGER NOT NULL,
    username TEXT NOT NULL,
    is_connected INTEGER NOT NULL DEFAULT 1,
    joined_at TEXT NOT NULL,
    PRIMARY KEY (room_id, id),
    FOREIGN KEY (room_id) REFERENCES rooms(id) ON DELETE CASCADE
);

CREATE INDEX IF NOT EXISTS idx_players_room_connected ON players(room_id, is_connected);
"""


def init_rooms_schema(settings: Settings) -> None:
    """Ensure room/player tables and indexes exist."""
    conn = create_sqlite_connection(settings.revelax_sqlite_path)
    try:
        conn.executescript(CREATE_ROOMS_SCHEMA_SQL)
    finally:
        conn.close()
