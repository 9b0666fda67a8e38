"""Record-store capability for rooms and players, with a SQLite adapter."""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime
from datetime import timezone
import logging
import sqlite3
from typing import Protocol

from revelax.core.db import create_sqlite_connection
from revelax.rooms.errors import PlayerNotFoundError
from revelax.rooms.errors import RoomFullError
from revelax.rooms.errors import StoreUnavailableError
from revelax.rooms.models import Player
from revelax.rooms.models import Room

logger = logging.getLogger(__name__)

_ROOM_COLUMNS = "id, code, name, admin_id, state, created_at"
_PLAYER_COLUMNS = "id, room_id, username, is_connected, joined_at"


class RecordStore(Protocol):
    """Durable room/player records consumed by the coordinator and REST routes."""

    def find_room_by_code(self, code: str) -> Room | None: ...

    def create_room(self, *, code: str, name: str, admin_id: str) -> Room: ...

    def delete_room(self, room_id: int) -> None: ...

    def update_room_admin(self, room_id: int, player_id: str) -> None: ...

    def list_connected_players(self, room_id: int) -> list[Player]: ...

    def list_players(self, room_id: int) -> list[Player]: ...

    def count_players(self, room_id: int) -> int: ...

    def add_player(self, *, room_id: int, player_id: str, username: str, max_players: int) -> Player: ...

    def set_player_connected(self, *, room_id: int, player_id: str, connected: bool) -> None: ...


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")


def _room_from_row(row: tuple) -> Room:
    room_id, code, name, admin_id, state, created_at = row
    return Room(
        id=int(room_id),
        code=str(code),
        name=str(name),
        admin_id=None if admin_id is None else str(admin_id),
        state=state,
        created_at=str(created_at),
    )


def _count_players(conn: sqlite3.Connection, room_id: int) -> int:
    (player_count,) = conn.execute(
        "SELECT COUNT(*) FROM players WHERE room_id = ?",
        (room_id,),
    ).fetchone()
    return int(player_count)


def _player_from_row(row: tuple) -> Player:
    player_id, room_id, username, is_connected, joined_at = row
    return Player(
        id=str(player_id),
        room_id=int(room_id),
        username=str(username),
        is_connected=bool(is_connected),
        joined_at=str(joined_at),
    )


class SqliteRecordStore:
    """SQLite-backed record store; one connection per call."""

    def __init__(self, path: str, *, timeout_seconds: float = 5.0) -> None:
        self._path = path
        self._timeout_seconds = timeout_seconds

    @contextmanager
    def _connect(self, operation: str) -> Iterator[sqlite3.Connection]:
        try:
            conn = create_sqlite_connection(self._path, timeout_seconds=self._timeout_seconds)
        except sqlite3.Error as exc:
            raise StoreUnavailableError(f"{operation}: {exc}") from exc
        try:
            yield conn
        except sqlite3.Error as exc:
            logger.debug("sqlite error during %s: %s", operation, exc)
            raise StoreUnavailableError(f"{operation}: {exc}") from exc
        finally:
            conn.close()

    @contextmanager
    def _transaction(self, operation: str) -> Iterator[sqlite3.Connection]:
        with self._connect(operation) as conn:
            conn.execute("BEGIN IMMEDIATE")
            try:
                yield conn
                conn.execute("COMMIT")
            except Exception:
                if conn.in_transaction:
                    conn.execute("ROLLBACK")
                raise

    def find_room_by_code(self, code: str) -> Room | None:
        """Return the room with this code, or None."""
        with self._connect("find_room_by_code") as conn:
            row = conn.execute(
                f"SELECT {_ROOM_COLUMNS} FROM rooms WHERE code = ?",
                (code,),
            ).fetchone()
        if row is None:
            return None
        return _room_from_row(row)

    def create_room(self, *, code: str, name: str, admin_id: str) -> Room:
        """Insert a waiting room and return it."""
        with self._transaction("create_room") as conn:
            cursor = conn.execute(
                """
                INSERT INTO rooms (code, name, admin_id, state, created_at)
                VALUES (?, ?, ?, 'waiting', ?)
                """,
                (code, name, admin_id, utc_now_iso()),
            )
            row = conn.execute(
                f"SELECT {_ROOM_COLUMNS} FROM rooms WHERE id = ?",
                (cursor.lastrowid,),
            ).fetchone()
        return _room_from_row(row)

    def delete_room(self, room_id: int) -> None:
        """Delete a room; its players go with it."""
        with self._transaction("delete_room") as conn:
            conn.execute("DELETE FROM rooms WHERE id = ?", (room_id,))

    def update_room_admin(self, room_id: int, player_id: str) -> None:
        with self._transaction("update_room_admin") as conn:
            conn.execute("UPDATE rooms SET admin_id = ? WHERE id = ?", (player_id, room_id))

    def list_connected_players(self, room_id: int) -> list[Player]:
        """Return players of the room currently marked connected, oldest first."""
        with self._connect("list_connected_players") as conn:
            rows = conn.execute(
                f"""
                SELECT {_PLAYER_COLUMNS}
                FROM players
                WHERE room_id = ? AND is_connected = 1
                ORDER BY joined_at, id
                """,
                (room_id,),
            ).fetchall()
        return [_player_from_row(row) for row in rows]

    def list_players(self, room_id: int) -> list[Player]:
        with self._connect("list_players") as conn:
            rows = conn.execute(
                f"SELECT {_PLAYER_COLUMNS} FROM players WHERE room_id = ? ORDER BY joined_at, id",
                (room_id,),
            ).fetchall()
        return [_player_from_row(row) for row in rows]

    def count_players(self, room_id: int) -> int:
        """Return how many players, connected or not, belong to the room."""
        with self._connect("count_players") as conn:
            return _count_players(conn, room_id)

    def add_player(self, *, room_id: int, player_id: str, username: str, max_players: int) -> Player:
        """Add a connected player, or mark an existing one connected again.

        Raises RoomFullError when a new player would exceed ``max_players``.
        """
        with self._transaction("add_player") as conn:
            existing = conn.execute(
                "SELECT 1 FROM players WHERE room_id = ? AND id = ?",
                (room_id, player_id),
            ).fetchone()
            if existing is None:
                if _count_players(conn, room_id) >= max_players:
                    raise RoomFullError(f"room_id={room_id} is full")
                conn.execute(
                    """
                    INSERT INTO players (id, room_id, username, is_connected, joined_at)
                    VALUES (?, ?, ?, 1, ?)
                    """,
                    (player_id, room_id, username, utc_now_iso()),
                )
            else:
                conn.execute(
                    "UPDATE players SET username = ?, is_connected = 1 WHERE room_id = ? AND id = ?",
                    (username, room_id, player_id),
                )
            row = conn.execute(
                f"SELECT {_PLAYER_COLUMNS} FROM players WHERE room_id = ? AND id = ?",
                (room_id, player_id),
            ).fetchone()
        return _player_from_row(row)

    def set_player_connected(self, *, room_id: int, player_id: str, connected: bool) -> None:
        with self._transaction("set_player_connected") as conn:
            cursor = conn.execute(
                "UPDATE players SET is_connected = ? WHERE room_id = ? AND id = ?",
                (1 if connected else 0, room_id, player_id),
            )
            if cursor.rowcount == 0:
                raise PlayerNotFoundError(f"player_id={player_id} not in room_id={room_id}")


__all__ = [
    "RecordStore",
    "SqliteRecordStore",
    "utc_now_iso",
]
