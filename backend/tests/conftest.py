"""Shared fixtures: an in-memory record store and fake websocket connections."""

from __future__ import annotations

import asyncio
from collections import deque
from collections.abc import Callable
from collections.abc import Iterable
from pathlib import Path
import threading
import time
from typing import Any

import pytest
from starlette.websockets import WebSocketState

from revelax.rooms.errors import PlayerNotFoundError
from revelax.rooms.errors import RoomFullError
from revelax.rooms.errors import StoreUnavailableError
from revelax.rooms.models import Player
from revelax.rooms.models import Room


class FakeConnection:
    """Websocket double exposing the transport surface the backend touches."""

    def __init__(self, name: str = "conn", *, open_: bool = True, fail_send: bool = False) -> None:
        self.name = name
        self.application_state = WebSocketState.CONNECTED if open_ else WebSocketState.CONNECTING
        self.client_state = WebSocketState.CONNECTED
        self.fail_send = fail_send
        self.accept_count = 0
        self.close_code: int | None = None
        self.close_reason: str | None = None
        self.sent_messages: list[dict[str, Any]] = []
        self._disconnect_event = asyncio.Event()
        self._wake = asyncio.Event()
        self._inbound: deque[dict[str, Any]] = deque()

    def __repr__(self) -> str:
        return f"FakeConnection({self.name!r})"

    async def accept(self) -> None:
        self.accept_count += 1
        self.application_state = WebSocketState.CONNECTED

    async def close(self, *, code: int = 1000, reason: str | None = None) -> None:
        self.close_code = code
        self.close_reason = reason
        self.application_state = WebSocketState.DISCONNECTED
        self._disconnect_event.set()
        self._wake.set()

    async def send_json(self, payload: Any) -> None:
        if self.fail_send:
            raise RuntimeError("socket is gone")
        self.sent_messages.append(payload)

    async def receive(self) -> dict[str, Any]:
        while True:
            if self._inbound:
                return self._inbound.popleft()
            if self._disconnect_event.is_set():
                return {"type": "websocket.disconnect", "code": 1000}
            self._wake.clear()
            await self._wake.wait()

    def push_text(self, text: str) -> None:
        self._inbound.append({"type": "websocket.receive", "text": text})
        self._wake.set()

    def push_bytes(self, data: bytes) -> None:
        self._inbound.append({"type": "websocket.receive", "bytes": data})
        self._wake.set()

    def disconnect(self) -> None:
        self.client_state = WebSocketState.DISCONNECTED
        self._disconnect_event.set()
        self._wake.set()

    def events(self, event_type: str) -> list[dict[str, Any]]:
        return [message for message in self.sent_messages if message.get("type") == event_type]


class FakeRecordStore:
    """Thread-safe in-memory record store with call logging and fault hooks.

    ``failing`` names methods that raise StoreUnavailableError; ``gates`` maps a
    method name to an event the call waits on before touching state.
    """

    def __init__(self) -> None:
        self.rooms: dict[int, Room] = {}
        self.players: dict[int, dict[str, Player]] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self.failing: set[str] = set()
        self.gates: dict[str, threading.Event] = {}
        self.delay_seconds: dict[str, float] = {}
        self._next_room_id = 1
        self._lock = threading.Lock()

    def _enter(self, name: str, *args: Any) -> None:
        with self._lock:
            self.calls.append((name, args))
        gate = self.gates.get(name)
        if gate is not None:
            gate.wait(timeout=5.0)
        delay = self.delay_seconds.get(name)
        if delay:
            time.sleep(delay)
        if name in self.failing:
            raise StoreUnavailableError(f"{name} failed")

    def count(self, name: str) -> int:
        return sum(1 for call_name, _ in self.calls if call_name == name)

    def seed_room(
        self,
        code: str,
        *,
        connected: Iterable[str] = (),
        disconnected: Iterable[str] = (),
        admin_id: str | None = None,
    ) -> Room:
        connected = list(connected)
        room = Room(
            id=self._next_room_id,
            code=code,
            name=f"room {code}",
            admin_id=admin_id or (connected[0] if connected else None),
            state="waiting",
            created_at="2026-01-01T00:00:00Z",
        )
        self._next_room_id += 1
        self.rooms[room.id] = room
        self.players[room.id] = {}
        for player_id in connected:
            self._put_player(room.id, player_id, True)
        for player_id in disconnected:
            self._put_player(room.id, player_id, False)
        return room

    def _put_player(self, room_id: int, player_id: str, connected: bool) -> Player:
        player = Player(
            id=player_id,
            room_id=room_id,
            username=f"user_{player_id}",
            is_connected=connected,
            joined_at=f"2026-01-01T00:00:{len(self.players[room_id]):02d}Z",
        )
        self.players[room_id][player_id] = player
        return player

    def room_by_code(self, code: str) -> Room | None:
        return next((room for room in self.rooms.values() if room.code == code), None)

    def find_room_by_code(self, code: str) -> Room | None:
        self._enter("find_room_by_code", code)
        with self._lock:
            return self.room_by_code(code)

    def create_room(self, *, code: str, name: str, admin_id: str) -> Room:
        self._enter("create_room", code, name, admin_id)
        with self._lock:
            room = Room(
                id=self._next_room_id,
                code=code,
                name=name,
                admin_id=admin_id,
                state="waiting",
                created_at="2026-01-01T00:00:00Z",
            )
            self._next_room_id += 1
            self.rooms[room.id] = room
            self.players[room.id] = {}
            return room

    def delete_room(self, room_id: int) -> None:
        self._enter("delete_room", room_id)
        with self._lock:
            self.rooms.pop(room_id, None)
            self.players.pop(room_id, None)

    def update_room_admin(self, room_id: int, player_id: str) -> None:
        self._enter("update_room_admin", room_id, player_id)
        with self._lock:
            room = self.rooms[room_id]
            self.rooms[room_id] = Room(
                id=room.id,
                code=room.code,
                name=room.name,
                admin_id=player_id,
                state=room.state,
                created_at=room.created_at,
            )

    def list_connected_players(self, room_id: int) -> list[Player]:
        self._enter("list_connected_players", room_id)
        with self._lock:
            return [player for player in self.players.get(room_id, {}).values() if player.is_connected]

    def list_players(self, room_id: int) -> list[Player]:
        self._enter("list_players", room_id)
        with self._lock:
            return list(self.players.get(room_id, {}).values())

    def count_players(self, room_id: int) -> int:
        self._enter("count_players", room_id)
        with self._lock:
            return len(self.players.get(room_id, {}))

    def add_player(self, *, room_id: int, player_id: str, username: str, max_players: int) -> Player:
        self._enter("add_player", room_id, player_id)
        with self._lock:
            members = self.players[room_id]
            if player_id not in members and len(members) >= max_players:
                raise RoomFullError(f"room_id={room_id} is full")
            return self._put_player(room_id, player_id, True)

    def set_player_connected(self, *, room_id: int, player_id: str, connected: bool) -> None:
        self._enter("set_player_connected", room_id, player_id, connected)
        with self._lock:
            player = self.players.get(room_id, {}).get(player_id)
            if player is None:
                raise PlayerNotFoundError(player_id)
            self.players[room_id][player_id] = Player(
                id=player.id,
                room_id=player.room_id,
                username=player.username,
                is_connected=connected,
                joined_at=player.joined_at,
            )


@pytest.fixture
def fake_store() -> FakeRecordStore:
    return FakeRecordStore()


@pytest.fixture
def make_connection() -> Callable[..., FakeConnection]:
    """Factory for fake connections; build them inside a running event loop."""
    return FakeConnection


@pytest.fixture
def app_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point settings at a throwaway SQLite file with a quiet heartbeat."""
    db_path = tmp_path / "revelax.sqlite3"
    monkeypatch.setenv("REVELAX_SQLITE_PATH", str(db_path))
    monkeypatch.setenv("REVELAX_WS_HEARTBEAT_INTERVAL_SECONDS", "600")
    monkeypatch.setenv("REVELAX_WS_PONG_TIMEOUT_SECONDS", "300")
    return db_path
