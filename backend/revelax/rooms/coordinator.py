"""In-memory room membership coordinator.

Tracks which live connections belong to which room code, tears a room down
when its last connection closes and hands the admin role to a random
connected player on every other disconnect. The record store stays the
source of truth; the registry here only holds the connection topology.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from collections.abc import Callable
from contextlib import asynccontextmanager
from dataclasses import dataclass
from dataclasses import field
from enum import Enum
import functools
import logging
import random
from typing import Any
from typing import TypeVar

from revelax.rooms.errors import EmptyAdminPoolError
from revelax.rooms.errors import RoomNotFoundError
from revelax.rooms.errors import StoreUnavailableError
from revelax.rooms.models import Player
from revelax.rooms.models import Room
from revelax.rooms.store import RecordStore
from revelax.ws.broadcast import broadcast_event
from revelax.ws.protocol import admin_changed_event

logger = logging.getLogger(__name__)

T = TypeVar("T")


class DisconnectOutcome(str, Enum):
    NOT_REGISTERED = "not_registered"
    TORN_DOWN = "torn_down"
    ADMIN_CHANGED = "admin_changed"
    NO_ADMIN_CANDIDATE = "no_admin_candidate"
    STORE_FAILED = "store_failed"


@dataclass(slots=True, eq=False)
class RoomEntry:
    """Registry entry for one active room code."""

    room_id: int
    connections: set[Any] = field(default_factory=set)


@dataclass(slots=True, eq=False)
class _RoomLock:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    users: int = 0


class RoomCoordinator:
    """Owns the room code -> connections registry and the disconnect protocol."""

    def __init__(
        self,
        store: RecordStore,
        *,
        store_timeout_seconds: float = 5.0,
        rng: random.Random | None = None,
    ) -> None:
        self._store = store
        self._store_timeout_seconds = store_timeout_seconds
        self._rng = rng or random.SystemRandom()
        self._entries: dict[str, RoomEntry] = {}
        self._locks: dict[str, _RoomLock] = {}

    def active_codes(self) -> list[str]:
        return sorted(self._entries)

    def connection_count(self, room_code: str) -> int:
        entry = self._entries.get(room_code)
        return 0 if entry is None else len(entry.connections)

    def connections(self, room_code: str) -> frozenset[Any]:
        entry = self._entries.get(room_code)
        return frozenset() if entry is None else frozenset(entry.connections)

    @asynccontextmanager
    async def lock_room(self, room_code: str) -> AsyncIterator[None]:
        """Serialize registry mutations for one code; other codes never wait."""
        slot = self._locks.get(room_code)
        if slot is None:
            slot = self._locks[room_code] = _RoomLock()
        slot.users += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.users -= 1
            if slot.users == 0:
                self._locks.pop(room_code, None)

    async def _call_store(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        call = functools.partial(fn, *args, **kwargs)
        try:
            return await asyncio.wait_for(asyncio.to_thread(call), timeout=self._store_timeout_seconds)
        except StoreUnavailableError:
            raise
        except (TimeoutError, asyncio.TimeoutError) as exc:
            raise StoreUnavailableError(f"{getattr(fn, '__name__', fn)} timed out") from exc
        except Exception as exc:
            raise StoreUnavailableError(f"{getattr(fn, '__name__', fn)} failed: {exc}") from exc

    async def connect(self, room_code: str, connection: Any) -> Room:
        """Register ``connection`` under ``room_code`` if the room exists.

        Raises RoomNotFoundError or StoreUnavailableError without touching the
        registry. Nothing is persisted and nothing is broadcast.
        """
        async with self.lock_room(room_code):
            try:
                room = await self._call_store(self._store.find_room_by_code, room_code)
            except StoreUnavailableError:
                logger.warning("rejecting connection to room %s: store unavailable", room_code, exc_info=True)
                raise
            if room is None:
                raise RoomNotFoundError(f"room_code={room_code} not found")

            entry = self._entries.get(room_code)
            if entry is None:
                entry = self._entries[room_code] = RoomEntry(room_id=room.id)
                logger.debug("room %s active", room_code)
            entry.connections.add(connection)
            return room

    async def disconnect(self, room_code: str, connection: Any) -> DisconnectOutcome:
        """Run one disconnect cycle for ``connection``. Never raises store errors."""
        async with self.lock_room(room_code):
            entry = self._entries.get(room_code)
            if entry is None or connection not in entry.connections:
                return DisconnectOutcome.NOT_REGISTERED
            entry.connections.discard(connection)

            if not entry.connections:
                return await self._tear_down(room_code, entry)

            try:
                new_admin = await self._reassign_admin(entry)
            except EmptyAdminPoolError:
                logger.info("room %s has connections but no connected players; admin unchanged", room_code)
                return DisconnectOutcome.NO_ADMIN_CANDIDATE
            except StoreUnavailableError:
                logger.warning("admin reassignment skipped for room %s", room_code, exc_info=True)
                return DisconnectOutcome.STORE_FAILED

            delivered = await broadcast_event(entry.connections, admin_changed_event(new_admin.id))
            logger.info("room %s admin -> %s (notified %d)", room_code, new_admin.id, delivered)
            return DisconnectOutcome.ADMIN_CHANGED

    async def broadcast(self, room_code: str, message: dict[str, Any]) -> int:
        """Fan ``message`` out to the open connections of ``room_code``."""
        entry = self._entries.get(room_code)
        if entry is None:
            return 0
        return await broadcast_event(entry.connections, message)

    async def _tear_down(self, room_code: str, entry: RoomEntry) -> DisconnectOutcome:
        outcome = DisconnectOutcome.TORN_DOWN
        try:
            await self._call_store(self._store.delete_room, entry.room_id)
        except StoreUnavailableError:
            logger.warning("room %s left empty but its record was not deleted", room_code, exc_info=True)
            outcome = DisconnectOutcome.STORE_FAILED
        finally:
            self._entries.pop(room_code, None)
        logger.debug("room %s torn down", room_code)
        return outcome

    async def _reassign_admin(self, entry: RoomEntry) -> Player:
        players = await self._call_store(self._store.list_connected_players, entry.room_id)
        if not players:
            raise EmptyAdminPoolError(f"room_id={entry.room_id} has no connected players")
        new_admin = self._rng.choice(players)
        await self._call_store(self._store.update_room_admin, entry.room_id, new_admin.id)
        return new_admin


__all__ = [
    "DisconnectOutcome",
    "RoomCoordinator",
    "RoomEntry",
]
