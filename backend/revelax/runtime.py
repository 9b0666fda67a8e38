"""Process-wide runtime state shared by REST and WebSocket handlers."""

from __future__ import annotations

from revelax.core.config import Settings
from revelax.core.config import load_settings
from revelax.rooms.coordinator import RoomCoordinator
from revelax.rooms.schema import init_rooms_schema
from revelax.rooms.store import SqliteRecordStore


def _build_store(current: Settings) -> SqliteRecordStore:
    return SqliteRecordStore(
        current.revelax_sqlite_path,
        timeout_seconds=current.revelax_store_timeout_seconds,
    )


settings = load_settings()
store = _build_store(settings)
coordinator = RoomCoordinator(store, store_timeout_seconds=settings.revelax_store_timeout_seconds)


def startup() -> None:
    """Ensure the schema exists and reset the in-memory connection registry."""
    global settings, store, coordinator
    settings = load_settings()
    init_rooms_schema(settings)
    store = _build_store(settings)
    coordinator = RoomCoordinator(store, store_timeout_seconds=settings.revelax_store_timeout_seconds)


__all__ = [
    "Settings",
    "coordinator",
    "settings",
    "startup",
    "store",
]
