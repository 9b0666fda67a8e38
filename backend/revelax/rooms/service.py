"""Room creation and player membership workflows over the record store."""

from __future__ import annotations

from collections.abc import Callable
import logging

from revelax.core.invite_codes import generate_invite_code
from revelax.rooms.errors import CodeSpaceExhaustedError
from revelax.rooms.errors import RoomNotFoundError
from revelax.rooms.errors import StoreUnavailableError
from revelax.rooms.models import Player
from revelax.rooms.models import Room
from revelax.rooms.store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_CODE_MAX_ATTEMPTS = 10


def generate_unique_room_code(
    store: RecordStore,
    *,
    max_attempts: int = DEFAULT_CODE_MAX_ATTEMPTS,
    generator: Callable[[], str] = generate_invite_code,
) -> str:
    """Draw codes until one is not used by an existing room."""
    for attempt in range(1, max_attempts + 1):
        code = generator()
        if store.find_room_by_code(code) is None:
            return code
        logger.debug("room code collision on attempt %d", attempt)
    raise CodeSpaceExhaustedError(f"no unused room code after {max_attempts} attempts")


def create_room_with_admin(
    store: RecordStore,
    *,
    room_name: str,
    admin_id: str,
    username: str,
    max_attempts: int = DEFAULT_CODE_MAX_ATTEMPTS,
    max_players: int = 8,
) -> Room:
    """Create a room under a fresh code and add its admin as the first player."""
    code = generate_unique_room_code(store, max_attempts=max_attempts)
    room = store.create_room(code=code, name=room_name, admin_id=admin_id)
    try:
        store.add_player(room_id=room.id, player_id=admin_id, username=username, max_players=max_players)
    except Exception:
        try:
            store.delete_room(room.id)
        except StoreUnavailableError:
            logger.warning("could not remove room %s after admin insert failed", code, exc_info=True)
        raise
    logger.info("room %s created by %s", code, admin_id)
    return room


def get_room(store: RecordStore, room_code: str) -> Room:
    room = store.find_room_by_code(room_code)
    if room is None:
        raise RoomNotFoundError(f"room_code={room_code} not found")
    return room


def join_room(
    store: RecordStore,
    *,
    room_code: str,
    player_id: str,
    username: str,
    max_players: int,
) -> tuple[Room, Player]:
    """Add or reconnect a player in the room behind ``room_code``."""
    room = get_room(store, room_code)
    player = store.add_player(room_id=room.id, player_id=player_id, username=username, max_players=max_players)
    return room, player


def leave_room(store: RecordStore, *, room_code: str, player_id: str) -> Room:
    """Mark a player disconnected; the room itself is untouched."""
    room = get_room(store, room_code)
    store.set_player_connected(room_id=room.id, player_id=player_id, connected=False)
    return room
