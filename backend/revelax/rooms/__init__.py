"""Room domain package."""

from revelax.rooms.coordinator import DisconnectOutcome
from revelax.rooms.coordinator import RoomCoordinator
from revelax.rooms.errors import CodeSpaceExhaustedError
from revelax.rooms.errors import EmptyAdminPoolError
from revelax.rooms.errors import PlayerNotFoundError
from revelax.rooms.errors import RoomError
from revelax.rooms.errors import RoomFullError
from revelax.rooms.errors import RoomNotFoundError
from revelax.rooms.errors import StoreUnavailableError
from revelax.rooms.models import CreateRoomRequest
from revelax.rooms.models import JoinRoomRequest
from revelax.rooms.models import Player
from revelax.rooms.models import Room
from revelax.rooms.store import RecordStore
from revelax.rooms.store import SqliteRecordStore

__all__ = [
    "CodeSpaceExhaustedError",
    "CreateRoomRequest",
    "DisconnectOutcome",
    "EmptyAdminPoolError",
    "JoinRoomRequest",
    "Player",
    "PlayerNotFoundError",
    "RecordStore",
    "Room",
    "RoomCoordinator",
    "RoomError",
    "RoomFullError",
    "RoomNotFoundError",
    "SqliteRecordStore",
    "StoreUnavailableError",
]
