"""Room-domain error hierarchy."""

from __future__ import annotations


class RoomError(Exception):
    """Base class for room-domain errors."""


class RoomNotFoundError(RoomError):
    """Raised when a room code has no backing room record."""


class StoreUnavailableError(RoomError):
    """Raised when a record-store call fails or times out."""


class CodeSpaceExhaustedError(RoomError):
    """Raised when no unused room code was drawn within the retry cap."""


class EmptyAdminPoolError(RoomError):
    """Raised when a room still has connections but no connected players."""


class RoomFullError(RoomError):
    """Raised when trying to join a full room."""


class PlayerNotFoundError(RoomError):
    """Raised when a player id is not part of the room."""


__all__ = [
    "CodeSpaceExhaustedError",
    "EmptyAdminPoolError",
    "PlayerNotFoundError",
    "RoomError",
    "RoomFullError",
    "RoomNotFoundError",
    "StoreUnavailableError",
]
