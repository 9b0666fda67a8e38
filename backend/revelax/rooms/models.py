"""Room and player records plus pydantic request bodies for room APIs."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Annotated
from typing import Literal

from pydantic import BaseModel
from pydantic import ConfigDict
from pydantic import Field
from pydantic import StringConstraints

RoomState = Literal["waiting", "active", "completed"]
RoomName = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=64)]


@dataclass(frozen=True, slots=True)
class Room:
    """Persisted room record."""

    id: int
    code: str
    name: str
    admin_id: str | None
    state: RoomState
    created_at: str


@dataclass(frozen=True, slots=True)
class Player:
    """Persisted player record; ``is_connected`` is the liveness source of truth."""

    id: str
    room_id: int
    username: str
    is_connected: bool
    joined_at: str


class _CamelModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True)


class CreateRoomRequest(_CamelModel):
    """POST /api/rooms request body."""

    room_name: RoomName = Field(alias="roomName")
    admin_id: str = Field(alias="adminId", min_length=1)
    username: str


class JoinRoomRequest(_CamelModel):
    """POST /api/rooms/{room_code}/players request body."""

    player_id: str = Field(alias="playerId", min_length=1)
    username: str
