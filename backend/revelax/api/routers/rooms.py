"""Room REST routes."""

from __future__ import annotations

import logging
from typing import NoReturn

from fastapi import APIRouter
from fastapi.responses import JSONResponse

import revelax.runtime as runtime
from revelax.api.errors import raise_api_error
from revelax.api.room_views import player_view
from revelax.api.room_views import room_detail
from revelax.api.room_views import room_view
from revelax.core.invite_codes import normalize_room_code
from revelax.core.username import UsernameValidationError
from revelax.core.username import normalize_and_validate_username
from revelax.rooms import service
from revelax.rooms.errors import CodeSpaceExhaustedError
from revelax.rooms.errors import PlayerNotFoundError
from revelax.rooms.errors import RoomFullError
from revelax.rooms.errors import RoomNotFoundError
from revelax.rooms.errors import StoreUnavailableError
from revelax.rooms.models import CreateRoomRequest
from revelax.rooms.models import JoinRoomRequest

logger = logging.getLogger(__name__)

router = APIRouter()

CREATE_ROOM_PATH = "/api/rooms"
CREATE_ROOM_FAILED = "Failed to create room"


def _raise_store_unavailable() -> NoReturn:
    raise_api_error(
        status_code=503,
        code="STORE_UNAVAILABLE",
        message="record store unavailable",
        detail={},
    )


def _raise_room_not_found(room_code: str) -> NoReturn:
    raise_api_error(
        status_code=404,
        code="ROOM_NOT_FOUND",
        message="room not found",
        detail={"room_code": room_code},
    )


def _validated_username(raw_username: str) -> str:
    try:
        return normalize_and_validate_username(raw_username)
    except UsernameValidationError as exc:
        raise_api_error(status_code=400, code="VALIDATION_ERROR", message=str(exc), detail={})


@router.post(CREATE_ROOM_PATH)
def create_room(payload: CreateRoomRequest) -> JSONResponse:
    """Create a room under a unique code with the admin as its first player."""
    try:
        username = normalize_and_validate_username(payload.username)
    except UsernameValidationError as exc:
        return JSONResponse(status_code=400, content={"success": False, "error": str(exc)})

    try:
        room = service.create_room_with_admin(
            runtime.store,
            room_name=payload.room_name,
            admin_id=payload.admin_id,
            username=username,
            max_attempts=runtime.settings.revelax_room_code_max_attempts,
            max_players=runtime.settings.revelax_max_room_players,
        )
    except (StoreUnavailableError, CodeSpaceExhaustedError):
        logger.exception("Error creating room")
        return JSONResponse(status_code=503, content={"success": False, "error": CREATE_ROOM_FAILED})
    return JSONResponse(status_code=201, content={"success": True, "room": room_view(room)})


@router.get("/api/rooms/{room_code}")
def get_room_detail(room_code: str) -> dict[str, object]:
    """Return one room with its players."""
    code = normalize_room_code(room_code)
    try:
        room = service.get_room(runtime.store, code)
        players = runtime.store.list_players(room.id)
    except RoomNotFoundError:
        _raise_room_not_found(code)
    except StoreUnavailableError:
        _raise_store_unavailable()
    return room_detail(room, players)


@router.post("/api/rooms/{room_code}/players")
def join_room(room_code: str, payload: JoinRoomRequest) -> dict[str, object]:
    """Join a room, or reconnect an existing player."""
    code = normalize_room_code(room_code)
    username = _validated_username(payload.username)
    try:
        room, player = service.join_room(
            runtime.store,
            room_code=code,
            player_id=payload.player_id,
            username=username,
            max_players=runtime.settings.revelax_max_room_players,
        )
    except RoomNotFoundError:
        _raise_room_not_found(code)
    except RoomFullError:
        raise_api_error(
            status_code=409,
            code="ROOM_FULL",
            message="room is full",
            detail={"room_code": code},
        )
    except StoreUnavailableError:
        _raise_store_unavailable()
    return {"room": room_view(room), "player": player_view(player)}


@router.post("/api/rooms/{room_code}/players/{player_id}/leave")
def leave_room(room_code: str, player_id: str) -> dict[str, bool]:
    """Mark one player disconnected."""
    code = normalize_room_code(room_code)
    try:
        service.leave_room(runtime.store, room_code=code, player_id=player_id)
    except RoomNotFoundError:
        _raise_room_not_found(code)
    except PlayerNotFoundError:
        raise_api_error(
            status_code=404,
            code="PLAYER_NOT_FOUND",
            message="player is not in this room",
            detail={"room_code": code, "player_id": player_id},
        )
    except StoreUnavailableError:
        _raise_store_unavailable()
    return {"ok": True}
