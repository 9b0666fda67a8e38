"""WebSocket route handler for room channels."""

from __future__ import annotations

import logging

from fastapi import APIRouter
from fastapi import WebSocket
from fastapi import WebSocketDisconnect

import revelax.runtime as runtime
from revelax.core.invite_codes import normalize_room_code
from revelax.rooms.errors import RoomNotFoundError
from revelax.rooms.errors import StoreUnavailableError

from .heartbeat import HeartbeatConfig
from .heartbeat import ws_message_loop
from .protocol import CLOSE_ROOM_NOT_FOUND
from .protocol import CLOSE_STORE_UNAVAILABLE

logger = logging.getLogger(__name__)

router = APIRouter()


async def reject_ws(websocket: WebSocket, close: tuple[int, str]) -> None:
    code, reason = close
    await websocket.close(code=code, reason=reason)


def heartbeat_config() -> HeartbeatConfig:
    current = runtime.settings
    return HeartbeatConfig(
        interval_seconds=current.revelax_ws_heartbeat_interval_seconds,
        pong_timeout_seconds=current.revelax_ws_pong_timeout_seconds,
        max_missed_pongs=current.revelax_ws_max_missed_pongs,
    )


@router.websocket("/ws/rooms/{room_code}")
async def ws_room(websocket: WebSocket, room_code: str) -> None:
    """Room websocket: register with the coordinator, heartbeat, disconnect on close."""
    code = normalize_room_code(room_code)
    coordinator = runtime.coordinator
    await websocket.accept()
    try:
        await coordinator.connect(code, websocket)
    except RoomNotFoundError:
        await reject_ws(websocket, CLOSE_ROOM_NOT_FOUND)
        return
    except StoreUnavailableError:
        await reject_ws(websocket, CLOSE_STORE_UNAVAILABLE)
        return

    try:
        await ws_message_loop(websocket, config=heartbeat_config())
    except WebSocketDisconnect:
        return
    finally:
        outcome = await coordinator.disconnect(code, websocket)
        logger.debug("room %s connection closed: %s", code, outcome.value)
