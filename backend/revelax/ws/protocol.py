"""WebSocket wire protocol helpers."""

from __future__ import annotations

import json
from typing import Any

from starlette.websockets import WebSocketState

ADMIN_CHANGED = "admin_changed"
PING = "ping"
PONG = "pong"

CLOSE_ROOM_NOT_FOUND = (4404, "ROOM_NOT_FOUND")
CLOSE_HEARTBEAT_TIMEOUT = (4408, "HEARTBEAT_TIMEOUT")
CLOSE_STORE_UNAVAILABLE = (1011, "STORE_UNAVAILABLE")


def ws_event(event_type: str, **fields: Any) -> dict[str, Any]:
    return {"type": event_type, **fields}


def admin_changed_event(new_admin_id: str) -> dict[str, Any]:
    return ws_event(ADMIN_CHANGED, newAdminId=new_admin_id)


def is_open(websocket: Any) -> bool:
    """True when both sides of the transport still report CONNECTED."""
    for attr in ("application_state", "client_state"):
        state = getattr(websocket, attr, WebSocketState.CONNECTED)
        if state != WebSocketState.CONNECTED:
            return False
    return True


async def ws_send_event(websocket: Any, message: dict[str, Any]) -> None:
    if hasattr(websocket, "send_json"):
        await websocket.send_json(message)
        return
    if hasattr(websocket, "send_text"):
        await websocket.send_text(json.dumps(message))
