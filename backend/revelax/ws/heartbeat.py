"""WebSocket heartbeat and message-loop utilities."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from dataclasses import field
import json
import logging
from typing import Any

from .protocol import CLOSE_HEARTBEAT_TIMEOUT
from .protocol import PING
from .protocol import PONG
from .protocol import ws_event
from .protocol import ws_send_event

logger = logging.getLogger(__name__)

WS_DISCONNECT = "websocket.disconnect"


@dataclass(frozen=True, slots=True)
class HeartbeatConfig:
    interval_seconds: float = 30.0
    pong_timeout_seconds: float = 10.0
    max_missed_pongs: int = 2


@dataclass(slots=True)
class HeartbeatState:
    """Outstanding-ping bookkeeping for one socket."""

    missed_pongs: int = 0
    pending: bool = False
    answered: asyncio.Event = field(default_factory=asyncio.Event)

    def ping_sent(self) -> None:
        self.pending = True
        self.answered.clear()

    def pong_seen(self) -> None:
        # Unsolicited pongs are harmless and do not reset the miss counter.
        if not self.pending:
            return
        self.pending = False
        self.missed_pongs = 0
        self.answered.set()

    async def pong_arrived(self, *, timeout_seconds: float) -> bool:
        if not self.pending:
            return True
        try:
            await asyncio.wait_for(self.answered.wait(), timeout=timeout_seconds)
        except TimeoutError:
            self.pending = False
            self.missed_pongs += 1
            return False
        return True


def message_type(message: str) -> str | None:
    """Return the lower-cased type of a bare-word or JSON client message."""
    stripped = message.strip()
    if stripped.lower() in {PING, PONG}:
        return stripped.lower()
    try:
        payload = json.loads(stripped)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict) or not isinstance(payload.get("type"), str):
        return None
    return payload["type"].lower()


async def handle_ws_message(*, websocket: Any, heartbeat_state: HeartbeatState, message: str) -> None:
    kind = message_type(message)
    if kind == PING:
        await ws_send_event(websocket, ws_event(PONG))
    elif kind == PONG:
        heartbeat_state.pong_seen()


async def next_text_frame(websocket: Any) -> str | None:
    """Return the next text frame, or None once the peer has gone. Binary frames are skipped."""
    while True:
        message = await websocket.receive()
        if message["type"] == WS_DISCONNECT:
            return None
        text = message.get("text")
        if text is not None:
            return text
        logger.debug("ignoring non-text websocket frame")


async def heartbeat_loop(websocket: Any, *, heartbeat_state: HeartbeatState, config: HeartbeatConfig) -> None:
    sleep_after_probe = max(config.interval_seconds - config.pong_timeout_seconds, 0.0)
    while True:
        await ws_send_event(websocket, ws_event(PING))
        heartbeat_state.ping_sent()
        if await heartbeat_state.pong_arrived(timeout_seconds=config.pong_timeout_seconds):
            await asyncio.sleep(sleep_after_probe)
            continue
        if heartbeat_state.missed_pongs >= config.max_missed_pongs:
            code, reason = CLOSE_HEARTBEAT_TIMEOUT
            logger.info("closing silent websocket after %d missed pongs", heartbeat_state.missed_pongs)
            await websocket.close(code=code, reason=reason)
            return
        await asyncio.sleep(sleep_after_probe)


async def ws_message_loop(websocket: Any, *, config: HeartbeatConfig) -> None:
    """Read client messages until the socket goes away, heartbeating meanwhile."""
    heartbeat_state = HeartbeatState()
    heartbeat_task = asyncio.create_task(
        heartbeat_loop(websocket, heartbeat_state=heartbeat_state, config=config)
    )
    try:
        while True:
            message = await next_text_frame(websocket)
            if message is None:
                return
            await handle_ws_message(websocket=websocket, heartbeat_state=heartbeat_state, message=message)
    finally:
        heartbeat_task.cancel()
        try:
            await heartbeat_task
        except asyncio.CancelledError:
            pass
        except Exception:  # noqa: BLE001
            logger.debug("heartbeat stopped on a dead socket", exc_info=True)
