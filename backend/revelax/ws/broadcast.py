"""Best-effort fan-out of room events to live connections."""

from __future__ import annotations

from collections.abc import Iterable
import logging
from typing import Any

from .protocol import is_open
from .protocol import ws_send_event

logger = logging.getLogger(__name__)


async def broadcast_event(connections: Iterable[Any], message: dict[str, Any]) -> int:
    """Send ``message`` to every open connection; return how many got it.

    Iterates over a snapshot. Connections that are not open, or whose send
    fails, are skipped without retry.
    """
    delivered = 0
    for websocket in list(connections):
        if not is_open(websocket):
            continue
        try:
            await ws_send_event(websocket, message)
        except Exception as exc:  # noqa: BLE001
            logger.debug("skipping connection after failed send of %s: %s", message.get("type"), exc)
            continue
        delivered += 1
    return delivered
