"""Room view builders used by REST responses."""

from __future__ import annotations

from revelax.rooms.models import Player
from revelax.rooms.models import Room


def room_view(room: Room) -> dict[str, object]:
    return {
        "id": room.id,
        "code": room.code,
        "name": room.name,
        "adminId": room.admin_id,
        "state": room.state,
        "createdAt": room.created_at,
    }


def player_view(player: Player) -> dict[str, object]:
    return {
        "id": player.id,
        "roomId": player.room_id,
        "username": player.username,
        "isConnected": player.is_connected,
        "joinedAt": player.joined_at,
    }


def room_detail(room: Room, players: list[Player]) -> dict[str, object]:
    return {**room_view(room), "players": [player_view(player) for player in players]}
