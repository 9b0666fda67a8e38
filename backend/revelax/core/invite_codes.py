"""Invite/room code generation."""

from __future__ import annotations

import secrets
import string

INVITE_CODE_ALPHABET = string.ascii_uppercase + string.digits
INVITE_CODE_LENGTH = 6


def generate_invite_code() -> str:
    """Return 6 symbols drawn uniformly with replacement from ``A-Z0-9``."""
    return "".join(secrets.choice(INVITE_CODE_ALPHABET) for _ in range(INVITE_CODE_LENGTH))


def normalize_room_code(raw_code: str) -> str:
    """Trim and upper-case a code typed or routed by a client."""
    return raw_code.strip().upper()
