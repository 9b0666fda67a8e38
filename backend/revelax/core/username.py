"""Username validation and generation helpers for players."""

from __future__ import annotations

import random

import regex

MIN_USERNAME_LENGTH = 2
MAX_USERNAME_LENGTH = 12
BLOCKED_USERNAME_FRAGMENTS = (
    "admin",
    "moderator",
    "support",
    "fuck",
    "shit",
    "cock",
    "pussy",
    "nigger",
    "asshole",
)
_USERNAME_CHARS = regex.compile(r"^[A-Za-z0-9_]+$")
_ALL_DIGITS = regex.compile(r"^\d+$")

_ADJECTIVES = ("Cool", "Brave", "Funny", "Clever", "Wild", "Smart", "Quick", "Sharp", "Bold", "Sly")
_NOUNS = ("Player", "Gamer", "Hero", "Star", "Wolf", "Tiger", "Fox", "Eagle", "Lion", "Shark")


class UsernameValidationError(ValueError):
    """Raised when a username violates player naming rules."""


def contains_blocked_fragment(username: str) -> bool:
    lowered = username.lower()
    return any(fragment in lowered for fragment in BLOCKED_USERNAME_FRAGMENTS)


def normalize_and_validate_username(raw_username: str) -> str:
    """Trim a username and check it against the naming rules, in order."""
    username = raw_username.strip()
    if len(username) < MIN_USERNAME_LENGTH:
        raise UsernameValidationError(f"Username must be at least {MIN_USERNAME_LENGTH} characters long")
    if len(username) > MAX_USERNAME_LENGTH:
        raise UsernameValidationError(f"Username cannot exceed {MAX_USERNAME_LENGTH} characters")
    if not _USERNAME_CHARS.match(username):
        raise UsernameValidationError("Username can only contain letters, numbers, and underscores")
    if _ALL_DIGITS.match(username):
        raise UsernameValidationError("Username cannot be only numbers")
    if contains_blocked_fragment(username):
        raise UsernameValidationError("Username contains inappropriate content")
    return username


def generate_random_username(rng: random.Random | None = None) -> str:
    """Return a name like ``CleverFox417``."""
    chooser = rng or random
    return f"{chooser.choice(_ADJECTIVES)}{chooser.choice(_NOUNS)}{chooser.randrange(999)}"
