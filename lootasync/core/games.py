"""Game ids understood by the engine."""

from __future__ import annotations

from lootasync.utils.exceptions import UnsupportedGameError

# game id -> engine game type
GAME_TYPES: dict[str, str] = {
    "oblivion": "tes4",
    "skyrim": "tes5",
    "skyrimse": "tes5se",
    "skyrimvr": "tes5vr",
    "fallout3": "fo3",
    "falloutnv": "fonv",
    "fallout4": "fo4",
    "fallout4vr": "fo4vr",
}


def resolve_game_type(game_id: str) -> str:
    """Map a game id to the engine game type or raise UnsupportedGameError."""
    game_type = GAME_TYPES.get(str(game_id or "").strip().lower())
    if game_type is None:
        raise UnsupportedGameError(game_id)
    return game_type
