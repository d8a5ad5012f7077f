"""Utility helpers for lootasync."""

from lootasync.utils.exceptions import (
    EngineError,
    ErrorCategory,
    LootAsyncError,
    ProtocolError,
    TransportError,
    UnsupportedGameError,
)

__all__ = [
    "EngineError",
    "ErrorCategory",
    "LootAsyncError",
    "ProtocolError",
    "TransportError",
    "UnsupportedGameError",
]
