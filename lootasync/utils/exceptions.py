"""
Exception hierarchy for lootasync.

Provides:
- A base exception class with error codes and categories
- Transport, engine and protocol errors raised by the dispatch core
- Conversion of worker error payloads into EngineError
"""

from __future__ import annotations

from enum import Enum
from typing import Any

TRANSPORT_MESSAGE = "LOOT closed? Please check your log. Error was: {cause}"


class ErrorCategory(Enum):
    """Error categories for classification."""
    FATAL = "fatal"
    TRANSPORT = "transport"
    ENGINE = "engine"
    PROTOCOL = "protocol"
    VALIDATION = "validation"


class LootAsyncError(Exception):
    """Base exception for all lootasync errors."""

    def __init__(
        self,
        message: str,
        code: str = "UNKNOWN_ERROR",
        category: ErrorCategory = ErrorCategory.FATAL,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "error": self.code,
            "message": self.message,
            "category": self.category.value,
            "details": self.details,
        }

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


class TransportError(LootAsyncError):
    """The worker process could not be reached."""

    def __init__(self, cause: str):
        super().__init__(
            TRANSPORT_MESSAGE.format(cause=cause),
            code="TRANSPORT_ERROR",
            category=ErrorCategory.TRANSPORT,
            details={"cause": cause},
        )
        self.cause = cause


class EngineError(LootAsyncError):
    """The engine reported a failure for one call."""

    def __init__(self, message: str, data: dict[str, Any] | None = None):
        super().__init__(message, code="ENGINE_ERROR", category=ErrorCategory.ENGINE, details=dict(data or {}))

    @property
    def data(self) -> dict[str, Any]:
        return self.details

    @property
    def cycle(self) -> list[dict[str, Any]] | None:
        """Plugins forming a cyclic interaction, when the engine reported one."""
        cycle = self.details.get("cycle")
        return cycle if isinstance(cycle, list) else None

    def __str__(self) -> str:
        return self.message


class ProtocolError(LootAsyncError):
    """The worker sent a payload that does not follow the message protocol."""

    def __init__(self, message: str, payload: Any = None):
        details = {"payload": repr(payload)[:200]} if payload is not None else {}
        super().__init__(message, code="PROTOCOL_ERROR", category=ErrorCategory.PROTOCOL, details=details)


class UnsupportedGameError(LootAsyncError):
    """Raised for game ids the engine cannot handle."""

    def __init__(self, game_id: str):
        super().__init__(
            "game not supported",
            code="UNSUPPORTED_GAME",
            category=ErrorCategory.VALIDATION,
            details={"game_id": game_id},
        )
        self.game_id = game_id


def engine_error_from_payload(error: Any) -> EngineError:
    """Build an EngineError from a worker ``error`` field (string or object)."""
    if isinstance(error, dict):
        data = {k: v for k, v in error.items() if k != "message"}
        return EngineError(str(error.get("message") or "engine call failed"), data)
    return EngineError(str(error))
