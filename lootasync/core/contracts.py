"""Runtime contracts for the worker transport and the engine."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Protocol, runtime_checkable

from .protocol import LogLevel, Request

MessageHandler = Callable[[Any], None]
ClosedHandler = Callable[[str], None]
LogHandler = Callable[[LogLevel, str], None]


class ChannelState(Enum):
    HEALTHY = "healthy"
    BROKEN = "broken"


@runtime_checkable
class WorkerChannel(Protocol):
    """Bidirectional transport to one worker process."""

    state: ChannelState

    def start(self, on_message: MessageHandler, on_closed: ClosedHandler) -> None: ...
    def send(self, request: Request) -> None: ...
    def close(self) -> None: ...


@runtime_checkable
class EngineFactory(Protocol):
    def __call__(
        self,
        *,
        game_type: str,
        game_path: str,
        game_local_path: str,
        language: str,
        log: LogHandler,
    ) -> Any: ...
