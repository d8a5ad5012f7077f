"""Shared protocol types and helpers."""

from .contracts import ChannelState, EngineFactory, WorkerChannel
from .games import GAME_TYPES, resolve_game_type
from .protocol import (
    ErrorReply,
    LogLevel,
    LogNotification,
    LogReply,
    OperationKind,
    Request,
    ResultReply,
    WorkerMessage,
    is_terminal,
)
from .serialization import decode_request_payload, decode_worker_message, encode_request_line, safe_dict

__all__ = [
    "ChannelState",
    "EngineFactory",
    "ErrorReply",
    "GAME_TYPES",
    "LogLevel",
    "LogNotification",
    "LogReply",
    "OperationKind",
    "Request",
    "ResultReply",
    "WorkerChannel",
    "WorkerMessage",
    "decode_request_payload",
    "decode_worker_message",
    "encode_request_line",
    "is_terminal",
    "resolve_game_type",
    "safe_dict",
]
