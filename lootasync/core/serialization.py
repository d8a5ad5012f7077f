"""Serialization helpers for worker protocol lines."""

from __future__ import annotations

import dataclasses
import json
from enum import Enum
from typing import Any

from lootasync.utils.exceptions import ProtocolError

from .protocol import (
    ErrorReply,
    LogLevel,
    LogNotification,
    LogReply,
    OperationKind,
    Request,
    ResultReply,
    WorkerMessage,
)


def safe_dict(value: Any) -> dict[str, Any]:
    """Return the value when dict-like, otherwise an empty dict."""
    return value if isinstance(value, dict) else {}


def to_jsonable(value: Any) -> Any:
    """Convert engine values (dataclasses, enums, sets, tuples) into JSON types."""
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return to_jsonable(dataclasses.asdict(value))
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_jsonable(v) for v in value]
    return value


def _line(payload: dict[str, Any]) -> str:
    return json.dumps(payload, ensure_ascii=False)


def encode_request_line(request: Request) -> str:
    """Encode a request into one line of JSON."""
    return _line({"type": request.kind.value, "args": to_jsonable(list(request.args))})


def decode_request_payload(payload: Any) -> Request:
    """Decode a raw request dict; raises ProtocolError for unknown operations."""
    row = safe_dict(payload)
    kind = row.get("type")
    try:
        op = OperationKind(kind)
    except ValueError as exc:
        raise ProtocolError(f"unknown operation: {kind}", payload) from exc
    args = row.get("args")
    return Request(kind=op, args=tuple(args) if isinstance(args, list) else ())


def encode_result_line(result: Any) -> str:
    return _line({"result": to_jsonable(result)})


def encode_error_line(error: str | dict[str, Any]) -> str:
    return _line({"error": to_jsonable(error)})


def encode_log_line(level: LogLevel, message: str) -> str:
    return _line({"log": {"level": level.value, "message": message}})


def decode_worker_message(payload: Any) -> WorkerMessage:
    """Decode a raw inbound payload into a log notification or a terminal reply."""
    if not isinstance(payload, dict):
        raise ProtocolError("worker message must be a JSON object", payload)
    log = payload.get("log")
    if isinstance(log, dict):
        return LogReply(LogNotification(LogLevel.parse(log.get("level")), str(log.get("message") or "")))
    if payload.get("error") is not None:
        return ErrorReply(payload["error"])
    if "result" in payload:
        return ResultReply(payload["result"])
    raise ProtocolError("worker message has none of error/result/log", payload)
