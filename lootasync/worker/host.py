"""Engine host that runs inside the worker process.

Reads one JSON request per line from stdin, runs it against the engine and
writes exactly one terminal line (``result`` or ``error``) per request to
stdout. Engine log output is written to stdout as ``log`` lines as it happens.
Requests are processed strictly one after another.
"""

from __future__ import annotations

import importlib
import json
import sys
import threading
from typing import Any, TextIO

from loguru import logger

from lootasync.core.contracts import EngineFactory
from lootasync.core.games import resolve_game_type
from lootasync.core.protocol import LogLevel, OperationKind, Request
from lootasync.core.serialization import (
    decode_request_payload,
    encode_error_line,
    encode_log_line,
    encode_result_line,
    to_jsonable,
)
from lootasync.utils.exceptions import LootAsyncError, ProtocolError


def load_engine_factory(entry: str) -> EngineFactory:
    """Import an engine factory from ``module:attr``."""
    module_ref, _, obj_name = entry.partition(":")
    module_ref = module_ref.strip()
    obj_name = obj_name.strip() or "create_engine"
    if not module_ref:
        raise ValueError("engine module is required")
    module = importlib.import_module(module_ref)
    if not hasattr(module, obj_name):
        raise AttributeError(f"engine factory not found: {entry}")
    target = getattr(module, obj_name)
    if not callable(target):
        raise TypeError(f"engine factory is not callable: {entry}")
    return target


def error_payload(exc: BaseException) -> str | dict[str, Any]:
    """Wire form of an engine exception; structured when it carries extra data."""
    message = str(exc) or exc.__class__.__name__
    cycle = getattr(exc, "cycle", None)
    if cycle is not None:
        return {"message": message, "cycle": to_jsonable(cycle)}
    if all(hasattr(exc, attr) for attr in ("func", "arg", "value")):
        return {
            "message": message,
            "func": str(getattr(exc, "func")),
            "arg": str(getattr(exc, "arg")),
            "value": str(getattr(exc, "value")),
        }
    if isinstance(exc, LootAsyncError):
        return {"message": exc.message, "code": exc.code, **to_jsonable(exc.details)}
    return message


class WorkerHost:
    """Serves engine requests over a pair of text streams."""

    def __init__(self, engine_factory: EngineFactory | None, stdin: TextIO, stdout: TextIO):
        self.engine_factory = engine_factory
        self.engine: Any = None
        self._stdin = stdin
        self._stdout = stdout
        self._write_lock = threading.Lock()

    def emit(self, line: str) -> None:
        with self._write_lock:
            self._stdout.write(line + "\n")
            self._stdout.flush()

    def log(self, level: Any, message: str) -> None:
        """Log callback handed to the engine; safe to call from engine threads."""
        self.emit(encode_log_line(LogLevel.parse(level), str(message)))

    def serve(self) -> int:
        for line in self._stdin:
            text = line.strip()
            if not text:
                continue
            try:
                payload = json.loads(text)
            except json.JSONDecodeError:
                logger.warning("Ignoring non-JSON request: {}", text[:200])
                self.emit(encode_error_line("invalid request: not JSON"))
                continue
            self.emit(self.handle(payload))
        logger.debug("stdin closed, worker exiting")
        return 0

    def handle(self, payload: Any) -> str:
        """Run one request and return its terminal reply line."""
        try:
            request = decode_request_payload(payload)
        except ProtocolError as exc:
            return encode_error_line(exc.message)
        try:
            result = self._execute(request)
        except Exception as exc:
            logger.debug("{} failed: {}", request.kind.value, exc)
            return encode_error_line(error_payload(exc))
        try:
            return encode_result_line(result)
        except (TypeError, ValueError) as exc:
            return encode_error_line(f"result of {request.kind.value} is not serializable: {exc}")

    def _execute(self, request: Request) -> Any:
        if request.kind is OperationKind.INIT:
            return self._initialize(*request.args)
        if self.engine is None:
            raise RuntimeError("engine is not initialized")
        method = getattr(self.engine, request.kind.method_name, None)
        if not callable(method):
            raise AttributeError(f"engine does not support {request.kind.value}")
        return method(*request.args)

    def _initialize(self, game_id: str, game_path: str, game_local_path: str, language: str = "en") -> None:
        game_type = resolve_game_type(game_id)
        if self.engine_factory is None:
            raise RuntimeError("no engine configured; set LOOTASYNC_WORKER__ENGINE or pass --engine")
        self.engine = self.engine_factory(
            game_type=game_type,
            game_path=game_path,
            game_local_path=game_local_path,
            language=language,
            log=self.log,
        )
        logger.info("Engine ready for {} ({})", game_id, game_type)
        return None


def run_worker(engine: str = "", log_level: str = "INFO") -> int:
    """Entry point of the worker process; stdout is reserved for protocol lines."""
    logger.remove()
    logger.add(sys.stderr, level=log_level.upper(), backtrace=False, diagnose=False)
    factory = load_engine_factory(engine) if engine else None
    return WorkerHost(factory, sys.stdin, sys.stdout).serve()
