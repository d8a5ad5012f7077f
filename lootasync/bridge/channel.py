"""Worker channel: line-delimited JSON over the stdio of a worker subprocess."""

from __future__ import annotations

import json
import os
import subprocess
import sys
import threading
from pathlib import Path
from typing import TYPE_CHECKING

from loguru import logger

from lootasync.core.contracts import ChannelState, ClosedHandler, MessageHandler
from lootasync.core.protocol import Request
from lootasync.core.serialization import encode_request_line
from lootasync.utils.exceptions import TransportError

if TYPE_CHECKING:
    from lootasync.config.schema import WorkerConfig


class SubprocessWorkerChannel:
    """Owns one worker process. A broken channel stays broken; there is no respawn."""

    def __init__(
        self,
        command: list[str],
        *,
        env: dict[str, str] | None = None,
        cwd: str | Path | None = None,
        shutdown_timeout: float = 2.0,
    ):
        self.command = list(command)
        self.env = env
        self.cwd = str(cwd) if cwd else None
        self.shutdown_timeout = shutdown_timeout
        self.state = ChannelState.HEALTHY
        self._broken_reason = ""
        self._proc: subprocess.Popen[str] | None = None
        self._reader_thread: threading.Thread | None = None
        self._write_lock = threading.Lock()
        self._on_message: MessageHandler | None = None
        self._on_closed: ClosedHandler | None = None

    @classmethod
    def from_config(cls, config: "WorkerConfig") -> "SubprocessWorkerChannel":
        command = [config.python or sys.executable, "-m", config.module]
        if config.engine:
            command += ["--engine", config.engine]
        env = os.environ.copy()
        env.update(config.env)
        env.setdefault("PYTHONUNBUFFERED", "1")
        env.setdefault("PYTHONIOENCODING", "utf-8")
        return cls(command, env=env, shutdown_timeout=config.shutdown_timeout_seconds)

    @property
    def pid(self) -> int | None:
        return self._proc.pid if self._proc else None

    def start(self, on_message: MessageHandler, on_closed: ClosedHandler) -> None:
        if self._proc is not None:
            raise RuntimeError("worker channel already started")
        self._on_message = on_message
        self._on_closed = on_closed
        try:
            self._proc = subprocess.Popen(
                self.command,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
                text=True,
                encoding="utf-8",
                cwd=self.cwd,
                env=self.env,
                bufsize=1,
            )
        except OSError as exc:
            self._mark_broken(f"failed to start worker: {exc}")
            raise TransportError(self._broken_reason) from exc
        if not self._proc.stdout or not self._proc.stdin:
            self._mark_broken("worker stdio is unavailable")
            raise TransportError(self._broken_reason)
        logger.info("Started LOOT worker (pid {})", self._proc.pid)
        self._reader_thread = threading.Thread(target=self._reader_loop, name="lootasync-reader", daemon=True)
        self._reader_thread.start()
        stderr_thread = threading.Thread(target=self._stderr_loop, name="lootasync-stderr", daemon=True)
        stderr_thread.start()

    def send(self, request: Request) -> None:
        if self.state is ChannelState.BROKEN:
            raise TransportError(self._broken_reason or "worker channel is closed")
        proc = self._proc
        if proc is None or proc.stdin is None:
            raise TransportError("worker channel is not started")
        if proc.poll() is not None:
            self._mark_broken(f"worker exited with code {proc.returncode}")
            raise TransportError(self._broken_reason)
        line = encode_request_line(request)
        try:
            with self._write_lock:
                proc.stdin.write(line + "\n")
                proc.stdin.flush()
        except (OSError, ValueError) as exc:
            self._mark_broken(str(exc) or exc.__class__.__name__)
            raise TransportError(self._broken_reason) from exc

    def close(self) -> None:
        proc = self._proc
        self._mark_broken("worker channel closed")
        if not proc:
            return
        try:
            if proc.poll() is None:
                # the worker exits on stdin EOF
                if proc.stdin:
                    try:
                        proc.stdin.close()
                    except OSError:
                        pass
                try:
                    proc.wait(timeout=self.shutdown_timeout)
                except subprocess.TimeoutExpired:
                    proc.terminate()
                    proc.wait(timeout=self.shutdown_timeout)
        except subprocess.TimeoutExpired:
            proc.kill()
            proc.wait()
        logger.info("LOOT worker stopped (exit code {})", proc.returncode)

    def _mark_broken(self, reason: str) -> None:
        if self.state is ChannelState.BROKEN:
            return
        self.state = ChannelState.BROKEN
        self._broken_reason = reason

    def _stderr_loop(self) -> None:
        proc = self._proc
        if not proc or not proc.stderr:
            return
        for line in proc.stderr:
            text = line.rstrip()
            if text:
                logger.debug("[loot-worker] {}", text)

    def _reader_loop(self) -> None:
        proc = self._proc
        if not proc or not proc.stdout:
            return
        for line in proc.stdout:
            text = line.strip()
            if not text:
                continue
            try:
                payload = json.loads(text)
            except json.JSONDecodeError:
                logger.warning("LOOT worker sent invalid JSON: {}", text[:200])
                continue
            try:
                if self._on_message:
                    self._on_message(payload)
            except Exception:
                logger.exception("Unhandled error while handling a LOOT worker message")
        code = proc.poll()
        self._mark_broken(f"worker exited with code {code}" if code is not None else "worker closed its output")
        logger.info("LOOT worker output closed: {}", self._broken_reason)
        try:
            if self._on_closed:
                self._on_closed(self._broken_reason)
        except Exception:
            logger.exception("Unhandled error while failing calls after worker exit")
