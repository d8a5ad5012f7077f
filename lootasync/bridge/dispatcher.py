"""Dispatcher: moves calls from the queue into the single in-flight slot."""

from __future__ import annotations

import threading
from typing import Any

from loguru import logger

from lootasync.core.contracts import WorkerChannel
from lootasync.core.protocol import Request
from lootasync.utils.exceptions import ProtocolError, TransportError

from .call_queue import CallQueue, Completion, PendingCall


def _invoke(call: PendingCall, error: Exception | None, result: Any = None) -> None:
    if error is not None:
        call.completion(error)
    else:
        call.completion(None, result)


class Dispatcher:
    """
    Serializes engine calls onto one worker channel.

    At most one call occupies the slot at a time; everything else waits in the
    CallQueue in arrival order. The dispatcher and the response router share
    ``lock``; nothing else touches the queue or the slot.
    """

    def __init__(self, channel: WorkerChannel, *, primed: PendingCall | None = None):
        self.channel = channel
        self.queue = CallQueue()
        self.lock = threading.RLock()
        self._primed = primed
        if primed is not None:
            self.queue.occupy(primed)

    @property
    def busy(self) -> bool:
        with self.lock:
            return not self.queue.slot_free

    @property
    def pending_count(self) -> int:
        with self.lock:
            return len(self.queue)

    def enqueue(self, request: Request, completion: Completion) -> None:
        """Dispatch now when the slot is free, otherwise append to the queue."""
        call = PendingCall(request, completion)
        with self.lock:
            if self.queue.slot_free:
                self._deliver(call)
                return
            position = self.queue.push(call)
            logger.debug("Queued {} at position {}", request.kind.value, position)

    def start(self) -> None:
        """Send the call that was primed into the slot at construction."""
        with self.lock:
            call, self._primed = self._primed, None
            if call is None:
                raise RuntimeError("dispatcher has no primed call to send")
            self._deliver(call)

    def complete(self, error: Exception | None, result: Any = None) -> None:
        """Resolve the in-flight call, then advance the queue even if its handler raises."""
        with self.lock:
            call = self.queue.active
            if call is None or call is self._primed:
                logger.warning("Worker reply arrived with no call in flight; dropped")
                return
            try:
                _invoke(call, error, result)
            finally:
                self.advance()

    def advance(self) -> None:
        """Dispatch the head of the queue, or free the slot when empty."""
        with self.lock:
            call = self.queue.pop()
            if call is None:
                self.queue.release()
                return
            self._deliver(call)

    def _deliver(self, call: PendingCall | None) -> None:
        fault: Exception | None = None
        while call is not None:
            self.queue.occupy(call)
            try:
                self.channel.send(call.request)
            except TransportError as exc:
                error: Exception = exc
            except (TypeError, ValueError) as exc:
                error = ProtocolError(f"request could not be encoded: {exc}")
            else:
                logger.debug("Dispatched {}", call.request.kind.value)
                break
            logger.warning("{} did not reach the worker: {}", call.request.kind.value, error)
            try:
                _invoke(call, error)
            except Exception as exc:
                if fault is None:
                    fault = exc
                else:
                    logger.exception("Completion handler failed during transport failure")
            call = self.queue.pop()
        else:
            self.queue.release()
        if fault is not None:
            raise fault
