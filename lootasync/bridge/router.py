"""Response router: splits worker messages into log notifications and call replies."""

from __future__ import annotations

from typing import Any

from loguru import logger

from lootasync.core.contracts import LogHandler
from lootasync.core.protocol import ErrorReply, LogLevel, WorkerMessage, is_terminal
from lootasync.core.serialization import decode_worker_message
from lootasync.utils.exceptions import ProtocolError, TransportError, engine_error_from_payload

from .dispatcher import Dispatcher


def loguru_log_handler(level: LogLevel, message: str) -> None:
    """Default log handler: forward engine log lines to loguru."""
    logger.log(level.loguru_level, "[loot] {}", message)


class ResponseRouter:
    """Routes inbound worker messages for one dispatcher."""

    def __init__(self, dispatcher: Dispatcher, log_handler: LogHandler | None = None):
        self.dispatcher = dispatcher
        self.log_handler = log_handler or loguru_log_handler

    def on_payload(self, payload: Any) -> None:
        """Decode a raw payload from the channel and route it."""
        try:
            message = decode_worker_message(payload)
        except ProtocolError as exc:
            logger.warning("Ignoring worker message: {} ({})", exc.message, exc.details.get("payload", ""))
            return
        self.on_message(message)

    def on_message(self, message: WorkerMessage) -> None:
        # logs never touch the slot or the queue
        if not is_terminal(message):
            self.log_handler(message.log.level, message.log.message)
            return
        if isinstance(message, ErrorReply):
            self.dispatcher.complete(engine_error_from_payload(message.error))
        else:
            self.dispatcher.complete(None, message.result)

    def on_closed(self, reason: str) -> None:
        """The worker went away: fail the in-flight call and drain the queue."""
        with self.dispatcher.lock:
            if self.dispatcher.queue.slot_free:
                return
            logger.warning("Worker channel closed with a call in flight: {}", reason)
            self.dispatcher.complete(TransportError(reason))
