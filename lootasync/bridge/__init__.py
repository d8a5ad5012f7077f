"""Dispatch core: worker channel, call queue, dispatcher and response router."""

from .call_queue import CallQueue, PendingCall
from .channel import SubprocessWorkerChannel
from .dispatcher import Dispatcher
from .router import ResponseRouter, loguru_log_handler

__all__ = [
    "CallQueue",
    "Dispatcher",
    "PendingCall",
    "ResponseRouter",
    "SubprocessWorkerChannel",
    "loguru_log_handler",
]
