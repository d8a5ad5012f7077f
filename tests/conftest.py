"""Pytest hooks and fixtures."""

from __future__ import annotations

import asyncio
import os
from typing import Any, Callable

import pytest

from lootasync.core.contracts import ChannelState
from lootasync.core.protocol import LogLevel, Request
from lootasync.core.serialization import encode_request_line
from lootasync.utils.exceptions import TransportError


def pytest_configure(config):
    """Register custom markers (also in pyproject.toml)."""
    config.addinivalue_line("markers", "subprocess: spawns a real worker process")


def pytest_collection_modifyitems(config, items):
    """Skip subprocess tests when LOOTASYNC_SKIP_SUBPROCESS=1."""
    if os.environ.get("LOOTASYNC_SKIP_SUBPROCESS") != "1":
        return
    skip = pytest.mark.skip(reason="LOOTASYNC_SKIP_SUBPROCESS=1")
    for item in items:
        if "subprocess" in item.keywords:
            item.add_marker(skip)


class FakeChannel:
    """In-memory worker channel: records sent requests, replies on demand."""

    def __init__(self) -> None:
        self.state = ChannelState.HEALTHY
        self.sent: list[Request] = []
        self.started = False
        self.closed = False
        self.on_message: Callable[[Any], None] | None = None
        self.on_closed: Callable[[str], None] | None = None

    def start(self, on_message, on_closed) -> None:
        self.started = True
        self.on_message = on_message
        self.on_closed = on_closed

    def send(self, request: Request) -> None:
        if self.state is ChannelState.BROKEN:
            raise TransportError("worker channel is closed")
        encode_request_line(request)
        self.sent.append(request)

    def close(self) -> None:
        self.closed = True
        self.state = ChannelState.BROKEN

    def reply(self, payload: Any) -> None:
        assert self.on_message is not None
        self.on_message(payload)

    def die(self, reason: str = "worker exited with code 1") -> None:
        self.state = ChannelState.BROKEN
        assert self.on_closed is not None
        self.on_closed(reason)

    @property
    def sent_kinds(self) -> list[str]:
        return [r.kind.value for r in self.sent]


class AutoReplyChannel(FakeChannel):
    """Answers every request on the next loop iteration using ``responder``."""

    def __init__(self, responder: Callable[[Request], Any]) -> None:
        super().__init__()
        self.responder = responder

    def send(self, request: Request) -> None:
        super().send(request)
        payload = self.responder(request)
        asyncio.get_running_loop().call_soon(self.reply, payload)


class Outcomes:
    """Collects completion outcomes in call order."""

    def __init__(self) -> None:
        self.items: list[tuple[str, Exception | None, Any]] = []

    def __call__(self, name: str) -> Callable[..., None]:
        def completion(error: Exception | None, result: Any = None) -> None:
            self.items.append((name, error, result))

        return completion

    @property
    def names(self) -> list[str]:
        return [name for name, _, _ in self.items]


@pytest.fixture
def channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture
def outcomes() -> Outcomes:
    return Outcomes()


@pytest.fixture
def logs() -> list[tuple[LogLevel, str]]:
    return []


@pytest.fixture
def auto_channel_factory() -> Callable[[Callable[[Request], Any]], AutoReplyChannel]:
    return AutoReplyChannel
