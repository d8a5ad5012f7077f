"""End-to-end tests against a real worker process running the fake engine."""

from __future__ import annotations

import os
import sys
import threading
from pathlib import Path

import pytest

from lootasync.bridge.channel import SubprocessWorkerChannel
from lootasync.client import LootAsync
from lootasync.config.schema import WorkerConfig
from lootasync.core.contracts import ChannelState
from lootasync.utils.exceptions import EngineError, TransportError

TESTS_DIR = Path(__file__).resolve().parent
ROOT_DIR = TESTS_DIR.parent

pytestmark = pytest.mark.subprocess


class Waiter:
    """Blocks the test thread until a completion fires on the reader thread."""

    def __init__(self) -> None:
        self._event = threading.Event()
        self.error: Exception | None = None
        self.result = None

    def __call__(self, error, result=None) -> None:
        self.error = error
        self.result = result
        self._event.set()

    def wait(self, timeout: float = 30.0) -> "Waiter":
        assert self._event.wait(timeout), "no completion within timeout"
        return self


def _channel() -> SubprocessWorkerChannel:
    config = WorkerConfig(
        engine="fake_engine:create_engine",
        env={"PYTHONPATH": os.pathsep.join([str(TESTS_DIR), str(ROOT_DIR), os.environ.get("PYTHONPATH", "")])},
    )
    return SubprocessWorkerChannel.from_config(config)


@pytest.fixture
def session():
    ready = Waiter()
    logs = []
    loot = LootAsync.create(
        "skyrimse",
        "/games/sse",
        "/local/sse",
        "en",
        lambda level, message: logs.append((level.value, message)),
        ready,
        channel=_channel(),
    )
    ready.wait()
    assert ready.error is None, ready.error
    loot.logs = logs
    yield loot
    loot.close()


def test_calls_round_trip_through_worker(session):
    loaded = Waiter()
    sorted_ = Waiter()
    session.load_plugins(["B.esp", "a.esp"], False, loaded)
    session.sort_plugins(["B.esp", "a.esp"], sorted_)
    assert loaded.wait().error is None
    assert sorted_.wait().result == ["a.esp", "B.esp"]
    assert ("debug", "loading B.esp") in session.logs


def test_engine_error_crosses_process_boundary(session):
    waiter = Waiter()
    session.sort_plugins(["cycle.esp", "other.esp"], waiter)
    error = waiter.wait().error
    assert isinstance(error, EngineError)
    assert error.cycle is not None
    assert error.cycle[0]["name"] == "cycle.esp"


def test_dead_worker_fails_later_calls(session):
    proc = session.channel._proc
    proc.kill()
    proc.wait(timeout=10)
    waiter = Waiter()
    session.get_load_order(waiter)
    assert isinstance(waiter.wait().error, TransportError)
    assert session.channel.state is ChannelState.BROKEN


def test_missing_interpreter_fails_initialization():
    channel = SubprocessWorkerChannel([str(ROOT_DIR / "no-such-python"), "-m", "lootasync.worker"])
    ready = Waiter()
    LootAsync.create("skyrim", "/g", "/l", "en", None, ready, channel=channel)
    assert isinstance(ready.wait(timeout=5).error, TransportError)
    assert channel.state is ChannelState.BROKEN


def test_worker_without_engine_reports_init_error():
    config = WorkerConfig(env={"PYTHONPATH": os.pathsep.join([str(ROOT_DIR), os.environ.get("PYTHONPATH", "")])})
    ready = Waiter()
    loot = LootAsync.create(
        "skyrim", "/g", "/l", "en", None, ready, channel=SubprocessWorkerChannel.from_config(config)
    )
    try:
        error = ready.wait().error
        assert isinstance(error, EngineError)
        assert "no engine configured" in str(error)
    finally:
        loot.close()
