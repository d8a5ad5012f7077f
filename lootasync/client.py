"""Callback-style client for a LOOT engine running in a worker process."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

from loguru import logger

from lootasync.bridge.call_queue import PendingCall
from lootasync.bridge.channel import SubprocessWorkerChannel
from lootasync.bridge.dispatcher import Dispatcher
from lootasync.bridge.router import ResponseRouter
from lootasync.config.schema import Config
from lootasync.core.contracts import LogHandler, WorkerChannel
from lootasync.core.games import resolve_game_type
from lootasync.core.protocol import OperationKind, Request
from lootasync.utils.exceptions import TransportError, UnsupportedGameError

Callback = Callable[..., None]


def _proxy(kind: OperationKind) -> Callable[..., None]:
    def call(self: "LootAsync", *args: Any) -> None:
        if not args or not callable(args[-1]):
            raise TypeError(f"{kind.method_name}() takes a callback as its last argument")
        self._dispatcher.enqueue(Request(kind, tuple(args[:-1])), args[-1])

    call.__name__ = kind.method_name
    call.__doc__ = f"Queue a ``{kind.value}`` call; ``callback(error)`` or ``callback(None, result)``."
    return call


class LootAsync:
    """
    One engine session in one worker process.

    Every operation takes its engine arguments followed by a callback, returns
    immediately, and invokes the callback exactly once. Calls reach the worker
    one at a time in the order they were made. The initialization call holds
    the slot from construction, so operations issued before ``start()`` wait
    behind it.
    """

    def __init__(
        self,
        game_id: str,
        game_path: str | Path,
        game_local_path: str | Path,
        language: str,
        log_handler: LogHandler | None = None,
        callback: Callback | None = None,
        *,
        channel: WorkerChannel | None = None,
        config: Config | None = None,
    ):
        self.game_id = game_id
        self.config = config or Config()
        self.channel = channel or SubprocessWorkerChannel.from_config(self.config.worker)
        self.initialized = False
        self._init_callback = callback
        self._started = False
        init = Request(OperationKind.INIT, (game_id, str(game_path), str(game_local_path), language))
        self._dispatcher = Dispatcher(self.channel, primed=PendingCall(init, self._on_initialized))
        self._router = ResponseRouter(self._dispatcher, log_handler)

    @classmethod
    def create(
        cls,
        game_id: str,
        game_path: str | Path,
        game_local_path: str | Path,
        language: str,
        log_handler: LogHandler | None,
        callback: Callback,
        **kwargs: Any,
    ) -> "LootAsync | None":
        """Start a session; ``callback(error)`` on failure, ``callback(None, session)`` once ready."""
        try:
            resolve_game_type(game_id)
        except UnsupportedGameError as exc:
            callback(exc)
            return None

        def on_ready(error: Exception | None, result: Any = None) -> None:
            if error is not None:
                callback(error)
            else:
                callback(None, session)

        session = cls(game_id, game_path, game_local_path, language, log_handler, on_ready, **kwargs)
        session.start()
        return session

    def start(self) -> "LootAsync":
        """Spawn the worker and send the initialization request."""
        if self._started:
            raise RuntimeError("session already started")
        self._started = True
        try:
            self.channel.start(self._router.on_payload, self._router.on_closed)
        except TransportError as exc:
            logger.error("Could not start LOOT worker: {}", exc.cause)
        self._dispatcher.start()
        return self

    def close(self) -> None:
        """Stop the worker; calls still waiting fail with TransportError."""
        self.channel.close()
        if not self._started:
            self._started = True
            self._dispatcher.start()
            return
        self._router.on_closed("worker channel closed")

    @property
    def busy(self) -> bool:
        return self._dispatcher.busy

    @property
    def pending_count(self) -> int:
        return self._dispatcher.pending_count

    def snapshot(self) -> dict[str, Any]:
        with self._dispatcher.lock:
            return {"gameId": self.game_id, "initialized": self.initialized, **self._dispatcher.queue.snapshot()}

    def _on_initialized(self, error: Exception | None, result: Any = None) -> None:
        self.initialized = error is None
        if error is not None:
            logger.error("LOOT initialization failed for {}: {}", self.game_id, error)
        else:
            logger.info("LOOT initialized for {}", self.game_id)
        if self._init_callback is not None:
            self._init_callback(error)

    def __enter__(self) -> "LootAsync":
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    update_masterlist = _proxy(OperationKind.UPDATE_MASTERLIST)
    get_masterlist_revision = _proxy(OperationKind.GET_MASTERLIST_REVISION)
    load_lists = _proxy(OperationKind.LOAD_LISTS)
    load_plugins = _proxy(OperationKind.LOAD_PLUGINS)
    get_plugin = _proxy(OperationKind.GET_PLUGIN)
    get_plugin_metadata = _proxy(OperationKind.GET_PLUGIN_METADATA)
    sort_plugins = _proxy(OperationKind.SORT_PLUGINS)
    set_load_order = _proxy(OperationKind.SET_LOAD_ORDER)
    get_load_order = _proxy(OperationKind.GET_LOAD_ORDER)
    load_current_load_order_state = _proxy(OperationKind.LOAD_CURRENT_LOAD_ORDER_STATE)
    is_plugin_active = _proxy(OperationKind.IS_PLUGIN_ACTIVE)
    get_groups = _proxy(OperationKind.GET_GROUPS)
    get_user_groups = _proxy(OperationKind.GET_USER_GROUPS)
    set_user_groups = _proxy(OperationKind.SET_USER_GROUPS)
    get_groups_path = _proxy(OperationKind.GET_GROUPS_PATH)
    get_general_messages = _proxy(OperationKind.GET_GENERAL_MESSAGES)


OPERATIONS: tuple[OperationKind, ...] = tuple(kind for kind in OperationKind if kind is not OperationKind.INIT)
