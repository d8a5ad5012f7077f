"""asyncio front end over the callback client."""

from __future__ import annotations

import asyncio
from pathlib import Path
from typing import Any, Callable

from lootasync.client import LootAsync
from lootasync.core.contracts import LogHandler


def _settle(future: asyncio.Future, error: Exception | None, result: Any = None) -> None:
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


def _async_proxy(name: str) -> Callable[..., Any]:
    async def call(self: "AsyncLoot", *args: Any) -> Any:
        return await self._call(name, *args)

    call.__name__ = name
    call.__doc__ = f"Await the result of ``LootAsync.{name}``."
    return call


class AsyncLoot:
    """
    Awaitable wrapper around LootAsync.

    Completions arrive on the worker reader thread and are handed back to the
    event loop that created the session. ``log_handler`` still runs on the
    reader thread.
    """

    def __init__(self, session: LootAsync, loop: asyncio.AbstractEventLoop):
        self.session = session
        self._loop = loop

    @classmethod
    async def create(
        cls,
        game_id: str,
        game_path: str | Path,
        game_local_path: str | Path,
        language: str,
        log_handler: LogHandler | None = None,
        **kwargs: Any,
    ) -> "AsyncLoot":
        loop = asyncio.get_running_loop()
        ready: asyncio.Future = loop.create_future()

        def on_ready(error: Exception | None, result: Any = None) -> None:
            loop.call_soon_threadsafe(_settle, ready, error, result)

        session = LootAsync.create(game_id, game_path, game_local_path, language, log_handler, on_ready, **kwargs)
        try:
            await ready
        except BaseException:
            # includes cancellation from wait_for
            if session is not None:
                await asyncio.to_thread(session.close)
            raise
        assert session is not None
        return cls(session, loop)

    def _call(self, name: str, *args: Any) -> asyncio.Future:
        future = self._loop.create_future()

        def done(error: Exception | None, result: Any = None) -> None:
            self._loop.call_soon_threadsafe(_settle, future, error, result)

        getattr(self.session, name)(*args, done)
        return future

    async def close(self) -> None:
        await asyncio.to_thread(self.session.close)

    async def __aenter__(self) -> "AsyncLoot":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    update_masterlist = _async_proxy("update_masterlist")
    get_masterlist_revision = _async_proxy("get_masterlist_revision")
    load_lists = _async_proxy("load_lists")
    load_plugins = _async_proxy("load_plugins")
    get_plugin = _async_proxy("get_plugin")
    get_plugin_metadata = _async_proxy("get_plugin_metadata")
    sort_plugins = _async_proxy("sort_plugins")
    set_load_order = _async_proxy("set_load_order")
    get_load_order = _async_proxy("get_load_order")
    load_current_load_order_state = _async_proxy("load_current_load_order_state")
    is_plugin_active = _async_proxy("is_plugin_active")
    get_groups = _async_proxy("get_groups")
    get_user_groups = _async_proxy("get_user_groups")
    set_user_groups = _async_proxy("set_user_groups")
    get_groups_path = _async_proxy("get_groups_path")
    get_general_messages = _async_proxy("get_general_messages")
