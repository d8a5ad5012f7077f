"""lootasync - non-blocking access to a LOOT engine hosted in a worker process."""

__version__ = "0.1.0"

from lootasync.aio import AsyncLoot
from lootasync.client import LootAsync
from lootasync.core.protocol import LogLevel, OperationKind
from lootasync.utils.exceptions import EngineError, LootAsyncError, TransportError, UnsupportedGameError

__all__ = [
    "AsyncLoot",
    "EngineError",
    "LogLevel",
    "LootAsync",
    "LootAsyncError",
    "OperationKind",
    "TransportError",
    "UnsupportedGameError",
    "__version__",
]
