"""Message models shared by the controller and the worker process."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Union


class OperationKind(str, Enum):
    """Engine operations accepted by the worker; values are the wire names."""

    INIT = "init"
    UPDATE_MASTERLIST = "updateMasterlist"
    GET_MASTERLIST_REVISION = "getMasterlistRevision"
    LOAD_LISTS = "loadLists"
    LOAD_PLUGINS = "loadPlugins"
    GET_PLUGIN = "getPlugin"
    GET_PLUGIN_METADATA = "getPluginMetadata"
    SORT_PLUGINS = "sortPlugins"
    SET_LOAD_ORDER = "setLoadOrder"
    GET_LOAD_ORDER = "getLoadOrder"
    LOAD_CURRENT_LOAD_ORDER_STATE = "loadCurrentLoadOrderState"
    IS_PLUGIN_ACTIVE = "isPluginActive"
    GET_GROUPS = "getGroups"
    GET_USER_GROUPS = "getUserGroups"
    SET_USER_GROUPS = "setUserGroups"
    GET_GROUPS_PATH = "getGroupsPath"
    GET_GENERAL_MESSAGES = "getGeneralMessages"

    @property
    def method_name(self) -> str:
        """Engine method name, e.g. ``sortPlugins`` -> ``sort_plugins``."""
        return self.name.lower()


class LogLevel(str, Enum):
    """Engine log levels, in increasing severity."""

    TRACE = "trace"
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    FATAL = "fatal"

    @classmethod
    def parse(cls, value: Any) -> "LogLevel":
        """Accept a level name or the engine's numeric level (0 = trace)."""
        if isinstance(value, LogLevel):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            members = list(cls)
            return members[min(max(value, 0), len(members) - 1)]
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.INFO

    @property
    def loguru_level(self) -> str:
        if self is LogLevel.FATAL:
            return "CRITICAL"
        return self.name


@dataclass(frozen=True, slots=True)
class Request:
    """One engine call: operation kind plus positional arguments."""

    kind: OperationKind
    args: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class LogNotification:
    level: LogLevel
    message: str


@dataclass(frozen=True, slots=True)
class LogReply:
    """Worker log line; never completes a call."""

    log: LogNotification


@dataclass(frozen=True, slots=True)
class ErrorReply:
    """Terminal reply: the engine call failed."""

    error: Any


@dataclass(frozen=True, slots=True)
class ResultReply:
    """Terminal reply: the engine call succeeded."""

    result: Any = None


WorkerMessage = Union[LogReply, ErrorReply, ResultReply]


def is_terminal(message: WorkerMessage) -> bool:
    """True for replies that resolve the in-flight call."""
    return not isinstance(message, LogReply)
