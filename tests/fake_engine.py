"""Small in-memory engine used by the worker tests."""

from __future__ import annotations

from dataclasses import dataclass, field


class CyclicInteractionError(Exception):
    def __init__(self, cycle: list[dict[str, str]]):
        super().__init__("Cyclic interaction detected")
        self.cycle = cycle


class InvalidParameterError(Exception):
    def __init__(self, func: str, arg: str, value: str):
        super().__init__(f'Invalid value passed to "{func}"')
        self.func = func
        self.arg = arg
        self.value = value


@dataclass
class MasterlistInfo:
    revision_id: str
    revision_date: str
    is_modified: bool


@dataclass
class Group:
    name: str
    after: set[str] = field(default_factory=set)


class FakeEngine:
    def __init__(self, *, game_type, game_path, game_local_path, language, log):
        self.game_type = game_type
        self.game_path = game_path
        self.language = language
        self.log = log
        self.plugins: list[str] = []
        self.load_order: list[str] = []
        self.active: set[str] = set()

    def load_plugins(self, plugins, load_headers_only=False):
        for name in plugins:
            self.log("debug", f"loading {name}")
        self.plugins = list(plugins)

    def sort_plugins(self, plugins):
        if "cycle.esp" in plugins:
            raise CyclicInteractionError(
                [
                    {"name": "cycle.esp", "typeOfEdgeToNextVertex": "master"},
                    {"name": "other.esp", "typeOfEdgeToNextVertex": "masterlist load after"},
                ]
            )
        return sorted(plugins, key=str.lower)

    def set_load_order(self, order):
        self.load_order = list(order)
        self.active = set(order)

    def get_load_order(self):
        return list(self.load_order)

    def is_plugin_active(self, name):
        return name in self.active

    def get_plugin_metadata(self, name):
        if name not in self.plugins:
            raise InvalidParameterError("getPluginMetadata", "pluginName", name)
        return {"name": name, "group": "default"}

    def get_masterlist_revision(self, masterlist_path, short_id):
        return MasterlistInfo(revision_id="abc1234" if short_id else "abc1234def", revision_date="2024-01-01", is_modified=False)

    def get_groups(self, include_user_metadata=True):
        return [Group("default"), Group("late", {"default"})]


def create_engine(**kwargs) -> FakeEngine:
    return FakeEngine(**kwargs)
