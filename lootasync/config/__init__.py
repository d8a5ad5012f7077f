"""Configuration module for lootasync."""

from lootasync.config.loader import get_config_path, load_config, save_config
from lootasync.config.schema import Config, WorkerConfig

__all__ = ["Config", "WorkerConfig", "get_config_path", "load_config", "save_config"]
