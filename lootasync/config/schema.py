"""Configuration schema using Pydantic."""

import sys

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class WorkerConfig(BaseModel):
    """How the LOOT worker process is launched."""
    python: str = Field(default_factory=lambda: sys.executable)  # Interpreter running the worker
    module: str = "lootasync.worker"
    engine: str = ""  # Engine factory import path, e.g. "mypackage.engine:create_engine"
    env: dict[str, str] = Field(default_factory=dict)  # Extra environment for the worker
    shutdown_timeout_seconds: float = 2.0


class Config(BaseSettings):
    """Root configuration for lootasync."""
    worker: WorkerConfig = Field(default_factory=WorkerConfig)
    log_level: str = "INFO"
    log_file: bool = False  # Also write a rotating log under ~/.lootasync/logs

    model_config = SettingsConfigDict(
        env_prefix="LOOTASYNC_",
        env_nested_delimiter="__",
    )
