"""CLI commands for lootasync.

Registers the top-level commands: games and operations (listings), init (write
the config file), call (run one engine operation in a fresh worker) and worker
(serve the line protocol on stdio).
"""

import asyncio
import json
from pathlib import Path
from typing import Any

import typer
from rich.console import Console
from rich.table import Table

from lootasync import __version__
from lootasync.aio import AsyncLoot
from lootasync.client import OPERATIONS
from lootasync.cli.logging_utils import configure_console_logging, ensure_rotating_log_file
from lootasync.config.loader import get_config_path, load_config, save_config
from lootasync.config.schema import Config
from lootasync.core.games import GAME_TYPES
from lootasync.core.protocol import OperationKind
from lootasync.utils.exceptions import LootAsyncError
from lootasync.worker.host import run_worker

app = typer.Typer(
    name="lootasync",
    help=f"lootasync {__version__} - run LOOT operations in a worker process",
    no_args_is_help=True,
)

console = Console()


def _operation(name: str) -> OperationKind:
    for kind in OPERATIONS:
        if name in (kind.value, kind.method_name, kind.method_name.replace("_", "-")):
            return kind
    raise typer.BadParameter(f"unknown operation: {name}")


def _parse_args(raw: str) -> list[Any]:
    try:
        args = json.loads(raw) if raw else []
    except json.JSONDecodeError as e:
        raise typer.BadParameter(f"--args must be a JSON array: {e}") from e
    if not isinstance(args, list):
        raise typer.BadParameter("--args must be a JSON array")
    return args


def _load(config_path: Path | None, engine: str) -> Config:
    try:
        cfg = load_config(config_path)
    except ValueError as e:
        console.print(f"[red]{e}[/red]")
        raise typer.Exit(1)
    if engine:
        cfg.worker.engine = engine
    configure_console_logging(cfg.log_level)
    if cfg.log_file:
        ensure_rotating_log_file("lootasync", level=cfg.log_level)
    return cfg


async def _run_call(
    cfg: Config,
    kind: OperationKind,
    args: list[Any],
    game: str,
    game_path: str,
    local_path: str,
    language: str,
    timeout: float,
) -> Any:
    loot = await asyncio.wait_for(
        AsyncLoot.create(game, game_path, local_path, language, config=cfg),
        timeout=timeout,
    )
    async with loot:
        return await asyncio.wait_for(getattr(loot, kind.method_name)(*args), timeout=timeout)


@app.command()
def games() -> None:
    """List supported game ids."""
    table = Table(title="Supported games")
    table.add_column("Game id", style="cyan")
    table.add_column("Engine game type")
    for game_id, game_type in GAME_TYPES.items():
        table.add_row(game_id, game_type)
    console.print(table)


@app.command()
def operations() -> None:
    """List engine operations accepted by `call`."""
    for kind in OPERATIONS:
        console.print(f"{kind.method_name} [dim]({kind.value})[/dim]")


@app.command()
def init(
    config_path: str = typer.Option(None, "--config", "-c", help="Config file path"),
    engine: str = typer.Option("", "--engine", "-e", help="Engine factory import path (module:attr)"),
) -> None:
    """Create the config file, or refresh an existing one keeping its values."""
    path = Path(config_path) if config_path else get_config_path()
    if path.exists():
        try:
            cfg = load_config(path)
        except ValueError as e:
            console.print(f"[red]{e}[/red]")
            raise typer.Exit(1)
        action = "Refreshed"
    else:
        cfg = Config()
        action = "Created"
    if engine:
        cfg.worker.engine = engine
    save_config(cfg, path)
    console.print(f"[green]✓[/green] {action} config at {path}")


@app.command()
def call(
    operation: str = typer.Argument(..., help="Operation, e.g. sortPlugins or sort_plugins"),
    game: str = typer.Option(..., "--game", "-g", help="Game id, see `lootasync games`"),
    game_path: str = typer.Option(..., "--game-path", help="Game install directory"),
    local_path: str = typer.Option("", "--local-path", help="Game local app data directory"),
    language: str = typer.Option("en", "--language", "-l"),
    args: str = typer.Option("[]", "--args", "-a", help="Operation arguments as a JSON array"),
    engine: str = typer.Option("", "--engine", "-e", help="Engine factory import path (module:attr)"),
    config_path: str = typer.Option(None, "--config", "-c", help="Config file path"),
    timeout: float = typer.Option(300.0, "--timeout", help="Seconds to wait for each step"),
) -> None:
    """Start a worker, initialize it and run one operation."""
    kind = _operation(operation)
    call_args = _parse_args(args)
    cfg = _load(Path(config_path) if config_path else None, engine)
    try:
        result = asyncio.run(_run_call(cfg, kind, call_args, game, game_path, local_path, language, timeout))
    except LootAsyncError as e:
        console.print(f"[red]{kind.value} failed:[/red] {e.message}")
        if e.details:
            console.print_json(data=e.details)
        raise typer.Exit(1)
    except asyncio.TimeoutError:
        console.print(f"[red]{kind.value} timed out after {timeout}s[/red]")
        raise typer.Exit(1)
    console.print_json(data=result)


@app.command()
def worker(
    engine: str = typer.Option("", "--engine", "-e", help="Engine factory import path (module:attr)"),
    log_level: str = typer.Option("INFO", "--log-level"),
) -> None:
    """Serve engine requests on stdin/stdout (what `python -m lootasync.worker` runs)."""
    raise typer.Exit(run_worker(engine=engine, log_level=log_level))


if __name__ == "__main__":
    app()
