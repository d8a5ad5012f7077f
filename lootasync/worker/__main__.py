"""``python -m lootasync.worker --engine module:attr``"""

import typer

from lootasync.worker.host import run_worker


def main(
    engine: str = typer.Option("", "--engine", "-e", help="Engine factory import path (module:attr)"),
    log_level: str = typer.Option("INFO", "--log-level", help="Worker log level (written to stderr)"),
) -> None:
    raise typer.Exit(run_worker(engine=engine, log_level=log_level))


if __name__ == "__main__":
    typer.run(main)
