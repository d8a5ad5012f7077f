"""Entry point for ``python -m lootasync``."""

from lootasync.cli.commands import app

if __name__ == "__main__":
    app()
