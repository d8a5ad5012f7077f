"""Command line interface for lootasync."""
