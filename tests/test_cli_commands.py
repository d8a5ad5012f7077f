"""Tests for the typer CLI."""

from __future__ import annotations

import json

from typer.testing import CliRunner

from lootasync.cli.commands import app
from lootasync.config.loader import load_config

runner = CliRunner()


def test_games_lists_supported_ids():
    result = runner.invoke(app, ["games"])
    assert result.exit_code == 0
    assert "skyrimse" in result.output
    assert "fo4vr" in result.output


def test_operations_lists_every_proxy():
    result = runner.invoke(app, ["operations"])
    assert result.exit_code == 0
    assert "sort_plugins" in result.output
    assert "getGroupsPath" in result.output
    assert "init" not in result.output.split()


def test_call_rejects_unknown_operation():
    result = runner.invoke(app, ["call", "frobnicate", "--game", "skyrim", "--game-path", "/g"])
    assert result.exit_code != 0


def test_call_rejects_non_array_args():
    result = runner.invoke(app, ["call", "getLoadOrder", "--game", "skyrim", "--game-path", "/g", "--args", '{"a": 1}'])
    assert result.exit_code != 0


def test_init_writes_config_and_keeps_existing_values(tmp_path):
    path = tmp_path / "config.json"
    result = runner.invoke(app, ["init", "--config", str(path), "--engine", "pkg:factory"])
    assert result.exit_code == 0
    assert "Created" in result.output
    assert json.loads(path.read_text(encoding="utf-8"))["worker"]["shutdownTimeoutSeconds"] == 2.0

    result = runner.invoke(app, ["init", "--config", str(path)])
    assert result.exit_code == 0
    assert "Refreshed" in result.output
    assert load_config(path).worker.engine == "pkg:factory"


def test_init_refuses_invalid_existing_config(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")
    result = runner.invoke(app, ["init", "--config", str(path)])
    assert result.exit_code == 1
    assert path.read_text(encoding="utf-8") == "{not json"
