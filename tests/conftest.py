"""Shared fixtures for longrun-mcp tests."""

import json
import logging
import pytest


@pytest.fixture
def write_config(tmp_path):
    """Write a config file into tmp_path and return its path."""
    def _write(commands, outputdir="logs"):
        config_path = tmp_path / "config.json"
        config_path.write_text(json.dumps({"outputdir": outputdir, "commands": commands}), encoding="utf-8")
        return config_path
    return _write


@pytest.fixture(autouse=True)
def restore_root_logger():
    """Undo logging.basicConfig(force=True) calls made by the CLI."""
    root = logging.getLogger()
    handlers = root.handlers[:]
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
