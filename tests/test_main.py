"""Tests for CLI main module."""

import json
import sys
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from longrun_mcp.errors import ConfigurationError
from longrun_mcp.main import cli

posix_only = pytest.mark.skipif(sys.platform == "win32", reason="requires /bin/sh")


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def config_path(write_config):
    return write_config({
        "echo": {"workdir": ".", "command": "echo"},
        "echo-args": {"workdir": ".", "command": "echo", "additionalArgs": True,
                      "description": "Echo the arguments"},
    })


class TestRunCommand:
    """Tests for the run command."""

    @posix_only
    def test_run_success(self, runner, config_path):
        result = runner.invoke(cli, ['run', '-c', str(config_path), 'echo-args', 'hello'])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        assert payload["success"] is True
        assert payload["exitCode"] == 0
        with open(payload["outputPath"]) as f:
            assert f.read().strip() == "hello"

    @posix_only
    def test_run_dash_arguments(self, runner, config_path):
        """Test that arguments after -- are passed through."""
        result = runner.invoke(cli, ['run', '-c', str(config_path), 'echo-args', '--', '--flag=1'])

        assert result.exit_code == 0
        payload = json.loads(result.output)
        with open(payload["outputPath"]) as f:
            assert f.read().strip() == "--flag=1"

    def test_run_rejected_arguments(self, runner, config_path):
        result = runner.invoke(cli, ['run', '-c', str(config_path), 'echo', 'x'])

        assert result.exit_code == 1
        payload = json.loads(result.output)
        assert payload == {"success": False, "error": "Additional arguments are not allowed for command: echo"}

    def test_run_unknown_key(self, runner, config_path):
        result = runner.invoke(cli, ['run', '-c', str(config_path), 'deploy'])

        assert result.exit_code == 1
        assert "Unknown command key: deploy" in result.output

    def test_run_with_border(self, runner, config_path):
        result = runner.invoke(cli, ['run', '-c', str(config_path), '--border', 'deploy'])

        assert result.exit_code == 1
        assert "deploy" in result.output
        assert "Unknown command key" in result.output

    def test_run_missing_config(self, runner, tmp_path):
        result = runner.invoke(cli, ['run', '-c', str(tmp_path / 'missing.json'), 'echo'])

        assert result.exit_code == 1
        assert "Error: Config file not found" in result.output

    def test_run_uses_env_config(self, runner, config_path, monkeypatch):
        """Test that LONGRUN_MCP_CONFIG provides the default config path."""
        monkeypatch.setenv("LONGRUN_MCP_CONFIG", str(config_path))

        result = runner.invoke(cli, ['run', 'deploy'])

        assert "Unknown command key: deploy" in result.output


class TestServeCommand:
    """Tests for the serve command."""

    def test_serve_calls_run_server(self, runner, config_path):
        with patch('longrun_mcp.main.run_server') as mock_run:
            result = runner.invoke(cli, ['serve', '-c', str(config_path)])

        assert result.exit_code == 0
        mock_run.assert_called_once_with(str(config_path), transport="stdio")

    def test_serve_transport_option(self, runner, config_path):
        with patch('longrun_mcp.main.run_server') as mock_run:
            result = runner.invoke(cli, ['serve', '-c', str(config_path), '--transport', 'sse'])

        assert result.exit_code == 0
        mock_run.assert_called_once_with(str(config_path), transport="sse")

    def test_serve_invalid_transport(self, runner, config_path):
        result = runner.invoke(cli, ['serve', '-c', str(config_path), '--transport', 'carrier-pigeon'])
        assert result.exit_code != 0

    def test_serve_configuration_error(self, runner, config_path):
        with patch('longrun_mcp.main.run_server', side_effect=ConfigurationError("Config validation error: bad")):
            result = runner.invoke(cli, ['serve', '-c', str(config_path)])

        assert result.exit_code == 1
        assert "Error: Config validation error: bad" in result.output

    def test_serve_keyboard_interrupt(self, runner, config_path):
        with patch('longrun_mcp.main.run_server', side_effect=KeyboardInterrupt):
            result = runner.invoke(cli, ['serve', '-c', str(config_path)])

        assert result.exit_code == 130
        assert "Interrupted by user" in result.output


class TestToolsCommands:
    """Tests for the tools command group."""

    def test_list(self, runner, config_path):
        result = runner.invoke(cli, ['tools', 'list', '-c', str(config_path)])

        assert result.exit_code == 0
        assert "run_echo" in result.output
        assert "run_echo-args" in result.output
        assert "Echo the arguments" in result.output

    def test_list_empty(self, runner, write_config):
        config_path = write_config({})

        result = runner.invoke(cli, ['tools', 'list', '-c', str(config_path)])

        assert result.exit_code == 0
        assert "No tools available" in result.output

    def test_show(self, runner, config_path):
        result = runner.invoke(cli, ['tools', 'show', '-c', str(config_path), 'run_echo-args'])

        assert result.exit_code == 0
        assert "Tool: run_echo-args" in result.output
        assert "Key: echo-args" in result.output
        assert "args: array of string" in result.output

    def test_show_without_parameters(self, runner, config_path):
        result = runner.invoke(cli, ['tools', 'show', '-c', str(config_path), 'run_echo'])

        assert result.exit_code == 0
        assert "  None" in result.output

    def test_show_unknown(self, runner, config_path):
        result = runner.invoke(cli, ['tools', 'show', '-c', str(config_path), 'run_nope'])

        assert result.exit_code == 1
        assert "Tool not found: run_nope" in result.output


class TestLogLevel:
    """Tests for the --log-level option."""

    def test_invalid_log_level(self, runner, config_path):
        result = runner.invoke(cli, ['--log-level', 'LOUD', 'tools', 'list', '-c', str(config_path)])

        assert result.exit_code != 0
        assert "Unknown log level" in result.output
