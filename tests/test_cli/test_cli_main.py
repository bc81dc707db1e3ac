"""Tests for CLI main module."""

import pytest
from pathlib import Path
from unittest.mock import AsyncMock, patch

import typer
from typer.testing import CliRunner

from dockside.cli.main import app, _run_cli_command
from dockside.engine.reconciler import Action, ReconcileReport, CREATE
from dockside.errors import ConfigError


runner = CliRunner()


@patch("dockside.cli.main.console")
def test_run_cli_command_success(mock_console):
    """Test the CLI command runner on a successful execution."""
    mock_handler = AsyncMock(return_value="done")

    result = _run_cli_command(mock_handler, arg1="value1")

    assert result == "done"
    mock_handler.assert_awaited_once_with(arg1="value1")
    mock_console.print.assert_not_called()


@patch("dockside.cli.main.console")
def test_run_cli_command_dockside_error(mock_console):
    """Test the CLI command runner when a DocksideError is raised."""
    mock_handler = AsyncMock(side_effect=ConfigError("Compose file not found: compose.yaml"))

    with pytest.raises(typer.Exit) as exc_info:
        _run_cli_command(mock_handler, arg1="value1")

    mock_console.print.assert_called_once_with("[red]Error:[/red] Compose file not found: compose.yaml")
    assert exc_info.value.exit_code == 1


@patch("dockside.cli.main.setup_logging")
class TestCommands:
    """Option handling of up and down."""

    @patch("dockside.cli.main.run_up", new_callable=AsyncMock)
    def test_up(self, mock_run_up, mock_setup_logging):
        mock_run_up.return_value = ReconcileReport(
            project="shop", actions=[Action(service="web", kind=CREATE, created="abcdef1234567890")]
        )

        result = runner.invoke(app, ["up", "-f", "deploy/compose.yaml", "-n", "shop", "-l", "debug"])

        assert result.exit_code == 0
        kwargs = mock_run_up.await_args.kwargs
        assert kwargs["file_path"] == Path("deploy/compose.yaml")
        assert kwargs["project_name"] == "shop"
        assert kwargs["settings"].log_level == "DEBUG"
        mock_setup_logging.assert_called_once_with("DEBUG")
        assert "web" in result.output

    @patch("dockside.cli.main.run_up", new_callable=AsyncMock)
    def test_up_defaults_to_compose_yaml(self, mock_run_up, mock_setup_logging, monkeypatch):
        monkeypatch.delenv("DOCKSIDE_COMPOSE_FILE", raising=False)
        mock_run_up.return_value = ReconcileReport(project="shop")

        result = runner.invoke(app, ["up", "--quiet"])

        assert result.exit_code == 0
        assert mock_run_up.await_args.kwargs["file_path"] == Path("compose.yaml")
        assert mock_run_up.await_args.kwargs["project_name"] is None

    @patch("dockside.cli.main.run_up", new_callable=AsyncMock)
    def test_up_error_exits_nonzero(self, mock_run_up, mock_setup_logging):
        mock_run_up.side_effect = ConfigError("Invalid Compose file")

        result = runner.invoke(app, ["up"])

        assert result.exit_code == 1

    def test_invalid_log_level(self, mock_setup_logging):
        result = runner.invoke(app, ["up", "--log-level", "loud"])

        assert result.exit_code == 1
        mock_setup_logging.assert_not_called()

    @patch("dockside.cli.main.run_down", new_callable=AsyncMock)
    def test_down(self, mock_run_down, mock_setup_logging):
        mock_run_down.return_value = ["abc", "def"]

        result = runner.invoke(app, ["down", "-n", "shop"])

        assert result.exit_code == 0
        assert mock_run_down.await_args.kwargs["project_name"] == "shop"
        assert "Removed 2 containers" in result.output
