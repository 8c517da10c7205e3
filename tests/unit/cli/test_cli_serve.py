"""Tests for the command line entry point."""

from typing import Any

import pytest
from typer.testing import CliRunner

from provider_connect import __version__
from provider_connect.cli import main as cli_main
from provider_connect.cli.main import app, use_json_logs


@pytest.fixture
def cli_runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def captured_run(monkeypatch, tmp_path) -> dict[str, Any]:
    """Replace uvicorn.run and keep settings discovery inside tmp_path."""
    captured: dict[str, Any] = {}

    def fake_run(**kwargs: Any) -> None:
        captured.update(kwargs)

    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.delenv("PROVIDER_CONNECT_CONFIG_FILE", raising=False)
    monkeypatch.setattr(cli_main.uvicorn, "run", fake_run)
    monkeypatch.setattr(cli_main, "setup_logging", lambda **kwargs: None)
    return captured


@pytest.mark.unit
class TestCli:
    """Test the typer application."""

    def test_version(self, cli_runner):
        """Test --version prints the package version."""
        result = cli_runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.stdout

    def test_serve_applies_overrides(self, cli_runner, captured_run, tmp_path):
        """Test command-line options reach the server."""
        gateway = tmp_path / "gw.json"

        result = cli_runner.invoke(
            app, ["serve", "--port", "9999", "--gateway-config", str(gateway)]
        )

        assert result.exit_code == 0, result.output
        assert captured_run["port"] == 9999
        assert captured_run["host"] == "127.0.0.1"
        container = captured_run["app"].state.service_container
        assert container.settings.paths.resolved_config_file == gateway

    def test_serve_reports_bad_settings_file(self, cli_runner, captured_run, tmp_path):
        """Test an invalid TOML settings file exits with an error."""
        bad = tmp_path / "bad.toml"
        bad.write_text("[server\n")

        result = cli_runner.invoke(app, ["serve", "--config", str(bad)])

        assert result.exit_code == 1
        assert captured_run == {}

    @pytest.mark.parametrize(
        "log_format,expected", [("json", True), ("rich", False)]
    )
    def test_log_format(self, log_format, expected):
        """Test explicit log formats map to the renderer choice."""
        assert use_json_logs(log_format) is expected
