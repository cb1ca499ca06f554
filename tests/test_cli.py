"""Tests for CLI module."""

from __future__ import annotations

from unittest.mock import patch

import click
import pytest
from typer.testing import CliRunner

import mosh_launcher.cli as cli_module
import mosh_launcher.config as cfg_module
from mosh_launcher.cli import app

runner = CliRunner()


@pytest.fixture
def isolated_config(tmp_path, monkeypatch):
    config_file = tmp_path / "config.toml"
    monkeypatch.setattr(cfg_module, "CONFIG_DIR", tmp_path)
    monkeypatch.setattr(cfg_module, "CONFIG_FILE", config_file)
    monkeypatch.setattr(cli_module, "CONFIG_FILE", config_file)
    for name in (
        "MOSH_LAUNCHER_CLIENT",
        "MOSH_LAUNCHER_SSH",
        "MOSH_LAUNCHER_SERVER",
        "MOSH_LAUNCHER_PORT_RANGE",
        "MOSH_LAUNCHER_PREDICT",
        "MOSH_LAUNCHER_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    return config_file


class TestCli:
    def test_version(self, isolated_config):
        with patch("mosh_launcher.cli.check_ssh", return_value=(True, "OpenSSH_9.6p1")), \
                patch("mosh_launcher.cli.find_client", return_value="/usr/bin/mosh-client"):
            result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "mosh-launcher v" in result.output
        assert "OpenSSH_9.6p1" in result.output
        assert "/usr/bin/mosh-client" in result.output

    def test_version_without_client(self, isolated_config):
        with patch("mosh_launcher.cli.check_ssh", return_value=(False, "'ssh' not found on PATH.")), \
                patch("mosh_launcher.cli.find_client", side_effect=cli_module.LauncherError("missing")):
            result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert "not found" in result.output

    def test_config_shows_defaults(self, isolated_config):
        result = runner.invoke(app, ["config"])
        assert result.exit_code == 0
        assert "60000:61000" in result.output
        assert "mosh-server" in result.output

    def test_config_set_client_path(self, isolated_config):
        result = runner.invoke(app, ["config", "client.path", "/opt/mosh/mosh-client"])
        assert result.exit_code == 0
        assert isolated_config.exists()
        assert cfg_module.load_config().client.path == "/opt/mosh/mosh-client"

    def test_config_set_port_range_validated(self, isolated_config):
        result = runner.invoke(app, ["config", "session.port_range", "61000:60000"])
        assert result.exit_code == 1
        assert not isolated_config.exists()

    def test_config_set_predict_normalized(self, isolated_config):
        result = runner.invoke(app, ["config", "session.predict", "ALWAYS"])
        assert result.exit_code == 0
        assert cfg_module.load_config().session.predict == "always"

    def test_config_set_bool(self, isolated_config):
        result = runner.invoke(app, ["config", "session.no_init", "yes"])
        assert result.exit_code == 0
        assert cfg_module.load_config().session.no_init is True

    def test_config_bad_key_format(self, isolated_config):
        result = runner.invoke(app, ["config", "client", "x"])
        assert result.exit_code == 1

    def test_config_unknown_key(self, isolated_config):
        result = runner.invoke(app, ["config", "client.colour", "x"])
        assert result.exit_code == 1

    def test_config_show_single_key(self, isolated_config):
        result = runner.invoke(app, ["config", "session.port_range"])
        assert result.exit_code == 0
        assert "session.port_range = 60000:61000" in result.output

    def test_config_set_log_level_validated(self, isolated_config):
        result = runner.invoke(app, ["config", "logging.level", "chatty"])
        assert result.exit_code == 1
        assert not isolated_config.exists()

        result = runner.invoke(app, ["config", "logging.level", "debug"])
        assert result.exit_code == 0
        assert cfg_module.load_config().logging.level == "DEBUG"

    def test_config_set_malformed_ssh_command(self, isolated_config):
        result = runner.invoke(app, ["config", "ssh.command", "'ssh"])
        assert result.exit_code == 1
        assert not isolated_config.exists()

    def test_usage_errors_are_click_exceptions(self):
        with pytest.raises(click.UsageError):
            app(args=["connect", "--bogus", "alice@example.com"], prog_name="mosh-launcher", standalone_mode=False)

    def test_main_maps_usage_errors_to_254(self, capsys):
        assert cli_module.main(["connect", "--bogus", "alice@example.com"]) == 254
        assert "--help" in capsys.readouterr().err

    def test_connect_exit_code(self, app_config, monkeypatch):
        monkeypatch.setattr(cli_module, "load_config", lambda: app_config)
        monkeypatch.setattr(cli_module, "setup_logging", lambda config, verbose: None)
        with patch("mosh_launcher.cli.run_session", return_value=3):
            result = runner.invoke(app, ["connect", "alice@example.com"])
        assert result.exit_code == 3

    def test_connect_unexpected_error(self, app_config, monkeypatch):
        monkeypatch.setattr(cli_module, "load_config", lambda: app_config)
        monkeypatch.setattr(cli_module, "setup_logging", lambda config, verbose: None)
        with patch("mosh_launcher.cli.run_session", side_effect=RuntimeError("kaboom")):
            result = runner.invoke(app, ["connect", "alice@example.com"])
        assert result.exit_code == 255
