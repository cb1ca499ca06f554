"""Tests for configuration module."""

from __future__ import annotations

import pytest

import mosh_launcher.config as cfg_module
from mosh_launcher.config import LOG_FILE, AppConfig, ClientConfig, SessionConfig, SshConfig, load_config, save_config


@pytest.fixture
def config_paths(tmp_path, monkeypatch):
    config_file = tmp_path / "config.toml"
    monkeypatch.setattr(cfg_module, "CONFIG_FILE", config_file)
    monkeypatch.setattr(cfg_module, "CONFIG_DIR", tmp_path)
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


class TestAppConfig:
    def test_defaults(self):
        config = AppConfig()
        assert config.client.path == ""
        assert config.ssh.command == "ssh"
        assert config.ssh.server == "mosh-server"
        assert config.session.port_range == "60000:61000"
        assert config.session.predict == ""
        assert config.session.no_init is False
        assert config.logging.level == "WARNING"
        assert config.logging.file == str(LOG_FILE)

    def test_missing_file_gives_defaults(self, config_paths):
        assert load_config() == AppConfig()

    def test_save_and_load(self, config_paths):
        config = AppConfig(
            client=ClientConfig(path="/opt/mosh/mosh-client"),
            ssh=SshConfig(command="ssh -p 2222", server="/usr/local/bin/mosh-server"),
            session=SessionConfig(port_range="60100:60200", predict="never", no_init=True),
        )

        save_config(config)
        assert config_paths.exists()

        loaded = load_config()
        assert loaded.client.path == "/opt/mosh/mosh-client"
        assert loaded.ssh.command == "ssh -p 2222"
        assert loaded.ssh.server == "/usr/local/bin/mosh-server"
        assert loaded.session.port_range == "60100:60200"
        assert loaded.session.predict == "never"
        assert loaded.session.no_init is True

    def test_env_overrides(self, config_paths, monkeypatch):
        save_config(AppConfig(client=ClientConfig(path="/from/file")))
        monkeypatch.setenv("MOSH_LAUNCHER_CLIENT", "/from/env")
        monkeypatch.setenv("MOSH_LAUNCHER_SSH", "ssh -4")
        monkeypatch.setenv("MOSH_LAUNCHER_PORT_RANGE", "60001")
        monkeypatch.setenv("MOSH_LAUNCHER_LOG_LEVEL", "DEBUG")

        loaded = load_config()
        assert loaded.client.path == "/from/env"
        assert loaded.ssh.command == "ssh -4"
        assert loaded.session.port_range == "60001"
        assert loaded.logging.level == "DEBUG"
