"""Configuration management using TOML + environment variables."""

from __future__ import annotations

import os
import sys
from dataclasses import dataclass, field
from pathlib import Path

if sys.version_info >= (3, 11):
    import tomllib
else:
    try:
        import tomllib
    except ModuleNotFoundError:
        import tomli as tomllib  # type: ignore[no-redef]

import tomli_w

from mosh_launcher.models import DEFAULT_PORT_RANGE

CONFIG_DIR = Path.home() / ".mosh-launcher"
CONFIG_FILE = CONFIG_DIR / "config.toml"
LOG_FILE = CONFIG_DIR / "launcher.log"


@dataclass
class ClientConfig:
    path: str = ""


@dataclass
class SshConfig:
    command: str = "ssh"
    server: str = "mosh-server"


@dataclass
class SessionConfig:
    port_range: str = DEFAULT_PORT_RANGE
    predict: str = ""
    no_init: bool = False


@dataclass
class LoggingConfig:
    level: str = "WARNING"
    file: str = str(LOG_FILE)


@dataclass
class AppConfig:
    client: ClientConfig = field(default_factory=ClientConfig)
    ssh: SshConfig = field(default_factory=SshConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def ensure_config_dir() -> None:
    """Create config directory with secure permissions."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    os.chmod(CONFIG_DIR, 0o700)


def load_config() -> AppConfig:
    """Load configuration from TOML file with env var overrides."""
    config = AppConfig()

    if CONFIG_FILE.exists():
        with open(CONFIG_FILE, "rb") as f:
            data = tomllib.load(f)

        client = data.get("client", {})
        config.client.path = client.get("path", config.client.path)

        ssh = data.get("ssh", {})
        config.ssh.command = ssh.get("command", config.ssh.command)
        config.ssh.server = ssh.get("server", config.ssh.server)

        session = data.get("session", {})
        config.session.port_range = session.get("port_range", config.session.port_range)
        config.session.predict = session.get("predict", config.session.predict)
        config.session.no_init = session.get("no_init", config.session.no_init)

        logging_cfg = data.get("logging", {})
        config.logging.level = logging_cfg.get("level", config.logging.level)
        config.logging.file = logging_cfg.get("file", config.logging.file)

    # Environment variable overrides
    if env_client := os.environ.get("MOSH_LAUNCHER_CLIENT"):
        config.client.path = env_client
    if env_ssh := os.environ.get("MOSH_LAUNCHER_SSH"):
        config.ssh.command = env_ssh
    if env_server := os.environ.get("MOSH_LAUNCHER_SERVER"):
        config.ssh.server = env_server
    if env_ports := os.environ.get("MOSH_LAUNCHER_PORT_RANGE"):
        config.session.port_range = env_ports
    if env_predict := os.environ.get("MOSH_LAUNCHER_PREDICT"):
        config.session.predict = env_predict
    if env_log_level := os.environ.get("MOSH_LAUNCHER_LOG_LEVEL"):
        config.logging.level = env_log_level

    return config


def save_config(config: AppConfig) -> None:
    """Save configuration to TOML file."""
    ensure_config_dir()

    data = {
        "client": {
            "path": config.client.path,
        },
        "ssh": {
            "command": config.ssh.command,
            "server": config.ssh.server,
        },
        "session": {
            "port_range": config.session.port_range,
            "predict": config.session.predict,
            "no_init": config.session.no_init,
        },
        "logging": {
            "level": config.logging.level,
            "file": config.logging.file,
        },
    }

    with open(CONFIG_FILE, "wb") as f:
        tomli_w.dump(data, f)

    os.chmod(CONFIG_FILE, 0o600)
