"""Session orchestration: target -> handshake -> mosh-client."""

from __future__ import annotations

import enum
import logging

from rich.console import Console

from mosh_launcher.config import AppConfig
from mosh_launcher.errors import InvalidArguments
from mosh_launcher.models import PortRange, PredictMode, SessionOptions, Target
from mosh_launcher.services.client import build_client_env, find_client, launch
from mosh_launcher.services.handshake import build_ssh_command, negotiate
from mosh_launcher.utils.system import resolve_host

logger = logging.getLogger(__name__)


class SessionState(enum.Enum):
    PARSE_TARGET = "parse-target"
    RESOLVE_REMOTE_COMMAND = "resolve-remote-command"
    AUTHENTICATE = "authenticate"
    BUILD_ENVIRONMENT = "build-environment"
    RESOLVE_CLIENT_PATH = "resolve-client-path"
    LAUNCH_CLIENT = "launch-client"
    DONE = "done"
    FAILED = "failed"


def parse_predict(value: str) -> PredictMode | None:
    """Map a config or env value to a prediction mode; empty means unset."""
    if not value:
        return None
    try:
        return PredictMode(value.lower())
    except ValueError:
        choices = ", ".join(mode.value for mode in PredictMode)
        raise InvalidArguments(f"Invalid prediction mode '{value}': expected one of {choices}") from None


def merge_options(options: SessionOptions, config: AppConfig) -> SessionOptions:
    """Fill options left unset on the command line from the config."""
    return SessionOptions(
        client_path=options.client_path or config.client.path,
        ssh_command=options.ssh_command or config.ssh.command,
        server_command=options.server_command or config.ssh.server,
        ssh_args=list(options.ssh_args),
        port_range=options.port_range or config.session.port_range,
        predict=options.predict or parse_predict(config.session.predict),
        no_init=options.no_init or config.session.no_init,
    )


class Session:
    """One connect run. Every step happens once, in order."""

    def __init__(self, options: SessionOptions, console: Console | None = None) -> None:
        self.options = options
        self.console = console or Console()
        self.state = SessionState.PARSE_TARGET
        self.error: Exception | None = None

    def _enter(self, state: SessionState) -> None:
        logger.debug("Session state: %s -> %s", self.state.value, state.value)
        self.state = state

    def run(self, target_text: str) -> int:
        """Run the session and return mosh-client's exit code."""
        try:
            return self._run(target_text)
        except Exception as e:
            logger.debug("Session failed in state %s: %s", self.state.value, e)
            self.error = e
            self._enter(SessionState.FAILED)
            raise

    def _run(self, target_text: str) -> int:
        target = Target.parse(target_text)
        port_range = PortRange.parse(self.options.port_range)

        self._enter(SessionState.RESOLVE_REMOTE_COMMAND)
        ssh = build_ssh_command(target, self.options, port_range)

        self._enter(SessionState.AUTHENTICATE)
        handshake = negotiate(ssh.program, ssh.arguments)

        self._enter(SessionState.BUILD_ENVIRONMENT)
        predict = self.options.predict.value if self.options.predict else None
        env = build_client_env(target.user, handshake.secret, predict, self.options.no_init)
        address = resolve_host(target.host)

        self._enter(SessionState.RESOLVE_CLIENT_PATH)
        client_path = find_client(self.options.client_path)

        self._enter(SessionState.LAUNCH_CLIENT)
        self.console.clear()
        exit_code = launch(client_path, [address, handshake.port], env)

        self._enter(SessionState.DONE)
        return exit_code


def run_session(target: str, options: SessionOptions, config: AppConfig, console: Console | None = None) -> int:
    """Connect to ``target`` and return the remote session's exit code."""
    return Session(merge_options(options, config), console).run(target)
