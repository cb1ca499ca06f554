"""mosh-client discovery and launch."""

from __future__ import annotations

import logging
import os
import shutil
import sys
from collections.abc import Mapping, Sequence
from pathlib import Path

from mosh_launcher.errors import ClientLaunchFailed, ClientNotFound
from mosh_launcher.utils.process import spawned

logger = logging.getLogger(__name__)

CLIENT_EXE_NAME = "mosh-client.exe" if sys.platform == "win32" else "mosh-client"
CLIENT_CONFIG_KEY = "client.path"


def client_not_found_message() -> str:
    return "\n".join(
        [
            f"{CLIENT_EXE_NAME} cannot be found. Possible solutions are:",
            "  - Pass the full path with the '--client' option;",
            f"  - Set '{CLIENT_CONFIG_KEY}' with 'mosh-launcher config {CLIENT_CONFIG_KEY} <path>'"
            " or the MOSH_LAUNCHER_CLIENT environment variable;",
            f"  - Copy {CLIENT_EXE_NAME} (with this exact name) into the current working directory;",
            f"  - Copy {CLIENT_EXE_NAME} (with this exact name) next to the mosh-launcher executable;",
            f"  - Add the directory containing {CLIENT_EXE_NAME} to PATH.",
        ]
    )


def find_client(
    override: str = "",
    *,
    cwd: Path | None = None,
    self_dir: Path | None = None,
) -> str:
    """Locate mosh-client.

    Strategies, in order: explicit override, current working directory,
    the directory holding the running launcher, PATH.
    """
    if override:
        path = Path(override).expanduser()
        if path.is_file():
            return str(path.resolve())
        logger.warning("Configured client path does not exist: %s", path)

    cwd = Path.cwd() if cwd is None else cwd
    candidate = cwd / CLIENT_EXE_NAME
    if candidate.is_file():
        return str(candidate.resolve())

    if self_dir is None and sys.argv and sys.argv[0]:
        self_dir = Path(sys.argv[0]).resolve().parent
    if self_dir is not None:
        candidate = self_dir / CLIENT_EXE_NAME
        if candidate.is_file():
            return str(candidate.resolve())

    found = shutil.which(CLIENT_EXE_NAME)
    if found:
        return found

    raise ClientNotFound(client_not_found_message())


def build_client_env(
    user: str,
    secret: str,
    predict: str | None = None,
    no_init: bool = False,
) -> dict[str, str]:
    """Build the variables mosh-client reads at startup."""
    env = {"MOSH_KEY": secret, "MOSH_USER": user}
    if predict:
        env["MOSH_PREDICTION_DISPLAY"] = predict
    if no_init:
        env["MOSH_NO_TERM_INIT"] = "1"
    return env


def launch(program_path: str, args: Sequence[str], env: Mapping[str, str]) -> int:
    """Run mosh-client attached to this terminal and return its exit code.

    ``env`` is layered on top of the inherited environment. A child killed
    by signal N is reported as ``128 + N``, like a POSIX shell does.
    """
    merged = {**os.environ, **env}
    logger.info("Launching %s %s", program_path, " ".join(args))

    try:
        with spawned([program_path, *args], env=merged) as proc:
            returncode = proc.wait()
    except OSError as e:
        raise ClientLaunchFailed(f"Failed to start '{program_path}': {e}") from e

    if returncode < 0:
        logger.info("Client terminated by signal %d", -returncode)
        return 128 - returncode
    logger.info("Client exited with code %d", returncode)
    return returncode
