"""Launcher error taxonomy. Every error carries the process exit code it maps to."""

from __future__ import annotations

EXIT_INVALID_ARGS = 254
EXIT_CONNECTION_ERROR = 255


class LauncherError(Exception):
    """Base class for failures reported at the CLI boundary."""

    exit_code: int = EXIT_CONNECTION_ERROR

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class InvalidArguments(LauncherError):
    """Malformed target, port range or option value."""

    exit_code = EXIT_INVALID_ARGS


class MalformedCommand(LauncherError):
    """Inconsistent quoting in a command string."""


class ClientNotFound(LauncherError):
    """mosh-client could not be located by any strategy."""


class ClientLaunchFailed(LauncherError):
    """mosh-client was found but could not be started."""


class HandshakeFailed(LauncherError):
    """ssh exited without printing a MOSH CONNECT line."""

    def __init__(self, message: str, returncode: int | None = None) -> None:
        super().__init__(message)
        self.returncode = returncode


class HostResolutionFailed(LauncherError):
    """Target host did not resolve to an address."""
