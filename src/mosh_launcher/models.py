"""Data models for mosh-launcher."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import Enum

from mosh_launcher.errors import InvalidArguments

TARGET_RE = re.compile(r"^(?P<user>[^\s@]+)@(?P<host>[^@\s]+)$")
PORT_RANGE_RE = re.compile(r"^(?P<low>\d{1,5})(?::(?P<high>\d{1,5}))?$")

DEFAULT_PORT_RANGE = "60000:61000"


class PredictMode(str, Enum):
    """Local echo prediction modes understood by mosh-client."""

    ADAPTIVE = "adaptive"
    ALWAYS = "always"
    NEVER = "never"


@dataclass(frozen=True)
class Target:
    """Remote endpoint named on the command line."""

    user: str
    host: str

    @classmethod
    def parse(cls, value: str) -> Target:
        match = TARGET_RE.match(value.strip())
        if match is None:
            raise InvalidArguments(f"Invalid target '{value}': expected user@host")
        return cls(user=match.group("user"), host=match.group("host"))

    def __str__(self) -> str:
        return f"{self.user}@{self.host}"


@dataclass(frozen=True)
class PortRange:
    """UDP port or port range requested from mosh-server."""

    low: int
    high: int

    @classmethod
    def parse(cls, value: str) -> PortRange:
        match = PORT_RANGE_RE.match(value.strip())
        if match is None:
            raise InvalidArguments(f"Invalid port range '{value}': expected PORT or PORT:PORT")
        low = int(match.group("low"))
        high = int(match.group("high") or low)
        if not 0 < low <= 65535 or not 0 < high <= 65535:
            raise InvalidArguments(f"Invalid port range '{value}': ports must be 1-65535")
        if low > high:
            raise InvalidArguments(f"Invalid port range '{value}': {low} is greater than {high}")
        return cls(low=low, high=high)

    def __str__(self) -> str:
        if self.low == self.high:
            return str(self.low)
        return f"{self.low}:{self.high}"


@dataclass(frozen=True)
class CommandSpec:
    """Executable name and its raw argument string."""

    program: str
    arguments: str = ""


@dataclass(frozen=True)
class HandshakeResult:
    """Port and session key announced by mosh-server."""

    port: str
    secret: str = field(repr=False)


@dataclass
class SessionOptions:
    """Per-invocation settings for one connect run. Empty strings mean unset."""

    client_path: str = ""
    ssh_command: str = ""
    server_command: str = ""
    ssh_args: list[str] = field(default_factory=list)
    port_range: str = ""
    predict: PredictMode | None = None
    no_init: bool = False
