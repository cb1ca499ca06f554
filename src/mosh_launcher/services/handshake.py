"""ssh handshake: start mosh-server remotely and capture its MOSH CONNECT line."""

from __future__ import annotations

import logging
import os
import re
import subprocess
from collections.abc import Mapping

from mosh_launcher.errors import HandshakeFailed, MalformedCommand
from mosh_launcher.models import CommandSpec, HandshakeResult, PortRange, SessionOptions, Target
from mosh_launcher.utils.command import join_arguments, split_arguments, split_command
from mosh_launcher.utils.process import spawned

logger = logging.getLogger(__name__)

HANDSHAKE_RE = re.compile(r"^\s*MOSH\s+CONNECT\s+(?P<port>\d{1,5})\s+(?P<secret>\S+)\s*$")

# Locale settings forwarded to mosh-server with -l
LOCALE_VARS = ("LANG", "LC_ALL", "LC_CTYPE")


def parse_handshake_line(line: str) -> HandshakeResult | None:
    """Return the port and key from a MOSH CONNECT line, or None."""
    match = HANDSHAKE_RE.match(line)
    if match is None:
        return None
    return HandshakeResult(port=match.group("port"), secret=match.group("secret"))


def build_server_command(
    server: str,
    port_range: PortRange,
    environ: Mapping[str, str] | None = None,
) -> list[str]:
    """Build the remote mosh-server invocation."""
    environ = os.environ if environ is None else environ

    cmd: list[str] = [server, "new", "-s", "-c", "256"]
    for name in LOCALE_VARS:
        if value := environ.get(name):
            cmd.extend(["-l", f"{name}={value}"])
    cmd.extend(["-p", str(port_range)])
    return cmd


def build_ssh_command(
    target: Target,
    options: SessionOptions,
    port_range: PortRange,
    environ: Mapping[str, str] | None = None,
) -> CommandSpec:
    """Assemble the ssh program and argument string for the handshake."""
    ssh = split_command(options.ssh_command)
    if not ssh.program:
        raise MalformedCommand("ssh command is empty")

    tokens = [
        "-n",
        "-tt",
        *options.ssh_args,
        str(target),
        "--",
        *build_server_command(options.server_command, port_range, environ),
    ]
    arguments = " ".join(part for part in (ssh.arguments, join_arguments(tokens)) if part)
    return CommandSpec(program=ssh.program, arguments=arguments)


def negotiate(command: str, arguments: str) -> HandshakeResult:
    """Run ``command`` and return the first MOSH CONNECT line it prints.

    stdout is read line by line until a handshake line shows up or the stream
    closes. stderr stays attached to the terminal so ssh can prompt for
    passwords and report errors. The process is reaped before returning.
    """
    argv = [command, *split_arguments(arguments)]
    logger.info("Starting handshake via %s", command)
    logger.debug("Handshake argv: %s", argv)

    try:
        with spawned(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
        ) as proc:
            for line in proc.stdout:
                result = parse_handshake_line(line)
                if result is not None:
                    logger.info("Handshake received, server port %s", result.port)
                    return result
                logger.debug("ssh: %s", line.rstrip())
            # No handshake: wait for ssh to exit on its own
            proc.wait()
    except OSError as e:
        raise HandshakeFailed(f"Failed to start '{command}': {e}") from e

    returncode = proc.returncode
    logger.warning("Handshake failed, %s exited with code %s", command, returncode)
    raise HandshakeFailed(
        f"Remote server has not returned a valid MOSH CONNECT response (ssh exit code {returncode}).",
        returncode=returncode,
    )
