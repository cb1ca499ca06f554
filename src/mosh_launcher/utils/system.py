"""System utility checks."""

from __future__ import annotations

import ipaddress
import logging
import shutil
import socket
import subprocess

from mosh_launcher.errors import HostResolutionFailed

logger = logging.getLogger(__name__)


def check_ssh(command: str = "ssh") -> tuple[bool, str]:
    """Check if the ssh client is installed and return its version."""
    ssh_path = shutil.which(command)
    if not ssh_path:
        return False, f"'{command}' not found on PATH. Install an OpenSSH client."
    try:
        result = subprocess.run(
            [ssh_path, "-V"],
            capture_output=True,
            text=True,
            timeout=10,
        )
        # OpenSSH prints its version banner on stderr
        version = result.stderr.strip() or result.stdout.strip()
        return True, version
    except subprocess.TimeoutExpired:
        return False, "ssh version check timed out"
    except OSError as e:
        return False, f"Error checking ssh: {e}"


def resolve_host(host: str) -> str:
    """Resolve a host name or IP literal to an address string."""
    try:
        return str(ipaddress.ip_address(host.strip("[]")))
    except ValueError:
        pass

    try:
        infos = socket.getaddrinfo(host, None, type=socket.SOCK_DGRAM)
    except (socket.gaierror, UnicodeError) as e:
        raise HostResolutionFailed(f"Failed to resolve host '{host}': {e}") from e

    if not infos:
        raise HostResolutionFailed(f"Failed to resolve host '{host}'.")

    address = infos[0][4][0]
    logger.debug("Resolved %s to %s", host, address)
    return address
