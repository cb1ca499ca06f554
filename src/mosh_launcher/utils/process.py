"""Scoped subprocess ownership."""

from __future__ import annotations

import logging
import subprocess
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from typing import Any

logger = logging.getLogger(__name__)

EXIT_GRACE_SECONDS = 5.0


@contextmanager
def spawned(argv: Sequence[str], **kwargs: Any) -> Iterator[subprocess.Popen]:
    """Start a process and guarantee it is reaped when the block exits.

    On a normal exit the child gets a short grace period to finish after its
    stdout is closed; if it is still running afterwards it is killed. If the
    block raises (including KeyboardInterrupt) the child is killed right away.
    """
    proc = subprocess.Popen(list(argv), **kwargs)
    try:
        yield proc
    except BaseException:
        proc.kill()
        raise
    finally:
        _reap(proc)


def _reap(proc: subprocess.Popen) -> None:
    if proc.stdout is not None:
        proc.stdout.close()
    try:
        proc.wait(timeout=EXIT_GRACE_SECONDS)
    except subprocess.TimeoutExpired:
        logger.warning("Process %d did not exit, killing it", proc.pid)
        proc.kill()
        proc.wait()
