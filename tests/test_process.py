"""Tests for scoped subprocess ownership."""

from __future__ import annotations

import subprocess
import sys

import pytest

import mosh_launcher.utils.process as process_module
from mosh_launcher.utils.process import spawned

SLEEPER = [sys.executable, "-c", "import time; time.sleep(30)"]


class TestSpawned:
    def test_reaped_after_normal_exit(self):
        with spawned([sys.executable, "-c", "print('hi')"], stdout=subprocess.PIPE, text=True) as proc:
            assert proc.stdout.readline().strip() == "hi"
        assert proc.returncode == 0
        assert proc.stdout.closed

    def test_killed_and_reaped_on_error(self):
        with pytest.raises(RuntimeError):
            with spawned(SLEEPER) as proc:
                raise RuntimeError("boom")
        assert proc.returncode is not None

    def test_killed_after_grace_period(self, monkeypatch):
        monkeypatch.setattr(process_module, "EXIT_GRACE_SECONDS", 0.1)
        with spawned(SLEEPER, stdout=subprocess.PIPE) as proc:
            pass
        assert proc.returncode is not None
        assert proc.returncode != 0
