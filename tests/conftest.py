# noqa: D104
"""Pytest fixtures for shiv-runner tests."""

from __future__ import annotations

from pathlib import Path
from typing import BinaryIO, List, Optional, Sequence

import pytest

from shiv_runner import main as cli
from shiv_runner.process import ProcessLauncher

RUNNER_ENV_VARS = (
    "MACHINE",
    "EXTRUDER",
    "MATERIAL",
    "SHIV_BIN_PATH",
    "SHIV_CONFIG_DIR",
    "SHIV_LOG_LEVEL",
)


class RecordingLauncher(ProcessLauncher):
    """Launcher stub that records commands instead of spawning them."""

    def __init__(self, exit_code: int = 0, error: Optional[Exception] = None) -> None:
        self.exit_code = exit_code
        self.error = error
        self.calls: List[List[str]] = []
        self.stdin_data: List[Optional[bytes]] = []

    @property
    def invoked(self) -> bool:
        return bool(self.calls)

    def launch(self, command: Sequence[str], stdin: Optional[BinaryIO] = None) -> int:
        self.calls.append(list(command))
        self.stdin_data.append(stdin.read() if stdin is not None else None)
        if self.error is not None:
            raise self.error
        return self.exit_code


@pytest.fixture(autouse=True)
def clean_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Isolate tests from the caller's profile selectors and any .env file."""
    for name in RUNNER_ENV_VARS:
        # setenv first so teardown also removes values loaded from .env files
        monkeypatch.setenv(name, "")
        monkeypatch.delenv(name)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def launcher(monkeypatch: pytest.MonkeyPatch) -> RecordingLauncher:
    """Replace the CLI's process launcher with a recording stub."""
    stub = RecordingLauncher()
    monkeypatch.setattr(cli, "get_launcher", lambda: stub)
    return stub
