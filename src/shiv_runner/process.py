# noqa: D401
"""Process launching for the shiv slicing engine."""

from __future__ import annotations

import bz2
import gzip
import lzma
import shutil
import signal
import subprocess
import threading
import time
from abc import ABC, abstractmethod
from contextlib import contextmanager, suppress
from typing import BinaryIO, Iterator, Optional, Sequence

import lz4.frame

from .logging import get_logger
from .models import Compression, Invocation, RunResult

LOGGER = get_logger(__name__)

# Shell conventions for commands that cannot be started
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126
EXIT_BAD_INPUT = 1

_OPENERS = {
    Compression.GZIP: gzip.open,
    Compression.BZIP2: bz2.open,
    Compression.XZ: lzma.open,
    Compression.LZ4: lz4.frame.open,
}

# Keyboard signals the terminal delivers to the whole foreground group
TERMINAL_SIGNALS = tuple(
    getattr(signal, name) for name in ("SIGINT", "SIGQUIT") if hasattr(signal, name)
)


def _hold_signal(signum, frame) -> None:
    LOGGER.debug("Signal received while slicer runs", signal=signum)


@contextmanager
def terminal_signals_held() -> Iterator[None]:
    """Keep keyboard signals from interrupting the runner while a child runs.

    The child still receives them and decides its own exit status. The
    handler is a caught one, not ``SIG_IGN``, so the child starts with default
    dispositions after exec. Signals that were already ignored stay ignored.
    Outside the main thread this is a no-op.
    """
    if threading.current_thread() is not threading.main_thread():
        yield
        return

    previous = {}
    for signum in TERMINAL_SIGNALS:
        handler = signal.getsignal(signum)
        if handler is not signal.SIG_IGN:
            previous[signum] = signal.signal(signum, _hold_signal)
    try:
        yield
    finally:
        for signum, handler in previous.items():
            signal.signal(signum, handler)


class ShivRunnerError(Exception):
    """Base exception for runner errors."""

    pass


class LaunchError(ShivRunnerError):
    """The engine could not be run. Carries the exit code to report."""

    def __init__(self, message: str, exit_code: int = 1) -> None:
        super().__init__(message)
        self.exit_code = exit_code


class ProcessLauncher(ABC):
    """Runs a command and reports its exit code."""

    @abstractmethod
    def launch(self, command: Sequence[str], stdin: Optional[BinaryIO] = None) -> int:
        """Run ``command`` to completion.

        Args:
            command: Argument vector, executable first
            stdin: Optional stream piped into the child's stdin

        Returns:
            Child exit code

        Raises:
            LaunchError: If the command could not be started
        """


class SubprocessLauncher(ProcessLauncher):
    """Launch the engine as a child process with inherited stdout/stderr."""

    def launch(self, command: Sequence[str], stdin: Optional[BinaryIO] = None) -> int:
        LOGGER.info("Launching slicer", command=list(command))

        with terminal_signals_held():
            try:
                process = subprocess.Popen(
                    list(command),
                    stdin=subprocess.PIPE if stdin is not None else None,
                )
            except FileNotFoundError:
                raise LaunchError(f"Executable not found: {command[0]}", exit_code=EXIT_NOT_FOUND)
            except PermissionError:
                raise LaunchError(f"Permission denied: {command[0]}", exit_code=EXIT_NOT_EXECUTABLE)

            if stdin is not None:
                self._feed(process, stdin)

            return_code = process.wait()

        if return_code < 0:
            # Killed by signal N, report as the shell does
            return_code = 128 - return_code

        LOGGER.info("Slicer exited", exit_code=return_code)
        return return_code

    @staticmethod
    def _feed(process: subprocess.Popen, stream: BinaryIO) -> None:
        """Copy ``stream`` into the child's stdin, then close it."""
        try:
            shutil.copyfileobj(stream, process.stdin)
        except BrokenPipeError:
            LOGGER.warning("Slicer closed stdin before input was fully written")
        except (OSError, EOFError, RuntimeError, lzma.LZMAError) as e:
            with suppress(BrokenPipeError):
                process.stdin.close()
            process.wait()
            raise LaunchError(f"Failed to decompress input: {e}", exit_code=EXIT_BAD_INPUT)

        with suppress(BrokenPipeError):
            process.stdin.close()


@contextmanager
def open_input(invocation: Invocation) -> Iterator[Optional[BinaryIO]]:
    """Yield a decompressing reader for compressed input, else ``None``."""
    if not invocation.reads_stdin:
        yield None
        return

    opener = _OPENERS[invocation.compression]
    try:
        stream = opener(invocation.input_path, "rb")
    except OSError as e:
        raise LaunchError(f"Cannot read input {invocation.input_path}: {e}", exit_code=EXIT_BAD_INPUT)

    with stream:
        yield stream


def run_timed(launcher: ProcessLauncher, invocation: Invocation) -> RunResult:
    """Run the engine once and measure wall-clock time of the child only.

    Failures are not retried.
    """
    with open_input(invocation) as stream:
        start = time.perf_counter()
        exit_code = launcher.launch(invocation.command, stdin=stream)
        elapsed = time.perf_counter() - start

    LOGGER.debug("Timed slicer run", exit_code=exit_code, elapsed_seconds=elapsed)
    return RunResult(exit_code=exit_code, elapsed_seconds=elapsed)


def get_launcher() -> ProcessLauncher:
    """Get the default process launcher.

    Returns:
        SubprocessLauncher instance
    """
    return SubprocessLauncher()


__all__ = [
    "EXIT_BAD_INPUT",
    "EXIT_NOT_EXECUTABLE",
    "EXIT_NOT_FOUND",
    "LaunchError",
    "ProcessLauncher",
    "ShivRunnerError",
    "SubprocessLauncher",
    "TERMINAL_SIGNALS",
    "get_launcher",
    "open_input",
    "run_timed",
    "terminal_signals_held",
]
