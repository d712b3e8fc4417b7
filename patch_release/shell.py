"""Shell utilities.

Provides a thin wrapper around subprocess calls for running external tools
(git, patch, tar), plus output formatting helpers. Pipeline steps accept a
``runner`` argument so tests can swap in a recording fake.
"""

from __future__ import annotations

import subprocess
from pathlib import Path
from typing import Any, Protocol


class Runner(Protocol):
    """Callable that executes a command, shaped like :func:`run`."""

    def __call__(
        self,
        *args: str,
        cwd: Path | None = None,
        capture: bool = False,
        check: bool = True,
        text: bool = True,
    ) -> subprocess.CompletedProcess[Any]: ...


def run(
    *args: str,
    cwd: Path | None = None,
    capture: bool = False,
    check: bool = True,
    text: bool = True,
) -> subprocess.CompletedProcess[Any]:
    """Run an external command.

    Output streams directly to the terminal unless ``capture`` is set, so
    users can follow tool progress in the CI log.

    Args:
        *args: Command and arguments (e.g., "patch", "-p1", "-i", "patch.diff").
        cwd: Working directory for the command (defaults to the current one).
        capture: If True, capture stdout/stderr on the returned object.
        check: If True (default), raise on non-zero exit.
        text: If True (default), decode output as text. Set to False to get
              raw bytes, e.g. for diffs that must be written back verbatim.

    Returns:
        CompletedProcess with returncode (and output when captured).

    Raises:
        FileNotFoundError: If the executable does not exist.
        subprocess.CalledProcessError: On non-zero exit when ``check`` is set.
    """
    return subprocess.run(
        args, cwd=cwd, capture_output=capture, text=text, check=check
    )


def git(*args: str, cwd: Path | None = None, runner: Runner = run) -> str:
    """Run a git command and return stripped stdout, raising on failure."""
    return runner("git", *args, cwd=cwd, capture=True).stdout.strip()


def step(msg: str) -> None:
    """Print a visually distinct step header.

    Used to separate the phases of the release pipeline in terminal output.
    """
    print(f"\n{'─' * 60}\n{msg}\n{'─' * 60}")
