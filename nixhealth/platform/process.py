"""Subprocess execution for read-only external commands.

Every command goes through a ``CommandRunner`` so tests can substitute canned
responses, and every call carries a timeout so a hung tool cannot hang the
whole health run.

Usage:
    result = run(["nix", "--version"], timeout=10)
    match result:
        case Ok(stdout):
            print(stdout)
        case Err(error):
            print(f"Failed: {error}")
"""

from __future__ import annotations

import logging
import subprocess
from dataclasses import dataclass
from pathlib import Path
from typing import Protocol

from nixhealth.core.result import Err, Ok, Result

__all__ = [
    "DEFAULT_TIMEOUT",
    "CommandRunner",
    "DefaultCommandRunner",
    "ProcessError",
    "run",
]

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 10.0
"""Seconds an external command may take before it is abandoned."""


class CommandRunner(Protocol):
    """Protocol for running external commands.

    This abstraction allows mocking subprocess calls in tests.
    """

    def run(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> subprocess.CompletedProcess[str]:
        """Run a command and capture its output.

        Raises:
            OSError: If the command cannot be started.
            subprocess.TimeoutExpired: If it outlives ``timeout``.
        """
        ...


class DefaultCommandRunner:
    """Command runner using subprocess.run."""

    def run(
        self,
        args: list[str],
        *,
        cwd: Path | None = None,
        timeout: float | None = DEFAULT_TIMEOUT,
    ) -> subprocess.CompletedProcess[str]:
        logger.debug("running %s (cwd=%s)", " ".join(args), cwd or ".")
        return subprocess.run(
            args,
            capture_output=True,
            text=True,
            check=False,
            cwd=cwd,
            timeout=timeout,
        )


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that did not exit cleanly.

    ``returncode`` is -1 when the command never finished (it could not be
    started, or was killed at its timeout); ``stderr`` then holds the reason.
    """

    argv: tuple[str, ...]
    returncode: int
    stdout: str = ""
    stderr: str = ""

    @classmethod
    def not_finished(cls, argv: list[str], reason: str) -> ProcessError:
        return cls(tuple(argv), -1, stderr=reason)

    @property
    def command(self) -> str:
        """The command line, shortened to its first three words."""
        head = " ".join(self.argv[:3])
        return f"{head} ..." if len(self.argv) > 3 else head

    def __str__(self) -> str:
        if self.returncode == -1:
            return f"{self.command} failed: {self.stderr}"
        return f"{self.command} failed (exit {self.returncode})"


def run(
    cmd: list[str],
    *,
    cwd: Path | None = None,
    timeout: float | None = DEFAULT_TIMEOUT,
    runner: CommandRunner | None = None,
) -> Result[str, ProcessError]:
    """Run a command and return its stdout.

    Never raises for a missing binary, a timeout or a non-zero exit: each
    comes back as ``Err(ProcessError)``.
    """
    runner = runner or DefaultCommandRunner()
    try:
        proc = runner.run(cmd, cwd=cwd, timeout=timeout)
    except subprocess.TimeoutExpired:
        logger.debug("%s timed out after %ss", cmd[0], timeout)
        return Err(ProcessError.not_finished(cmd, f"timed out after {timeout}s"))
    except OSError as e:
        return Err(ProcessError.not_finished(cmd, str(e)))

    if proc.returncode == 0:
        return Ok(proc.stdout)
    return Err(ProcessError(tuple(cmd), proc.returncode, proc.stdout, proc.stderr))
