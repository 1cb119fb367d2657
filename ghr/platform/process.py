"""Subprocess execution returning ``Result``.

Only read-only git queries go through here (owner/repo inference). The
child never gets a terminal: stdin is closed so a credential prompt fails
fast instead of hanging the run.
"""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from pathlib import Path

from ghr.core.result import Err, Ok, Result

__all__ = ["ProcessError", "run"]


@dataclass(frozen=True, slots=True)
class ProcessError:
    """A command that exited non-zero, or could not be started.

    ``returncode`` is -1 when the process never ran (missing executable,
    missing cwd, timeout); ``stderr`` then holds the reason.
    """

    command: tuple[str, ...]
    returncode: int
    stdout: str
    stderr: str

    def __str__(self) -> str:
        head = " ".join(self.command[:3])
        tail = " ..." if len(self.command) > 3 else ""
        return f"{head}{tail} failed (exit {self.returncode})"


def _not_started(cmd: list[str], reason: str) -> Err[ProcessError]:
    return Err(ProcessError(command=tuple(cmd), returncode=-1, stdout="", stderr=reason))


def run(cmd: list[str], cwd: Path, *, timeout: float | None = None) -> Result[str, ProcessError]:
    """Run ``cmd`` in ``cwd`` and return its stdout if it exits 0."""
    try:
        proc = subprocess.run(
            cmd,
            cwd=str(cwd),
            stdin=subprocess.DEVNULL,
            capture_output=True,
            text=True,
            timeout=timeout,
            check=False,
        )
    except subprocess.TimeoutExpired:
        return _not_started(cmd, f"Command timed out after {timeout}s")
    except OSError as e:
        return _not_started(cmd, str(e))

    if proc.returncode == 0:
        return Ok(proc.stdout)
    return Err(
        ProcessError(
            command=tuple(cmd),
            returncode=proc.returncode,
            stdout=proc.stdout,
            stderr=proc.stderr,
        )
    )
