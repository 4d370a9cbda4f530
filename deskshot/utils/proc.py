# deskshot/utils/proc.py
from __future__ import annotations

"""External command helpers
--------------------------
Single entry point for running platform tools (powershell, screencapture,
xrandr, import) with a bounded timeout and captured output.
"""

import subprocess
from dataclasses import dataclass
from typing import Callable, Sequence

from deskshot.utils.logger import get_logger


log = get_logger(__name__)


@dataclass
class CommandResult:
    args: list[str]
    returncode: int
    stdout: str
    stderr: str


class CommandError(Exception):
    """An external command could not be started, timed out, or exited non-zero."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "", timed_out: bool = False):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr
        self.timed_out = timed_out


# Signature shared by run_command and test doubles
CommandRunner = Callable[[Sequence[str], float], CommandResult]


def run_command(args: Sequence[str], timeout: float) -> CommandResult:
    """
    Run `args` without a shell and return its captured output.

    Raises:
        CommandError when the executable is missing, the timeout elapses,
        or the process exits with a non-zero status.
    """
    argv = [str(a) for a in args]
    log.debug(f"exec: {' '.join(argv)} (timeout {timeout:g}s)")
    try:
        proc = subprocess.run(argv, capture_output=True, text=True, errors="replace", timeout=timeout)
    except FileNotFoundError as e:
        raise CommandError(f"{argv[0]}: command not found") from e
    except subprocess.TimeoutExpired as e:
        raise CommandError(f"{argv[0]} timed out after {timeout:g}s", timed_out=True) from e

    result = CommandResult(args=argv, returncode=proc.returncode, stdout=proc.stdout or "", stderr=proc.stderr or "")
    if proc.returncode != 0:
        detail = result.stderr.strip() or result.stdout.strip() or f"exit status {proc.returncode}"
        raise CommandError(
            f"{argv[0]} failed: {detail}",
            returncode=proc.returncode,
            stderr=result.stderr,
        )
    return result
