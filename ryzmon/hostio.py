"""Host I/O primitives: whole-file reads and bounded subprocess runs."""

from __future__ import annotations

import subprocess
from dataclasses import dataclass
from typing import Callable, Sequence

from .errors import ProcessTimeout, SourceReadError

# procfs/sysfs files we read are tiny; never slurp more than this.
MAX_READ_BYTES: int = 64 * 1024


@dataclass(frozen=True)
class ProcessResult:
    exit_code: int
    stdout: str


ReadFn = Callable[[str], bytes]
RunFn = Callable[[Sequence[str], float], ProcessResult]


def read_text_file(path: str) -> bytes:
    """Read a whole (small) file synchronously."""
    try:
        with open(path, "rb") as f:
            return f.read(MAX_READ_BYTES)
    except OSError as e:
        raise SourceReadError(f"cannot read {path}: {e.strerror or e}") from e


def run_process(argv: Sequence[str], timeout: float) -> ProcessResult:
    """Run a command to completion under a hard timeout.

    The child is killed when the timeout expires.
    """
    try:
        r = subprocess.run(
            list(argv),
            capture_output=True, encoding="utf-8", errors="replace",
            timeout=timeout)
    except subprocess.TimeoutExpired as e:
        raise ProcessTimeout(
            f"{argv[0]} exceeded {timeout:g}s") from e
    except OSError as e:
        raise SourceReadError(f"cannot run {argv[0]}: {e.strerror or e}") from e
    return ProcessResult(exit_code=r.returncode, stdout=r.stdout or "")
