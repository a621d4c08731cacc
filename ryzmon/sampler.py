"""Counter readers for /proc/stat and /proc/meminfo.

Both readers are stateless: they parse one snapshot and return it.  Delta
bookkeeping lives in the scheduler.
"""

from __future__ import annotations

import math

from .errors import ParseError
from .hostio import ReadFn, read_text_file
from .models import CounterSample, MemorySample

PROC_STAT: str = "/proc/stat"
PROC_MEMINFO: str = "/proc/meminfo"

_MEM_TOTAL: str = "MemTotal:"
_MEM_AVAILABLE: str = "MemAvailable:"


def round_half_up(value: float) -> int:
    """Round like the panel always has: .5 goes up, not to even."""
    return math.floor(value + 0.5)


def _clamp_pct(value: int) -> int:
    return min(100, max(0, value))


def parse_cpu_line(line: str) -> CounterSample:
    """Parse the aggregate ``cpu`` line into (total, idle) jiffies.

    Only user, nice, system and idle are counted.
    """
    fields = line.split()[1:5]
    if len(fields) < 4:
        raise ParseError(f"expected 4 cpu fields, got {len(fields)}")
    try:
        user, nice, system, idle = (int(f) for f in fields)
    except ValueError as e:
        raise ParseError(f"non-numeric cpu field in {line.strip()!r}") from e
    return CounterSample(
        total_jiffies=user + nice + system + idle,
        idle_jiffies=idle,
    )


def sample_cpu(read: ReadFn = read_text_file, path: str = PROC_STAT) -> CounterSample:
    text = read(path).decode("utf-8", errors="replace")
    first_line = text.split("\n", 1)[0]
    return parse_cpu_line(first_line)


def _parse_kb(line: str, label: str) -> int:
    parts = line[len(label):].split()
    if not parts:
        raise ParseError(f"{label} has no value")
    try:
        return int(parts[0])
    except ValueError as e:
        raise ParseError(f"{label} value {parts[0]!r} is not an integer") from e


def parse_meminfo(text: str) -> MemorySample:
    total: int | None = None
    available: int | None = None
    for line in text.splitlines():
        if line.startswith(_MEM_TOTAL):
            total = _parse_kb(line, _MEM_TOTAL)
        elif line.startswith(_MEM_AVAILABLE):
            available = _parse_kb(line, _MEM_AVAILABLE)
        if total is not None and available is not None:
            break

    if total is None:
        raise ParseError("MemTotal not found")
    if available is None:
        raise ParseError("MemAvailable not found")
    if total <= 0:
        raise ParseError("MemTotal is zero")
    return MemorySample(total=total, available=available)


def sample_memory(
    read: ReadFn = read_text_file, path: str = PROC_MEMINFO,
) -> MemorySample:
    return parse_meminfo(read(path).decode("utf-8", errors="replace"))


def cpu_usage_pct(prev_total: int, prev_idle: int, sample: CounterSample) -> int | None:
    """Busy percentage since the previous sample, or None without a baseline."""
    if prev_total <= 0:
        return None
    total_delta = sample.total_jiffies - prev_total
    if total_delta <= 0:
        return None
    idle_delta = sample.idle_jiffies - prev_idle
    return _clamp_pct(round_half_up((1 - idle_delta / total_delta) * 100))


def memory_usage_pct(sample: MemorySample) -> int:
    used = sample.total - sample.available
    return _clamp_pct(round_half_up(used / sample.total * 100))
