"""GPU telemetry: one-time strategy resolution and per-strategy readers.

Resolution order is sysfs busy-percent nodes first, then ``radeontop`` if
it is installed, else nothing.  The strategy is fixed for the session.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import Callable, Iterable

from .errors import ParseError, ProcessTimeout, SourceReadError
from .hostio import ReadFn, RunFn, read_text_file, run_process
from .models import GpuResolution, GpuStrategy, Metric, MetricReading
from .sampler import round_half_up
from .settings import GpuConfig

logger = logging.getLogger(__name__)

SYSFS_GPU_PATHS: tuple[str, ...] = (
    "/sys/class/drm/card0/device/gpu_busy_percent",
    "/sys/class/drm/card1/device/gpu_busy_percent",
    "/sys/class/drm/card0/device/utilization",
    "/sys/class/hwmon/hwmon1/device/gpu_busy_percent",
    "/sys/class/hwmon/hwmon2/device/gpu_busy_percent",
)

DEFAULT_TOOL: str = "radeontop"
DEFAULT_TOOL_TIMEOUT: float = 2.0
DEFAULT_LOOKUP_TIMEOUT: float = 2.0

_LEADING_INT_RE = re.compile(r"^[+-]?\d+")
_TOOL_GPU_RE = re.compile(r"gpu\s+([0-9.]+)%", re.IGNORECASE)
# Leading decimal of the captured token: "1.2.3" reads as 1.2.
_LEADING_FLOAT_RE = re.compile(r"\d+(?:\.\d*)?|\.\d+")


@dataclass
class GpuSource:
    """Everything the GPU readers need: candidates, tool, and I/O hooks."""
    sysfs_paths: tuple[str, ...] = SYSFS_GPU_PATHS
    tool: str = DEFAULT_TOOL
    tool_timeout: float = DEFAULT_TOOL_TIMEOUT
    lookup_timeout: float = DEFAULT_LOOKUP_TIMEOUT
    read: ReadFn = field(default=read_text_file, repr=False)
    run: RunFn = field(default=run_process, repr=False)


def source_from_config(
    config: GpuConfig,
    read: ReadFn = read_text_file,
    run: RunFn = run_process,
) -> GpuSource:
    """Build a GpuSource from settings; an empty path list means the defaults."""
    return GpuSource(
        sysfs_paths=config.sysfs_paths or SYSFS_GPU_PATHS,
        tool=config.tool,
        tool_timeout=config.tool_timeout,
        lookup_timeout=config.lookup_timeout,
        read=read,
        run=run,
    )


# ---------------------------------------------------------------------------
# Parsing
# ---------------------------------------------------------------------------

def parse_busy_value(raw: bytes | str) -> int:
    """Parse the leading integer of a sysfs busy file (``"42\\n"`` -> 42)."""
    text = raw.decode("utf-8", errors="replace") if isinstance(raw, bytes) else raw
    m = _LEADING_INT_RE.match(text.strip())
    if m is None:
        raise ParseError(f"not an integer: {text.strip()[:32]!r}")
    return int(m.group(0))


def is_percentage(value: int) -> bool:
    return 0 <= value <= 100


def parse_tool_dump(output: str) -> int | None:
    """Extract GPU busy % from a radeontop dump; the last matching line wins."""
    for line in reversed(output.strip().splitlines()):
        line = line.strip()
        if not line or "gpu" not in line.lower():
            continue
        m = _TOOL_GPU_RE.search(line)
        if m is None:
            continue
        number = _LEADING_FLOAT_RE.match(m.group(1))
        if number is None:
            continue
        return min(100, max(0, round_half_up(float(number.group(0)))))
    return None


# ---------------------------------------------------------------------------
# Ordered probing
# ---------------------------------------------------------------------------

def first_valid(
    paths: Iterable[str],
    accept: Callable[[int], bool],
    read: ReadFn = read_text_file,
) -> tuple[str, int] | None:
    """Return ``(path, value)`` for the first path whose value passes ``accept``.

    Each candidate is tried in isolation; read and parse failures skip it.
    """
    for path in paths:
        try:
            value = parse_busy_value(read(path))
        except (SourceReadError, ParseError) as e:
            logger.debug("gpu candidate %s skipped: %s", path, e)
            continue
        if accept(value):
            return path, value
        logger.debug("gpu candidate %s rejected value %d", path, value)
    return None


def _tool_location(source: GpuSource) -> str | None:
    try:
        r = source.run(["which", source.tool], source.lookup_timeout)
    except (SourceReadError, ProcessTimeout) as e:
        logger.debug("lookup of %s failed: %s", source.tool, e)
        return None
    if r.exit_code != 0:
        return None
    return r.stdout.strip() or source.tool


def resolve_gpu_strategy(source: GpuSource | None = None) -> GpuResolution:
    """Pick the GPU telemetry strategy for this session.  Never raises."""
    source = source or GpuSource()

    hit = first_valid(source.sysfs_paths, lambda _v: True, source.read)
    if hit is not None:
        logger.info("gpu strategy: sysfs (%s)", hit[0])
        return GpuResolution(GpuStrategy.SYSFS, hit[0])

    location = _tool_location(source)
    if location is not None:
        logger.info("gpu strategy: %s (%s)", source.tool, location)
        return GpuResolution(GpuStrategy.EXTERNAL_TOOL, location)

    logger.info("gpu strategy: none (no sysfs node, no %s)", source.tool)
    return GpuResolution(GpuStrategy.NONE)


# ---------------------------------------------------------------------------
# Readers
# ---------------------------------------------------------------------------

def read_gpu_sysfs(source: GpuSource) -> MetricReading:
    hit = first_valid(source.sysfs_paths, is_percentage, source.read)
    if hit is None:
        return MetricReading.unavailable(Metric.GPU, "no sysfs node answered")
    return MetricReading.ok(Metric.GPU, hit[1])


def read_gpu_external_tool(source: GpuSource) -> MetricReading:
    argv = [source.tool, "--limit", "1", "--dump", "-"]
    try:
        r = source.run(argv, source.tool_timeout)
    except ProcessTimeout as e:
        logger.warning("%s", e)
        return MetricReading.unavailable(Metric.GPU, "timeout")
    except SourceReadError as e:
        logger.debug("%s", e)
        return MetricReading.unavailable(Metric.GPU, str(e))
    if r.exit_code != 0:
        return MetricReading.unavailable(
            Metric.GPU, f"{source.tool} exited {r.exit_code}")
    value = parse_tool_dump(r.stdout)
    if value is None:
        return MetricReading.unavailable(Metric.GPU, "no gpu line in dump")
    return MetricReading.ok(Metric.GPU, value)


def _read_gpu_disabled(_source: GpuSource) -> MetricReading:
    return MetricReading.unavailable(Metric.GPU, "no gpu telemetry")


_READERS: dict[GpuStrategy, Callable[[GpuSource], MetricReading]] = {
    GpuStrategy.SYSFS: read_gpu_sysfs,
    GpuStrategy.EXTERNAL_TOOL: read_gpu_external_tool,
    GpuStrategy.NONE: _read_gpu_disabled,
    GpuStrategy.UNRESOLVED: _read_gpu_disabled,
}


def read_gpu(strategy: GpuStrategy, source: GpuSource) -> MetricReading:
    return _READERS[strategy](source)
