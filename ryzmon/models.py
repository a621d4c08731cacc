"""Core data types."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Metric(str, Enum):
    CPU = "cpu"
    GPU = "gpu"
    RAM = "ram"


class Status(str, Enum):
    OK = "ok"
    UNAVAILABLE = "unavailable"
    ERROR = "error"


class GpuStrategy(str, Enum):
    UNRESOLVED = "unresolved"
    SYSFS = "sysfs"
    EXTERNAL_TOOL = "external-tool"
    NONE = "none"


@dataclass(frozen=True)
class CounterSample:
    total_jiffies: int
    idle_jiffies: int


@dataclass(frozen=True)
class MemorySample:
    total: int      # kB
    available: int  # kB


@dataclass(frozen=True)
class MetricReading:
    metric: Metric
    status: Status
    value: Optional[int] = None   # 0..100, set only when status is OK
    detail: str = ""              # reason for UNAVAILABLE/ERROR

    @classmethod
    def ok(cls, metric: Metric, value: int) -> MetricReading:
        return cls(metric, Status.OK, value)

    @classmethod
    def unavailable(cls, metric: Metric, detail: str = "") -> MetricReading:
        return cls(metric, Status.UNAVAILABLE, None, detail)

    @classmethod
    def error(cls, metric: Metric, detail: str = "") -> MetricReading:
        return cls(metric, Status.ERROR, None, detail)


@dataclass(frozen=True)
class GpuResolution:
    strategy: GpuStrategy
    source: str = ""   # winning sysfs path or the tool's location


@dataclass
class SchedulerState:
    last_total: int = 0
    last_idle: int = 0
    gpu_tick_counter: int = 0
    gpu_strategy: GpuStrategy = GpuStrategy.UNRESOLVED

    @property
    def has_baseline(self) -> bool:
        return self.last_total > 0


PLACEHOLDER = "—"

_STATUS_TEXT: dict[Status, str] = {
    Status.UNAVAILABLE: "n/a",
    Status.ERROR: "err",
}


def reading_text(reading: Optional[MetricReading]) -> str:
    """Short display form: ``42%``, ``n/a``, ``err``, or ``—`` before any reading."""
    if reading is None:
        return PLACEHOLDER
    if reading.status is Status.OK:
        return f"{reading.value}%"
    return _STATUS_TEXT[reading.status]
