"""Periodic sampling engine.

One startup timer resolves the GPU strategy and runs the first tick; a
recurring timer then samples CPU and RAM every tick and the GPU every
second tick.  All state is touched only from timer callbacks.
"""

from __future__ import annotations

import logging
from typing import Callable

from .clock import TimerHandle, TimerHost
from .errors import ParseError, SchedulerError, SourceReadError
from .gpu import GpuSource, read_gpu, resolve_gpu_strategy, source_from_config
from .hostio import ReadFn, RunFn, read_text_file, run_process
from .models import (
    GpuResolution,
    GpuStrategy,
    Metric,
    MetricReading,
    SchedulerState,
    Status,
)
from .sampler import cpu_usage_pct, memory_usage_pct, sample_cpu, sample_memory
from .settings import SETTINGS, Settings

logger = logging.getLogger(__name__)

STARTUP_DELAY: float = 1.0
TICK_INTERVAL: float = 3.0
GPU_TICK_DIVISOR: int = 2

ReadingCallback = Callable[[MetricReading], object]


class MetricsScheduler:
    """Drives the samplers on a ``TimerHost`` and reports each reading."""

    def __init__(
        self,
        clock: TimerHost,
        on_reading: ReadingCallback,
        *,
        settings: Settings = SETTINGS,
        read: ReadFn = read_text_file,
        run: RunFn = run_process,
        resolve: Callable[[GpuSource], GpuResolution] = resolve_gpu_strategy,
    ) -> None:
        self._clock = clock
        self._on_reading = on_reading
        self._read = read
        self._resolve = resolve
        self._stat_path = settings.proc.stat_path
        self._meminfo_path = settings.proc.meminfo_path
        self._gpu = source_from_config(settings.gpu, read, run)
        self._samplers: dict[Metric, Callable[[], MetricReading]] = {
            Metric.CPU: self._sample_cpu,
            Metric.RAM: self._sample_ram,
            Metric.GPU: self._sample_gpu,
        }
        self.state = SchedulerState()
        self.resolution: GpuResolution | None = None
        self._active = False
        self._session = 0
        self._startup_timer: TimerHandle | None = None
        self._tick_timer: TimerHandle | None = None

    @property
    def running(self) -> bool:
        return self._active

    # ── Lifecycle ───────────────────────────────────────────────────

    def start(self) -> None:
        """Arm the startup timer.  Raises SchedulerError if it cannot be armed."""
        if self._active:
            return
        try:
            self._startup_timer = self._clock.set_timer(STARTUP_DELAY, self._on_startup)
        except Exception as e:
            raise SchedulerError(f"cannot arm startup timer: {e}") from e
        self._active = True

    def stop(self) -> None:
        """Cancel all timers and forget the session.  Safe to call repeatedly."""
        self._active = False
        self._session += 1
        for timer in (self._startup_timer, self._tick_timer):
            if timer is not None:
                timer.stop()
        self._startup_timer = None
        self._tick_timer = None
        self.state = SchedulerState()
        self.resolution = None

    def _on_startup(self) -> None:
        if not self._active or self._startup_timer is None:
            return
        self._startup_timer = None
        session = self._session
        self.resolve_gpu()
        self.tick()
        if self._session != session:
            return  # stopped from inside the first tick
        try:
            self._tick_timer = self._clock.set_interval(TICK_INTERVAL, self._on_tick)
        except Exception as e:
            self._active = False
            raise SchedulerError(f"cannot arm tick timer: {e}") from e

    def _on_tick(self) -> None:
        if self._active:
            self.tick()

    # ── Sampling ────────────────────────────────────────────────────

    def resolve_gpu(self) -> GpuStrategy:
        """Resolve the GPU strategy once per session; later calls are no-ops."""
        if self.state.gpu_strategy is GpuStrategy.UNRESOLVED:
            self.resolution = self._resolve(self._gpu)
            self.state.gpu_strategy = self.resolution.strategy
        return self.state.gpu_strategy

    def due_metrics(self) -> list[Metric]:
        """Advance the GPU counter and return the metrics to sample this tick."""
        self.state.gpu_tick_counter += 1
        due = [Metric.CPU, Metric.RAM]
        if self.state.gpu_tick_counter % GPU_TICK_DIVISOR == 0:
            due.append(Metric.GPU)
        return due

    def tick(self) -> None:
        session = self._session
        for metric in self.due_metrics():
            if self._session != session:
                break  # stopped from a reading callback
            self._emit(self._sample(metric))

    def _sample(self, metric: Metric) -> MetricReading:
        try:
            return self._samplers[metric]()
        except Exception as e:
            logger.exception("unexpected failure sampling %s", metric.value)
            return MetricReading.error(metric, str(e))

    def _emit(self, reading: MetricReading) -> None:
        if reading.status is not Status.OK:
            logger.debug("%s %s: %s", reading.metric.value, reading.status.value,
                         reading.detail)
        try:
            self._on_reading(reading)
        except Exception:
            logger.exception("reading callback failed for %s", reading.metric.value)

    def _sample_cpu(self) -> MetricReading:
        try:
            sample = sample_cpu(self._read, self._stat_path)
        except (SourceReadError, ParseError) as e:
            logger.warning("cpu: %s", e)
            return MetricReading.error(Metric.CPU, str(e))

        usage = cpu_usage_pct(self.state.last_total, self.state.last_idle, sample)
        self.state.last_total = sample.total_jiffies
        self.state.last_idle = sample.idle_jiffies
        if usage is None:
            return MetricReading.unavailable(Metric.CPU, "no cpu delta yet")
        return MetricReading.ok(Metric.CPU, usage)

    def _sample_ram(self) -> MetricReading:
        try:
            sample = sample_memory(self._read, self._meminfo_path)
        except (SourceReadError, ParseError) as e:
            logger.warning("ram: %s", e)
            return MetricReading.error(Metric.RAM, str(e))
        return MetricReading.ok(Metric.RAM, memory_usage_pct(sample))

    def _sample_gpu(self) -> MetricReading:
        return read_gpu(self.state.gpu_strategy, self._gpu)
