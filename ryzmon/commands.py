"""CLI subcommands: watch, probe."""

from __future__ import annotations

import argparse

from .clock import SchedClock
from .gpu import resolve_gpu_strategy, source_from_config
from .logs import configure_logging
from .models import MetricReading, reading_text
from .scheduler import MetricsScheduler
from .settings import SETTINGS


def format_reading(reading: MetricReading) -> str:
    line = f"{reading.metric.value} {reading_text(reading)}"
    if reading.detail:
        line += f"  ({reading.detail})"
    return line


def cmd_watch(args: argparse.Namespace) -> None:
    """Print readings as they arrive until interrupted or --count ticks pass."""
    configure_logging(SETTINGS.logging)
    clock = SchedClock()
    limit: int = getattr(args, "count", 0) or 0
    finishing = False

    def finish() -> None:
        scheduler.stop()
        clock.close()

    def on_reading(reading: MetricReading) -> None:
        nonlocal finishing
        print(format_reading(reading), flush=True)
        if limit and not finishing and scheduler.state.gpu_tick_counter >= limit:
            # Let the rest of this tick print before tearing down.
            finishing = True
            clock.set_timer(0, finish)

    scheduler = MetricsScheduler(clock, on_reading)
    scheduler.start()
    try:
        clock.run()
    except KeyboardInterrupt:
        pass
    finally:
        scheduler.stop()
        clock.close()


def cmd_probe(args: argparse.Namespace) -> None:
    """Resolve the GPU strategy once and report it."""
    configure_logging(SETTINGS.logging)
    resolution = resolve_gpu_strategy(source_from_config(SETTINGS.gpu))
    print(f"strategy: {resolution.strategy.value}")
    if resolution.source:
        print(f"source:   {resolution.source}")
