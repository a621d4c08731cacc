"""RyzmonApp: a one-line CPU · GPU · RAM panel driven by MetricsScheduler."""

from __future__ import annotations

import argparse

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.widgets import Static

from ..logs import configure_logging
from ..models import GpuStrategy, Metric, MetricReading
from ..scheduler import MetricsScheduler
from ..settings import SETTINGS, Settings
from .css import APP_CSS
from .widgets import MetricLabel, Separator

_PANEL_ORDER: tuple[Metric, ...] = (Metric.CPU, Metric.GPU, Metric.RAM)

_STRATEGY_TEXT: dict[GpuStrategy, str] = {
    GpuStrategy.UNRESOLVED: "gpu: probing…",
    GpuStrategy.SYSFS: "gpu: sysfs",
    GpuStrategy.EXTERNAL_TOOL: "gpu: external tool",
    GpuStrategy.NONE: "gpu: no telemetry",
}


class RyzmonApp(App):
    TITLE = "ryzmon"
    DEFAULT_CSS = APP_CSS
    BINDINGS = [
        Binding("q", "quit", "Quit"),
        Binding("r", "reprobe", "Re-probe GPU"),
    ]

    def __init__(self, settings: Settings = SETTINGS) -> None:
        super().__init__()
        self.scheduler = MetricsScheduler(self, self.apply_reading, settings=settings)

    def compose(self) -> ComposeResult:
        with Horizontal(id="metric-bar"):
            for i, metric in enumerate(_PANEL_ORDER):
                if i:
                    yield Separator()
                yield MetricLabel(metric, id=f"metric-{metric.value}")
        yield Static(_STRATEGY_TEXT[GpuStrategy.UNRESOLVED], id="strategy-line")

    def on_mount(self) -> None:
        self.scheduler.start()

    def on_unmount(self) -> None:
        self.scheduler.stop()

    def strategy_text(self) -> str:
        text = _STRATEGY_TEXT[self.scheduler.state.gpu_strategy]
        resolution = self.scheduler.resolution
        if resolution is not None and resolution.source:
            text += f" ({resolution.source})"
        return text

    def apply_reading(self, reading: MetricReading) -> None:
        self.query_one(f"#metric-{reading.metric.value}", MetricLabel).show(reading)
        self.query_one("#strategy-line", Static).update(self.strategy_text())

    def action_reprobe(self) -> None:
        """Start a fresh session, which resolves the GPU strategy again."""
        self.scheduler.stop()
        self.scheduler.start()
        self.query_one("#strategy-line", Static).update(self.strategy_text())


def cmd_panel(args: argparse.Namespace | None = None) -> None:
    configure_logging(SETTINGS.logging, to_file=True)
    app = RyzmonApp()
    app.run()
