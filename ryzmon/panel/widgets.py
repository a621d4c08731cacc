"""Panel widgets: MetricLabel and the separator."""

from __future__ import annotations

from rich.text import Text
from textual.reactive import reactive
from textual.widgets import Static

from ..models import Metric, MetricReading, Status, reading_text

# Metric -> (icon glyph, short name)
METRIC_LABELS: dict[Metric, tuple[str, str]] = {
    Metric.CPU: ("▣", "CPU"),
    Metric.GPU: ("▤", "GPU"),
    Metric.RAM: ("▥", "RAM"),
}


def _gradient_color(pct: float) -> str:
    """Return a hex color smoothly interpolated across a cyan→yellow→red ramp."""
    p = max(0.0, min(100.0, pct)) / 100.0
    # Ramp: 0%=#00d7d7 (cyan) → 70%=#d7d700 (yellow) → 100%=#ff3333 (red)
    if p < 0.70:
        t = p / 0.70
        r = int(0xd7 * t)
        g = 0xd7
        b = int(0xd7 - 0xd7 * t)
    else:
        t = (p - 0.70) / 0.30
        r = int(0xd7 + (0xff - 0xd7) * t)
        g = int(0xd7 + (0x33 - 0xd7) * t)
        b = int(0x33 * t)
    return f"#{r:02x}{g:02x}{b:02x}"


def should_replace(incoming: MetricReading) -> bool:
    """A CPU reading without a delta keeps whatever is already shown."""
    if incoming.metric is Metric.CPU and incoming.status is Status.UNAVAILABLE:
        return False
    return True


def render_metric(metric: Metric, reading: MetricReading | None) -> Text:
    icon, name = METRIC_LABELS[metric]
    t = Text()
    t.append(f"{icon} {name} ", style="#447777")
    value = reading_text(reading).rjust(4)
    if reading is not None and reading.status is Status.OK:
        t.append(value, style=f"bold {_gradient_color(reading.value or 0)}")
    else:
        t.append(value)
    return t


class MetricLabel(Static):
    """Icon, name and current value of one metric."""
    reading: reactive[MetricReading | None] = reactive(None)

    def __init__(
        self,
        metric: Metric,
        *,
        id: str | None = None,
        classes: str | None = None,
    ) -> None:
        super().__init__("", id=id, classes=classes)
        self.metric = metric

    def show(self, reading: MetricReading) -> None:
        if reading.metric is self.metric and should_replace(reading):
            self.reading = reading

    def watch_reading(self, reading: MetricReading | None) -> None:
        status = reading.status if reading is not None else None
        self.set_class(status is Status.ERROR, "-error")
        self.set_class(status is Status.UNAVAILABLE, "-na")
        self.tooltip = reading.detail if reading is not None and reading.detail else None

    def render(self) -> Text:
        return render_metric(self.metric, self.reading)


class Separator(Static):
    def __init__(self) -> None:
        super().__init__("·", classes="separator-label")
