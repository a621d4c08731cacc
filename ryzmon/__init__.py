"""ryzmon: CPU, GPU and RAM utilization sampling for a status panel."""

__version__ = "0.1.0"
