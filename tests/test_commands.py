"""Tests for the CLI subcommands and argument dispatch."""

import argparse
import functools
import sys

import ryzmon.commands as commands
import ryzmon.main as main_mod
from ryzmon.clock import SchedClock
from ryzmon.commands import cmd_probe, cmd_watch, format_reading
from ryzmon.gpu import SYSFS_GPU_PATHS
from ryzmon.models import GpuResolution, GpuStrategy, Metric, MetricReading
from ryzmon.scheduler import MetricsScheduler

from tests.helpers import FakeFiles, FakeRunner, meminfo, stat_line


def test_format_reading():
    assert format_reading(MetricReading.ok(Metric.CPU, 15)) == "cpu 15%"
    assert format_reading(MetricReading.unavailable(Metric.GPU, "timeout")) == (
        "gpu n/a  (timeout)"
    )


def test_cmd_probe_prints_strategy_and_source(monkeypatch, capsys):
    monkeypatch.setattr(commands, "configure_logging", lambda *a, **k: None)
    monkeypatch.setattr(
        commands, "resolve_gpu_strategy",
        lambda source: GpuResolution(GpuStrategy.EXTERNAL_TOOL, "/usr/bin/radeontop"),
    )

    cmd_probe(argparse.Namespace())

    out = capsys.readouterr().out
    assert "strategy: external-tool" in out
    assert "source:   /usr/bin/radeontop" in out


def _patch_watch(monkeypatch) -> None:
    now = [0.0]
    files = FakeFiles({
        "/proc/stat": [stat_line(100, 0, 50, 850), stat_line(200, 0, 100, 1700)],
        "/proc/meminfo": meminfo(16000000, 4000000),
        SYSFS_GPU_PATHS[0]: "42\n",
    })

    def sleep(seconds: float) -> None:
        now[0] += seconds

    monkeypatch.setattr(commands, "configure_logging", lambda *a, **k: None)
    monkeypatch.setattr(
        commands, "SchedClock",
        lambda: SchedClock(timefunc=lambda: now[0], delayfunc=sleep),
    )
    monkeypatch.setattr(
        commands, "MetricsScheduler",
        functools.partial(MetricsScheduler, read=files, run=FakeRunner()),
    )


def test_cmd_watch_prints_whole_last_tick(monkeypatch, capsys):
    _patch_watch(monkeypatch)

    cmd_watch(argparse.Namespace(count=2))

    lines = capsys.readouterr().out.splitlines()
    assert lines == [
        "cpu n/a  (no cpu delta yet)",
        "ram 75%",
        "cpu 15%",
        "ram 75%",
        "gpu 42%",
    ]


def test_cmd_watch_gpu_lines_follow_tick_cadence(monkeypatch, capsys):
    _patch_watch(monkeypatch)

    cmd_watch(argparse.Namespace(count=5))

    lines = capsys.readouterr().out.splitlines()
    assert sum(line.startswith("cpu ") for line in lines) == 5
    assert sum(line.startswith("ram ") for line in lines) == 5
    assert [line for line in lines if line.startswith("gpu ")] == ["gpu 42%"] * 2

def test_main_dispatches_subcommand(monkeypatch):
    called = []
    monkeypatch.setattr(main_mod, "cmd_probe", lambda args: called.append(args.cmd))
    monkeypatch.setattr(sys, "argv", ["ryzmon", "probe"])

    main_mod.main()

    assert called == ["probe"]


def test_main_defaults_to_panel(monkeypatch):
    called = []
    monkeypatch.setattr(main_mod, "cmd_panel", lambda args: called.append("panel"))
    monkeypatch.setattr(sys, "argv", ["ryzmon"])

    main_mod.main()

    assert called == ["panel"]
