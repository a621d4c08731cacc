"""CLI entry point: argument parsing and dispatch."""

import argparse

from .commands import cmd_probe, cmd_watch
from .panel import cmd_panel


def main():
    parser = argparse.ArgumentParser(
        prog="ryzmon",
        description="CPU, GPU and RAM utilization monitor",
    )
    sub = parser.add_subparsers(dest="cmd")

    p_panel = sub.add_parser("panel", aliases=["p"], help="Live status panel")
    p_panel.set_defaults(func=cmd_panel)

    p_watch = sub.add_parser("watch", help="Print readings to stdout")
    p_watch.add_argument(
        "-n", "--count", type=int, default=0,
        help="Stop after this many ticks (default: run until interrupted)")
    p_watch.set_defaults(func=cmd_watch)

    p_probe = sub.add_parser("probe", help="Show which GPU telemetry source is usable")
    p_probe.set_defaults(func=cmd_probe)

    args = parser.parse_args()
    if hasattr(args, "func"):
        args.func(args)
    else:
        cmd_panel(args)
