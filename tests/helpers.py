"""Shared test helpers: a manual clock and fake host I/O."""

from __future__ import annotations

from typing import Callable, Sequence

from ryzmon.errors import ProcessTimeout, SourceReadError
from ryzmon.hostio import ProcessResult


class FakeTimer:
    def __init__(
        self, clock: FakeClock, delay: float, callback: Callable[[], object], repeat: bool,
    ) -> None:
        self.delay = delay
        self.callback = callback
        self.repeat = repeat
        self.due = clock.now + delay
        self.stopped = False

    def stop(self) -> None:
        self.stopped = True


class FakeClock:
    """TimerHost whose time only moves when ``advance`` is called."""

    def __init__(self) -> None:
        self.now = 0.0
        self.timers: list[FakeTimer] = []

    def set_timer(self, delay: float, callback: Callable[[], object]) -> FakeTimer:
        timer = FakeTimer(self, delay, callback, repeat=False)
        self.timers.append(timer)
        return timer

    def set_interval(self, interval: float, callback: Callable[[], object]) -> FakeTimer:
        timer = FakeTimer(self, interval, callback, repeat=True)
        self.timers.append(timer)
        return timer

    def live(self) -> list[FakeTimer]:
        return [t for t in self.timers if not t.stopped]

    def advance(self, seconds: float) -> None:
        target = self.now + seconds
        while True:
            due = [t for t in self.live() if t.due <= target + 1e-9]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self.now = timer.due
            if timer.repeat:
                timer.due += timer.delay
            else:
                timer.stopped = True
            timer.callback()
        self.now = target


class FakeFiles:
    """``read_text_file`` stand-in backed by a dict; lists are served in order."""

    def __init__(self, files: dict[str, object] | None = None) -> None:
        self.files: dict[str, object] = dict(files or {})
        self.reads: list[str] = []

    def __call__(self, path: str) -> bytes:
        self.reads.append(path)
        content = self.files.get(path)
        if isinstance(content, list):
            if not content:
                raise SourceReadError(f"cannot read {path}: exhausted")
            content = content.pop(0) if len(content) > 1 else content[0]
        if content is None:
            raise SourceReadError(f"cannot read {path}: missing")
        if isinstance(content, Exception):
            raise content
        return content.encode() if isinstance(content, str) else bytes(content)


class FakeRunner:
    """``run_process`` stand-in keyed on argv[0]."""

    def __init__(self, results: dict[str, object] | None = None) -> None:
        self.results: dict[str, object] = dict(results or {})
        self.calls: list[tuple[tuple[str, ...], float]] = []

    def __call__(self, argv: Sequence[str], timeout: float) -> ProcessResult:
        self.calls.append((tuple(argv), timeout))
        result = self.results.get(argv[0])
        if result is None:
            raise SourceReadError(f"cannot run {argv[0]}: not found")
        if isinstance(result, Exception):
            raise result
        return result  # type: ignore[return-value]


def timeout_for(tool: str) -> ProcessTimeout:
    return ProcessTimeout(f"{tool} exceeded 2s")


def stat_line(user: int, nice: int, system: int, idle: int) -> str:
    return f"cpu  {user} {nice} {system} {idle} 0 0 0 0 0 0\ncpu0 1 2 3 4\n"


def meminfo(total: int, available: int | None) -> str:
    lines = [f"MemTotal:       {total} kB", "MemFree:         1000 kB"]
    if available is not None:
        lines.append(f"MemAvailable:   {available} kB")
    lines.append("Buffers:          200 kB")
    return "\n".join(lines) + "\n"
