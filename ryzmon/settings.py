"""Typed settings loaded from TOML config with env-var overrides."""

from __future__ import annotations

import os
import tomllib
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path


USER_CONFIG_PATH = Path(
    os.environ.get("RYZMON_CONFIG") or "~/.config/ryzmon/config.toml"
).expanduser()


def _load_default_toml() -> dict:
    """Load the built-in default_config.toml shipped with the package."""
    ref = resources.files("ryzmon").joinpath("default_config.toml")
    return tomllib.loads(ref.read_text(encoding="utf-8"))


def _load_user_toml(path: Path = USER_CONFIG_PATH) -> dict:
    """Load user config if it exists, otherwise empty dict."""
    if not path.is_file():
        return {}
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, tomllib.TOMLDecodeError):
        return {}


def _deep_merge(base: dict, override: dict) -> dict:
    """Recursively merge override into base (override wins)."""
    merged = dict(base)
    for key, val in override.items():
        if key in merged and isinstance(merged[key], dict) and isinstance(val, dict):
            merged[key] = _deep_merge(merged[key], val)
        else:
            merged[key] = val
    return merged


# ── Dataclasses ──────────────────────────────────────────────────────


@dataclass
class ProcConfig:
    stat_path: str
    meminfo_path: str


@dataclass
class GpuConfig:
    sysfs_paths: tuple[str, ...]
    tool: str
    tool_timeout: float
    lookup_timeout: float


@dataclass
class LoggingConfig:
    level: str
    file: str


@dataclass
class Settings:
    proc: ProcConfig
    gpu: GpuConfig
    logging: LoggingConfig

    _raw: dict = field(default_factory=dict, repr=False)


def _env_float(name: str, default: float) -> float:
    """Float from an env var; a malformed value falls back to ``default``."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def load_settings(user_path: Path = USER_CONFIG_PATH) -> Settings:
    """Load settings: defaults ← user TOML ← env vars."""
    raw = _deep_merge(_load_default_toml(), _load_user_toml(user_path))

    pr = raw.get("proc", {})
    gp = raw.get("gpu", {})
    lg = raw.get("logging", {})

    proc = ProcConfig(
        stat_path=os.environ.get("RYZMON_PROC_STAT", pr.get("stat_path", "/proc/stat")),
        meminfo_path=os.environ.get(
            "RYZMON_PROC_MEMINFO", pr.get("meminfo_path", "/proc/meminfo")),
    )

    gpu = GpuConfig(
        sysfs_paths=tuple(str(p) for p in gp.get("sysfs_paths", [])),
        tool=os.environ.get("RYZMON_GPU_TOOL", gp.get("tool", "radeontop")),
        tool_timeout=_env_float(
            "RYZMON_GPU_TOOL_TIMEOUT", float(gp.get("tool_timeout", 2.0))),
        lookup_timeout=float(gp.get("lookup_timeout", 2.0)),
    )

    logging = LoggingConfig(
        level=os.environ.get("RYZMON_LOG_LEVEL", lg.get("level", "WARNING")).upper(),
        file=os.environ.get("RYZMON_LOG_FILE", lg.get("file", "")),
    )

    return Settings(proc=proc, gpu=gpu, logging=logging, _raw=raw)


# Loaded once on import.
SETTINGS = load_settings()
