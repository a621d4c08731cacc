"""Pytest global setup for isolated ryzmon settings.

Keeps a developer's own ~/.config/ryzmon/config.toml and RYZMON_* env vars
from leaking into the tests.
"""

from __future__ import annotations

import atexit
import os
from pathlib import Path
import shutil
import tempfile


_TEST_ROOT = Path(tempfile.mkdtemp(prefix="ryzmon-pytest-"))

for _key in list(os.environ):
    if _key.startswith("RYZMON_"):
        del os.environ[_key]

# Force imported ryzmon modules to see only the built-in defaults.
os.environ["RYZMON_CONFIG"] = str(_TEST_ROOT / "missing-config.toml")


@atexit.register
def _cleanup_test_state() -> None:
    shutil.rmtree(_TEST_ROOT, ignore_errors=True)
