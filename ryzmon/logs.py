"""Logging setup: stdlib logging, stderr or a rotating file."""

from __future__ import annotations

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .settings import LoggingConfig

DEFAULT_LOG_FILE = Path("~/.cache/ryzmon/ryzmon.log").expanduser()

_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def configure_logging(config: LoggingConfig, *, to_file: bool = False) -> logging.Handler:
    """Install one handler on the ``ryzmon`` logger and return it.

    The panel logs to a file so records never land on the Textual screen.
    An explicit ``config.file`` always wins.
    """
    handler: logging.Handler
    target = config.file or (str(DEFAULT_LOG_FILE) if to_file else "")
    if target:
        path = Path(target).expanduser()
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(
                path, maxBytes=1024 * 1024, backupCount=2, encoding="utf-8")
        except OSError:
            handler = logging.NullHandler() if to_file else logging.StreamHandler(sys.stderr)
    else:
        handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(fmt=_FORMAT, datefmt="%H:%M:%S"))

    log = logging.getLogger("ryzmon")
    for old in list(log.handlers):
        log.removeHandler(old)
        old.close()
    log.addHandler(handler)
    log.setLevel(getattr(logging, config.level.upper(), logging.WARNING))
    log.propagate = False
    return handler
