from __future__ import annotations

import logging
import sys
from typing import TextIO

from pythonjsonlogger import jsonlogger

# Loggers that report every request at INFO
CHATTY_LOGGERS = ("httpx", "httpcore")


def configure_logging(level: str = "INFO", *, stream: TextIO | None = None) -> None:
    """Send JSON log records to ``stream`` (stderr by default).

    stdout is left alone: ``follow`` writes run output there.
    """
    root = logging.getLogger()
    root.setLevel(level.upper())

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        jsonlogger.JsonFormatter("%(asctime)s %(levelname)s %(name)s %(message)s")
    )
    root.handlers = [handler]

    quiet = max(root.level, logging.WARNING)
    for name in CHATTY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)
