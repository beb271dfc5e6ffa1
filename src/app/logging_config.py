# src/app/logging_config.py
"""
Process logging setup for the patrol solver.

Entry points call configure_logging() once:

    from app.logging_config import configure_logging
    configure_logging("DEBUG")

Per-command trace lines come from the "locomotion.command" logger; pass
trace_commands=False to keep them out of an INFO-level run.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Optional, Union

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    stream: Optional[IO[str]] = None,
    trace_commands: bool = True,
) -> None:
    """
    Attach a single stream handler to the root logger.

    No-op when the root logger already has handlers.
    """
    root = logging.getLogger()
    if root.handlers:
        return

    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            raise ValueError(f"Unknown log level: {level!r}")

    handler = logging.StreamHandler(stream=stream or sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT))
    root.addHandler(handler)
    root.setLevel(level)

    if not trace_commands:
        logging.getLogger("locomotion.command").setLevel(logging.WARNING)
