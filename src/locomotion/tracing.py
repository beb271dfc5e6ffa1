# src/locomotion/tracing.py
"""
Execution tracing for locomotion commands.

Thin, structured record of every command the planner executes, so that
the accepted actions can be replayed into a trajectory afterwards and so
that rejected options show up in logs.

It does NOT:
- Decide which commands to run
- Validate anything itself
"""

from __future__ import annotations

import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Any, Deque, List, Optional

from spec.types import ActionRecord
from .commands import CommandResult


@dataclass
class CommandTraceRecord:
    """Structured record of a single command execution."""

    timestamp: float           # wall-clock time (time.time())
    sequence: int              # monotonically increasing per tracer

    command: str
    entity: Optional[str]
    action: Any                # the primitive action variant executed

    success: bool
    error: Optional[str]       # error code on failure
    duration_ms: int


class CommandTracer:
    """
    In-memory command tracer.

    Responsibilities:
    - Keep a rolling buffer of recent CommandTraceRecord entries.
    - Emit a single structured log line per command (info level).
    - Turn the successful records back into ActionRecords for replay.
    """

    def __init__(
        self,
        *,
        logger: Optional[logging.Logger] = None,
        max_records: int = 10_000,
    ) -> None:
        self._logger = logger or logging.getLogger("locomotion.command")
        self._records: Deque[CommandTraceRecord] = deque(maxlen=max_records)
        self._sequence = 0

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def record(self, *, action: Any, result: CommandResult) -> CommandTraceRecord:
        """Record a trace for an executed command, successful or not."""
        record = CommandTraceRecord(
            timestamp=time.time(),
            sequence=self._sequence,
            command=getattr(action, "name", type(action).__name__),
            entity=getattr(action, "entity", None),
            action=action,
            success=result.ok,
            error=result.error.code if result.error is not None else None,
            duration_ms=result.duration_ms,
        )
        self._sequence += 1
        self._records.append(record)

        self._logger.info(
            "command=%s entity=%s success=%s error=%s duration_ms=%d",
            record.command,
            record.entity,
            record.success,
            record.error,
            record.duration_ms,
        )
        return record

    def get_records(self) -> List[CommandTraceRecord]:
        """Snapshot of all currently buffered records."""
        return list(self._records)

    def to_action_records(self) -> List[ActionRecord]:
        """Successful commands as ActionRecords, in execution order."""
        return [
            ActionRecord(action=r.action, duration_ms=r.duration_ms, start_time=r.sequence)
            for r in self._records
            if r.success
        ]

    def clear(self) -> None:
        self._records.clear()
        self._sequence = 0
