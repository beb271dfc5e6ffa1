# rich summary table for an exported trajectory
# src/trajectory/render.py
"""
Terminal summary of an exported trajectory document.

Works on the plain export() dict so it can render a document loaded
back from JSON just as well as a fresh one.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.table import Table


def _format_position(position: List[float]) -> str:
    return "(" + ", ".join(f"{c:.2f}" for c in position) + ")"


def trajectory_table(doc: Dict[str, Any], title: Optional[str] = None) -> Table:
    """One row per step: step, time, entity positions, reached waypoints."""
    meta = doc.get("metadata", {})
    table = Table(
        title=title or f"Trajectory ({meta.get('total_steps', 0)} steps, {meta.get('total_time', 0):.2f}s)",
        show_header=True,
        header_style="bold magenta",
    )
    table.add_column("Step", justify="right", style="bold")
    table.add_column("Time (s)", justify="right")
    table.add_column("Entities")
    table.add_column("Reached")

    steps = doc.get("steps", [])
    if not steps:
        table.add_row("-", "-", "<none>", "<none>")
        return table

    for step in steps:
        entities = "\n".join(
            f"{e['id']} @ {e['position_index']} {_format_position(e['position'])}"
            for e in step.get("entities", [])
        )
        reached = ", ".join(
            w["id"] for w in step.get("waypoints", []) if w.get("reached_by")
        )
        table.add_row(
            str(step["step"]),
            f"{step['time']:.3f}",
            entities or "<none>",
            reached or "<none>",
        )
    return table


def print_trajectory(doc: Dict[str, Any], console: Optional[Console] = None) -> None:
    (console or Console()).print(trajectory_table(doc))
