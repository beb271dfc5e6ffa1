# SolverConfig dataclass
# src/env/schema.py

from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional, Tuple

Cell = Tuple[int, int]


@dataclass(frozen=True)
class SolverConfig:
    """Resolved solver parameters for one profile."""
    name: str = "default"
    num_waypoints: int = 7
    maze_mode: bool = True            # False: 3D sphere mode
    grid_width: int = 10
    grid_height: int = 10
    grid_spacing: float = 1.0
    sphere_points: int = 100
    rotation_points: int = 8          # maze mode only; 8 compass directions
    obstacles: Tuple[Cell, ...] = ()  # (x, y) grid cells
    entity_speed: float = 2.0
    rotation_duration: float = 0.5    # seconds
    output_path: Optional[str] = None # informational; the core writes nothing

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in fields(cls))

    @classmethod
    def from_mapping(cls, raw: Mapping[str, Any], name: str = "default") -> "SolverConfig":
        """
        Build a config from a plain mapping (a YAML profile or a CLI struct).

        Missing keys take the defaults above; unknown keys raise ValueError.
        """
        unknown = sorted(set(raw) - set(cls.field_names()))
        if unknown:
            raise ValueError(f"Unknown solver config keys in profile '{name}': {unknown}")

        values = dict(raw)
        values.setdefault("name", name)
        if "obstacles" in values:
            values["obstacles"] = tuple(
                (int(cell[0]), int(cell[1])) for cell in values["obstacles"] or ()
            )
        for key in ("grid_spacing", "entity_speed", "rotation_duration"):
            if key in values:
                values[key] = float(values[key])
        return cls(**values)
