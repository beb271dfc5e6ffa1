# src/locomotion/spaces.py
"""
Spatial quantization: fixed, indexed point sets and nearest-point lookup.

Two concrete spaces:
- SphereSpace: N points on the unit sphere laid out with the golden angle
  (low-discrepancy, deterministic given N). Used for 3D positions and for
  orientations (forward directions).
- GridSpace: width x height lattice at z = 0, row-major index y*width + x.
  Used for 2D maze navigation.

Spaces are immutable after construction: indices are contiguous 0..N-1
and N never changes. They are shared read-only by every entity, the
sequencer and the navmesh layer.
"""

from __future__ import annotations

import math
from typing import Dict, Optional, Sequence, Tuple

from spec.types import Point, Quaternion, Rotation
from .errors import ValidationError

GOLDEN_ANGLE = 2.39996322972865332

# Returned by normalize() for vectors too short to have a direction.
DEFAULT_AXIS: Point = (0.0, 0.0, 1.0)

_MIN_MAGNITUDE = 1e-10


# ---------------------------------------------------------------------------
# Vector helpers
# ---------------------------------------------------------------------------


def normalize(vector: Sequence[float]) -> Point:
    """Return `vector` scaled to unit length, or DEFAULT_AXIS if degenerate."""
    x, y, z = float(vector[0]), float(vector[1]), float(vector[2])
    magnitude = math.sqrt(x * x + y * y + z * z)
    if magnitude < _MIN_MAGNITUDE:
        return DEFAULT_AXIS
    return (x / magnitude, y / magnitude, z / magnitude)


def angular_distance(a: Point, b: Point) -> float:
    """Angle in radians between two unit vectors."""
    dot = a[0] * b[0] + a[1] * b[1] + a[2] * b[2]
    return math.acos(max(-1.0, min(1.0, dot)))


def euclidean_3d(a: Point, b: Point) -> float:
    return math.sqrt((b[0] - a[0]) ** 2 + (b[1] - a[1]) ** 2 + (b[2] - a[2]) ** 2)


def planar_distance(a: Point, b: Point) -> float:
    """Euclidean distance on the XY plane; z is ignored."""
    return math.hypot(b[0] - a[0], b[1] - a[1])


def is_upward_movement(from_point: Point, to_point: Point) -> bool:
    return to_point[2] > from_point[2]


# ---------------------------------------------------------------------------
# Indexed spaces
# ---------------------------------------------------------------------------


class IndexedSpace:
    """Ordered, fixed-size point set with a reverse point -> index lookup."""

    kind = "abstract"

    def __init__(self, points: Sequence[Point]) -> None:
        self._points: Tuple[Point, ...] = tuple(points)
        index_map: Dict[Point, int] = {}
        for idx, point in enumerate(self._points):
            # first occurrence wins so lookups agree with nearest-index ties
            index_map.setdefault(point, idx)
        self._index_map = index_map

    @property
    def points(self) -> Tuple[Point, ...]:
        return self._points

    @property
    def n(self) -> int:
        return len(self._points)

    def __len__(self) -> int:
        return len(self._points)

    def contains_index(self, index: int) -> bool:
        return isinstance(index, int) and 0 <= index < len(self._points)

    def get_point(self, index: int) -> Optional[Point]:
        """Point at `index`, or None when the index is out of range."""
        if not self.contains_index(index):
            return None
        return self._points[index]

    def get_index(self, point: Point) -> Optional[int]:
        """Exact reverse lookup; use find_nearest_index for arbitrary points."""
        return self._index_map.get(tuple(point))  # type: ignore[arg-type]

    def __repr__(self) -> str:
        return f"{type(self).__name__}(n={self.n})"


class SphereSpace(IndexedSpace):
    kind = "sphere"


class GridSpace(IndexedSpace):
    kind = "grid"

    def __init__(
        self,
        points: Sequence[Point],
        width: int,
        height: int,
        spacing: float,
    ) -> None:
        super().__init__(points)
        self.width = width
        self.height = height
        self.spacing = spacing

    def index_to_coords(self, index: int) -> Optional[Tuple[int, int]]:
        """(row, col) of a point index, or None when out of range."""
        if not self.contains_index(index):
            return None
        return divmod(index, self.width)

    def coords_to_index(self, row: int, col: int) -> Optional[int]:
        if 0 <= row < self.height and 0 <= col < self.width:
            return row * self.width + col
        return None

    def __repr__(self) -> str:
        return (
            f"GridSpace(width={self.width}, height={self.height}, "
            f"spacing={self.spacing})"
        )


# ---------------------------------------------------------------------------
# Generators
# ---------------------------------------------------------------------------


def _sphere_point(i: int, n: int) -> Point:
    y = 1.0 - (2.0 * i) / (n - 1.0)
    radius = math.sqrt(max(0.0, 1.0 - y * y))
    theta = GOLDEN_ANGLE * i
    return normalize((radius * math.cos(theta), y, radius * math.sin(theta)))


def generate_sphere(n: int) -> SphereSpace:
    """N golden-angle points on the unit sphere, from +Y down to -Y."""
    if not isinstance(n, int) or n <= 0:
        raise ValidationError("invalid_space", {"sphere_points": n})
    if n == 1:
        # y = 1 - 2i/(n-1) is undefined for a single point; use the pole.
        return SphereSpace([(0.0, 1.0, 0.0)])
    return SphereSpace([_sphere_point(i, n) for i in range(n)])


def generate_grid(width: int, height: int, spacing: float = 1.0) -> GridSpace:
    """Lattice points (x*spacing, y*spacing, 0), row-major."""
    if not isinstance(width, int) or width <= 0:
        raise ValidationError("invalid_space", {"grid_width": width})
    if not isinstance(height, int) or height <= 0:
        raise ValidationError("invalid_space", {"grid_height": height})
    if spacing <= 0.0:
        raise ValidationError("invalid_space", {"grid_spacing": spacing})

    spacing = float(spacing)
    points = [
        (x * spacing, y * spacing, 0.0)
        for y in range(height)
        for x in range(width)
    ]
    return GridSpace(points, width, height, spacing)


# ---------------------------------------------------------------------------
# Lookup and metrics
# ---------------------------------------------------------------------------


def find_nearest_index(space: IndexedSpace, point: Sequence[float]) -> int:
    """
    Index of the point in `space` closest to `point`.

    Sphere spaces compare angular distance against the normalized input;
    grid spaces compare planar distance and ignore z. Ties resolve to the
    lowest index (first encountered in generation order).
    """
    if space.n == 0:
        raise ValidationError("invalid_space", {"reason": "empty_space"})

    if len(point) == 2:
        point = (point[0], point[1], 0.0)

    if isinstance(space, GridSpace):
        target: Point = (float(point[0]), float(point[1]), 0.0)
        metric = planar_distance
    else:
        target = normalize(point)
        metric = angular_distance

    best_index = 0
    best_distance = math.inf
    for idx, candidate in enumerate(space.points):
        d = metric(target, candidate)
        if d < best_distance:
            best_index = idx
            best_distance = d
    return best_index


def distance(space: IndexedSpace, from_index: int, to_index: int) -> float:
    """
    Distance between two indices of the same space.

    Sphere: straight-line (chord) distance between the unit points.
    Grid: planar Euclidean distance.
    """
    a = space.get_point(from_index)
    b = space.get_point(to_index)
    if a is None or b is None:
        raise ValidationError(
            "position_index_out_of_range",
            {"from": from_index, "to": to_index, "max": space.n - 1},
        )
    if isinstance(space, GridSpace):
        return planar_distance(a, b)
    return euclidean_3d(a, b)


# ---------------------------------------------------------------------------
# Rotation quantization
# ---------------------------------------------------------------------------


def quaternion_to_forward(quaternion: Quaternion) -> Point:
    """Unit forward vector of the rotation; the identity maps to +Z."""
    qx, qy, qz, qw = quaternion
    fx = 2.0 * (qx * qz + qw * qy)
    fy = 2.0 * (qy * qz - qw * qx)
    fz = 1.0 - 2.0 * (qx * qx + qy * qy)
    return normalize((fx, fy, fz))


def quantize_position(space: IndexedSpace, position: Sequence[float]) -> int:
    return find_nearest_index(space, position)


def quantize_rotation(space: IndexedSpace, rotation: Rotation) -> int:
    """Accepts a quaternion (x, y, z, w) or a forward direction (x, y, z)."""
    if len(rotation) == 4:
        forward = quaternion_to_forward(rotation)  # type: ignore[arg-type]
    elif len(rotation) == 3:
        forward = normalize(rotation)
    else:
        raise ValidationError("invalid_rotation", {"rotation": tuple(rotation)})
    return find_nearest_index(space, forward)


def encode_combined_state(n: int, position_index: int, rotation_index: int) -> int:
    """Pack (position, rotation) into one id: position * n + rotation."""
    if not (0 <= position_index < n and 0 <= rotation_index < n):
        raise ValidationError(
            "position_index_out_of_range",
            {"position_index": position_index, "rotation_index": rotation_index, "n": n},
        )
    return position_index * n + rotation_index


def decode_combined_state(n: int, state_id: int) -> Tuple[int, int]:
    if not 0 <= state_id < n * n:
        raise ValidationError("position_index_out_of_range", {"state_id": state_id, "n": n})
    return divmod(state_id, n)
