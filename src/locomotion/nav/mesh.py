# triangle navmesh: construction, walkability and path queries
# src/locomotion/nav/mesh.py
"""
NavMesh: triangle mesh of walkable / blocked faces.

Built once, then shared read-only:
- from_grid(): two triangles per grid cell, obstacle cells blocked.
- from_mesh_data(): import an external {"vertices", "faces"} description.

Grid meshes are laid out so that cell (x, y) is centred on the maze grid
point (x * cell_size, y * cell_size). A grid point therefore sits on the
diagonal of exactly one cell, and its walkability is that cell's.

Face adjacency comes from shared triangle edges, which on a grid gives the
four-directional neighbours plus the diagonal split inside each cell.

Changing obstacles means building a new mesh (with_obstacles); instances
are never mutated after construction.
"""

from __future__ import annotations

import logging
import math
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

import networkx as nx

from spec.types import Point
from ..errors import PathNotFound, ValidationError
from ..spaces import euclidean_3d
from .pathfinder import find_face_path

log = logging.getLogger(__name__)

# (v1, v2, v3) vertex indices
Face = Tuple[int, int, int]
Cell = Tuple[int, int]

SUPPORTED_FORMATS = ("json", "godot", "unity")

_EPS = 1e-9


# ---------------------------------------------------------------------------
# Geometry helpers
# ---------------------------------------------------------------------------


def point_in_triangle(p: Sequence[float], a: Point, b: Point, c: Point) -> bool:
    """Barycentric containment test on the XY projection (edges included)."""
    v0x, v0y = c[0] - a[0], c[1] - a[1]
    v1x, v1y = b[0] - a[0], b[1] - a[1]
    v2x, v2y = p[0] - a[0], p[1] - a[1]

    dot00 = v0x * v0x + v0y * v0y
    dot01 = v0x * v1x + v0y * v1y
    dot02 = v0x * v2x + v0y * v2y
    dot11 = v1x * v1x + v1y * v1y
    dot12 = v1x * v2x + v1y * v2y

    denom = dot00 * dot11 - dot01 * dot01
    if abs(denom) < _EPS:
        # degenerate (zero-area) triangle contains nothing
        return False

    u = (dot11 * dot02 - dot01 * dot12) / denom
    v = (dot00 * dot12 - dot01 * dot02) / denom
    return u >= -_EPS and v >= -_EPS and u + v <= 1.0 + _EPS


def _orient(p: Sequence[float], q: Sequence[float], r: Sequence[float]) -> float:
    return (q[0] - p[0]) * (r[1] - p[1]) - (q[1] - p[1]) * (r[0] - p[0])


def _within_bbox(p: Sequence[float], a: Sequence[float], b: Sequence[float]) -> bool:
    return (
        min(a[0], b[0]) - _EPS <= p[0] <= max(a[0], b[0]) + _EPS
        and min(a[1], b[1]) - _EPS <= p[1] <= max(a[1], b[1]) + _EPS
    )


def segments_intersect(
    p1: Sequence[float],
    p2: Sequence[float],
    q1: Sequence[float],
    q2: Sequence[float],
) -> bool:
    """Closed XY segment intersection: touching endpoints and collinear overlap count."""
    d1 = _orient(q1, q2, p1)
    d2 = _orient(q1, q2, p2)
    d3 = _orient(p1, p2, q1)
    d4 = _orient(p1, p2, q2)

    if ((d1 > _EPS and d2 < -_EPS) or (d1 < -_EPS and d2 > _EPS)) and (
        (d3 > _EPS and d4 < -_EPS) or (d3 < -_EPS and d4 > _EPS)
    ):
        return True

    return (
        (abs(d1) <= _EPS and _within_bbox(p1, q1, q2))
        or (abs(d2) <= _EPS and _within_bbox(p2, q1, q2))
        or (abs(d3) <= _EPS and _within_bbox(q1, p1, p2))
        or (abs(d4) <= _EPS and _within_bbox(q2, p1, p2))
    )


def segment_hits_triangle(
    a: Sequence[float], b: Sequence[float], va: Point, vb: Point, vc: Point
) -> bool:
    """True when segment a-b shares any XY point with the closed triangle."""
    if point_in_triangle(a, va, vb, vc) or point_in_triangle(b, va, vb, vc):
        return True
    return (
        segments_intersect(a, b, va, vb)
        or segments_intersect(a, b, vb, vc)
        or segments_intersect(a, b, vc, va)
    )


def _as_point(raw: Any) -> Point:
    if isinstance(raw, (list, tuple)) and all(isinstance(c, (int, float)) for c in raw):
        if len(raw) == 3:
            return (float(raw[0]), float(raw[1]), float(raw[2]))
        if len(raw) == 2:
            return (float(raw[0]), float(raw[1]), 0.0)
    raise ValueError(f"Invalid vertex format: {raw!r}")


def _as_face(raw: Any) -> Face:
    if isinstance(raw, (list, tuple)) and len(raw) == 3 and all(isinstance(i, int) for i in raw):
        return (raw[0], raw[1], raw[2])
    raise ValueError(f"Invalid face format: {raw!r}")


# ---------------------------------------------------------------------------
# NavMesh
# ---------------------------------------------------------------------------


class NavMesh:
    """
    Immutable triangle navmesh.

    Attributes (read-only):
        vertices: tuple of 3D points
        faces: tuple of vertex-index triangles
        walkable_mask: face index -> bool
        adjacency: face index -> tuple of edge-sharing face indices
        regions: tuple of connected walkable face groups
        metadata: construction info (type, width, height, cell_size, ...)
    """

    def __init__(
        self,
        vertices: Sequence[Point],
        faces: Sequence[Face],
        walkable_mask: Optional[Mapping[int, bool]] = None,
        metadata: Optional[Mapping[str, Any]] = None,
    ) -> None:
        self._vertices: Tuple[Point, ...] = tuple(vertices)
        self._faces: Tuple[Face, ...] = tuple(tuple(f) for f in faces)  # type: ignore[misc]

        n_vertices = len(self._vertices)
        for idx, face in enumerate(self._faces):
            if any(not 0 <= v < n_vertices for v in face):
                raise ValidationError(
                    "invalid_navmesh",
                    {"face": idx, "vertices": face, "vertex_count": n_vertices},
                )

        mask: Dict[int, bool] = {idx: True for idx in range(len(self._faces))}
        if walkable_mask is not None:
            for idx, flag in walkable_mask.items():
                if idx not in mask:
                    raise ValidationError(
                        "invalid_navmesh",
                        {"reason": "mask_references_missing_face", "face": idx},
                    )
                mask[idx] = bool(flag)
        self._walkable = MappingProxyType(mask)
        self._metadata = MappingProxyType(dict(metadata or {}))

        self._centroids: Tuple[Point, ...] = tuple(
            self._compute_centroid(face) for face in self._faces
        )
        edge_faces = self._compute_edge_faces()
        self._adjacency = self._compute_adjacency(edge_faces)
        # face -> its edges that no other face shares (outer rim and holes)
        self._boundary_edges = self._compute_boundary_edges(edge_faces)
        self._regions, self._region_of = self._compute_regions()
        self._bucket_size, self._bucket_origin, self._buckets = self._compute_buckets()

    # ------------------------------------------------------------------
    # Construction
    # ------------------------------------------------------------------

    @classmethod
    def from_grid(
        cls,
        width: int,
        height: int,
        cell_size: float = 1.0,
        obstacles: Iterable[Sequence[int]] = (),
    ) -> "NavMesh":
        """
        Build a (width+1) x (height+1) vertex lattice with two triangles per
        cell. Cells listed in `obstacles` ((x, y) pairs) are unwalkable;
        pairs outside the grid are ignored.
        """
        if width <= 0 or height <= 0 or cell_size <= 0.0:
            raise ValidationError(
                "invalid_navmesh",
                {"width": width, "height": height, "cell_size": cell_size},
            )

        cell_size = float(cell_size)
        blocked = {
            (int(c[0]), int(c[1]))
            for c in obstacles
            if 0 <= int(c[0]) < width and 0 <= int(c[1]) < height
        }
        offset = cell_size / 2.0

        vertices: List[Point] = [
            (x * cell_size - offset, y * cell_size - offset, 0.0)
            for y in range(height + 1)
            for x in range(width + 1)
        ]

        faces: List[Face] = []
        mask: Dict[int, bool] = {}
        row = width + 1
        for y in range(height):
            for x in range(width):
                v00 = y * row + x
                v01 = v00 + 1
                v10 = (y + 1) * row + x
                v11 = v10 + 1

                walkable = (x, y) not in blocked
                mask[len(faces)] = walkable
                faces.append((v00, v01, v10))
                mask[len(faces)] = walkable
                faces.append((v01, v11, v10))

        return cls(
            vertices,
            faces,
            mask,
            metadata={
                "type": "grid",
                "width": width,
                "height": height,
                "cell_size": cell_size,
                "obstacles": tuple(sorted(blocked)),
            },
        )

    @classmethod
    def from_mesh_data(cls, data: Mapping[str, Any], fmt: str = "json") -> "NavMesh":
        """
        Import an externally generated navmesh.

        Expected shape (json / godot / unity):
            {"vertices": [[x, y, z] | [x, y], ...],
             "faces": [[i, j, k], ...],
             "walkable": [bool, ...]}        # optional, defaults to all True

        Raises ValueError for unsupported formats or malformed entries.
        """
        if fmt not in SUPPORTED_FORMATS:
            raise ValueError(f"Unsupported navmesh format: {fmt!r}")
        if not isinstance(data, Mapping):
            raise ValueError(f"Expected mapping navmesh data, got {type(data)}")

        vertices = [_as_point(v) for v in data.get("vertices", [])]
        faces = [_as_face(f) for f in data.get("faces", [])]

        mask: Optional[Dict[int, bool]] = None
        walkable = data.get("walkable")
        if walkable is not None:
            if len(walkable) != len(faces):
                raise ValueError(
                    f"walkable mask has {len(walkable)} entries for {len(faces)} faces"
                )
            mask = {idx: bool(flag) for idx, flag in enumerate(walkable)}

        return cls(vertices, faces, mask, metadata={"type": fmt, "source": "import"})

    def with_obstacles(self, cells: Iterable[Sequence[int]]) -> "NavMesh":
        """New grid mesh with `cells` added to the existing obstacles."""
        if self._metadata.get("type") != "grid":
            raise ValidationError("invalid_navmesh", {"reason": "not_a_grid_mesh"})
        combined = set(self._metadata["obstacles"]) | {(int(c[0]), int(c[1])) for c in cells}
        return NavMesh.from_grid(
            self._metadata["width"],
            self._metadata["height"],
            self._metadata["cell_size"],
            combined,
        )

    # ------------------------------------------------------------------
    # Read-only views
    # ------------------------------------------------------------------

    @property
    def vertices(self) -> Tuple[Point, ...]:
        return self._vertices

    @property
    def faces(self) -> Tuple[Face, ...]:
        return self._faces

    @property
    def face_count(self) -> int:
        return len(self._faces)

    @property
    def walkable_mask(self) -> Mapping[int, bool]:
        return self._walkable

    @property
    def adjacency(self) -> Mapping[int, Tuple[int, ...]]:
        return self._adjacency

    @property
    def regions(self) -> Tuple[Tuple[int, ...], ...]:
        return self._regions

    @property
    def metadata(self) -> Mapping[str, Any]:
        return self._metadata

    def centroid(self, face: int) -> Point:
        return self._centroids[face]

    def neighbors(self, face: int) -> Tuple[int, ...]:
        return self._adjacency.get(face, ())

    def is_face_walkable(self, face: int) -> bool:
        return self._walkable.get(face, False)

    def region_of(self, face: int) -> Optional[int]:
        return self._region_of.get(face)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def find_face(self, point: Sequence[float]) -> Optional[int]:
        """First face (in index order) whose XY projection contains `point`."""
        for idx in self._faces_containing(point):
            return idx
        return None

    def walkable(self, point: Sequence[float]) -> bool:
        face = self.find_face(point)
        if face is None:
            return False
        return self.is_face_walkable(face)

    def find_path(self, start: Point, goal: Point) -> List[Point]:
        """
        Walkable route from `start` to `goal`, both endpoints included.

        Interior points are face centroids along the A* face chain, with
        points dropped wherever a straight segment stays on walkable faces.

        Raises:
            PathNotFound if either endpoint is off-mesh or unwalkable, the
            endpoints lie in different regions, or the bounded search fails.
        """
        start_face = self.find_face(start)
        goal_face = self.find_face(goal)
        if start_face is None or goal_face is None:
            raise PathNotFound(
                "no_containing_face",
                {"from": tuple(start), "to": tuple(goal)},
            )
        if not (self.is_face_walkable(start_face) and self.is_face_walkable(goal_face)):
            raise PathNotFound(
                "no_path_found",
                {"from_face": start_face, "to_face": goal_face, "reason": "unwalkable_endpoint"},
            )
        if self.region_of(start_face) != self.region_of(goal_face):
            raise PathNotFound(
                "no_path_found",
                {"from_face": start_face, "to_face": goal_face, "reason": "disconnected"},
            )

        result = find_face_path(self, start_face, goal_face)
        if not result.success:
            log.debug(
                "NavMesh.find_path failed from_face=%s to_face=%s reason=%s expanded=%s",
                start_face,
                goal_face,
                result.reason,
                result.expanded,
            )
            raise PathNotFound(
                result.reason or "no_path_found",
                {"from_face": start_face, "to_face": goal_face},
            )

        interior = [self._centroids[f] for f in result.path[1:-1]]
        points: List[Point] = [tuple(start), *interior, tuple(goal)]  # type: ignore[list-item]
        return self._smooth(points)

    def get_nearest_walkable(self, point: Sequence[float]) -> Point:
        """`point` itself if walkable, else the closest walkable face centroid."""
        if self.walkable(point):
            return tuple(point)  # type: ignore[return-value]

        target: Point = (float(point[0]), float(point[1]), float(point[2]) if len(point) > 2 else 0.0)
        best: Optional[Point] = None
        best_distance = math.inf
        for idx, centroid in enumerate(self._centroids):
            if not self._walkable[idx]:
                continue
            d = euclidean_3d(target, centroid)
            if d < best_distance:
                best, best_distance = centroid, d

        if best is None:
            raise PathNotFound("no_walkable_face", {"point": tuple(point)})
        return best

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _faces_containing(self, point: Sequence[float]):
        px, py = point[0], point[1]
        key = (
            math.floor((px - self._bucket_origin[0]) / self._bucket_size),
            math.floor((py - self._bucket_origin[1]) / self._bucket_size),
        )
        for idx in self._buckets.get(key, ()):
            a, b, c = self._faces[idx]
            va, vb, vc = self._vertices[a], self._vertices[b], self._vertices[c]
            if px < min(va[0], vb[0], vc[0]) - _EPS or px > max(va[0], vb[0], vc[0]) + _EPS:
                continue
            if py < min(va[1], vb[1], vc[1]) - _EPS or py > max(va[1], vb[1], vc[1]) + _EPS:
                continue
            if point_in_triangle(point, va, vb, vc):
                yield idx

    def _faces_near_segment(self, a: Sequence[float], b: Sequence[float]) -> List[int]:
        """Faces whose bucket range overlaps the XY bbox of a-b, ascending."""
        ox, oy = self._bucket_origin
        size = self._bucket_size
        x0 = math.floor((min(a[0], b[0]) - ox) / size) - 1
        x1 = math.floor((max(a[0], b[0]) - ox) / size) + 1
        y0 = math.floor((min(a[1], b[1]) - oy) / size) - 1
        y1 = math.floor((max(a[1], b[1]) - oy) / size) + 1

        found = set()
        for bx in range(x0, x1 + 1):
            for by in range(y0, y1 + 1):
                found.update(self._buckets.get((bx, by), ()))
        return sorted(found)

    def _segment_clear(self, a: Point, b: Point) -> bool:
        """
        Exact walkability of segment a-b on the XY projection.

        Blocked when it touches any unwalkable triangle (edges and corners
        included) or any boundary edge of the mesh.
        """
        for idx in self._faces_near_segment(a, b):
            va, vb, vc = (self._vertices[v] for v in self._faces[idx])
            if not self._walkable[idx]:
                if segment_hits_triangle(a, b, va, vb, vc):
                    return False
                continue
            for u, v in self._boundary_edges[idx]:
                if segments_intersect(a, b, self._vertices[u], self._vertices[v]):
                    return False
        return True

    def _smooth(self, points: List[Point]) -> List[Point]:
        # string pulling: extend each segment while it stays on walkable faces
        smoothed = [points[0]]
        i = 0
        last = len(points) - 1
        while i < last:
            j = i + 1
            while j < last and self._segment_clear(points[i], points[j + 1]):
                j += 1
            smoothed.append(points[j])
            i = j
        return smoothed

    def _compute_centroid(self, face: Face) -> Point:
        a, b, c = (self._vertices[v] for v in face)
        return (
            (a[0] + b[0] + c[0]) / 3.0,
            (a[1] + b[1] + c[1]) / 3.0,
            (a[2] + b[2] + c[2]) / 3.0,
        )

    def _compute_edge_faces(self) -> Dict[Tuple[int, int], List[int]]:
        edge_faces: Dict[Tuple[int, int], List[int]] = {}
        for idx, (a, b, c) in enumerate(self._faces):
            for u, v in ((a, b), (b, c), (c, a)):
                edge_faces.setdefault((min(u, v), max(u, v)), []).append(idx)
        return edge_faces

    def _compute_adjacency(
        self, edge_faces: Mapping[Tuple[int, int], List[int]]
    ) -> Mapping[int, Tuple[int, ...]]:
        adjacency: Dict[int, set] = {idx: set() for idx in range(len(self._faces))}
        for sharing in edge_faces.values():
            for f in sharing:
                adjacency[f].update(g for g in sharing if g != f)

        return MappingProxyType({idx: tuple(sorted(n)) for idx, n in adjacency.items()})

    def _compute_boundary_edges(
        self, edge_faces: Mapping[Tuple[int, int], List[int]]
    ) -> Dict[int, Tuple[Tuple[int, int], ...]]:
        boundary: Dict[int, List[Tuple[int, int]]] = {idx: [] for idx in range(len(self._faces))}
        for edge, sharing in edge_faces.items():
            if len(sharing) == 1:
                boundary[sharing[0]].append(edge)
        return {idx: tuple(edges) for idx, edges in boundary.items()}

    def _compute_regions(self) -> Tuple[Tuple[Tuple[int, ...], ...], Dict[int, int]]:
        walkable = [face for face, ok in self._walkable.items() if ok]
        graph = nx.Graph()
        graph.add_nodes_from(walkable)
        graph.add_edges_from(
            (face, nxt)
            for face in walkable
            for nxt in self._adjacency[face]
            if self._walkable[nxt]
        )

        # numbered by lowest member face
        regions = sorted(tuple(sorted(c)) for c in nx.connected_components(graph))
        region_of = {face: rid for rid, members in enumerate(regions) for face in members}
        return tuple(regions), region_of

    def _compute_min_edge(self) -> float:
        shortest = math.inf
        for a, b, c in self._faces:
            va, vb, vc = self._vertices[a], self._vertices[b], self._vertices[c]
            for p, q in ((va, vb), (vb, vc), (vc, va)):
                edge = math.hypot(q[0] - p[0], q[1] - p[1])
                if edge > _EPS:
                    shortest = min(shortest, edge)
        return shortest if shortest < math.inf else 4.0

    def _compute_buckets(self) -> Tuple[float, Tuple[float, float], Dict[Tuple[int, int], List[int]]]:
        """Uniform XY hash grid: bucket -> ascending face indices whose bbox overlaps it."""
        if not self._vertices:
            return 1.0, (0.0, 0.0), {}

        min_x = min(v[0] for v in self._vertices)
        min_y = min(v[1] for v in self._vertices)
        extent = max(
            max(v[0] for v in self._vertices) - min_x,
            max(v[1] for v in self._vertices) - min_y,
        )
        size = max(self._compute_min_edge(), extent / 256.0, _EPS)
        pad = 10 * _EPS

        buckets: Dict[Tuple[int, int], List[int]] = {}
        for idx, face in enumerate(self._faces):
            xs = [self._vertices[v][0] for v in face]
            ys = [self._vertices[v][1] for v in face]
            x0 = math.floor((min(xs) - pad - min_x) / size)
            x1 = math.floor((max(xs) + pad - min_x) / size)
            y0 = math.floor((min(ys) - pad - min_y) / size)
            y1 = math.floor((max(ys) + pad - min_y) / size)
            for bx in range(x0, x1 + 1):
                for by in range(y0, y1 + 1):
                    buckets.setdefault((bx, by), []).append(idx)
        return size, (min_x, min_y), buckets

    def __repr__(self) -> str:
        return (
            f"NavMesh(faces={self.face_count}, "
            f"walkable={sum(self._walkable.values())}, type={self._metadata.get('type')!r})"
        )
