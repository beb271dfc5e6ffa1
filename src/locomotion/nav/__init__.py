from .mesh import NavMesh, point_in_triangle, segment_hits_triangle, segments_intersect
from .pathfinder import PathfindingResult, find_face_path

__all__ = [
    "NavMesh",
    "PathfindingResult",
    "find_face_path",
    "point_in_triangle",
    "segment_hits_triangle",
    "segments_intersect",
]
