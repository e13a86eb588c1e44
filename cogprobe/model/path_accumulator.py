"""PathAccumulator - append-only sequence of path vertices.

Lifecycle: Empty → Accumulating → Empty (reset). There is no closed state;
a path grows until reset() starts a new one.
"""

import logging
from typing import Optional

from cogprobe.model.geo_point import GeoPoint
from cogprobe.model.path_vertex import PathVertex

logger = logging.getLogger(__name__)


class PathAccumulator:
    """Ordered path vertices with sequence numbers 0..n-1.

    Example:
        path = PathAccumulator()
        path.append(point=GeoPoint(lon=78.96, lat=20.59), value=245.7)
        path.vertices()[0].sequence  # 0
    """

    def __init__(self) -> None:
        self._vertices: list[PathVertex] = []
        self.generation = 0  # Incremented by every reset()

    def append(self, point: GeoPoint, value: Optional[float]) -> PathVertex:
        """Append a vertex. No deduplication, no reordering."""
        vertex = PathVertex(point=point, value=value, sequence=len(self._vertices))
        self._vertices.append(vertex)
        logger.debug(f"[PATH] Appended {vertex}")
        return vertex

    def reset(self) -> None:
        """Clear all vertices so the next append starts at sequence 0."""
        if self._vertices:
            logger.info(f"[PATH] Reset path with {len(self._vertices)} vertices")
        self._vertices = []
        self.generation += 1

    def vertices(self) -> tuple[PathVertex, ...]:
        """Read-only snapshot in append order."""
        return tuple(self._vertices)

    @property
    def is_empty(self) -> bool:
        """True in the Empty state."""
        return not self._vertices

    def __len__(self) -> int:
        return len(self._vertices)

    def __repr__(self) -> str:
        return f"PathAccumulator(vertices={len(self._vertices)})"
