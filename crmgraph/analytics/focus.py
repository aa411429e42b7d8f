"""
Focused View - the neighborhood around one person
=================================================

Breadth-first walk from a focal person, used by the network page to
show "everyone within N degrees" and by the dashboard to report reach.

    focus_graph          nodes/links within N degrees plus degree counts
    degree_connections   cumulative reach n1, n2, n3
"""

import logging
from collections import deque
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Union

from .config import Config
from .errors import NotFound, PERSON_NOT_FOUND_MESSAGE
from .snapshot import GraphSnapshot
from .utils import normalize_person_id

logger = logging.getLogger("Graph.Focus")


@dataclass
class FocusedGraph:
    """Neighborhood of a focal person."""
    focal_person: Dict[str, str]
    max_degrees: Union[int, str]
    nodes: List[dict] = field(default_factory=list)
    links: List[dict] = field(default_factory=list)
    degree_counts: Dict[int, int] = field(default_factory=dict)
    cumulative_counts: Dict[str, int] = field(default_factory=dict)

    @property
    def total_connections(self) -> int:
        return len(self.nodes) - 1

    def to_dict(self) -> dict:
        return {
            "focal_person": self.focal_person,
            "nodes": self.nodes,
            "links": self.links,
            "degree_counts": {str(k): v for k, v in self.degree_counts.items()},
            "cumulative_counts": self.cumulative_counts,
            "total_connections": self.total_connections,
            "max_degrees": self.max_degrees,
        }


def _distances(snapshot: GraphSnapshot, origin: str, limit: Optional[int]) -> Dict[str, int]:
    """Hop distance from ``origin`` to every person reachable within ``limit``."""
    distances = {origin: 0}
    queue = deque([origin])

    while queue:
        node = queue.popleft()
        if limit is not None and distances[node] >= limit:
            continue
        for neighbor, _strength, _type in snapshot.neighbors(node):
            if neighbor not in distances:
                distances[neighbor] = distances[node] + 1
                queue.append(neighbor)

    return distances


def focus_graph(
    snapshot: GraphSnapshot,
    person_id: str,
    max_degrees: Union[int, str, None] = None,
) -> FocusedGraph:
    """
    Everyone within ``max_degrees`` of a focal person.

    Args:
        snapshot: Snapshot of the owner's network
        person_id: Focal person
        max_degrees: Hop limit, or "all" for the whole component
            (Config.FOCUS.DEFAULT_DEGREES if None)

    Raises:
        NotFound: The focal person is not in the owner's network
    """
    pid = normalize_person_id(person_id)
    if not snapshot.has_person(pid):
        raise NotFound(PERSON_NOT_FOUND_MESSAGE)

    degrees = max_degrees if max_degrees is not None else Config.FOCUS.DEFAULT_DEGREES
    limit = None if degrees == "all" else int(degrees)

    distances = _distances(snapshot, pid, limit)

    degree_counts: Dict[int, int] = {}
    for distance in distances.values():
        degree_counts[distance] = degree_counts.get(distance, 0) + 1

    top = Config.FOCUS.MAX_CUMULATIVE_DEGREE if limit is None else min(limit, Config.FOCUS.MAX_CUMULATIVE_DEGREE)
    cumulative_counts = {}
    running = 0
    for level in range(top + 1):
        running += degree_counts.get(level, 0)
        cumulative_counts[f"n{level}"] = running

    nodes = [
        {
            "id": node,
            "name": snapshot.person_name(node),
            "degree_from_focus": distances[node],
            "is_focal_person": node == pid,
        }
        for node in sorted(distances, key=lambda n: (distances[n], n))
    ]

    links = [
        {"source": a, "target": b, "strength": strength, "type": rel_type}
        for a, b, strength, rel_type in sorted(snapshot.iter_edges())
        if a in distances and b in distances
    ]

    logger.debug(f"Focus on {pid}: {len(nodes)} people within {degrees} degrees")

    return FocusedGraph(
        focal_person={"id": pid, "name": snapshot.person_name(pid)},
        max_degrees=degrees,
        nodes=nodes,
        links=links,
        degree_counts=dict(sorted(degree_counts.items())),
        cumulative_counts=cumulative_counts,
    )


def degree_connections(snapshot: GraphSnapshot, person_id: str) -> Dict[str, int]:
    """
    Cumulative reach of a person: n1 direct, n2 within two, n3 within three.

    Unknown people have no reach.
    """
    pid = normalize_person_id(person_id)
    if not snapshot.has_person(pid):
        return {"n1": 0, "n2": 0, "n3": 0}

    distances = _distances(snapshot, pid, 3)
    return {
        f"n{level}": sum(1 for d in distances.values() if 0 < d <= level)
        for level in (1, 2, 3)
    }
