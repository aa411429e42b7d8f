"""
Pathfinder - bounded shortest paths between people
==================================================

Finds how two people in one owner's network are connected.

Path Selection
--------------
    1. Fewest degrees (edges) wins, up to a hop bound D (default 3)
    2. Among equal-degree paths, the highest cumulative strength wins
       (sum of the strengths of the traversed relationships)
    3. Remaining ties go to the lexicographically smallest sequence of
       person ids, so results are reproducible

Algorithm
---------
Layered breadth-first search. Every node is settled on the first layer
that reaches it; for each node reached on layer k we keep the best
predecessor on layer k-1 according to the rules above. Because all
shortest routes to a node pass through the previous layer, this yields
the optimal path, which is reconstructed from the predecessor links.
Cost is O(V + E), bounded by D layers.

Ranked Multi-Path Search
------------------------
``find_all_paths`` enumerates simple paths up to a larger bound, shortest
first and capped at Config.PATH.ALL_PATHS_MAX_ENUMERATED, and ranks them
by degrees, then by a quality score that weights each edge by its
relationship type:

    quality = sum(strength * type_weight) / degrees

Example
-------
    >>> result = find_path(snapshot, "alice", "charlie")
    >>> result.path, result.degrees, result.strength
    (['alice', 'bob', 'charlie'], 2, 8)
"""

import heapq
import logging
from dataclasses import dataclass, field
from itertools import islice
from typing import Dict, List, Optional, Tuple

import networkx as nx

from .config import Config, RELATIONSHIP_TYPE_WEIGHTS
from .db import DBConnection
from .errors import AuthorizationError, NotFound, PERSON_NOT_FOUND_MESSAGE
from .snapshot import GraphSnapshot, person_owner
from .utils import normalize_person_id

logger = logging.getLogger("Graph.Pathfinder")


@dataclass
class PathResult:
    """Result of a path query."""
    source: str
    target: str
    path: List[str]
    degrees: int
    strength: int = 0
    weakest_link: Optional[int] = None
    intermediaries: List[Dict[str, str]] = field(default_factory=list)

    def to_dict(self) -> dict:
        return {
            "from": self.source,
            "to": self.target,
            "path": self.path,
            "degrees": self.degrees,
            "strength": self.strength,
            "weakest_link": self.weakest_link,
            "intermediaries": self.intermediaries,
        }


@dataclass
class RankedPath:
    """One entry of a ranked multi-path search."""
    path: List[str]
    degrees: int
    quality_score: float
    strength: int
    weakest_link: int

    def to_dict(self) -> dict:
        return {
            "path": self.path,
            "degrees": self.degrees,
            "quality_score": self.quality_score,
            "strength": self.strength,
            "weakest_link": self.weakest_link,
        }


@dataclass
class AllPathsResult:
    """Result of a ranked multi-path search."""
    source: str
    target: str
    total_found: int
    paths: List[RankedPath] = field(default_factory=list)
    truncated: bool = False

    @property
    def found(self) -> bool:
        return self.total_found > 0

    def to_dict(self) -> dict:
        return {
            "from": self.source,
            "to": self.target,
            "found": self.found,
            "total_found": self.total_found,
            "truncated": self.truncated,
            "paths": [p.to_dict() for p in self.paths],
        }


def check_endpoint(
    snapshot: GraphSnapshot,
    person_id: str,
    conn_or_db: Optional[DBConnection] = None,
) -> str:
    """
    Ensure a person id is inside the snapshot's owner scope.

    Args:
        snapshot: Snapshot for the calling owner
        person_id: Id supplied by the caller
        conn_or_db: Storage handle used to classify out-of-scope ids

    Returns:
        The normalized person id

    Raises:
        AuthorizationError: The person belongs to another owner
        NotFound: The person does not exist
    """
    pid = normalize_person_id(person_id)
    if snapshot.has_person(pid):
        return pid

    if conn_or_db is not None:
        owner = person_owner(conn_or_db, pid)
        if owner is not None and owner != snapshot.owner_id:
            logger.warning(
                f"Owner {snapshot.owner_id} referenced person {pid} outside its scope"
            )
            raise AuthorizationError(pid)

    logger.debug(f"Owner {snapshot.owner_id} referenced unknown person {pid}")
    raise NotFound(PERSON_NOT_FOUND_MESSAGE)


def _trace(predecessors: Dict[str, Optional[str]], node: str) -> List[str]:
    """Reconstruct the route from the source to ``node``."""
    route = []
    current: Optional[str] = node
    while current is not None:
        route.append(current)
        current = predecessors[current]
    route.reverse()
    return route


def _path_stats(snapshot: GraphSnapshot, path: List[str]) -> Tuple[int, Optional[int]]:
    """Sum and minimum of the strengths along a path."""
    strengths = [snapshot.strength(a, b) for a, b in zip(path, path[1:])]
    if not strengths:
        return 0, None
    return sum(strengths), min(strengths)


def bounded_shortest_path(
    snapshot: GraphSnapshot,
    source: str,
    target: str,
    max_degrees: int,
) -> Optional[List[str]]:
    """
    Layered BFS with strength and id tie-breaking.

    Both endpoints must already be in the snapshot.

    Returns:
        The selected path, or None if the target is not reachable
        within ``max_degrees`` hops
    """
    if source == target:
        return [source]

    predecessors: Dict[str, Optional[str]] = {source: None}
    totals: Dict[str, int] = {source: 0}
    frontier = [source]

    for _ in range(max_degrees):
        # node -> (cumulative strength, predecessor)
        reached: Dict[str, Tuple[int, str]] = {}

        for node in frontier:
            for neighbor, strength, _type in snapshot.neighbors(node):
                if neighbor in predecessors:
                    continue

                total = totals[node] + strength
                best = reached.get(neighbor)
                if best is None or total > best[0]:
                    reached[neighbor] = (total, node)
                elif total == best[0] and _trace(predecessors, node) < _trace(predecessors, best[1]):
                    reached[neighbor] = (total, node)

        if not reached:
            return None

        for neighbor, (total, node) in reached.items():
            predecessors[neighbor] = node
            totals[neighbor] = total

        if target in reached:
            return _trace(predecessors, target)

        frontier = sorted(reached)

    return None


def find_path(
    snapshot: GraphSnapshot,
    source: str,
    target: str,
    max_degrees: Optional[int] = None,
    conn_or_db: Optional[DBConnection] = None,
) -> PathResult:
    """
    Find the best path between two people within a hop bound.

    Args:
        snapshot: Snapshot of the calling owner's network
        source: Source person id
        target: Target person id
        max_degrees: Hop bound (Config.PATH.DEFAULT_MAX_DEGREES if None)
        conn_or_db: Storage handle used to classify out-of-scope ids

    Returns:
        PathResult; ``source == target`` yields degrees 0

    Raises:
        AuthorizationError: An endpoint belongs to another owner
        NotFound: An endpoint is unknown, or no path exists within the bound
    """
    bound = max_degrees if max_degrees is not None else Config.PATH.DEFAULT_MAX_DEGREES

    src = check_endpoint(snapshot, source, conn_or_db)
    dst = check_endpoint(snapshot, target, conn_or_db)

    path = bounded_shortest_path(snapshot, src, dst, bound)
    if path is None:
        logger.debug(f"No path {src} -> {dst} within {bound} degrees")
        raise NotFound(
            f"No connection found within {bound} degrees of separation",
            details={"from": src, "to": dst, "max_degrees": bound},
        )

    total, weakest = _path_stats(snapshot, path)

    return PathResult(
        source=src,
        target=dst,
        path=path,
        degrees=len(path) - 1,
        strength=total,
        weakest_link=weakest,
        intermediaries=[
            {"id": pid, "name": snapshot.person_name(pid)} for pid in path[1:-1]
        ],
    )


def path_quality_score(snapshot: GraphSnapshot, path: List[str]) -> float:
    """
    Quality score of a path: sum(strength * type_weight) / degrees.

    Unknown relationship types use the "other" weight. Rounded to 2 places.
    """
    degrees = len(path) - 1
    if degrees <= 0:
        return 0.0

    weighted = 0.0
    for a, b in zip(path, path[1:]):
        data = snapshot.edge(a, b)
        if data:
            weight = RELATIONSHIP_TYPE_WEIGHTS.get(data["type"], RELATIONSHIP_TYPE_WEIGHTS["other"])
            weighted += data["strength"] * weight

    return round(weighted / degrees, 2)


def _simple_paths_by_degrees(graph: nx.Graph, source: str, target: str, max_degrees: int):
    """Yield simple paths in order of increasing degrees."""
    for degrees in range(1, max_degrees + 1):
        for path in nx.all_simple_paths(graph, source, target, cutoff=degrees):
            if len(path) - 1 == degrees:
                yield path


def _rank_key(ranked: RankedPath):
    return (ranked.degrees, -ranked.quality_score, ranked.path)


def find_all_paths(
    snapshot: GraphSnapshot,
    source: str,
    target: str,
    max_degrees: Optional[int] = None,
    limit: Optional[int] = None,
    conn_or_db: Optional[DBConnection] = None,
    max_enumerated: Optional[int] = None,
) -> AllPathsResult:
    """
    Enumerate and rank the simple paths between two distinct people.

    Paths are walked shortest first and enumeration stops after
    ``max_enumerated`` of them. When that happens ``truncated`` is set;
    every shorter layer was still examined in full, so the ranking is
    exact except within the last, partially walked layer.

    Args:
        snapshot: Snapshot of the calling owner's network
        source: Source person id
        target: Target person id (must differ from source)
        max_degrees: Hop bound (Config.PATH.ALL_PATHS_MAX_DEGREES if None)
        limit: Paths to keep (Config.PATH.ALL_PATHS_LIMIT if None)
        conn_or_db: Storage handle used to classify out-of-scope ids
        max_enumerated: Enumeration cap
            (Config.PATH.ALL_PATHS_MAX_ENUMERATED if None)

    Returns:
        AllPathsResult sorted by degrees asc, quality desc, ids asc.
        ``total_found`` counts every examined path before the limit.

    Raises:
        ValueError: If source and target are the same person
        AuthorizationError / NotFound: As in find_path
    """
    bound = max_degrees if max_degrees is not None else Config.PATH.ALL_PATHS_MAX_DEGREES
    keep = limit if limit is not None else Config.PATH.ALL_PATHS_LIMIT
    cap = max_enumerated if max_enumerated is not None else Config.PATH.ALL_PATHS_MAX_ENUMERATED

    src = check_endpoint(snapshot, source, conn_or_db)
    dst = check_endpoint(snapshot, target, conn_or_db)
    if src == dst:
        raise ValueError("Cannot find paths from a person to themselves")

    walk = _simple_paths_by_degrees(snapshot.graph, src, dst, bound)
    examined = list(islice(walk, cap + 1))
    truncated = len(examined) > cap
    if truncated:
        examined.pop()
        logger.warning(f"Path enumeration {src} -> {dst} stopped after {cap} paths")

    ranked = []
    for path in examined:
        total, weakest = _path_stats(snapshot, path)
        ranked.append(RankedPath(
            path=list(path),
            degrees=len(path) - 1,
            quality_score=path_quality_score(snapshot, path),
            strength=total,
            weakest_link=weakest,
        ))

    logger.debug(f"Found {len(ranked)} paths {src} -> {dst} within {bound} degrees")

    return AllPathsResult(
        source=src,
        target=dst,
        total_found=len(ranked),
        paths=heapq.nsmallest(keep, ranked, key=_rank_key),
        truncated=truncated,
    )
