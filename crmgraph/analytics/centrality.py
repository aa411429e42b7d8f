"""
Centrality Ranker and Isolation Detector
========================================

Pure degree centrality: a person's score is the number of distinct
relationships they take part in. Strength-weighted influence is not
computed here; callers that want it compose it from the snapshot.

    rank_central_nodes   top-N people, degree desc, id asc
    find_isolated        everyone with degree <= threshold
"""

import logging
from dataclasses import dataclass
from typing import List

from .snapshot import GraphSnapshot

logger = logging.getLogger("Graph.Centrality")


@dataclass
class CentralityEntry:
    """Degree centrality of one person."""
    person_id: str
    name: str
    connection_count: int

    def to_dict(self) -> dict:
        return {
            "person_id": self.person_id,
            "name": self.name,
            "connection_count": self.connection_count,
        }


@dataclass
class IsolatedEntry:
    """An under-connected person."""
    person_id: str
    name: str
    connection_count: int

    def to_dict(self) -> dict:
        return {
            "id": self.person_id,
            "name": self.name,
            "connection_count": self.connection_count,
        }


def rank_central_nodes(snapshot: GraphSnapshot, limit: int) -> List[CentralityEntry]:
    """
    Most connected people.

    Args:
        snapshot: Snapshot of the owner's network
        limit: Number of entries to return

    Returns:
        Up to ``limit`` entries, connection_count desc then person id asc
    """
    entries = [
        CentralityEntry(
            person_id=pid,
            name=snapshot.person_name(pid),
            connection_count=degree,
        )
        for pid, degree in snapshot.graph.degree()
    ]
    entries.sort(key=lambda e: (-e.connection_count, e.person_id))
    return entries[:limit]


def find_isolated(snapshot: GraphSnapshot, max_connections: int) -> List[IsolatedEntry]:
    """
    People with at most ``max_connections`` relationships.

    Returns:
        Entries ordered by connection_count asc, then name, then id
    """
    isolated = [
        IsolatedEntry(
            person_id=pid,
            name=snapshot.person_name(pid),
            connection_count=degree,
        )
        for pid, degree in snapshot.graph.degree()
        if degree <= max_connections
    ]
    isolated.sort(key=lambda e: (e.connection_count, e.name, e.person_id))

    logger.debug(
        f"Owner {snapshot.owner_id}: {len(isolated)} people with <= {max_connections} connections"
    )

    return isolated
