"""
Cluster Detector - connected groups in one owner's network
==========================================================

Every maximal connected component becomes a Cluster, including
singleton components for people without relationships.

Output order is deterministic: size descending, ties broken by the
smallest member id. Members inside a cluster are sorted ascending and
cluster ids are the 1-based positions in that order.
"""

import logging
from dataclasses import dataclass, field
from typing import List

import networkx as nx

from .snapshot import GraphSnapshot

logger = logging.getLogger("Graph.Clusters")


@dataclass
class Cluster:
    """One connected component."""
    cluster_id: int
    members: List[str] = field(default_factory=list)

    @property
    def size(self) -> int:
        return len(self.members)

    def to_dict(self) -> dict:
        return {
            "id": self.cluster_id,
            "members": self.members,
            "size": self.size,
        }


def detect_clusters(snapshot: GraphSnapshot) -> List[Cluster]:
    """
    Find connected components of the owner's full graph.

    Returns:
        Clusters sorted by size desc, then smallest member id
    """
    components = [sorted(c) for c in nx.connected_components(snapshot.graph)]
    components.sort(key=lambda members: (-len(members), members[0]))

    clusters = [
        Cluster(cluster_id=index, members=members)
        for index, members in enumerate(components, start=1)
    ]

    logger.debug(
        f"Owner {snapshot.owner_id}: {len(clusters)} clusters over {snapshot.node_count} people"
    )

    return clusters
