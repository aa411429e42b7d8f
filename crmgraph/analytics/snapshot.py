"""
Graph Snapshot - point-in-time view of one owner's social graph
===============================================================

Builds an in-memory NetworkX graph from the people and relationships of a
single owner. Every analytic (pathfinding, clusters, centrality, health)
runs against a snapshot that is loaded fresh for the request and thrown
away afterwards, so CRUD mutations are visible on the next call.

Architecture
------------
    SQLite (people, relationships) --> GraphSnapshot (networkx.Graph)

    1. People become nodes (``name`` attribute), including people with
       no relationships at all
    2. Relationships become undirected edges with ``strength``, ``type``
       and ``context`` attributes
    3. Rows that break the storage invariants (self-loops, duplicate
       pairs, strength outside 1-5, dangling endpoints) are skipped and
       logged rather than failing the whole request

Example
-------
    >>> from crmgraph.analytics.snapshot import load_snapshot
    >>>
    >>> snapshot = load_snapshot(db, owner_id)
    >>> snapshot.adjacency()["alice"]
    [('bob', 5, 'friend')]
"""

import logging
import time
from typing import Dict, Iterator, List, Optional, Tuple

import networkx as nx

from .db import DBConnection, run_query
from .utils import normalize_person_id

logger = logging.getLogger("Graph.Snapshot")

MIN_STRENGTH = 1
MAX_STRENGTH = 5

# (neighbor_id, strength, relationship_type)
Neighbor = Tuple[str, int, str]

# (person_a, person_b, strength, relationship_type) with person_a < person_b
Edge = Tuple[str, str, int, str]


class GraphSnapshot:
    """
    Read-only adjacency view of one owner's network.

    Wraps an undirected ``networkx.Graph``. Node ids are normalized
    person ids; the graph never holds parallel edges or self-loops.

    Attributes:
        owner_id: Owner whose people and relationships were loaded
        graph: Underlying NetworkX Graph
        built_at: Timestamp when the snapshot was constructed

    Example:
        >>> snap = GraphSnapshot("owner-1")
        >>> snap.add_person("a", "Alice")
        >>> snap.add_person("b", "Bob")
        >>> snap.add_relationship("a", "b", strength=5, relationship_type="friend")
        >>> snap.neighbors("a")
        [('b', 5, 'friend')]
    """

    def __init__(self, owner_id: str):
        self.owner_id = owner_id
        self.graph: nx.Graph = nx.Graph()
        self.built_at = time.time()

    @property
    def node_count(self) -> int:
        return self.graph.number_of_nodes()

    @property
    def edge_count(self) -> int:
        return self.graph.number_of_edges()

    def add_person(self, person_id: str, name: str = "") -> None:
        self.graph.add_node(normalize_person_id(person_id), name=name or "")

    def add_relationship(
        self,
        person_a: str,
        person_b: str,
        strength: int,
        relationship_type: str = "other",
        context: str = "",
    ) -> bool:
        """
        Add an undirected edge between two known people.

        Returns:
            True if the edge was added, False if it was rejected
            (self-loop, unknown endpoint, duplicate pair, bad strength)
        """
        a = normalize_person_id(person_a)
        b = normalize_person_id(person_b)

        if a == b:
            logger.warning(f"Skipping self-loop relationship on {a}")
            return False
        if not (self.graph.has_node(a) and self.graph.has_node(b)):
            logger.warning(f"Skipping relationship {a}-{b}: endpoint not in owner scope")
            return False
        if self.graph.has_edge(a, b):
            logger.warning(f"Skipping duplicate relationship {a}-{b}")
            return False
        if not isinstance(strength, int) or not MIN_STRENGTH <= strength <= MAX_STRENGTH:
            logger.warning(f"Skipping relationship {a}-{b}: strength {strength!r} outside 1-5")
            return False

        self.graph.add_edge(
            a,
            b,
            strength=strength,
            type=relationship_type or "other",
            context=context or "",
        )
        return True

    def has_person(self, person_id: str) -> bool:
        return self.graph.has_node(normalize_person_id(person_id))

    def person_name(self, person_id: str) -> str:
        """Display name of a person, empty string if unknown."""
        pid = normalize_person_id(person_id)
        if not self.graph.has_node(pid):
            return ""
        return self.graph.nodes[pid].get("name", "")

    def person_ids(self) -> List[str]:
        """All person ids in ascending order."""
        return sorted(self.graph.nodes)

    def neighbors(self, person_id: str) -> List[Neighbor]:
        """Neighbors of a person as (id, strength, type), ascending by id."""
        pid = normalize_person_id(person_id)
        if not self.graph.has_node(pid):
            return []
        return [
            (neighbor, data["strength"], data["type"])
            for neighbor, data in sorted(self.graph.adj[pid].items())
        ]

    def degree(self, person_id: str) -> int:
        """Number of distinct relationships incident to a person."""
        pid = normalize_person_id(person_id)
        if not self.graph.has_node(pid):
            return 0
        return self.graph.degree(pid)

    def edge(self, person_a: str, person_b: str) -> Optional[Dict]:
        """Edge attributes between two people, or None."""
        return self.graph.get_edge_data(
            normalize_person_id(person_a),
            normalize_person_id(person_b),
        )

    def strength(self, person_a: str, person_b: str) -> int:
        """Strength of the edge between two people, 0 if not connected."""
        data = self.edge(person_a, person_b)
        return data["strength"] if data else 0

    def adjacency(self) -> Dict[str, List[Neighbor]]:
        """
        Bidirectional adjacency mapping.

        Returns:
            ``personId -> [(neighborId, strength, type)]`` with an entry
            (possibly empty) for every person
        """
        return {pid: self.neighbors(pid) for pid in self.person_ids()}

    def iter_edges(self) -> Iterator[Edge]:
        """Yield every relationship once as (a, b, strength, type), a < b."""
        for a, b, data in self.graph.edges(data=True):
            if a > b:
                a, b = b, a
            yield a, b, data["strength"], data["type"]

    def to_graph_dict(self, only_linked: bool = False) -> dict:
        """
        Visualization payload.

        Args:
            only_linked: Keep only people that touch at least one link
                (used when a filter was applied to the links)
        """
        links = [
            {"source": a, "target": b, "strength": strength, "type": rel_type}
            for a, b, strength, rel_type in sorted(self.iter_edges())
        ]

        if only_linked:
            linked = {link["source"] for link in links} | {link["target"] for link in links}
            node_ids = [pid for pid in self.person_ids() if pid in linked]
        else:
            node_ids = self.person_ids()

        return {
            "nodes": [{"id": pid, "name": self.person_name(pid)} for pid in node_ids],
            "links": links,
        }


def load_snapshot(
    conn_or_db: DBConnection,
    owner_id: str,
    relationship_type: Optional[str] = None,
    min_strength: Optional[int] = None,
) -> GraphSnapshot:
    """
    Build a GraphSnapshot for one owner.

    Args:
        conn_or_db: SQLite connection or GraphDB instance
        owner_id: Owner whose people and relationships are loaded
        relationship_type: Only keep relationships of this type
        min_strength: Only keep relationships at least this strong

    Returns:
        GraphSnapshot (empty when the owner has no people)

    Raises:
        QueryError: If storage cannot be read
    """
    snapshot = GraphSnapshot(owner_id)

    people = run_query(
        conn_or_db,
        "SELECT id, name FROM people WHERE user_id = ?",
        (owner_id,),
    )
    for row in people:
        snapshot.add_person(row[0], row[1])

    query = """
        SELECT person_a_id, person_b_id, strength, relationship_type, context
        FROM relationships
        WHERE user_id = ?
    """
    params: list = [owner_id]

    if relationship_type:
        query += " AND relationship_type = ?"
        params.append(relationship_type)

    if min_strength is not None:
        query += " AND strength >= ?"
        params.append(min_strength)

    query += " ORDER BY id"

    skipped = 0
    for row in run_query(conn_or_db, query, tuple(params)):
        if not snapshot.add_relationship(row[0], row[1], row[2], row[3], row[4]):
            skipped += 1

    logger.debug(
        f"Built snapshot for owner {owner_id}: {snapshot.node_count} people, "
        f"{snapshot.edge_count} relationships, {skipped} skipped"
    )

    return snapshot


def person_owner(conn_or_db: DBConnection, person_id: str) -> Optional[str]:
    """
    Owner of a person across all accounts.

    Used only to tell "unknown person" apart from "someone else's person"
    for logging; both surface identically to the caller.
    """
    rows = run_query(
        conn_or_db,
        "SELECT user_id FROM people WHERE id = ?",
        (normalize_person_id(person_id),),
    )
    return rows[0][0] if rows else None
