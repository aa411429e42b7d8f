"""
Network Health - aggregate metrics for the dashboard
====================================================

Summarizes the state of one owner's network in a single pass over the
relationship set.

Metrics
-------
    average_relationship_strength:
        Mean strength over all relationships, 0 when there are none.

    total_connections:
        Number of relationships.

    stale_relationships_count:
        Relationships whose two people share no recorded interaction
        inside the trailing window (Config.HEALTH.STALE_WINDOW_DAYS,
        default 90). An interaction is an event both attended, or a
        favor between them in either direction.

    network_density:
        relationships / (n * (n - 1) / 2) over all n people, 0 when
        fewer than two people exist, never above 1.

API Endpoint
------------
    GET /dashboard/network-health
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Optional, Set

from .config import Config
from .db import DBConnection, run_query
from .snapshot import GraphSnapshot, load_snapshot
from .utils import make_pair_key, parse_timestamp

logger = logging.getLogger("Graph.Health")


@dataclass
class NetworkHealth:
    """Aggregate network health metrics."""
    average_strength: float = 0.0
    total_connections: int = 0
    stale_count: int = 0
    density: float = 0.0

    def to_dict(self) -> dict:
        return {
            "average_relationship_strength": self.average_strength,
            "total_connections": self.total_connections,
            "stale_relationships_count": self.stale_count,
            "network_density": self.density,
        }


def network_density(node_count: int, edge_count: int) -> float:
    """Undirected graph density, 0 below two nodes and capped at 1."""
    if node_count < 2:
        return 0.0
    max_edges = node_count * (node_count - 1) / 2
    return min(edge_count / max_edges, 1.0)


def load_recent_interactions(
    conn_or_db: DBConnection,
    owner_id: str,
    since: datetime,
) -> Set[str]:
    """
    Pairs of people who interacted on or after ``since``.

    Returns:
        Set of canonical pair keys (see utils.make_pair_key)
    """
    pairs: Set[str] = set()

    shared_events = run_query(
        conn_or_db,
        """
        SELECT ep1.person_id, ep2.person_id, e.date
        FROM events e
        JOIN event_participants ep1 ON ep1.event_id = e.id
        JOIN event_participants ep2 ON ep2.event_id = e.id
            AND ep1.person_id < ep2.person_id
        WHERE e.user_id = ?
        """,
        (owner_id,),
    )

    favors = run_query(
        conn_or_db,
        "SELECT giver_id, receiver_id, date FROM favors WHERE user_id = ?",
        (owner_id,),
    )

    for person_a, person_b, date in list(shared_events) + list(favors):
        when = parse_timestamp(date)
        if when is None:
            logger.warning(f"Ignoring interaction {person_a}-{person_b} with unreadable date {date!r}")
            continue
        if when >= since and person_a != person_b:
            pairs.add(make_pair_key(person_a, person_b))

    return pairs


def compute_network_health(
    snapshot: GraphSnapshot,
    recent_pairs: Set[str],
) -> NetworkHealth:
    """
    Single pass over the snapshot's relationships.

    Args:
        snapshot: Snapshot of the owner's full network
        recent_pairs: Pair keys with an interaction inside the window
    """
    total_strength = 0
    edge_count = 0
    stale = 0

    for person_a, person_b, strength, _type in snapshot.iter_edges():
        edge_count += 1
        total_strength += strength
        if make_pair_key(person_a, person_b) not in recent_pairs:
            stale += 1

    average = round(total_strength / edge_count, 2) if edge_count else 0.0

    return NetworkHealth(
        average_strength=average,
        total_connections=edge_count,
        stale_count=stale,
        density=network_density(snapshot.node_count, edge_count),
    )


def get_network_health(
    conn_or_db: DBConnection,
    owner_id: str,
    window_days: Optional[int] = None,
    now: Optional[datetime] = None,
) -> NetworkHealth:
    """
    Load the owner's network and compute its health metrics.

    Args:
        conn_or_db: SQLite connection or GraphDB instance
        owner_id: Owner whose network is summarized
        window_days: Staleness window (Config.HEALTH.STALE_WINDOW_DAYS if None)
        now: Reference time (current UTC time if None)
    """
    days = window_days if window_days is not None else Config.HEALTH.STALE_WINDOW_DAYS
    reference = now or datetime.now(timezone.utc)
    if reference.tzinfo is None:
        reference = reference.replace(tzinfo=timezone.utc)
    since = reference - timedelta(days=days)

    snapshot = load_snapshot(conn_or_db, owner_id)
    recent = load_recent_interactions(conn_or_db, owner_id, since)
    health = compute_network_health(snapshot, recent)

    logger.debug(
        f"Owner {owner_id} health: {health.total_connections} connections, "
        f"{health.stale_count} stale (window {days}d), density {health.density:.3f}"
    )

    return health
