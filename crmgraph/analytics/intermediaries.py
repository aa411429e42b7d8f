"""
Intermediary Suggester - who could make an introduction
=======================================================

Fallback used after the Pathfinder reports that two people are not
connected within the hop bound. This is a best-effort heuristic, not an
optimality guarantee: it looks only at the direct (1-hop) neighborhoods
of the two people and ranks everyone found there by how strong their
tie to either side is.

Ranking
-------
    1. Strength of the connecting edge, strongest first. A candidate
       adjacent to both sides uses its stronger edge and is flagged
       ``connects_both``.
    2. Ascending person id.

A person with no relationships cannot be introduced to anyone, so the
list is empty when either side has no connections. It is capped
(Config.INTERMEDIARY.MAX_SUGGESTIONS, default 5) and is never an error.
"""

import logging
from dataclasses import dataclass
from typing import Dict, List, Optional

from .config import Config
from .snapshot import GraphSnapshot
from .utils import normalize_person_id

logger = logging.getLogger("Graph.Intermediaries")


@dataclass
class Intermediary:
    """A suggested introducer."""
    person_id: str
    name: str
    strength: int
    connected_to: str
    connects_both: bool = False

    def to_dict(self) -> dict:
        return {
            "id": self.person_id,
            "name": self.name,
            "strength": self.strength,
            "connected_to": self.connected_to,
            "connects_both": self.connects_both,
        }


def suggest_intermediaries(
    snapshot: GraphSnapshot,
    source: str,
    target: str,
    limit: Optional[int] = None,
) -> List[Intermediary]:
    """
    Suggest people directly connected to either side.

    Args:
        snapshot: Snapshot of the calling owner's network
        source: Person the caller starts from
        target: Person the caller wants to reach
        limit: Maximum suggestions (Config.INTERMEDIARY.MAX_SUGGESTIONS if None)

    Returns:
        Ranked list of Intermediary, empty when either side has no
        relationships
    """
    cap = limit if limit is not None else Config.INTERMEDIARY.MAX_SUGGESTIONS
    src = normalize_person_id(source)
    dst = normalize_person_id(target)

    if snapshot.degree(src) == 0 or snapshot.degree(dst) == 0:
        return []

    candidates: Dict[str, Intermediary] = {}

    for side in (src, dst):
        for neighbor, strength, _type in snapshot.neighbors(side):
            if neighbor in (src, dst):
                continue

            existing = candidates.get(neighbor)
            if existing is None:
                candidates[neighbor] = Intermediary(
                    person_id=neighbor,
                    name=snapshot.person_name(neighbor),
                    strength=strength,
                    connected_to=side,
                )
                continue

            if existing.connected_to != side:
                existing.connects_both = True
            if strength > existing.strength:
                existing.strength = strength
                existing.connected_to = side

    ranked = sorted(candidates.values(), key=lambda c: (-c.strength, c.person_id))

    logger.debug(f"{len(ranked)} intermediary candidates for {src} -> {dst}")

    return ranked[:cap]
