"""
Proximity Ranking for the Chat Assistant Tools
==============================================

The assistant's search tools (capabilities, assets, demographics) return
candidate people. When the user asks "as" a specific person, each
candidate gets a ``connection`` describing how close they are, and the
list is reordered so closer people come first.

Ordering Guarantee
------------------
    1. Fewer degrees always before more degrees
    2. Equal degrees: higher cumulative strength first
    3. Candidates that cannot be reached (or are the asker) keep their
       original relative order at the end

Without an asker, or with one outside the owner's network, candidates
come back in search order with ``connection`` set to None.

One snapshot is loaded per tool call and the Pathfinder runs once per
candidate against it.
"""

import logging
from typing import Any, Dict, List, Mapping, Optional

from .errors import NotFound
from .intermediaries import suggest_intermediaries
from .pathfinder import check_endpoint, find_path
from .snapshot import GraphSnapshot
from .utils import normalize_person_id

logger = logging.getLogger("Graph.Proximity")


def rank_by_proximity(
    snapshot: GraphSnapshot,
    from_person_id: Optional[str],
    candidates: List[Mapping[str, Any]],
    max_degrees: Optional[int] = None,
) -> List[Dict[str, Any]]:
    """
    Attach connection info to search candidates and sort by closeness.

    Args:
        snapshot: Snapshot of the owner's network
        from_person_id: Person the search is made on behalf of, or None
        candidates: Search results; each must carry an ``id``
        max_degrees: Pathfinder hop bound

    Returns:
        New list of candidate dicts with a ``connection`` key that is
        ``{degrees, strength, path}`` or None
    """
    origin = normalize_person_id(from_person_id)
    if not origin or not snapshot.has_person(origin):
        logger.debug(f"No asker in scope ({origin or 'none'}), keeping search order")
        return [dict(candidate, connection=None) for candidate in candidates]

    enriched = []
    for candidate in candidates:
        entry = dict(candidate)
        candidate_id = normalize_person_id(candidate.get("id"))

        connection = None
        if candidate_id and candidate_id != origin and snapshot.has_person(candidate_id):
            try:
                result = find_path(snapshot, origin, candidate_id, max_degrees)
                connection = {
                    "degrees": result.degrees,
                    "strength": result.strength,
                    "path": result.path,
                }
            except NotFound:
                connection = None

        entry["connection"] = connection
        enriched.append(entry)

    # sorted() is stable, so unreachable candidates keep their search order
    enriched = sorted(
        enriched,
        key=lambda c: (
            c["connection"] is None,
            c["connection"]["degrees"] if c["connection"] else 0,
            -c["connection"]["strength"] if c["connection"] else 0,
        ),
    )

    reachable = sum(1 for c in enriched if c["connection"] is not None)
    logger.debug(f"Ranked {len(enriched)} candidates from {origin}, {reachable} reachable")

    return enriched


def find_connection_path(
    snapshot: GraphSnapshot,
    from_person_id: str,
    to_person_id: str,
    max_degrees: Optional[int] = None,
) -> Dict[str, Any]:
    """
    Tool payload for "how am I connected to X".

    Returns:
        ``{found: True, from, to, degrees, strength, path, intermediaries}``
        or ``{found: False, suggested_intermediaries: [...]}`` when no
        path exists within the bound

    Raises:
        AuthorizationError / NotFound: An endpoint is not in scope
    """
    origin = check_endpoint(snapshot, from_person_id)
    destination = check_endpoint(snapshot, to_person_id)

    try:
        result = find_path(snapshot, origin, destination, max_degrees)
    except NotFound:
        suggestions = suggest_intermediaries(snapshot, origin, destination)
        return {
            "found": False,
            "suggested_intermediaries": [s.to_dict() for s in suggestions],
        }

    payload = {"found": True}
    payload.update(result.to_dict())
    payload["from"] = {"id": origin, "name": snapshot.person_name(origin)}
    payload["to"] = {"id": destination, "name": snapshot.person_name(destination)}
    return payload
