"""
Graph Engine for the personal CRM
=================================

Read-only analytics over each user's private social graph. Every
computation loads a fresh snapshot of one owner's people and
relationships and throws it away afterwards; nothing is cached.

Components
----------
    snapshot:
        Loads people and relationships for one owner into a NetworkX
        graph. Entry point for every other component.

    pathfinder:
        Bounded shortest path (fewest degrees, then strongest, then
        smallest ids) and ranked enumeration of alternative paths.

    intermediaries:
        Who could make an introduction when no path exists.

    clusters:
        Connected groups, largest first.

    centrality:
        Most connected people and people with few or no connections.

    network_health:
        Average strength, density and stale relationships for the
        dashboard.

    focus:
        Everyone within N degrees of one person.

    proximity:
        Orders assistant search results by how close each person is.

Database Tables
---------------
Owned by the CRUD layer (see db.SCHEMA):

    - people, relationships, events, event_participants, favors

API Endpoints
-------------
Mounted by crmgraph/web/http_server.py:

    GET  /network/graph
    GET  /network/clusters
    GET  /network/central-nodes
    GET  /network/isolated
    POST /network/path
    GET  /network/paths
    GET  /network/focus
    GET  /dashboard/network-health

Usage Example
-------------
    from crmgraph.analytics import GraphDB, load_snapshot, find_path

    db = GraphDB("/var/lib/crmgraph/crm.db")
    snapshot = load_snapshot(db, owner_id)
    result = find_path(snapshot, alice_id, charlie_id)
"""

from .db import (
    GraphDB,
    GraphDBError,
    ConnectionError,
    QueryError,
    DBConnection,
    ensure_connection,
    run_query,
)
from .snapshot import GraphSnapshot, load_snapshot, person_owner
from .pathfinder import (
    PathResult,
    RankedPath,
    AllPathsResult,
    check_endpoint,
    find_path,
    find_all_paths,
    path_quality_score,
)
from .intermediaries import Intermediary, suggest_intermediaries
from .clusters import Cluster, detect_clusters
from .centrality import (
    CentralityEntry,
    IsolatedEntry,
    rank_central_nodes,
    find_isolated,
)
from .network_health import (
    NetworkHealth,
    network_density,
    load_recent_interactions,
    compute_network_health,
    get_network_health,
)
from .focus import FocusedGraph, focus_graph, degree_connections
from .proximity import rank_by_proximity, find_connection_path
from .utils import (
    is_uuid,
    normalize_person_id,
    make_pair_key,
    parse_timestamp,
    format_timestamp,
)
from .errors import (
    ErrorCode,
    GraphError,
    NotFound,
    AuthorizationError,
    AuthenticationError,
    api_error,
    api_error_from_exception,
)
from .config import Config, reload_config
from .validation import (
    ValidationError,
    validate_int,
    validate_limit,
    validate_max_connections,
    validate_min_strength,
    validate_max_degrees,
    validate_focus_degrees,
    validate_person_id,
    validate_relationship_type,
)

__all__ = [
    # Storage
    "GraphDB",
    "GraphDBError",
    "ConnectionError",
    "QueryError",
    "DBConnection",
    "ensure_connection",
    "run_query",
    # Snapshot
    "GraphSnapshot",
    "load_snapshot",
    "person_owner",
    # Pathfinder
    "PathResult",
    "RankedPath",
    "AllPathsResult",
    "check_endpoint",
    "find_path",
    "find_all_paths",
    "path_quality_score",
    # Intermediaries
    "Intermediary",
    "suggest_intermediaries",
    # Clusters and centrality
    "Cluster",
    "detect_clusters",
    "CentralityEntry",
    "IsolatedEntry",
    "rank_central_nodes",
    "find_isolated",
    # Network health
    "NetworkHealth",
    "network_density",
    "load_recent_interactions",
    "compute_network_health",
    "get_network_health",
    # Focus and proximity
    "FocusedGraph",
    "focus_graph",
    "degree_connections",
    "rank_by_proximity",
    "find_connection_path",
    # Utils
    "is_uuid",
    "normalize_person_id",
    "make_pair_key",
    "parse_timestamp",
    "format_timestamp",
    # Errors
    "ErrorCode",
    "GraphError",
    "NotFound",
    "AuthorizationError",
    "AuthenticationError",
    "api_error",
    "api_error_from_exception",
    # Config
    "Config",
    "reload_config",
    # Validation
    "ValidationError",
    "validate_int",
    "validate_limit",
    "validate_max_connections",
    "validate_min_strength",
    "validate_max_degrees",
    "validate_focus_degrees",
    "validate_person_id",
    "validate_relationship_type",
]
