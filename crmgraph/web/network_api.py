"""
Network API - CherryPy endpoints for the relationship graph
===========================================================

Provides authenticated, read-only REST endpoints for:
    - The owner's full graph for visualization
    - Connected clusters
    - Most connected and most isolated people
    - Shortest path between two people, with intermediary suggestions
    - Ranked alternative paths
    - Focused neighborhood around one person

Every request loads a fresh snapshot of the caller's network from the
injected GraphDB; nothing is cached between requests.

Error Response Format
--------------------
All errors follow a consistent format and set the HTTP status:

    {
        "success": False,
        "error": {
            "code": "NOT_FOUND",
            "message": "...",
            "httpStatus": 404,
            "details": {...}
        }
    }

A path request that finds no route within the bound additionally carries
``suggested_intermediaries`` at the top level.
"""

import logging
from typing import Any, Dict

import cherrypy

from crmgraph.analytics.centrality import find_isolated, rank_central_nodes
from crmgraph.analytics.clusters import detect_clusters
from crmgraph.analytics.db import GraphDB
from crmgraph.analytics.errors import (
    GraphError,
    NotFound,
    api_error_from_exception,
    error_code_for,
)
from crmgraph.analytics.focus import degree_connections, focus_graph
from crmgraph.analytics.intermediaries import suggest_intermediaries
from crmgraph.analytics.pathfinder import check_endpoint, find_all_paths, find_path
from crmgraph.analytics.snapshot import load_snapshot
from crmgraph.analytics.validation import (
    ValidationError,
    validate_focus_degrees,
    validate_limit,
    validate_max_connections,
    validate_max_degrees,
    validate_min_strength,
    validate_person_id,
    validate_relationship_type,
)
from crmgraph.web.auth import TokenVerifier

logger = logging.getLogger("NetworkAPI")


def error_response(exc: Exception) -> Dict[str, Any]:
    """Set the HTTP status for an exception and build its error body."""
    if isinstance(exc, ValidationError):
        cherrypy.response.status = exc.http_status
        return exc.to_response()

    cherrypy.response.status = error_code_for(exc).http_status
    return api_error_from_exception(exc)


class NetworkAPI:
    """
    CherryPy-mounted API for graph endpoints.

    Mount at /network for URLs like:
        GET  /network/graph
        GET  /network/central-nodes
        POST /network/path

    CherryPy's dispatcher maps dashes in the URL to underscores, so
    ``central-nodes`` reaches ``central_nodes``.
    """

    def __init__(self, db: GraphDB, verifier: TokenVerifier):
        """
        Args:
            db: Storage handle shared by all requests
            verifier: Token verifier for the shared JWT secret
        """
        self._db = db
        self._verifier = verifier

    def _load(self, owner_id: str, **filters):
        return load_snapshot(self._db, owner_id, **filters)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def graph(self, type=None, min_strength=None, token=None):
        """
        GET /network/graph

        Query params:
            type: Only include relationships of this type
            min_strength: Only include relationships at least this strong (1-5)

        Returns:
            {nodes: [{id, name}], links: [{source, target, strength, type}]}
        """
        try:
            owner_id = self._verifier.owner_from_request()
            rel_type = validate_relationship_type(type)
            strength = validate_min_strength(min_strength)

            snapshot = self._load(owner_id, relationship_type=rel_type, min_strength=strength)
            filtered = rel_type is not None or strength is not None
            return snapshot.to_graph_dict(only_linked=filtered)

        except (ValidationError, GraphError) as e:
            return error_response(e)
        except Exception as e:
            logger.error(f"Error building graph: {e}")
            return error_response(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def clusters(self, token=None):
        """
        GET /network/clusters

        Returns:
            {clusters: [{id, members, size}]} sorted by size desc
        """
        try:
            owner_id = self._verifier.owner_from_request()
            snapshot = self._load(owner_id)
            return {"clusters": [c.to_dict() for c in detect_clusters(snapshot)]}

        except GraphError as e:
            return error_response(e)
        except Exception as e:
            logger.error(f"Error detecting clusters: {e}")
            return error_response(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def central_nodes(self, limit=None, token=None):
        """
        GET /network/central-nodes

        Query params:
            limit: Number of people to return (1-50, default 10)
        """
        try:
            owner_id = self._verifier.owner_from_request()
            top_n = validate_limit(limit)

            snapshot = self._load(owner_id)
            entries = rank_central_nodes(snapshot, top_n)
            return {"central_nodes": [e.to_dict() for e in entries]}

        except (ValidationError, GraphError) as e:
            return error_response(e)
        except Exception as e:
            logger.error(f"Error ranking central nodes: {e}")
            return error_response(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def isolated(self, max_connections=None, token=None):
        """
        GET /network/isolated

        Query params:
            max_connections: Degree threshold (0-5, default 1)
        """
        try:
            owner_id = self._verifier.owner_from_request()
            threshold = validate_max_connections(max_connections)

            snapshot = self._load(owner_id)
            entries = find_isolated(snapshot, threshold)
            return {"isolated_people": [e.to_dict() for e in entries]}

        except (ValidationError, GraphError) as e:
            return error_response(e)
        except Exception as e:
            logger.error(f"Error finding isolated people: {e}")
            return error_response(e)

    @cherrypy.expose
    @cherrypy.tools.json_in()
    @cherrypy.tools.json_out()
    def path(self, token=None):
        """
        POST /network/path

        JSON body:
            from_person_id: Source person UUID
            to_person_id: Target person UUID
            max_degrees: Optional hop bound (1-6, default 3)

        Returns:
            200 {from, to, path, degrees, strength, weakest_link, intermediaries}
            404 with suggested_intermediaries when no route exists within
                the bound
        """
        if cherrypy.request.method != "POST":
            cherrypy.response.headers["Allow"] = "POST"
            raise cherrypy.HTTPError(405, "Method not allowed. This endpoint requires POST.")

        try:
            owner_id = self._verifier.owner_from_request()

            body = cherrypy.request.json
            if not isinstance(body, dict):
                raise ValidationError("body", "must be a JSON object", body)

            source = validate_person_id(body.get("from_person_id"), "from_person_id")
            target = validate_person_id(body.get("to_person_id"), "to_person_id")
            bound = validate_max_degrees(body.get("max_degrees"))

            snapshot = self._load(owner_id)
            check_endpoint(snapshot, source, self._db)
            check_endpoint(snapshot, target, self._db)

            try:
                return find_path(snapshot, source, target, bound).to_dict()
            except NotFound as e:
                response = error_response(e)
                response["suggested_intermediaries"] = [
                    s.to_dict() for s in suggest_intermediaries(snapshot, source, target)
                ]
                return response

        except (ValidationError, GraphError) as e:
            return error_response(e)
        except Exception as e:
            logger.error(f"Error finding path: {e}")
            return error_response(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def paths(self, to=None, token=None, **params):
        """
        GET /network/paths?from=<uuid>&to=<uuid>

        Ranked alternative routes between two different people, scored
        by relationship type and strength.
        """
        try:
            owner_id = self._verifier.owner_from_request()
            source = validate_person_id(params.get("from"), "from")
            target = validate_person_id(to, "to")
            if source == target:
                raise ValidationError("to", "must differ from 'from'", to)

            snapshot = self._load(owner_id)
            result = find_all_paths(snapshot, source, target, conn_or_db=self._db)

            response = result.to_dict()
            if not result.found:
                response["suggested_intermediaries"] = [
                    s.to_dict() for s in suggest_intermediaries(snapshot, source, target)
                ]
            return response

        except (ValidationError, GraphError) as e:
            return error_response(e)
        except Exception as e:
            logger.error(f"Error ranking paths: {e}")
            return error_response(e)

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def focus(self, person_id=None, degrees=None, token=None):
        """
        GET /network/focus

        Query params:
            person_id: Focal person UUID
            degrees: 1-6 or "all" (default 3)

        Returns:
            Focused view plus ``degree_connections`` {n1, n2, n3}
        """
        try:
            owner_id = self._verifier.owner_from_request()
            focal = validate_person_id(person_id, "person_id")
            depth = validate_focus_degrees(degrees)

            snapshot = self._load(owner_id)
            check_endpoint(snapshot, focal, self._db)

            response = focus_graph(snapshot, focal, depth).to_dict()
            response["degree_connections"] = degree_connections(snapshot, focal)
            return response

        except (ValidationError, GraphError) as e:
            return error_response(e)
        except Exception as e:
            logger.error(f"Error building focused view: {e}")
            return error_response(e)

    @cherrypy.expose
    def default(self, *args, **kwargs):
        """Handle unmatched routes."""
        if cherrypy.request.method == "OPTIONS":
            return ""
        raise cherrypy.HTTPError(404, "Network endpoint not found")
