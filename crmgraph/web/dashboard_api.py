"""
Dashboard API - network summary for the home page
=================================================

    GET /dashboard/network-health
"""

import logging

import cherrypy

from crmgraph.analytics.db import GraphDB
from crmgraph.analytics.errors import GraphError
from crmgraph.analytics.network_health import get_network_health
from crmgraph.web.auth import TokenVerifier
from crmgraph.web.network_api import error_response

logger = logging.getLogger("DashboardAPI")


class DashboardAPI:
    """CherryPy-mounted API for dashboard widgets. Mount at /dashboard."""

    def __init__(self, db: GraphDB, verifier: TokenVerifier):
        self._db = db
        self._verifier = verifier

    @cherrypy.expose
    @cherrypy.tools.json_out()
    def network_health(self, token=None):
        """
        GET /dashboard/network-health

        Returns:
            {average_relationship_strength, total_connections,
             stale_relationships_count, network_density}
        """
        try:
            owner_id = self._verifier.owner_from_request()
            return get_network_health(self._db, owner_id).to_dict()

        except GraphError as e:
            return error_response(e)
        except Exception as e:
            logger.error(f"Error computing network health: {e}")
            return error_response(e)

    @cherrypy.expose
    def default(self, *args, **kwargs):
        """Handle unmatched routes."""
        if cherrypy.request.method == "OPTIONS":
            return ""
        raise cherrypy.HTTPError(404, "Dashboard endpoint not found")
