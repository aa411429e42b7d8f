"""
HTTP Server - mounts the graph APIs on CherryPy
===============================================

    /network     NetworkAPI
    /dashboard   DashboardAPI

CORS headers are added to every response when ``web.cors_enabled`` is
set in the daemon config.
"""

import logging
from typing import Optional

import cherrypy

from crmgraph.analytics.db import GraphDB
from crmgraph.web.auth import TokenVerifier
from crmgraph.web.dashboard_api import DashboardAPI
from crmgraph.web.network_api import NetworkAPI

logger = logging.getLogger("HTTPServer")


def _set_cors_headers():
    cherrypy.response.headers['Access-Control-Allow-Origin'] = '*'
    cherrypy.response.headers['Access-Control-Allow-Methods'] = 'GET, POST, OPTIONS'
    cherrypy.response.headers['Access-Control-Allow-Headers'] = 'Content-Type, Authorization'


cherrypy.tools.cors = cherrypy.Tool('before_handler', _set_cors_headers)


class HTTPGraphServer:
    """
    Threaded CherryPy server for the graph endpoints.

    Args:
        db: Storage handle passed to every API object
        jwt_secret: Shared secret for verifying bearer tokens
        host: Bind address
        port: Bind port
        socket_timeout: Per-connection socket timeout in seconds
        cors_enabled: Add CORS headers to responses
    """

    def __init__(
        self,
        db: GraphDB,
        jwt_secret: str,
        host: str = "0.0.0.0",
        port: int = 8000,
        socket_timeout: int = 10,
        cors_enabled: bool = False,
    ):
        self.host = host
        self.port = port
        self.socket_timeout = socket_timeout
        self.cors_enabled = cors_enabled

        verifier = TokenVerifier(jwt_secret)
        self.network_api = NetworkAPI(db, verifier)
        self.dashboard_api = DashboardAPI(db, verifier)

    def app_config(self) -> dict:
        """Per-application CherryPy config shared by both mounts."""
        return {
            "/": {
                "tools.cors.on": self.cors_enabled,
                "tools.encode.on": True,
                "tools.encode.encoding": "utf-8",
            }
        }

    def mount(self, script_prefix: Optional[str] = "") -> None:
        cherrypy.tree.mount(self.network_api, f"{script_prefix}/network", self.app_config())
        cherrypy.tree.mount(self.dashboard_api, f"{script_prefix}/dashboard", self.app_config())

    def start(self) -> None:
        cherrypy.config.update({
            "server.socket_host": self.host,
            "server.socket_port": self.port,
            "server.socket_timeout": self.socket_timeout,
            "engine.autoreload.on": False,
            "log.screen": False,
        })
        self.mount()

        cherrypy.engine.start()
        logger.info(f"HTTP server listening on http://{self.host}:{self.port}")

    def block(self) -> None:
        cherrypy.engine.block()

    def stop(self) -> None:
        cherrypy.engine.exit()
        logger.info("HTTP server stopped")
