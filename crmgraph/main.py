import logging
import sys

from crmgraph.analytics.db import GraphDB
from crmgraph.config import load_config
from crmgraph.web.http_server import HTTPGraphServer

logger = logging.getLogger("GraphDaemon")


class GraphDaemon:

    def __init__(self, config: dict):
        self.config = config
        self.db = None
        self.http_server = None

        log_level = config.get("logging", {}).get("level", "INFO")
        logging.basicConfig(
            level=getattr(logging, log_level),
            format=config.get("logging", {}).get("format"),
        )

    def initialize(self):
        db_path = self.config["storage"]["db_path"]
        self.db = GraphDB(db_path)
        self.db.init_schema()

        secret = self.config.get("auth", {}).get("jwt_secret")
        if not secret:
            raise RuntimeError("auth.jwt_secret (or CRMGRAPH_JWT_SECRET) is required")

        http = self.config.get("http", {})
        self.http_server = HTTPGraphServer(
            db=self.db,
            jwt_secret=secret,
            host=http.get("host", "0.0.0.0"),
            port=http.get("port", 8000),
            socket_timeout=http.get("socket_timeout", 10),
            cors_enabled=self.config.get("web", {}).get("cors_enabled", False),
        )

    def run(self):
        logger.info("Graph daemon started")

        self.initialize()
        self.http_server.start()

        try:
            self.http_server.block()
        except KeyboardInterrupt:
            logger.info("Shutting down...")
            self.http_server.stop()


def main():

    import argparse

    parser = argparse.ArgumentParser(description="CRM relationship graph daemon")
    parser.add_argument(
        "--config",
        help="Path to config file (default: /etc/crmgraph/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Log level (default: INFO)",
    )

    args = parser.parse_args()

    config = load_config(args.config)

    if args.log_level:
        config.setdefault("logging", {})["level"] = args.log_level

    daemon = GraphDaemon(config)

    try:
        daemon.run()
    except KeyboardInterrupt:
        logger.info("Graph daemon stopped")
    except Exception as e:
        logger.error(f"Fatal error: {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
