"""Daemon configuration loaded from YAML."""

import copy
import logging
import os
from typing import Any, Dict, Optional

import yaml

logger = logging.getLogger("Config")

DEFAULT_CONFIG_PATH = "/etc/crmgraph/config.yaml"

DEFAULTS: Dict[str, Any] = {
    "storage": {
        "db_path": "/var/lib/crmgraph/crm.db",
    },
    "http": {
        "host": "0.0.0.0",
        "port": 8000,
        "socket_timeout": 10,
    },
    "auth": {
        "jwt_secret": "",
    },
    "web": {
        "cors_enabled": False,
    },
    "logging": {
        "level": "INFO",
        "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    },
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Recursively merge ``override`` into a copy of ``base``."""
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load the daemon config, falling back to defaults for missing keys.

    A missing file is not an error; the defaults are used. The JWT
    secret can be supplied through ``CRMGRAPH_JWT_SECRET`` instead of
    the file.

    Raises:
        ValueError: The file is not a YAML mapping
    """
    path = config_path or os.environ.get("CRMGRAPH_CONFIG", DEFAULT_CONFIG_PATH)

    loaded: Dict[str, Any] = {}
    if os.path.exists(path):
        with open(path) as f:
            loaded = yaml.safe_load(f) or {}
        if not isinstance(loaded, dict):
            raise ValueError(f"Config file {path} must contain a mapping")
        logger.info(f"Loaded config from {path}")
    else:
        logger.warning(f"Config file {path} not found, using defaults")

    config = _merge(DEFAULTS, loaded)

    secret = os.environ.get("CRMGRAPH_JWT_SECRET")
    if secret:
        config["auth"]["jwt_secret"] = secret

    return config
