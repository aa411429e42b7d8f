"""
Graph Engine Configuration Module
=================================

Centralized configuration for all graph engine components. All magic numbers
and thresholds are defined here for easy tuning and consistency.

Usage
-----
    from crmgraph.analytics.config import Config

    max_degrees = Config.PATH.DEFAULT_MAX_DEGREES
    window = Config.HEALTH.STALE_WINDOW_DAYS

Environment Override
-------------------
Values can be overridden via environment variables using the pattern
CRMGRAPH_{GROUP}_{NAME}, for example:

    CRMGRAPH_PATH_DEFAULT_MAX_DEGREES=4
    CRMGRAPH_HEALTH_STALE_WINDOW_DAYS=60

Hot Reload
----------
    from crmgraph.analytics.config import reload_config, Config

    reload_config()
    print(Config.PATH.DEFAULT_MAX_DEGREES)
"""

import logging
import os
import threading
from dataclasses import dataclass
from typing import Dict

logger = logging.getLogger("Graph.Config")

_config_lock = threading.RLock()


def _env_int(key: str, default: int) -> int:
    """Get integer from environment or use default."""
    val = os.environ.get(key)
    if val is not None:
        try:
            return int(val)
        except ValueError:
            logger.warning(f"Invalid int value for {key}: {val}, using default {default}")
    return default


# Frozen dataclass defaults are evaluated once at class creation, so each
# group reads the environment in __post_init__ instead.

@dataclass(frozen=True)
class PathConfig:
    """Pathfinder configuration."""

    # Hop bound used when the caller does not pass one
    DEFAULT_MAX_DEGREES: int = 3

    # Largest bound a caller may request
    MAX_ALLOWED_DEGREES: int = 6

    # Hop bound for ranked multi-path enumeration
    ALL_PATHS_MAX_DEGREES: int = 6

    # Ranked paths returned by the multi-path search
    ALL_PATHS_LIMIT: int = 10

    # Simple paths examined before ranking stops
    ALL_PATHS_MAX_ENUMERATED: int = 1000

    def __post_init__(self):
        object.__setattr__(self, "DEFAULT_MAX_DEGREES",
                           _env_int("CRMGRAPH_PATH_DEFAULT_MAX_DEGREES", self.DEFAULT_MAX_DEGREES))
        object.__setattr__(self, "MAX_ALLOWED_DEGREES",
                           _env_int("CRMGRAPH_PATH_MAX_ALLOWED_DEGREES", self.MAX_ALLOWED_DEGREES))
        object.__setattr__(self, "ALL_PATHS_MAX_DEGREES",
                           _env_int("CRMGRAPH_PATH_ALL_PATHS_MAX_DEGREES", self.ALL_PATHS_MAX_DEGREES))
        object.__setattr__(self, "ALL_PATHS_LIMIT",
                           _env_int("CRMGRAPH_PATH_ALL_PATHS_LIMIT", self.ALL_PATHS_LIMIT))
        object.__setattr__(self, "ALL_PATHS_MAX_ENUMERATED",
                           _env_int("CRMGRAPH_PATH_ALL_PATHS_MAX_ENUMERATED", self.ALL_PATHS_MAX_ENUMERATED))


@dataclass(frozen=True)
class IntermediaryConfig:
    """Intermediary suggestion configuration."""

    MAX_SUGGESTIONS: int = 5

    def __post_init__(self):
        object.__setattr__(self, "MAX_SUGGESTIONS",
                           _env_int("CRMGRAPH_INTERMEDIARY_MAX_SUGGESTIONS", self.MAX_SUGGESTIONS))


@dataclass(frozen=True)
class NetworkHealthConfig:
    """Network health thresholds."""

    # Trailing window for shared interactions before an edge counts as stale
    STALE_WINDOW_DAYS: int = 90

    def __post_init__(self):
        object.__setattr__(self, "STALE_WINDOW_DAYS",
                           _env_int("CRMGRAPH_HEALTH_STALE_WINDOW_DAYS", self.STALE_WINDOW_DAYS))


@dataclass(frozen=True)
class FocusConfig:
    """Focused neighborhood view configuration."""

    DEFAULT_DEGREES: int = 3

    # Cumulative counts are reported up to this degree
    MAX_CUMULATIVE_DEGREE: int = 6

    def __post_init__(self):
        object.__setattr__(self, "DEFAULT_DEGREES",
                           _env_int("CRMGRAPH_FOCUS_DEFAULT_DEGREES", self.DEFAULT_DEGREES))


@dataclass(frozen=True)
class APIConfig:
    """HTTP endpoint defaults and bounds."""

    DEFAULT_CENTRAL_LIMIT: int = 10
    MAX_CENTRAL_LIMIT: int = 50
    DEFAULT_MAX_CONNECTIONS: int = 1
    MAX_MAX_CONNECTIONS: int = 5

    def __post_init__(self):
        object.__setattr__(self, "DEFAULT_CENTRAL_LIMIT",
                           _env_int("CRMGRAPH_API_DEFAULT_CENTRAL_LIMIT", self.DEFAULT_CENTRAL_LIMIT))
        object.__setattr__(self, "MAX_CENTRAL_LIMIT",
                           _env_int("CRMGRAPH_API_MAX_CENTRAL_LIMIT", self.MAX_CENTRAL_LIMIT))
        object.__setattr__(self, "DEFAULT_MAX_CONNECTIONS",
                           _env_int("CRMGRAPH_API_DEFAULT_MAX_CONNECTIONS", self.DEFAULT_MAX_CONNECTIONS))
        object.__setattr__(self, "MAX_MAX_CONNECTIONS",
                           _env_int("CRMGRAPH_API_MAX_MAX_CONNECTIONS", self.MAX_MAX_CONNECTIONS))


# Path quality weights per relationship type; unknown types use "other"
RELATIONSHIP_TYPE_WEIGHTS: Dict[str, float] = {
    "family": 1.5,
    "friend": 1.3,
    "extended_family": 1.2,
    "colleague": 1.0,
    "acquaintance": 0.8,
    "other": 0.5,
}


class Config:
    """
    Main configuration container with all config groups.

    Access via Config.GROUP.CONSTANT, e.g.:
        Config.PATH.DEFAULT_MAX_DEGREES
        Config.HEALTH.STALE_WINDOW_DAYS
    """

    PATH = PathConfig()
    INTERMEDIARY = IntermediaryConfig()
    HEALTH = NetworkHealthConfig()
    FOCUS = FocusConfig()
    API = APIConfig()


def reload_config() -> None:
    """
    Reload configuration from environment variables.

    Readers see either the old or the new group objects, never a mix
    within one group.

    Example:
        >>> import os
        >>> os.environ['CRMGRAPH_PATH_DEFAULT_MAX_DEGREES'] = '4'
        >>> reload_config()
        >>> Config.PATH.DEFAULT_MAX_DEGREES
        4
    """
    with _config_lock:
        Config.PATH = PathConfig()
        Config.INTERMEDIARY = IntermediaryConfig()
        Config.HEALTH = NetworkHealthConfig()
        Config.FOCUS = FocusConfig()
        Config.API = APIConfig()
        logger.info("Configuration reloaded")
