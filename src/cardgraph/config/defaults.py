"""
cardgraph.config.defaults - Default configuration values
"""

from typing import Any, Dict

DEFAULT_CONFIG: Dict[str, Any] = {
    "pagerank": {
        "damping": 0.85,
        "iterations": 20,
        "redistribute_dangling": False,
    },
    "clusters": {
        "mode": "strong",
    },
    "layout": {
        "iterations": 100,
        "repulsion": 5000.0,
        "spring_k": 50.0,
        "damping": 0.85,
        "dt": 0.1,
        "min_distance": 0.1,
        "init_range": 100.0,
    },
    "engine": {
        "lock_timeout": 10.0,
    },
    "logging": {
        "level": "WARNING",
    },
}

CONFIG_FILENAME = ".cardgraph.toml"
ENV_PREFIX = "CARDGRAPH_"
