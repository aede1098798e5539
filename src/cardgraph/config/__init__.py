"""
cardgraph.config - Configuration loading and defaults
"""

from cardgraph.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG
from cardgraph.config.loader import (
    _apply_env_overrides,
    _try_parse_env_value,
    find_config_file,
    get_config,
    load_config,
    merge_configs,
    parse_toml,
    validate_config,
)

__all__ = [
    "get_config",
    "load_config",
    "find_config_file",
    "merge_configs",
    "parse_toml",
    "validate_config",
    "CONFIG_FILENAME",
    "DEFAULT_CONFIG",
]
