"""
cardgraph.config.loader - Configuration discovery, parsing and merging.

Configuration lives in a ``.cardgraph.toml`` file, parsed with tomlkit.
Values are deep-merged over DEFAULT_CONFIG and then overridden by
``CARDGRAPH_<SECTION>_<KEY>`` environment variables.
"""

from __future__ import annotations

import copy
import json
import os
from pathlib import Path
from typing import Any

import tomlkit
from tomlkit.exceptions import TOMLKitError

from cardgraph.config.defaults import CONFIG_FILENAME, DEFAULT_CONFIG, ENV_PREFIX
from cardgraph.exceptions import ConfigError


def parse_toml(content: str) -> dict[str, Any]:
    """Parse TOML content into plain Python containers.

    Raises:
        ConfigError: If the content is not valid TOML.
    """
    try:
        return tomlkit.parse(content).unwrap()
    except TOMLKitError as e:
        raise ConfigError(f"Invalid TOML: {e}") from e


def find_config_file(start_dir: Path | None = None) -> Path | None:
    """Find .cardgraph.toml by walking up from start_dir.

    Args:
        start_dir: Directory to start from (defaults to cwd).

    Returns:
        Path to the config file, or None if not found.
    """
    current = (start_dir or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        if current == current.parent:
            return None
        current = current.parent


def merge_configs(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep-merge override into a copy of base."""
    result = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(result.get(key), dict):
            result[key] = merge_configs(result[key], value)
        else:
            result[key] = copy.deepcopy(value)
    return result


def _try_parse_env_value(value: str) -> Any:
    """Parse an environment variable value into a typed Python value.

    JSON lists/objects, booleans and numbers are converted; anything else
    (including malformed JSON) is returned as the original string.
    """
    stripped = value.strip()
    if stripped[:1] in ("[", "{"):
        try:
            return json.loads(stripped)
        except json.JSONDecodeError:
            return value
    if stripped.lower() == "true":
        return True
    if stripped.lower() == "false":
        return False
    try:
        return int(stripped)
    except ValueError:
        pass
    try:
        return float(stripped)
    except ValueError:
        return value


def _apply_env_overrides(config: dict[str, Any]) -> dict[str, Any]:
    """Apply CARDGRAPH_<SECTION>_<KEY> environment overrides in place.

    Only sections already present in the config are recognised.

    Returns:
        The same config dict, for chaining.
    """
    sections = sorted((s for s in config if isinstance(config[s], dict)), key=len, reverse=True)
    for name, raw in os.environ.items():
        if not name.startswith(ENV_PREFIX):
            continue
        rest = name[len(ENV_PREFIX):].lower()
        for section in sections:
            if rest.startswith(section + "_") and len(rest) > len(section) + 1:
                key = rest[len(section) + 1:]
                config[section][key] = _try_parse_env_value(raw)
                break
    return config


def validate_config(config: dict[str, Any]) -> None:
    """Check value ranges the engine relies on.

    Raises:
        ConfigError: On the first invalid value.
    """
    pagerank = config.get("pagerank", {})
    damping = pagerank.get("damping")
    if not isinstance(damping, (int, float)) or not 0.0 <= damping <= 1.0:
        raise ConfigError(f"pagerank.damping must be a number within [0, 1], got {damping!r}")
    iterations = pagerank.get("iterations")
    if not isinstance(iterations, int) or isinstance(iterations, bool) or iterations < 0:
        raise ConfigError(f"pagerank.iterations must be a non-negative integer, got {iterations!r}")

    mode = config.get("clusters", {}).get("mode")
    if mode not in ("strong", "weak"):
        raise ConfigError(f"clusters.mode must be 'strong' or 'weak', got {mode!r}")

    layout = config.get("layout", {})
    steps = layout.get("iterations")
    if not isinstance(steps, int) or isinstance(steps, bool) or steps < 0:
        raise ConfigError(f"layout.iterations must be a non-negative integer, got {steps!r}")
    for key in ("repulsion", "spring_k", "damping", "dt", "min_distance", "init_range"):
        value = layout.get(key)
        if not isinstance(value, (int, float)) or isinstance(value, bool):
            raise ConfigError(f"layout.{key} must be a number, got {value!r}")
    if layout["spring_k"] <= 0 or layout["min_distance"] <= 0:
        raise ConfigError("layout.spring_k and layout.min_distance must be positive")
    seed = layout.get("seed")
    if seed is not None and (not isinstance(seed, int) or isinstance(seed, bool)):
        raise ConfigError(f"layout.seed must be an integer, got {seed!r}")

    timeout = config.get("engine", {}).get("lock_timeout")
    if not isinstance(timeout, (int, float)) or timeout <= 0:
        raise ConfigError(f"engine.lock_timeout must be a positive number, got {timeout!r}")


def load_config(config_path: Path) -> dict[str, Any]:
    """Load a config file and merge it over the defaults.

    Raises:
        ConfigError: If the file cannot be read or parsed.
    """
    try:
        content = Path(config_path).read_text(encoding="utf-8")
    except OSError as e:
        raise ConfigError(f"Cannot read config file {config_path}: {e}") from e
    return merge_configs(DEFAULT_CONFIG, parse_toml(content))


def get_config(config_path: Path | None = None, start_dir: Path | None = None) -> dict[str, Any]:
    """Resolve the effective configuration.

    Priority: environment overrides > explicit/discovered file > defaults.

    Args:
        config_path: Explicit config file (skips discovery).
        start_dir: Directory to start discovery from (defaults to cwd).

    Returns:
        Validated configuration dict.
    """
    if config_path is None:
        config_path = find_config_file(start_dir)

    if config_path is not None:
        config = load_config(config_path)
    else:
        config = copy.deepcopy(DEFAULT_CONFIG)

    config = _apply_env_overrides(config)
    validate_config(config)
    return config
