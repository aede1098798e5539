"""
cardgraph.commands.config_cmd - Inspect configuration.

- `cardgraph config show` - Print the effective configuration as TOML
- `cardgraph config path` - Print the config file in use
"""

from __future__ import annotations

import argparse
import sys

import tomlkit

from cardgraph.config import find_config_file, get_config


def run(args: argparse.Namespace) -> int:
    """Run the config command."""
    action = getattr(args, "config_action", None)
    config_path = getattr(args, "config", None)

    if action == "path":
        path = config_path or find_config_file()
        if path is None:
            print("No .cardgraph.toml found (using defaults)", file=sys.stderr)
            return 1
        print(path)
        return 0

    if action == "show":
        config = get_config(config_path)
        print(tomlkit.dumps(config), end="")
        return 0

    print("Usage: cardgraph config {show|path}", file=sys.stderr)
    return 1
