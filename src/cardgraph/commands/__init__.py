"""
cardgraph.commands - CLI command implementations
"""

__all__ = [
    "analyze",
    "config_cmd",
    "layout_cmd",
]
