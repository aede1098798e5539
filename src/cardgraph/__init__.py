"""
cardgraph - Knowledge graph engine for linked note cards

Turns a flat collection of cards into a directed graph of references,
ranks cards by PageRank, groups them into clusters, finds backlinks and
orphans, and lays the graph out in 2D for display.
"""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("cardgraph")
except PackageNotFoundError:
    __version__ = "0.0.0+unknown"  # Not installed
__license__ = "MIT"

from cardgraph.engine import GraphEngine
from cardgraph.exceptions import (
    CardFormatError,
    CardGraphError,
    CardNotFoundError,
    ConfigError,
    DuplicateCardError,
    EngineLockError,
)
from cardgraph.graph.builder import GraphBuilder, KnowledgeGraph
from cardgraph.graph.factory import build_graph
from cardgraph.graph.GraphNode import CardRef, CardType
from cardgraph.graph.layout import compute_layout

__all__ = [
    "__version__",
    "GraphEngine",
    "GraphBuilder",
    "KnowledgeGraph",
    "CardRef",
    "CardType",
    "build_graph",
    "compute_layout",
    "CardGraphError",
    "CardFormatError",
    "CardNotFoundError",
    "ConfigError",
    "DuplicateCardError",
    "EngineLockError",
]
