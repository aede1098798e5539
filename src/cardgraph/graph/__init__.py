"""Graph module - Core graph data structures and algorithms.

Exports:
- CardType: Enum of card types
- CardRef: Immutable card snapshot (builder input)
- GraphNode: Card node with cached metadata
- Edge: Directed edge between cards
- UnresolvedReference: Reference that matched no card
- MutationEntry / MutationLog: Per-card mutation history
- CardImportance, KnowledgeCluster, BacklinkInfo, LayoutNode, GraphData: Result records

Note: KnowledgeGraph is in cardgraph.graph.builder (use graph.factory.build_graph() to construct)
"""

from cardgraph.graph.GraphNode import CardRef, CardType, GraphNode
from cardgraph.graph.metrics import (
    BacklinkInfo,
    CardImportance,
    GraphData,
    KnowledgeCluster,
    LayoutNode,
)
from cardgraph.graph.mutations import MutationEntry, MutationLog, UnresolvedReference
from cardgraph.graph.relations import Edge

__all__ = [
    "CardType",
    "CardRef",
    "GraphNode",
    "Edge",
    "UnresolvedReference",
    "MutationEntry",
    "MutationLog",
    "CardImportance",
    "KnowledgeCluster",
    "BacklinkInfo",
    "LayoutNode",
    "GraphData",
]
