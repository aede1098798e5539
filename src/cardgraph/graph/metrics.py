"""Analytics result data structures.

This module defines the records handed to the presentation layer:
- CardImportance: A card's PageRank score with its link counts
- KnowledgeCluster: A group of cards from the clustering pass
- BacklinkInfo: A card referencing a given card
- LayoutNode: A positioned card in the visual layout
- GraphData: The full layout payload
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CardImportance:
    """Importance ranking entry for a card.

    Attributes:
        id: Card id.
        title: Cached card title.
        score: PageRank score.
        inbound_links: In-degree.
        outbound_links: Out-degree.
    """

    id: str
    title: str
    score: float
    inbound_links: int
    outbound_links: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "score": self.score,
            "inbound_links": self.inbound_links,
            "outbound_links": self.outbound_links,
        }


@dataclass
class KnowledgeCluster:
    """A cluster of cards.

    Attributes:
        id: Cluster index (0 is the largest cluster).
        size: Number of member cards.
        nodes: Member card ids.
        center_node: Member with the highest PageRank, None for an empty cluster.
    """

    id: int
    size: int
    nodes: list[str] = field(default_factory=list)
    center_node: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "size": self.size,
            "nodes": list(self.nodes),
            "center_node": self.center_node,
        }


@dataclass
class BacklinkInfo:
    """A card that links to the queried card.

    Attributes:
        id: Id of the referencing card.
        title: Its cached title.
        card_type: Its card type name.
        context: Preview of the text around the reference, if available.
    """

    id: str
    title: str
    card_type: str
    context: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "card_type": self.card_type,
            "context": self.context,
        }


@dataclass
class LayoutNode:
    """A card with its computed layout position and analytics."""

    id: str
    title: str
    card_type: str
    x: float
    y: float
    neighbors: list[str] = field(default_factory=list)
    link_count: int = 0
    importance: float = 0.0
    cluster_id: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "title": self.title,
            "card_type": self.card_type,
            "x": self.x,
            "y": self.y,
            "neighbors": list(self.neighbors),
            "link_count": self.link_count,
            "importance": self.importance,
            "cluster_id": self.cluster_id,
        }


@dataclass
class GraphData:
    """Full layout payload for the presentation layer.

    Attributes:
        nodes: Positioned cards.
        edges: Undirected edges as (id, id) pairs, one per connected pair.
        cluster_count: Number of clusters.
        orphan_count: Number of cards with no links at all.
    """

    nodes: list[LayoutNode] = field(default_factory=list)
    edges: list[tuple[str, str]] = field(default_factory=list)
    cluster_count: int = 0
    orphan_count: int = 0

    def node(self, card_id: str) -> LayoutNode | None:
        for node in self.nodes:
            if node.id == card_id:
                return node
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [list(edge) for edge in self.edges],
            "cluster_count": self.cluster_count,
            "orphan_count": self.orphan_count,
        }


__all__ = [
    "CardImportance",
    "KnowledgeCluster",
    "BacklinkInfo",
    "LayoutNode",
    "GraphData",
]
