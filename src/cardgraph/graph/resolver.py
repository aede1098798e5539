"""Link resolution - maps raw reference strings to card ids.

A reference resolves, in order:
1. to a card whose id equals the reference exactly;
2. to the card owning a title or alias equal to the reference;
3. otherwise to nothing (the caller drops the reference).

Matching is exact and case-sensitive. When two cards share a title or
alias, the card indexed last owns the label.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field

from cardgraph.graph.GraphNode import GraphNode


@dataclass
class ResolutionIndex:
    """Title/alias -> card id lookup table.

    Attributes:
        labels: Mapping from label string to owning card id.
    """

    labels: dict[str, str] = field(default_factory=dict)

    @classmethod
    def from_nodes(cls, nodes: Iterable[GraphNode]) -> ResolutionIndex:
        """Derive the index from nodes in processing order (last writer wins)."""
        index = cls()
        for node in nodes:
            index.add(node)
        return index

    def add(self, node: GraphNode) -> None:
        """Index a node's title and aliases, overwriting earlier owners."""
        for label in node.labels():
            self.labels[label] = node.id

    def get(self, label: str) -> str | None:
        return self.labels.get(label)

    def __contains__(self, label: object) -> bool:
        return label in self.labels

    def __len__(self) -> int:
        return len(self.labels)


class LinkResolver:
    """Resolves raw references against a node set and its ResolutionIndex.

    Usage:
        resolver = LinkResolver(nodes, index)
        target_id = resolver.resolve("Some Title")
    """

    def __init__(self, nodes: Mapping[str, GraphNode], index: ResolutionIndex) -> None:
        self._nodes = nodes
        self._index = index

    def resolve(self, reference: str) -> str | None:
        """Resolve a reference to a card id.

        Args:
            reference: Raw reference string.

        Returns:
            The target card id, or None if nothing matches.
        """
        if reference in self._nodes:
            return reference
        target_id = self._index.get(reference)
        if target_id is not None and target_id in self._nodes:
            return target_id
        return None

    def resolve_targets(self, node: GraphNode) -> tuple[list[str], list[str]]:
        """Resolve all references of a node into edge targets.

        Self references are skipped and duplicate targets collapse to one,
        keeping first-reference order.

        Args:
            node: The referencing node.

        Returns:
            Tuple of (target ids, unresolved references).
        """
        targets: dict[str, None] = {}
        unresolved: list[str] = []
        for reference in node.link_refs:
            target_id = self.resolve(reference)
            if target_id is None:
                unresolved.append(reference)
            elif target_id != node.id:
                targets.setdefault(target_id)
        return list(targets), unresolved


__all__ = ["ResolutionIndex", "LinkResolver"]
