"""Graph Builder - Constructs KnowledgeGraph from card snapshots.

This module provides the builder pattern for constructing a complete
knowledge graph from a batch of cards, and the KnowledgeGraph container
with its read API and its per-card mutation API.
"""

from __future__ import annotations

import copy
import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any, Iterator

from cardgraph.exceptions import CardNotFoundError, DuplicateCardError
from cardgraph.graph.GraphNode import CardRef, CardType, GraphNode
from cardgraph.graph.mutations import MutationEntry, MutationLog, UnresolvedReference
from cardgraph.graph.relations import Edge
from cardgraph.graph.resolver import LinkResolver, ResolutionIndex

logger = logging.getLogger(__name__)


@dataclass
class KnowledgeGraph:
    """Container for the complete knowledge graph.

    Holds the node set (with cached card metadata), the directed
    adjacency, the title/alias resolution index and the references that
    could not be resolved. All of these are derived together and must be
    replaced together; use GraphBuilder (or graph.factory.build_graph)
    to construct one.
    """

    # Internal storage (prefixed) - excluded from constructor
    _index: dict[str, GraphNode] = field(default_factory=dict, init=False, repr=False)
    _resolution: ResolutionIndex = field(default_factory=ResolutionIndex, init=False, repr=False)
    _unresolved: dict[str, list[str]] = field(default_factory=dict, init=False, repr=False)

    # Mutation infrastructure
    _mutation_log: MutationLog = field(default_factory=MutationLog, init=False, repr=False)

    def find_by_id(self, card_id: str) -> GraphNode | None:
        """Find node by card id.

        Args:
            card_id: The card id to find.

        Returns:
            The matching GraphNode, or None if not found.
        """
        return self._index.get(card_id)

    def __contains__(self, card_id: object) -> bool:
        return card_id in self._index

    def all_nodes(self) -> Iterator[GraphNode]:
        """Iterate all nodes in build order."""
        yield from self._index.values()

    def node_ids(self) -> list[str]:
        return list(self._index)

    def node_count(self) -> int:
        return len(self._index)

    def edge_count(self) -> int:
        return sum(node.out_degree for node in self._index.values())

    def iter_edges(self) -> Iterator[Edge]:
        """Iterate all directed edges, grouped by source in build order."""
        for node in self._index.values():
            for target_id in node.iter_targets():
                yield Edge(source=node.id, target=target_id)

    def has_edge(self, source_id: str, target_id: str) -> bool:
        node = self._index.get(source_id)
        return node is not None and node.links_to(target_id)

    def _require(self, card_id: str) -> GraphNode:
        node = self._index.get(card_id)
        if node is None:
            raise CardNotFoundError(card_id)
        return node

    def successors(self, card_id: str) -> list[str]:
        """Ids the card links to.

        Raises:
            CardNotFoundError: If the card is not in the graph.
        """
        return list(self._require(card_id).iter_targets())

    def predecessors(self, card_id: str) -> list[str]:
        """Ids linking to the card.

        Raises:
            CardNotFoundError: If the card is not in the graph.
        """
        return list(self._require(card_id).iter_sources())

    def out_degree(self, card_id: str) -> int:
        return self._require(card_id).out_degree

    def in_degree(self, card_id: str) -> int:
        return self._require(card_id).in_degree

    def resolve(self, reference: str) -> str | None:
        """Resolve a raw reference against the current node set."""
        return LinkResolver(self._index, self._resolution).resolve(reference)

    def resolution_index(self) -> dict[str, str]:
        """Return a copy of the title/alias -> id mapping."""
        return dict(self._resolution.labels)

    def unresolved_references(self) -> list[UnresolvedReference]:
        """Get every reference dropped during resolution, in build order."""
        return [
            UnresolvedReference(source_id=source_id, reference=reference)
            for source_id in self._index
            for reference in self._unresolved.get(source_id, ())
        ]

    def has_unresolved_references(self) -> bool:
        return any(self._unresolved.values())

    def cards(self) -> list[CardRef]:
        """Return the card snapshots in build order.

        Rebuilding from this list yields an identical graph.
        """
        return [node.to_card() for node in self._index.values()]

    def clone(self) -> KnowledgeGraph:
        """Create a deep copy of this graph.

        The copy is fully independent - mutating one does not affect the other.
        """
        return copy.deepcopy(self)

    # ─────────────────────────────────────────────────────────────────────────
    # Resolution internals (shared by GraphBuilder and the mutation API)
    # ─────────────────────────────────────────────────────────────────────────

    def _link_outgoing(self, node: GraphNode, resolver: LinkResolver) -> None:
        """Resolve a node's references into edges. The node must have no outgoing edges."""
        targets, unresolved = resolver.resolve_targets(node)
        for target_id in targets:
            node._targets.append(target_id)
            self._index[target_id]._sources.append(node.id)
        if unresolved:
            self._unresolved[node.id] = unresolved
            for reference in unresolved:
                logger.debug("Dropping unresolved reference %r from %s", reference, node.id)
        else:
            self._unresolved.pop(node.id, None)

    def _unlink_outgoing(self, node: GraphNode) -> None:
        for target_id in node._targets:
            target = self._index.get(target_id)
            if target is not None:
                target._sources.remove(node.id)
        node._targets.clear()
        self._unresolved.pop(node.id, None)

    def _refresh(self, keys: set[str], changed_id: str | None = None) -> None:
        """Re-derive the resolution index and re-resolve affected references.

        Any reference whose resolution may have changed mentions one of
        ``keys`` (the ids and labels touched by the mutation), so only
        nodes holding such a reference, plus the changed node, are relinked.
        """
        self._resolution = ResolutionIndex.from_nodes(self._index.values())
        resolver = LinkResolver(self._index, self._resolution)
        for node in self._index.values():
            if node.id == changed_id or keys.intersection(node.link_refs):
                self._unlink_outgoing(node)
                self._link_outgoing(node, resolver)

    # ─────────────────────────────────────────────────────────────────────────
    # Per-card Mutation API
    # ─────────────────────────────────────────────────────────────────────────

    @property
    def mutation_log(self) -> MutationLog:
        """Access the mutation log for this graph."""
        return self._mutation_log

    def add_card(self, card: CardRef) -> MutationEntry:
        """Add a single card and resolve references to and from it.

        References elsewhere in the graph that name the new card's id,
        title or aliases start resolving to it.

        Args:
            card: The card snapshot to add.

        Returns:
            MutationEntry recording the operation.

        Raises:
            DuplicateCardError: If a card with this id already exists.
        """
        if card.id in self._index:
            raise DuplicateCardError(card.id)

        self._insert_card(card)
        entry = MutationEntry(
            operation="add_card",
            card_id=card.id,
            before_state={},
            after_state=card.to_dict(),
        )
        self._mutation_log.append(entry)
        return entry

    def update_card(
        self,
        card_id: str,
        *,
        title: str | None = None,
        aliases: Iterable[str] | None = None,
        link_refs: Iterable[str] | None = None,
        card_type: CardType | str | None = None,
    ) -> MutationEntry:
        """Update a card's metadata and/or references.

        Fields left as None keep their current value. Updating an unknown
        id creates the card (type defaults to fleeting).

        Args:
            card_id: The card to update.
            title: New title.
            aliases: New aliases.
            link_refs: New raw references (replaces all outgoing edges).
            card_type: New card type.

        Returns:
            MutationEntry recording the operation.
        """
        node = self._index.get(card_id)
        if node is None:
            card = CardRef(
                id=card_id,
                title=title or "",
                aliases=tuple(aliases or ()),
                card_type=CardType.from_str(card_type),
                link_refs=tuple(link_refs or ()),
            )
            self._insert_card(card)
            before: dict[str, Any] = {}
        else:
            old = node.to_card()
            card = CardRef(
                id=card_id,
                title=old.title if title is None else title,
                aliases=old.aliases if aliases is None else tuple(aliases),
                card_type=old.card_type if card_type is None else CardType.from_str(card_type),
                link_refs=old.link_refs if link_refs is None else tuple(link_refs),
            )
            self._replace_card(node, card)
            before = old.to_dict()

        entry = MutationEntry(
            operation="update_card",
            card_id=card_id,
            before_state=before,
            after_state=card.to_dict(),
        )
        self._mutation_log.append(entry)
        return entry

    def remove_card(self, card_id: str) -> MutationEntry:
        """Remove a card, its edges and its resolution index entries.

        References elsewhere that resolved to the card are re-resolved;
        they are dropped unless another card owns the same label.

        Args:
            card_id: The card to remove.

        Returns:
            MutationEntry recording the operation.

        Raises:
            CardNotFoundError: If the card is not in the graph.
        """
        node = self._require(card_id)
        position = list(self._index).index(card_id)
        card = node.to_card()
        self._delete_card(node)

        entry = MutationEntry(
            operation="remove_card",
            card_id=card_id,
            before_state=card.to_dict(),
            after_state={},
            position=position,
        )
        self._mutation_log.append(entry)
        return entry

    def undo_last(self) -> MutationEntry | None:
        """Undo the most recent mutation.

        Returns:
            The undone MutationEntry, or None if the log is empty.
        """
        entry = self._mutation_log.pop()
        if entry is None:
            return None

        if not entry.before_state:
            # add_card, or update_card that created the card
            self._delete_card(self._require(entry.card_id))
        elif entry.operation == "update_card":
            self._replace_card(self._require(entry.card_id), CardRef.from_dict(entry.before_state))
        elif entry.operation == "remove_card":
            self._insert_card(CardRef.from_dict(entry.before_state), position=entry.position)
        else:
            raise ValueError(f"Unknown mutation operation: {entry.operation}")
        return entry

    def _insert_card(self, card: CardRef, position: int | None = None) -> None:
        node = GraphNode.from_card(card)
        if position is None or position >= len(self._index):
            self._index[card.id] = node
        else:
            items = list(self._index.items())
            items.insert(position, (card.id, node))
            self._index = dict(items)
        self._refresh({card.id, *node.labels()}, changed_id=card.id)

    def _replace_card(self, node: GraphNode, card: CardRef) -> None:
        keys = {node.id, *node.labels()}
        node.title = card.title
        node.aliases = card.aliases
        node.card_type = card.card_type
        node.link_refs = card.link_refs
        keys.update(node.labels())
        self._refresh(keys, changed_id=node.id)

    def _delete_card(self, node: GraphNode) -> None:
        self._unlink_outgoing(node)
        for source_id in list(node.iter_sources()):
            self._index[source_id]._targets.remove(node.id)
        node._sources.clear()
        del self._index[node.id]
        self._refresh({node.id, *node.labels()})


class GraphBuilder:
    """Builder for constructing KnowledgeGraph from card snapshots.

    Usage:
        builder = GraphBuilder()
        builder.add_cards(cards)
        graph = builder.build()

    Build runs in two passes: the first creates every node and the
    resolution index, the second resolves references into edges, so a
    reference to a card supplied later in the batch still resolves.
    """

    def __init__(self) -> None:
        self._cards: dict[str, CardRef] = {}

    def add_card(self, card: CardRef) -> None:
        """Queue a card for the build.

        A card whose id was already queued replaces the earlier record
        (keeping the earlier position).
        """
        if card.id in self._cards:
            logger.debug("Card %s supplied more than once; keeping the later record", card.id)
        self._cards[card.id] = card

    def add_cards(self, cards: Iterable[CardRef]) -> None:
        for card in cards:
            self.add_card(card)

    def build(self) -> KnowledgeGraph:
        """Build the final KnowledgeGraph.

        Returns:
            Complete KnowledgeGraph with unresolved references recorded.
        """
        graph = KnowledgeGraph()

        # Pass 1: nodes and the title/alias index
        for card in self._cards.values():
            graph._index[card.id] = GraphNode.from_card(card)
        graph._resolution = ResolutionIndex.from_nodes(graph._index.values())

        # Pass 2: resolve references into edges
        resolver = LinkResolver(graph._index, graph._resolution)
        for node in graph._index.values():
            graph._link_outgoing(node, resolver)

        logger.info(
            "Built knowledge graph: %d cards, %d edges, %d unresolved references",
            graph.node_count(),
            graph.edge_count(),
            sum(len(refs) for refs in graph._unresolved.values()),
        )
        return graph


__all__ = ["KnowledgeGraph", "GraphBuilder"]
