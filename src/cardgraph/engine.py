"""cardgraph.engine - Shared knowledge graph state and query facade.

The engine holds exactly one KnowledgeGraph snapshot. Every update
produces a complete new snapshot and swaps the reference under a single
lock, so a reader always sees the graph, its resolution index and its
metadata from the same build:

    engine = GraphEngine(config)
    engine.rebuild(cards)
    engine.backlinks("card-1")

Queries grab the current snapshot and compute on it without holding the
lock. A snapshot is never mutated once published; incremental updates
clone it first.
"""

from __future__ import annotations

import copy
import logging
import threading
from collections.abc import Callable, Iterable, Iterator
from contextlib import contextmanager
from typing import Any, TypeVar

from cardgraph.config import DEFAULT_CONFIG
from cardgraph.exceptions import EngineLockError
from cardgraph.graph.analytics import (
    backlinks,
    importance_ranking,
    knowledge_clusters,
    orphan_ids,
    pagerank,
)
from cardgraph.graph.builder import KnowledgeGraph
from cardgraph.graph.factory import build_graph
from cardgraph.graph.GraphNode import CardRef, CardType
from cardgraph.graph.layout import LayoutConfig, layout_graph
from cardgraph.graph.metrics import BacklinkInfo, CardImportance, GraphData, KnowledgeCluster
from cardgraph.graph.mutations import MutationEntry, UnresolvedReference

logger = logging.getLogger(__name__)

T = TypeVar("T")


class GraphEngine:
    """In-memory knowledge graph with atomic rebuilds.

    Args:
        config: Effective configuration (see cardgraph.config); defaults if omitted.
    """

    def __init__(self, config: dict[str, Any] | None = None) -> None:
        self._config = copy.deepcopy(config) if config is not None else copy.deepcopy(DEFAULT_CONFIG)
        self._lock_timeout = float(self._config.get("engine", {}).get("lock_timeout", 10.0))
        # Guards the snapshot reference
        self._state_lock = threading.Lock()
        # Serialises writers so copy-on-write updates are never lost
        self._write_lock = threading.Lock()
        self._graph = KnowledgeGraph()
        self._built = False

    # ─────────────────────────────────────────────────────────────────────────
    # State handling
    # ─────────────────────────────────────────────────────────────────────────

    @contextmanager
    def _locked(self, lock: threading.Lock, operation: str) -> Iterator[None]:
        if not lock.acquire(timeout=self._lock_timeout):
            raise EngineLockError(operation, self._lock_timeout)
        try:
            yield
        finally:
            lock.release()

    def snapshot(self) -> KnowledgeGraph:
        """Return the current graph snapshot.

        The returned graph must be treated as read-only.

        Raises:
            EngineLockError: If the state lock cannot be acquired in time.
        """
        with self._locked(self._state_lock, "read"):
            return self._graph

    def _publish(self, graph: KnowledgeGraph, operation: str) -> None:
        with self._locked(self._state_lock, operation):
            self._graph = graph
            self._built = True

    @property
    def is_built(self) -> bool:
        """True once a rebuild or mutation has published a snapshot."""
        return self._built

    @property
    def config(self) -> dict[str, Any]:
        return self._config

    def rebuild(self, cards: Iterable[CardRef | dict[str, Any]]) -> KnowledgeGraph:
        """Replace the engine state with a graph built from ``cards``.

        The graph is built before any lock is taken; if building fails the
        previous snapshot stays in place.

        Args:
            cards: The complete card list.

        Returns:
            The newly published snapshot.
        """
        graph = build_graph(cards)
        with self._locked(self._write_lock, "rebuild"):
            self._publish(graph, "rebuild")
        logger.info("Published rebuilt graph with %d cards", graph.node_count())
        return graph

    def _mutate(self, operation: str, apply: Callable[[KnowledgeGraph], T]) -> T:
        with self._locked(self._write_lock, operation):
            graph = self.snapshot().clone()
            result = apply(graph)
            self._publish(graph, operation)
        logger.info("Applied %s; graph now has %d cards", operation, graph.node_count())
        return result

    # ─────────────────────────────────────────────────────────────────────────
    # Incremental updates
    # ─────────────────────────────────────────────────────────────────────────

    def add_card(self, card: CardRef) -> MutationEntry:
        """Add one card to the current graph. See KnowledgeGraph.add_card."""
        return self._mutate("add_card", lambda g: g.add_card(card))

    def update_card(
        self,
        card_id: str,
        *,
        title: str | None = None,
        aliases: Iterable[str] | None = None,
        link_refs: Iterable[str] | None = None,
        card_type: CardType | str | None = None,
    ) -> MutationEntry:
        """Update (or create) one card. See KnowledgeGraph.update_card."""
        aliases = None if aliases is None else tuple(aliases)
        link_refs = None if link_refs is None else tuple(link_refs)
        return self._mutate(
            "update_card",
            lambda g: g.update_card(
                card_id, title=title, aliases=aliases, link_refs=link_refs, card_type=card_type
            ),
        )

    def remove_card(self, card_id: str) -> MutationEntry:
        """Remove one card. See KnowledgeGraph.remove_card."""
        return self._mutate("remove_card", lambda g: g.remove_card(card_id))

    def undo_last(self) -> MutationEntry | None:
        """Undo the most recent incremental update, if any."""
        if self.snapshot().mutation_log.last() is None:
            return None
        return self._mutate("undo", lambda g: g.undo_last())

    # ─────────────────────────────────────────────────────────────────────────
    # Queries
    # ─────────────────────────────────────────────────────────────────────────

    def _pagerank_options(self) -> dict[str, Any]:
        options = self._config.get("pagerank", {})
        return {
            "damping": options.get("damping", 0.85),
            "iterations": options.get("iterations", 20),
            "redistribute_dangling": options.get("redistribute_dangling", False),
        }

    def _cluster_mode(self, mode: str | None) -> str:
        return mode or self._config.get("clusters", {}).get("mode", "strong")

    def pagerank(self) -> dict[str, float]:
        """PageRank scores for the current snapshot."""
        return pagerank(self.snapshot(), **self._pagerank_options())

    def importance_ranking(self, limit: int | None = None) -> list[CardImportance]:
        """Cards ranked by PageRank, highest first."""
        return importance_ranking(self.snapshot(), limit=limit, **self._pagerank_options())

    def clusters(self, mode: str | None = None) -> list[KnowledgeCluster]:
        """Knowledge clusters, largest first."""
        return knowledge_clusters(
            self.snapshot(), mode=self._cluster_mode(mode), **self._pagerank_options()
        )

    def backlinks(self, card_id: str) -> list[BacklinkInfo]:
        """Cards linking directly to ``card_id``."""
        return backlinks(self.snapshot(), card_id)

    def orphans(self) -> list[str]:
        """Ids of cards with no links in either direction."""
        return orphan_ids(self.snapshot())

    def unresolved_references(self) -> list[UnresolvedReference]:
        return self.snapshot().unresolved_references()

    def layout(self, seed: int | None = None, cluster_mode: str | None = None) -> GraphData:
        """Lay out the current snapshot."""
        graph = self.snapshot()
        return layout_graph(
            graph,
            config=LayoutConfig.from_dict(self._config.get("layout", {})),
            seed=seed,
            cluster_mode=self._cluster_mode(cluster_mode),
            scores=pagerank(graph, **self._pagerank_options()),
        )

    def stats(self) -> dict[str, Any]:
        """Summary counts for the current snapshot."""
        graph = self.snapshot()
        return {
            "built": self._built,
            "node_count": graph.node_count(),
            "edge_count": graph.edge_count(),
            "orphan_count": len(orphan_ids(graph)),
            "unresolved_count": len(graph.unresolved_references()),
            "mutation_count": len(graph.mutation_log),
        }


__all__ = ["GraphEngine"]
