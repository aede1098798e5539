"""Force-directed layout for the knowledge graph.

Places cards in 2D with a simple physics simulation over the undirected
collapse of the reference graph: every pair of cards repels, every
linked pair is pulled together by a spring, and velocities are damped
each step. The cost is O(iterations * N^2), which suits graphs of a few
hundred cards.

Starting positions are random. Pass a seed for reproducible output.
"""

from __future__ import annotations

import logging
import math
import random
from collections.abc import Iterable
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING, Any

from cardgraph.graph.analytics import cluster_assignment, knowledge_clusters, orphan_ids, pagerank
from cardgraph.graph.factory import build_graph
from cardgraph.graph.metrics import GraphData, LayoutNode

if TYPE_CHECKING:
    from cardgraph.graph.builder import KnowledgeGraph
    from cardgraph.graph.GraphNode import CardRef

logger = logging.getLogger(__name__)


@dataclass
class LayoutConfig:
    """Simulation parameters.

    Attributes:
        iterations: Number of simulation steps.
        repulsion: Pairwise repulsion constant (force = repulsion / dist^2).
        spring_k: Spring constant (force = dist^2 / spring_k).
        damping: Velocity multiplier applied every step.
        dt: Integration timestep.
        min_distance: Lower clamp on pair distance.
        init_range: Initial positions are drawn from [-init_range, init_range].
        seed: Random seed for initial positions (None for a fresh seed).
    """

    iterations: int = 100
    repulsion: float = 5000.0
    spring_k: float = 50.0
    damping: float = 0.85
    dt: float = 0.1
    min_distance: float = 0.1
    init_range: float = 100.0
    seed: int | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> LayoutConfig:
        """Create LayoutConfig from the ``[layout]`` configuration table.

        Unknown keys are ignored; missing keys keep their defaults.
        """
        known = {f.name for f in fields(cls)}
        return cls(**{key: value for key, value in data.items() if key in known})


def _undirected_edges(graph: KnowledgeGraph) -> list[tuple[str, str]]:
    """Collapse directed edges: one entry per linked pair, first orientation wins."""
    seen: set[tuple[str, str]] = set()
    edges: list[tuple[str, str]] = []
    for edge in graph.iter_edges():
        key = edge.undirected_key()
        if key not in seen:
            seen.add(key)
            edges.append(edge.as_tuple())
    return edges


def simulate(
    node_ids: list[str],
    edges: Iterable[tuple[str, str]],
    config: LayoutConfig,
    rng: random.Random,
) -> dict[str, tuple[float, float]]:
    """Run the force-directed simulation.

    Args:
        node_ids: Cards to place.
        edges: Undirected edges between them.
        config: Simulation parameters.
        rng: Random source for initial positions.

    Returns:
        Mapping of card id to final (x, y).
    """
    n = len(node_ids)
    position = {node_id: i for i, node_id in enumerate(node_ids)}
    springs = [(position[a], position[b]) for a, b in edges]

    xs = [rng.uniform(-config.init_range, config.init_range) for _ in range(n)]
    ys = [rng.uniform(-config.init_range, config.init_range) for _ in range(n)]
    vxs = [0.0] * n
    vys = [0.0] * n

    logger.debug("Simulating layout: %d nodes, %d edges, %d steps", n, len(springs), config.iterations)

    for _ in range(config.iterations):
        # Repulsive forces between all node pairs
        for i in range(n):
            for j in range(i + 1, n):
                dx = xs[i] - xs[j]
                dy = ys[i] - ys[j]
                dist = max(math.sqrt(dx * dx + dy * dy), config.min_distance)

                force = config.repulsion / (dist * dist)
                fx = dx / dist * force
                fy = dy / dist * force

                vxs[i] += fx
                vys[i] += fy
                vxs[j] -= fx
                vys[j] -= fy

        # Spring attraction along edges
        for a, b in springs:
            dx = xs[a] - xs[b]
            dy = ys[a] - ys[b]
            dist = max(math.sqrt(dx * dx + dy * dy), config.min_distance)

            force = dist * dist / config.spring_k
            fx = dx / dist * force
            fy = dy / dist * force

            vxs[a] -= fx
            vys[a] -= fy
            vxs[b] += fx
            vys[b] += fy

        # Damping + position update
        for i in range(n):
            vxs[i] *= config.damping
            vys[i] *= config.damping
            xs[i] += vxs[i] * config.dt
            ys[i] += vys[i] * config.dt

    return {node_id: (xs[i], ys[i]) for node_id, i in position.items()}


def layout_graph(
    graph: KnowledgeGraph,
    config: LayoutConfig | None = None,
    seed: int | None = None,
    cluster_mode: str = "strong",
    scores: dict[str, float] | None = None,
) -> GraphData:
    """Lay out a built graph and merge in PageRank and cluster analytics.

    Args:
        graph: The graph to lay out.
        config: Simulation parameters (defaults if omitted).
        seed: Overrides ``config.seed`` when given.
        cluster_mode: Clustering used for ``cluster_id`` ("strong" or "weak").
        scores: Precomputed PageRank scores; computed with defaults if omitted.

    Returns:
        GraphData payload.
    """
    config = config or LayoutConfig()
    rng = random.Random(seed if seed is not None else config.seed)

    if scores is None:
        scores = pagerank(graph)
    clusters = knowledge_clusters(graph, mode=cluster_mode, scores=scores)
    assignment = cluster_assignment(clusters)

    edges = _undirected_edges(graph)
    neighbors: dict[str, dict[str, None]] = {node_id: {} for node_id in graph.node_ids()}
    for a, b in edges:
        neighbors[a].setdefault(b)
        neighbors[b].setdefault(a)

    positions = simulate(graph.node_ids(), edges, config, rng)

    nodes = []
    for node in graph.all_nodes():
        x, y = positions[node.id]
        adjacent = list(neighbors[node.id])
        nodes.append(
            LayoutNode(
                id=node.id,
                title=node.title,
                card_type=node.card_type.value,
                x=x,
                y=y,
                neighbors=adjacent,
                link_count=len(adjacent),
                importance=scores.get(node.id, 0.0),
                cluster_id=assignment.get(node.id, 0),
            )
        )

    return GraphData(
        nodes=nodes,
        edges=edges,
        cluster_count=len(clusters),
        orphan_count=len(orphan_ids(graph)),
    )


def compute_layout(
    cards: Iterable[CardRef],
    config: LayoutConfig | None = None,
    seed: int | None = None,
    cluster_mode: str = "strong",
) -> GraphData:
    """Build a graph from cards and lay it out in one call.

    Uses the same build path as the engine, so link resolution is
    identical to a cached rebuild.
    """
    return layout_graph(build_graph(cards), config=config, seed=seed, cluster_mode=cluster_mode)


__all__ = ["LayoutConfig", "simulate", "layout_graph", "compute_layout"]
