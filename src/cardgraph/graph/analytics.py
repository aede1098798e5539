"""Graph analytics - read-only functions over a built KnowledgeGraph.

These are pure functions: they never mutate the graph, so they are safe
to run concurrently on the same snapshot.

Usage:
    from cardgraph.graph.analytics import importance_ranking, knowledge_clusters

    top = importance_ranking(graph, limit=10)
    clusters = knowledge_clusters(graph)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from cardgraph.graph.metrics import BacklinkInfo, CardImportance, KnowledgeCluster

if TYPE_CHECKING:
    from cardgraph.graph.builder import KnowledgeGraph

DEFAULT_DAMPING = 0.85
DEFAULT_ITERATIONS = 20

CLUSTER_MODES = ("strong", "weak")


def pagerank(
    graph: KnowledgeGraph,
    damping: float = DEFAULT_DAMPING,
    iterations: int = DEFAULT_ITERATIONS,
    redistribute_dangling: bool = False,
) -> dict[str, float]:
    """Compute PageRank by power iteration.

    Every node starts at 1/N and each round computes

        rank[v] = (1 - d) / N + d * sum(rank[u] / outdeg(u) for u -> v)

    for exactly ``iterations`` rounds; there is no convergence check.

    By default a node with no outgoing edges passes its rank on to nobody,
    so the scores sum to less than 1 whenever such nodes exist. With
    ``redistribute_dangling`` their rank is spread evenly over all nodes
    instead (textbook PageRank, scores sum to 1).

    Args:
        graph: The graph to rank.
        damping: Damping factor d, in [0, 1].
        iterations: Number of rounds to run.
        redistribute_dangling: Spread dangling-node rank over all nodes.

    Returns:
        Mapping of card id to score; empty for an empty graph.

    Raises:
        ValueError: If damping or iterations is out of range.
    """
    if not 0.0 <= damping <= 1.0:
        raise ValueError(f"damping must be within [0, 1], got {damping}")
    if iterations < 0:
        raise ValueError(f"iterations must be non-negative, got {iterations}")

    nodes = list(graph.all_nodes())
    n = len(nodes)
    if n == 0:
        return {}

    out_degree = {node.id: node.out_degree for node in nodes}
    dangling_ids = [node.id for node in nodes if node.out_degree == 0]
    base = (1.0 - damping) / n
    ranks = {node.id: 1.0 / n for node in nodes}

    for _ in range(iterations):
        dangling_share = 0.0
        if redistribute_dangling and dangling_ids:
            dangling_share = damping * sum(ranks[i] for i in dangling_ids) / n

        ranks = {
            node.id: base
            + dangling_share
            + damping * sum(ranks[src] / out_degree[src] for src in node.iter_sources())
            for node in nodes
        }

    return ranks


def importance_ranking(
    graph: KnowledgeGraph,
    limit: int | None = None,
    scores: dict[str, float] | None = None,
    damping: float = DEFAULT_DAMPING,
    iterations: int = DEFAULT_ITERATIONS,
    redistribute_dangling: bool = False,
) -> list[CardImportance]:
    """Rank cards by PageRank score.

    Ties are broken by card id so the order is stable across runs.

    Args:
        graph: The graph to rank.
        limit: Maximum number of entries to return (None for all).
        scores: Precomputed PageRank scores; computed if omitted.
        damping: PageRank damping factor (ignored when scores given).
        iterations: PageRank rounds (ignored when scores given).
        redistribute_dangling: PageRank dangling policy (ignored when scores given).

    Returns:
        CardImportance entries, highest score first.
    """
    if limit is not None and limit < 0:
        raise ValueError(f"limit must be non-negative, got {limit}")
    if scores is None:
        scores = pagerank(graph, damping, iterations, redistribute_dangling)

    rankings = [
        CardImportance(
            id=node.id,
            title=node.title,
            score=scores.get(node.id, 0.0),
            inbound_links=node.in_degree,
            outbound_links=node.out_degree,
        )
        for node in graph.all_nodes()
    ]
    rankings.sort(key=lambda r: (-r.score, r.id))
    return rankings if limit is None else rankings[:limit]


def strongly_connected_components(graph: KnowledgeGraph) -> list[list[str]]:
    """Return strongly connected components (Kosaraju).

    Uses iterative DFS to avoid recursion limits on long reference chains.

    Returns:
        Components in discovery order; members in discovery order.
    """
    visited: set[str] = set()
    order: list[str] = []

    # First pass: post-order over outgoing edges
    for start in graph.node_ids():
        if start in visited:
            continue
        visited.add(start)
        stack: list[tuple[str, list[str], int]] = [(start, graph.successors(start), 0)]
        while stack:
            node_id, children, idx = stack.pop()
            if idx < len(children):
                stack.append((node_id, children, idx + 1))
                child = children[idx]
                if child not in visited:
                    visited.add(child)
                    stack.append((child, graph.successors(child), 0))
            else:
                order.append(node_id)

    # Second pass: collect components over incoming edges
    assigned: set[str] = set()
    components: list[list[str]] = []
    for start in reversed(order):
        if start in assigned:
            continue
        component: list[str] = []
        pending = [start]
        assigned.add(start)
        while pending:
            node_id = pending.pop()
            component.append(node_id)
            for source_id in graph.predecessors(node_id):
                if source_id not in assigned:
                    assigned.add(source_id)
                    pending.append(source_id)
        components.append(component)

    return components


def weakly_connected_components(graph: KnowledgeGraph) -> list[list[str]]:
    """Return connected components of the graph with edge direction ignored."""
    assigned: set[str] = set()
    components: list[list[str]] = []
    for start in graph.node_ids():
        if start in assigned:
            continue
        component: list[str] = []
        pending = [start]
        assigned.add(start)
        while pending:
            node_id = pending.pop()
            component.append(node_id)
            for neighbor in (*graph.successors(node_id), *graph.predecessors(node_id)):
                if neighbor not in assigned:
                    assigned.add(neighbor)
                    pending.append(neighbor)
        components.append(component)
    return components


def knowledge_clusters(
    graph: KnowledgeGraph,
    mode: str = "strong",
    scores: dict[str, float] | None = None,
    damping: float = DEFAULT_DAMPING,
    iterations: int = DEFAULT_ITERATIONS,
    redistribute_dangling: bool = False,
) -> list[KnowledgeCluster]:
    """Group cards into clusters.

    In "strong" mode clusters are strongly connected components: a one-way
    reference A -> B leaves A and B in different clusters. "weak" mode
    ignores edge direction.

    Clusters are ordered by size, largest first (ties by smallest member
    id) and numbered in that order. Each cluster's center is the member
    with the highest PageRank.

    Args:
        graph: The graph to cluster.
        mode: "strong" or "weak".
        scores: Precomputed PageRank scores; computed if omitted.

    Returns:
        KnowledgeCluster list partitioning the node set.

    Raises:
        ValueError: If mode is unknown.
    """
    if mode == "strong":
        components = strongly_connected_components(graph)
    elif mode == "weak":
        components = weakly_connected_components(graph)
    else:
        raise ValueError(f"Unknown cluster mode {mode!r}; expected one of {CLUSTER_MODES}")

    if scores is None:
        scores = pagerank(graph, damping, iterations, redistribute_dangling)

    members = [sorted(component) for component in components]
    members.sort(key=lambda m: (-len(m), m[0] if m else ""))

    return [
        KnowledgeCluster(
            id=cluster_id,
            size=len(nodes),
            nodes=nodes,
            center_node=min(nodes, key=lambda i: (-scores.get(i, 0.0), i)) if nodes else None,
        )
        for cluster_id, nodes in enumerate(members)
    ]


def cluster_assignment(clusters: list[KnowledgeCluster]) -> dict[str, int]:
    """Map each card id to its cluster id."""
    return {card_id: cluster.id for cluster in clusters for card_id in cluster.nodes}


def backlinks(graph: KnowledgeGraph, card_id: str) -> list[BacklinkInfo]:
    """Cards with a direct edge into ``card_id``.

    Returns an empty list for an unknown id. Backlinks are not transitive.
    """
    target = graph.find_by_id(card_id)
    if target is None:
        return []

    result = []
    for source_id in target.iter_sources():
        source = graph.find_by_id(source_id)
        if source is None:
            continue
        result.append(
            BacklinkInfo(
                id=source.id,
                title=source.title,
                card_type=source.card_type.value,
                context=None,
            )
        )
    return result


def orphan_ids(graph: KnowledgeGraph) -> list[str]:
    """Ids of cards with neither incoming nor outgoing edges, sorted."""
    return sorted(node.id for node in graph.all_nodes() if node.is_orphan)


__all__ = [
    "DEFAULT_DAMPING",
    "DEFAULT_ITERATIONS",
    "CLUSTER_MODES",
    "pagerank",
    "importance_ranking",
    "strongly_connected_components",
    "weakly_connected_components",
    "knowledge_clusters",
    "cluster_assignment",
    "backlinks",
    "orphan_ids",
]
