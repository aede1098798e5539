"""Graph Serialization - Export KnowledgeGraph and analytics results.

This module provides functions to serialize the graph to JSON-compatible
dicts and to render analytics result rows as markdown tables or CSV.
"""

from __future__ import annotations

import csv
import io
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from cardgraph.graph.builder import KnowledgeGraph
    from cardgraph.graph.GraphNode import GraphNode


def serialize_node(node: GraphNode) -> dict[str, Any]:
    """Serialize a GraphNode to a JSON-compatible dict.

    Args:
        node: The node to serialize.

    Returns:
        Dict suitable for JSON serialization.
    """
    result: dict[str, Any] = {
        "id": node.id,
        "title": node.title,
        "card_type": node.card_type.value,
        "aliases": list(node.aliases),
    }

    targets = list(node.iter_targets())
    if targets:
        result["links"] = targets

    sources = list(node.iter_sources())
    if sources:
        result["backlinks"] = sources

    return result


def serialize_graph(graph: KnowledgeGraph) -> dict[str, Any]:
    """Serialize a KnowledgeGraph to a JSON-compatible dict.

    Args:
        graph: The graph to serialize.

    Returns:
        Dict with nodes, edges, unresolved references and metadata.
    """
    nodes = {}
    type_counts: dict[str, int] = {}
    for node in graph.all_nodes():
        nodes[node.id] = serialize_node(node)
        type_name = node.card_type.value
        type_counts[type_name] = type_counts.get(type_name, 0) + 1

    edges = [list(edge.as_tuple()) for edge in graph.iter_edges()]
    return {
        "nodes": nodes,
        "edges": edges,
        "unresolved": [
            {"source_id": ref.source_id, "reference": ref.reference}
            for ref in graph.unresolved_references()
        ],
        "metadata": {
            "node_count": len(nodes),
            "edge_count": len(edges),
            "by_type": type_counts,
        },
    }


def _cell(value: Any) -> str:
    if value is None:
        return "-"
    if isinstance(value, float):
        return f"{value:.6f}"
    if isinstance(value, (list, tuple)):
        return ", ".join(str(v) for v in value) or "-"
    return str(value)


def to_markdown(rows: Sequence[dict[str, Any]], columns: Sequence[str], title: str | None = None) -> str:
    """Render result rows as a markdown table.

    Args:
        rows: Result dicts (e.g. from ``CardImportance.to_dict()``).
        columns: Keys to include, in order.
        title: Optional heading above the table.

    Returns:
        Markdown string.
    """
    lines = []
    if title:
        lines.extend([f"# {title}", ""])

    lines.append("| " + " | ".join(columns) + " |")
    lines.append("|" + "|".join("-" * (len(c) + 2) for c in columns) + "|")
    for row in rows:
        cells = [_cell(row.get(column)).replace("|", "\\|") for column in columns]
        lines.append("| " + " | ".join(cells) + " |")

    lines.append("")
    return "\n".join(lines)


def to_csv(rows: Sequence[dict[str, Any]], columns: Sequence[str]) -> str:
    """Render result rows as CSV.

    List values are joined with "; ".
    """
    output = io.StringIO()
    writer = csv.writer(output, quoting=csv.QUOTE_MINIMAL)
    writer.writerow(columns)
    for row in rows:
        values = []
        for column in columns:
            value = row.get(column)
            if isinstance(value, (list, tuple)):
                value = "; ".join(str(v) for v in value)
            values.append("" if value is None else value)
        writer.writerow(values)
    return output.getvalue()


__all__ = [
    "serialize_node",
    "serialize_graph",
    "to_markdown",
    "to_csv",
]
