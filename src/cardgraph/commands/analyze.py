"""
cardgraph.commands.analyze - Graph analytics command.

- `cardgraph analyze rank CARDS` - Importance ranking (PageRank)
- `cardgraph analyze clusters CARDS` - Knowledge clusters
- `cardgraph analyze orphans CARDS` - Cards with no links
- `cardgraph analyze backlinks CARDS CARD_ID` - Cards linking to a card
- `cardgraph analyze unresolved CARDS` - References that matched no card
"""

from __future__ import annotations

import argparse
import json
import sys
from typing import Any

from cardgraph.config import get_config
from cardgraph.engine import GraphEngine
from cardgraph.graph.factory import load_cards
from cardgraph.graph.serialize import to_csv, to_markdown


def load_engine(args: argparse.Namespace) -> GraphEngine:
    """Build an engine from the command's config and card file."""
    config = get_config(getattr(args, "config", None))
    engine = GraphEngine(config)
    engine.rebuild(load_cards(args.cards))
    return engine


def run(args: argparse.Namespace) -> int:
    """Run the analyze command."""
    action = getattr(args, "analyze_action", None)
    if not action:
        print(
            "Usage: cardgraph analyze {rank|clusters|orphans|backlinks|unresolved} CARDS",
            file=sys.stderr,
        )
        return 1

    engine = load_engine(args)

    if action == "rank":
        rows = [entry.to_dict() for entry in engine.importance_ranking(args.limit)]
        columns = ["id", "title", "score", "inbound_links", "outbound_links"]
        title = "Card Importance"
    elif action == "clusters":
        rows = [cluster.to_dict() for cluster in engine.clusters(args.mode)]
        columns = ["id", "size", "center_node", "nodes"]
        title = "Knowledge Clusters"
    elif action == "orphans":
        rows = [{"id": card_id} for card_id in engine.orphans()]
        columns = ["id"]
        title = "Orphan Cards"
    elif action == "backlinks":
        rows = [info.to_dict() for info in engine.backlinks(args.card_id)]
        columns = ["id", "title", "card_type"]
        title = f"Backlinks to {args.card_id}"
    elif action == "unresolved":
        rows = [
            {"source_id": ref.source_id, "reference": ref.reference}
            for ref in engine.unresolved_references()
        ]
        columns = ["source_id", "reference"]
        title = "Unresolved References"
    else:
        print(f"Unknown analyze action: {action}", file=sys.stderr)
        return 1

    print(_render(rows, columns, title, args.format), end="")
    return 0


def _render(rows: list[dict[str, Any]], columns: list[str], title: str, fmt: str) -> str:
    if fmt == "json":
        return json.dumps(rows, indent=2) + "\n"
    if fmt == "markdown":
        return to_markdown(rows, columns, title=title)
    if fmt == "csv":
        return to_csv(rows, columns)

    if not rows:
        return f"{title}: none\n"
    lines = [title, "=" * 60]
    for row in rows:
        parts = []
        for column in columns:
            value = row.get(column)
            if isinstance(value, float):
                value = f"{value:.4f}"
            elif isinstance(value, list):
                value = ", ".join(value)
            parts.append(str(value))
        lines.append("  ".join(parts))
    return "\n".join(lines) + "\n"
