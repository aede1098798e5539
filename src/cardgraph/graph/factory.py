"""Graph Factory - Single entry point for building a KnowledgeGraph.

Every caller (the engine, the standalone layout, the CLI) builds graphs
through ``build_graph`` so link resolution has exactly one implementation.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from pathlib import Path
from typing import Any

from cardgraph.exceptions import CardFormatError
from cardgraph.graph.builder import GraphBuilder, KnowledgeGraph
from cardgraph.graph.GraphNode import CardRef


def cards_from_records(records: Iterable[CardRef | dict[str, Any]]) -> list[CardRef]:
    """Convert note-store records to CardRef snapshots.

    CardRef instances pass through unchanged.

    Raises:
        CardFormatError: If a record cannot be converted.
    """
    return [r if isinstance(r, CardRef) else CardRef.from_dict(r) for r in records]


def load_cards(path: Path) -> list[CardRef]:
    """Load cards from a JSON file.

    The file holds either a list of card records or an object with a
    ``"cards"`` list.

    Args:
        path: Path to the JSON file.

    Returns:
        List of CardRef snapshots in file order.

    Raises:
        CardFormatError: If the file is not valid JSON or has the wrong shape.
    """
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise CardFormatError(f"{path}: invalid JSON: {e}") from e

    if isinstance(data, dict):
        data = data.get("cards")
    if not isinstance(data, list):
        raise CardFormatError(f"{path}: expected a list of cards or an object with a 'cards' list")
    return cards_from_records(data)


def build_graph(cards: Iterable[CardRef | dict[str, Any]]) -> KnowledgeGraph:
    """Build a KnowledgeGraph from a complete batch of cards.

    Args:
        cards: CardRef snapshots or note-store records.

    Returns:
        Complete KnowledgeGraph.
    """
    builder = GraphBuilder()
    builder.add_cards(cards_from_records(cards))
    return builder.build()


__all__ = ["build_graph", "cards_from_records", "load_cards"]
