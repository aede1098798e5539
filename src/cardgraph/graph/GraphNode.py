"""GraphNode - Card snapshots and per-card graph nodes.

This module provides the core data structures of the knowledge graph:
- CardType: Enum of card types
- CardRef: Immutable card snapshot supplied by the note store
- GraphNode: A card in the graph, with cached metadata and adjacency
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterator

from cardgraph.exceptions import CardFormatError


class CardType(Enum):
    """Types of cards in the knowledge graph."""

    FLEETING = "fleeting"
    LITERATURE = "literature"
    PERMANENT = "permanent"
    PROJECT = "project"
    CANVAS = "canvas"

    @classmethod
    def from_str(cls, value: str | CardType | None) -> CardType:
        """Parse a card type name, case-insensitively.

        Unknown or missing values fall back to FLEETING.
        """
        if isinstance(value, CardType):
            return value
        if not value or not isinstance(value, str):
            return cls.FLEETING
        try:
            return cls(value.strip().lower())
        except ValueError:
            return cls.FLEETING


@dataclass(frozen=True)
class CardRef:
    """Immutable snapshot of a card as supplied by the note store.

    Link references have already been extracted from the card body;
    they are raw strings naming another card by id, title or alias.

    Attributes:
        id: Globally unique, stable card identifier.
        title: Display title (may be empty).
        aliases: Alternative names the card can be referenced by.
        card_type: The card's type tag.
        link_refs: Raw outgoing link references, in document order.
    """

    id: str
    title: str = ""
    aliases: tuple[str, ...] = ()
    card_type: CardType = CardType.FLEETING
    link_refs: tuple[str, ...] = ()

    def __post_init__(self) -> None:
        # Accept lists from callers but store tuples so snapshots stay hashable.
        object.__setattr__(self, "aliases", tuple(self.aliases))
        object.__setattr__(self, "link_refs", tuple(self.link_refs))
        object.__setattr__(self, "card_type", CardType.from_str(self.card_type))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CardRef:
        """Create a CardRef from a note-store record.

        Accepts both the store's field names (``type``, ``links``) and the
        snapshot's own (``card_type``, ``link_refs``), as well as the
        camelCase ``cardType`` used by the presentation layer.

        Args:
            data: Record dictionary.

        Returns:
            CardRef instance.

        Raises:
            CardFormatError: If the record is not a mapping or has no id.
        """
        if not isinstance(data, dict):
            raise CardFormatError(f"Card record must be a mapping, got {type(data).__name__}")
        card_id = data.get("id")
        if not card_id or not isinstance(card_id, str):
            raise CardFormatError(f"Card record has no string id: {data!r}")

        card_type = data.get("card_type", data.get("cardType", data.get("type")))
        links = data.get("link_refs", data.get("links")) or []
        return cls(
            id=card_id,
            title=data.get("title") or "",
            aliases=tuple(data.get("aliases") or ()),
            card_type=CardType.from_str(card_type),
            link_refs=tuple(links),
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a JSON-compatible dict in the store's record shape."""
        return {
            "id": self.id,
            "title": self.title,
            "aliases": list(self.aliases),
            "type": self.card_type.value,
            "links": list(self.link_refs),
        }


@dataclass
class GraphNode:
    """A card in the knowledge graph.

    Holds the cached metadata (title, type, aliases) alongside the raw
    link references and resolved adjacency. Adjacency lists hold card
    ids, never node objects, so a graph can be cloned cheaply.

    Attributes:
        id: Card id (node key).
        title: Cached display title.
        card_type: Cached card type.
        aliases: Cached aliases.
        link_refs: Raw outgoing references as supplied.
    """

    id: str
    title: str = ""
    card_type: CardType = CardType.FLEETING
    aliases: tuple[str, ...] = ()
    link_refs: tuple[str, ...] = ()

    # Internal storage (prefixed)
    _targets: list[str] = field(default_factory=list, repr=False)
    _sources: list[str] = field(default_factory=list, repr=False)

    @classmethod
    def from_card(cls, card: CardRef) -> GraphNode:
        """Create an unlinked node from a card snapshot."""
        return cls(
            id=card.id,
            title=card.title,
            card_type=card.card_type,
            aliases=card.aliases,
            link_refs=card.link_refs,
        )

    def to_card(self) -> CardRef:
        """Return the card snapshot this node was built from."""
        return CardRef(
            id=self.id,
            title=self.title,
            aliases=self.aliases,
            card_type=self.card_type,
            link_refs=self.link_refs,
        )

    def labels(self) -> Iterator[str]:
        """Iterate the strings this card can be referenced by (besides its id).

        Empty titles and aliases are skipped; they name nothing.
        """
        if self.title:
            yield self.title
        yield from (alias for alias in self.aliases if alias)

    # Iterator access
    def iter_targets(self) -> Iterator[str]:
        """Iterate ids this node links to."""
        yield from self._targets

    def iter_sources(self) -> Iterator[str]:
        """Iterate ids linking to this node."""
        yield from self._sources

    @property
    def out_degree(self) -> int:
        return len(self._targets)

    @property
    def in_degree(self) -> int:
        return len(self._sources)

    @property
    def is_orphan(self) -> bool:
        """True if the node has neither incoming nor outgoing edges."""
        return not self._targets and not self._sources

    def links_to(self, target_id: str) -> bool:
        return target_id in self._targets


__all__ = ["CardType", "CardRef", "GraphNode"]
