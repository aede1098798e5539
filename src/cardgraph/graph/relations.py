"""Relations - Edges between cards.

Edges in the knowledge graph are directed and unweighted: an edge A -> B
means card A references card B. The graph never holds two edges with the
same endpoints and never holds a self-loop.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Edge:
    """A directed edge between two cards.

    Attributes:
        source: Id of the referencing card.
        target: Id of the referenced card.
    """

    source: str
    target: str

    def undirected_key(self) -> tuple[str, str]:
        """Key identifying the edge regardless of direction."""
        return (self.source, self.target) if self.source <= self.target else (self.target, self.source)

    def as_tuple(self) -> tuple[str, str]:
        return (self.source, self.target)

    def __str__(self) -> str:
        return f"{self.source} --> {self.target}"


__all__ = ["Edge"]
