"""Mutation types for KnowledgeGraph operations.

This module provides dataclasses for recording dropped references and
the per-card mutations applied through the incremental API.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any
from uuid import uuid4


@dataclass(frozen=True)
class UnresolvedReference:
    """A link reference that matched no card id, title or alias.

    Recorded during resolution; the reference creates no edge.

    Attributes:
        source_id: Id of the card containing the reference.
        reference: The raw reference string.
    """

    source_id: str
    reference: str

    def __str__(self) -> str:
        return f"{self.source_id} --> {self.reference!r} (unresolved)"


@dataclass
class MutationEntry:
    """Single card mutation record.

    ``before_state`` holds the card record as it was before the
    operation (empty for an added card), which is enough to undo it.

    Attributes:
        operation: One of "add_card", "update_card", "remove_card".
        card_id: The card that was mutated.
        before_state: Card record before the mutation, or {}.
        after_state: Card record after the mutation, or {}.
        position: Index of the card in node order before the mutation.
        id: Unique mutation ID (UUID4 hex).
        timestamp: When the mutation occurred.
    """

    operation: str
    card_id: str
    before_state: dict[str, Any]
    after_state: dict[str, Any]
    position: int | None = None
    id: str = field(default_factory=lambda: uuid4().hex)
    timestamp: datetime = field(default_factory=datetime.now)

    def __str__(self) -> str:
        return f"[{self.id[:8]}] {self.operation}({self.card_id})"


class MutationLog:
    """Append-only mutation history, in chronological order.

    Example:
        >>> log = MutationLog()
        >>> log.append(MutationEntry("remove_card", "c1", {"id": "c1"}, {}))
        >>> len(log)
        1
    """

    def __init__(self) -> None:
        self._entries: list[MutationEntry] = []

    def append(self, entry: MutationEntry) -> None:
        self._entries.append(entry)

    def __len__(self) -> int:
        return len(self._entries)

    def last(self) -> MutationEntry | None:
        """Return the most recent entry, or None if empty."""
        return self._entries[-1] if self._entries else None

    def pop(self) -> MutationEntry | None:
        """Remove and return the most recent entry (used by undo)."""
        return self._entries.pop() if self._entries else None


__all__ = ["UnresolvedReference", "MutationEntry", "MutationLog"]
