"""Custom exceptions for knowledge graph operations."""


class CardGraphError(Exception):
    """Base exception for knowledge graph operations."""


class EngineLockError(CardGraphError):
    """Raised when the engine state lock cannot be acquired."""

    def __init__(self, operation: str, timeout: float):
        self.operation = operation
        self.timeout = timeout
        super().__init__(f"Could not acquire graph state lock for {operation} within {timeout}s")


class CardNotFoundError(CardGraphError, KeyError):
    """Raised when a card id is not present in the graph."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card '{card_id}' not found")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class DuplicateCardError(CardGraphError, ValueError):
    """Raised when adding a card whose id already exists."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card '{card_id}' already exists")


class CardFormatError(CardGraphError, ValueError):
    """Raised when a card record cannot be converted to a CardRef."""


class ConfigError(CardGraphError):
    """Raised when configuration cannot be loaded or is invalid."""
