"""
Ports (interfaces) for durable game state.

These define the contract that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Any


class StateStore(ABC):
    """
    Port for reading and writing named JSON-compatible records.

    Implementations:
        - JsonFileStore: one JSON file per record in a state directory.
        - MemoryStore: process-local dict, used by tests and ephemeral sessions.
    """

    @abstractmethod
    def load(self, name: str) -> Any | None:
        """
        Read a record.

        Returns:
            The decoded record, or None if it is missing or unreadable.
        """
        pass

    @abstractmethod
    def save(self, name: str, record: Any) -> None:
        """
        Write a record. Best-effort: failures are logged, never raised.
        """
        pass

    @abstractmethod
    def clear(self, name: str) -> None:
        """Remove a record if it exists."""
        pass
