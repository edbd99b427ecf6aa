"""
Ports (interfaces) for storage and randomness.

These define the contracts that infrastructure adapters must implement.
Application services depend on these abstractions, not concrete implementations.
"""

from abc import ABC, abstractmethod
from typing import Protocol

from .models import Card, Settings


class RandomSource(Protocol):
    """
    Source of uniform floats in [0, 1).

    ``random.Random`` and ``random.SystemRandom`` both satisfy this protocol.
    """

    def random(self) -> float: ...


class KeyValueStorage(ABC):
    """
    Port for a string-to-string key-value store.

    Implementations:
        - JsonFileStorage: A single JSON file on disk.
        - MemoryStorage: A plain dict, used in tests.
    """

    @abstractmethod
    def get_item(self, key: str) -> str | None:
        """Return the stored value or None if the key is absent."""
        pass

    @abstractmethod
    def set_item(self, key: str, value: str) -> None:
        """
        Store ``value`` under ``key``.

        Raises:
            StorageError: If the value cannot be persisted.
        """
        pass

    @abstractmethod
    def remove_item(self, key: str) -> None:
        pass


class CardStore(ABC):
    """
    Port for loading and saving the whole card collection.

    Every mutation is a read-modify-write of the full collection.
    """

    @abstractmethod
    def load_cards(self) -> list[Card]:
        pass

    @abstractmethod
    def save_cards(self, cards: list[Card]) -> None:
        pass

    @abstractmethod
    def load_settings(self) -> Settings:
        pass

    @abstractmethod
    def save_settings(self, settings: Settings) -> None:
        pass

    @abstractmethod
    def clear_all(self) -> None:
        pass
