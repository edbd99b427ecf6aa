"""
Storage Manager: card and settings persistence over a key-value backend.

Implements CardStore by serializing the whole collection as one JSON string.
"""

import json
import logging

from flashdeck.domain.constants import CARDS_KEY, SETTINGS_KEY
from flashdeck.domain.errors import StorageError
from flashdeck.domain.models import Card, Settings
from flashdeck.domain.ports import CardStore, KeyValueStorage

logger = logging.getLogger(__name__)


class StorageManager(CardStore):
    """
    Loads and saves cards and settings.

    Corrupted data on load is logged and treated as empty. Failures on save
    are raised as StorageError.
    """

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    def save_cards(self, cards: list[Card]) -> None:
        payload = json.dumps([card.to_dict() for card in cards], ensure_ascii=False)
        try:
            self.storage.set_item(CARDS_KEY, payload)
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save cards: {e}") from e
        logger.debug(f"Saved {len(cards)} cards")

    def load_cards(self) -> list[Card]:
        """
        Load every card.

        Raises:
            InvalidInputError: If a stored record is malformed.
        """
        raw = self.storage.get_item(CARDS_KEY)
        if not raw:
            return []

        try:
            records = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to load cards, corrupted data: {e}")
            return []

        if not isinstance(records, list):
            logger.error(f"Corrupted data: expected array, got {type(records).__name__}")
            return []

        return [Card.from_dict(record) for record in records]

    def save_settings(self, settings: Settings) -> None:
        try:
            self.storage.set_item(SETTINGS_KEY, json.dumps(settings.to_dict()))
        except StorageError:
            raise
        except Exception as e:
            raise StorageError(f"Failed to save settings: {e}") from e

    def load_settings(self) -> Settings:
        raw = self.storage.get_item(SETTINGS_KEY)
        if not raw:
            return Settings()

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.error(f"Failed to load settings, corrupted data: {e}")
            return Settings()

        if not isinstance(data, dict):
            logger.error("Corrupted settings data")
            return Settings()

        return Settings.from_dict(data)

    def clear_all(self) -> None:
        self.storage.remove_item(CARDS_KEY)
        self.storage.remove_item(SETTINGS_KEY)
