"""
Card Manager: create, update, delete, filter and bulk-import cards.

All operations are read-modify-write against the CardStore.
"""

import logging
from collections.abc import Callable, Iterable
from typing import Any

from flashdeck.application.id_service import generate_card_id
from flashdeck.application.utils.clock import now_ms
from flashdeck.application.utils.text import dedupe_tags
from flashdeck.domain.constants import DEFAULT_CARD_LANGUAGE, IMPORT_MODES
from flashdeck.domain.errors import CardNotFoundError, CardValidationError
from flashdeck.domain.models import Card, Statistics
from flashdeck.domain.ports import CardStore

logger = logging.getLogger(__name__)


def validate_card_data(
    word: Any, translation: Any, tags: Any = None, language: Any = None
) -> list[str]:
    """Return a list of validation messages; empty means the data is valid."""
    errors = []

    if not isinstance(word, str) or not word.strip():
        errors.append("Word is required and must be a non-empty string")

    if not isinstance(translation, str) or not translation.strip():
        errors.append("Translation is required and must be a non-empty string")

    if tags is not None:
        if not isinstance(tags, (list, tuple)):
            errors.append("Tags must be an array")
        elif not all(isinstance(t, str) for t in tags):
            errors.append("All tags must be strings")

    if language is not None and not isinstance(language, str):
        errors.append("Language must be a string")

    return errors


def _clean_tags(tags: Iterable[str] | None) -> list[str]:
    return dedupe_tags([t.strip() for t in tags or [] if t.strip()])


def merge_cards(existing: list[Card], imported: Iterable[Card]) -> list[Card]:
    """
    Append imported cards that are not already present.

    Cards are duplicates when word and translation both match. Duplicates
    inside ``imported`` are collapsed too, first one wins.
    """
    merged = list(existing)
    seen = {card.key for card in existing}

    for card in imported:
        if card.key not in seen:
            merged.append(card)
            seen.add(card.key)

    return merged


class CardManager:
    def __init__(self, store: CardStore, clock: Callable[[], int] = now_ms):
        self.store = store
        self.clock = clock

    def create_card(
        self,
        word: str,
        translation: str,
        tags: list[str] | None = None,
        language: str | None = None,
    ) -> Card:
        """
        Create and persist a new card with zeroed statistics.

        Raises:
            CardValidationError: If word/translation are blank or tags/language mistyped.
        """
        errors = validate_card_data(word, translation, tags, language)
        if errors:
            raise CardValidationError(errors)

        now = self.clock()
        card = Card(
            id=generate_card_id(),
            word=word.strip(),
            translation=translation.strip(),
            tags=_clean_tags(tags),
            language=language or DEFAULT_CARD_LANGUAGE,
            statistics=Statistics(),
            created_at=now,
            updated_at=now,
        )

        cards = self.store.load_cards()
        cards.append(card)
        self.store.save_cards(cards)

        logger.info(f"Created card {card.id} ({card.word!r})")
        return card

    def update_card(
        self,
        card_id: str,
        word: str,
        translation: str,
        tags: list[str] | None = None,
        language: str | None = None,
    ) -> Card:
        """
        Replace a card's content fields, preserving statistics and created_at.

        Raises:
            CardValidationError: If the new data is invalid.
            CardNotFoundError: If no card has this id.
        """
        errors = validate_card_data(word, translation, tags, language)
        if errors:
            raise CardValidationError(errors)

        cards = self.store.load_cards()
        card = next((c for c in cards if c.id == card_id), None)
        if card is None:
            raise CardNotFoundError(card_id)

        card.word = word.strip()
        card.translation = translation.strip()
        card.tags = _clean_tags(tags)
        card.language = language or DEFAULT_CARD_LANGUAGE
        card.touch(self.clock())

        self.store.save_cards(cards)
        logger.info(f"Updated card {card_id}")
        return card

    def delete_card(self, card_id: str) -> bool:
        """Delete a card. Returns False if it did not exist."""
        cards = self.store.load_cards()
        remaining = [c for c in cards if c.id != card_id]

        if len(remaining) == len(cards):
            return False

        self.store.save_cards(remaining)
        logger.info(f"Deleted card {card_id}")
        return True

    def get_all_cards(self) -> list[Card]:
        return self.store.load_cards()

    def get_card(self, card_id: str) -> Card:
        for card in self.store.load_cards():
            if card.id == card_id:
                return card
        raise CardNotFoundError(card_id)

    def get_cards_by_tags(self, tags: Iterable[str] | None) -> list[Card]:
        """Cards carrying at least one of ``tags``; all cards when no tags are given."""
        wanted = set(tags or [])
        cards = self.store.load_cards()
        if not wanted:
            return cards
        return [card for card in cards if wanted.intersection(card.tags)]

    def list_tags(self) -> list[str]:
        """All tags in use, sorted."""
        return sorted({tag for card in self.store.load_cards() for tag in card.tags})

    def import_cards(self, cards: list[Card], mode: str = "merge") -> list[Card]:
        """
        Import cards, either merging with or replacing the stored collection.

        Returns:
            The resulting full collection.
        """
        if mode not in IMPORT_MODES:
            raise CardValidationError(
                [f'Mode must be either "merge" or "overwrite", got {mode!r}'],
                prefix="Import failed",
            )

        if mode == "overwrite":
            result = list(cards)
        else:
            result = merge_cards(self.store.load_cards(), cards)

        self.store.save_cards(result)
        logger.info(f"Imported cards ({mode}): collection now has {len(result)} cards")
        return result
