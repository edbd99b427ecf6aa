"""Records know/don't-know answers and exposes per-card statistics."""

import logging
from collections.abc import Callable

from flashdeck.application.utils.clock import now_ms
from flashdeck.domain.errors import CardNotFoundError
from flashdeck.domain.models import Card, Statistics
from flashdeck.domain.ports import CardStore

logger = logging.getLogger(__name__)


class StatisticsTracker:
    """
    Mutates the statistics of a single card per answer and persists the change.

    Each call reloads the collection, updates one card and saves the whole
    collection back before returning.
    """

    def __init__(self, store: CardStore, clock: Callable[[], int] = now_ms):
        self.store = store
        self.clock = clock

    def record_known(self, card_id: str) -> Statistics:
        """
        Increment the "know" counter for a card.

        Raises:
            CardNotFoundError: If no card has this id.
        """
        return self._record(card_id, known=True)

    def record_dont_know(self, card_id: str) -> Statistics:
        """
        Increment the "don't know" counter for a card.

        Raises:
            CardNotFoundError: If no card has this id.
        """
        return self._record(card_id, known=False)

    def read_statistics(self, card_id: str) -> Statistics:
        """
        Return the statistics of a card.

        Statistics is frozen, so callers cannot modify stored counters through it.
        """
        return self._find(self.store.load_cards(), card_id).statistics

    def _record(self, card_id: str, known: bool) -> Statistics:
        cards = self.store.load_cards()
        card = self._find(cards, card_id)

        now = self.clock()
        if known:
            card.statistics = card.statistics.record_known(now)
        else:
            card.statistics = card.statistics.record_dont_know(now)
        card.touch(now)

        self.store.save_cards(cards)
        logger.debug(
            f"Recorded {'known' if known else 'dont_know'} for {card_id}: {card.statistics}"
        )
        return card.statistics

    @staticmethod
    def _find(cards: list[Card], card_id: str) -> Card:
        for card in cards:
            if card.id == card_id:
                return card
        raise CardNotFoundError(card_id)
