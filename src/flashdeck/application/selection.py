"""
Adaptive card selection.

Cards are drawn by weighted random sampling where the weight of a card is

    ratio  = know_count / (dont_know_count + 1)
    weight = 1 / (1 + ratio)

so a fresh card weighs 1.0 and cards the learner keeps getting right fade
toward 0. This is a pure computation module with no I/O.
"""

import logging
import random
from collections.abc import Mapping, Sequence
from typing import Any, TypeVar

from flashdeck.domain.errors import InvalidInputError
from flashdeck.domain.models import Statistics
from flashdeck.domain.ports import RandomSource

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _statistics_of(card: Any) -> Statistics:
    """Accept Card objects as well as raw records in the persisted form."""
    if card is None:
        raise InvalidInputError("Card must have statistics")

    if isinstance(card, Mapping):
        return Statistics.from_dict(card.get("statistics"))

    stats = getattr(card, "statistics", None)
    if isinstance(stats, Statistics):
        return stats
    return Statistics.from_dict(stats)


def calculate_probability(card: Any) -> float:
    """
    Selection weight for a card, in (0, 1].

    Raises:
        InvalidInputError: If the card has no usable statistics.
    """
    stats = _statistics_of(card)
    ratio = stats.know_count / (stats.dont_know_count + 1)
    return 1 / (1 + ratio)


def default_random_source() -> RandomSource:
    return random.SystemRandom()


def seeded_random_source(seed: int | str) -> RandomSource:
    return random.Random(seed)


class SelectionAlgorithm:
    """
    Weighted random card selector.

    Stateless between calls; the random source is the only hidden input.
    """

    def __init__(self, rng: RandomSource | None = None):
        self.rng = rng or default_random_source()

    def calculate_probability(self, card: Any) -> float:
        return calculate_probability(card)

    def select_next(self, cards: Sequence[T]) -> T | None:
        """
        Pick the next card to present, or None for an empty collection.

        The draw walks the cards in input order subtracting weights, so when a
        draw lands exactly on a boundary the earlier card wins. A malformed card
        anywhere in the input aborts the whole selection.
        """
        if not cards:
            return None

        weights = [calculate_probability(card) for card in cards]
        total_weight = sum(weights)

        if total_weight == 0:
            logger.warning("All card weights are zero; falling back to uniform selection")
            return cards[int(self.rng.random() * len(cards))]

        remainder = self.rng.random() * total_weight
        for card, weight in zip(cards, weights):
            remainder -= weight
            if remainder <= 0:
                return card

        # Float drift can leave a tiny positive remainder after the last card.
        return cards[-1]
