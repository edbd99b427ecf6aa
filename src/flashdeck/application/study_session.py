"""
Study session: the select -> present -> answer loop.

The statistics written by each answer are the only feedback into the next
selection; the session itself just keeps a tally for display.
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass

from flashdeck.application.card_manager import CardManager
from flashdeck.application.selection import SelectionAlgorithm
from flashdeck.application.statistics_tracker import StatisticsTracker
from flashdeck.domain.models import Card, Statistics

logger = logging.getLogger(__name__)


@dataclass
class SessionTally:
    reviewed: int = 0
    known: int = 0
    dont_know: int = 0

    @property
    def accuracy(self) -> float | None:
        if self.reviewed == 0:
            return None
        return self.known / self.reviewed


class StudySession:
    def __init__(
        self,
        card_manager: CardManager,
        tracker: StatisticsTracker,
        selector: SelectionAlgorithm | None = None,
        tags: Iterable[str] = (),
    ):
        self.card_manager = card_manager
        self.tracker = tracker
        self.selector = selector or SelectionAlgorithm()
        self.tags = list(tags)
        self.tally = SessionTally()

    def candidates(self) -> list[Card]:
        return self.card_manager.get_cards_by_tags(self.tags)

    def next_card(self) -> Card | None:
        """Select the next card from a fresh snapshot of the store."""
        return self.selector.select_next(self.candidates())

    def answer(self, card_id: str, known: bool) -> Statistics:
        """Record an answer for ``card_id`` and return its updated statistics."""
        if known:
            stats = self.tracker.record_known(card_id)
            self.tally.known += 1
        else:
            stats = self.tracker.record_dont_know(card_id)
            self.tally.dont_know += 1
        self.tally.reviewed += 1
        return stats
