"""
CSV import of flashcards.

Expected header: ``word,translation,tags,language`` (case-insensitive, any
order). ``word`` and ``translation`` are required; ``tags`` is a
semicolon-separated list; ``language`` defaults to "en".
"""

import csv
import io
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from flashdeck.application.id_service import generate_card_id
from flashdeck.application.utils.clock import now_ms
from flashdeck.application.utils.text import split_tags
from flashdeck.domain.constants import CSV_TAG_SEPARATOR, DEFAULT_CSV_LANGUAGE
from flashdeck.domain.errors import CsvImportError
from flashdeck.domain.models import Card, Statistics
from flashdeck.domain.ports import CardStore

logger = logging.getLogger(__name__)


def _cell(row: list[str], index: int | None) -> str:
    if index is None or index >= len(row):
        return ""
    return row[index].strip()


class CsvImporter:
    def __init__(self, store: CardStore, clock: Callable[[], int] = now_ms):
        self.store = store
        self.clock = clock

    def parse_csv(self, content: str) -> list[Card]:
        """
        Parse CSV text into new cards with zeroed statistics.

        Rows missing a word or translation are skipped with a warning.

        Raises:
            CsvImportError: If the content is empty or lacks required columns.
        """
        rows = [row for row in csv.reader(io.StringIO(content)) if any(c.strip() for c in row)]
        if not rows:
            raise CsvImportError("CSV file is empty")

        header = [h.strip().lower() for h in rows[0]]
        columns: dict[str, int | None] = {
            name: header.index(name) if name in header else None
            for name in ("word", "translation", "tags", "language")
        }
        if columns["word"] is None or columns["translation"] is None:
            raise CsvImportError('CSV must contain "word" and "translation" columns')

        cards = []
        for line_no, row in enumerate(rows[1:], start=2):
            word = _cell(row, columns["word"])
            translation = _cell(row, columns["translation"])
            if not word or not translation:
                logger.warning(f"Skipping row {line_no}: missing word or translation")
                continue

            now = self.clock()
            cards.append(
                Card(
                    id=generate_card_id(),
                    word=word,
                    translation=translation,
                    tags=split_tags(_cell(row, columns["tags"]), CSV_TAG_SEPARATOR),
                    language=_cell(row, columns["language"]) or DEFAULT_CSV_LANGUAGE,
                    statistics=Statistics(),
                    created_at=now,
                    updated_at=now,
                )
            )

        return cards

    def parse_csv_file(self, path: Path) -> list[Card]:
        try:
            content = Path(path).read_text(encoding="utf-8-sig")
        except (OSError, UnicodeDecodeError) as e:
            raise CsvImportError(f"Failed to read CSV file: {e}") from e
        return self.parse_csv(content)

    @staticmethod
    def validate_csv_data(cards: Any) -> list[str]:
        """Return validation messages for parsed cards; empty means valid."""
        if not isinstance(cards, list):
            return ["Data must be an array"]
        if not cards:
            return ["No valid cards found in CSV"]

        errors = []
        for index, card in enumerate(cards, start=1):
            word = getattr(card, "word", None)
            translation = getattr(card, "translation", None)
            if not isinstance(word, str) or not word.strip():
                errors.append(f"Card {index}: missing or invalid word")
            if not isinstance(translation, str) or not translation.strip():
                errors.append(f"Card {index}: missing or invalid translation")
        return errors

    def import_csv(self, path: Path) -> list[Card]:
        """
        Parse ``path`` and append its cards to the store.

        Returns:
            Only the newly imported cards.
        """
        cards = self.parse_csv_file(path)
        errors = self.validate_csv_data(cards)
        if errors:
            raise CsvImportError(f"CSV validation failed: {', '.join(errors)}")

        existing = self.store.load_cards()
        self.store.save_cards(existing + cards)
        logger.info(f"Imported {len(cards)} cards from {path}")
        return cards
