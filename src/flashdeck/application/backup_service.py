"""
Backup Service: JSON export and restore of the card collection.

A backup document looks like::

    {"version": "1.0", "timestamp": 1700000000000, "cards": [...]}
"""

import json
import logging
from collections.abc import Callable
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ValidationError

from flashdeck.application.card_manager import merge_cards
from flashdeck.application.utils.clock import now_ms
from flashdeck.domain.constants import BACKUP_INDENT, BACKUP_VERSION, IMPORT_MODES
from flashdeck.domain.errors import BackupFormatError, InvalidInputError
from flashdeck.domain.models import Card
from flashdeck.domain.ports import CardStore

logger = logging.getLogger(__name__)


class BackupDocument(BaseModel):
    version: str = BACKUP_VERSION
    timestamp: int | None = None
    cards: list[dict[str, Any]]

    def to_cards(self) -> list[Card]:
        try:
            return [Card.from_dict(record) for record in self.cards]
        except InvalidInputError as e:
            raise BackupFormatError(f"Invalid backup format: {e}") from e


class BackupService:
    def __init__(self, store: CardStore, clock: Callable[[], int] = now_ms):
        self.store = store
        self.clock = clock

    def create_backup(self, cards: list[Card]) -> str:
        """Serialize cards into an indented backup document."""
        doc = {
            "version": BACKUP_VERSION,
            "timestamp": self.clock(),
            "cards": [card.to_dict() for card in cards],
        }
        return json.dumps(doc, indent=BACKUP_INDENT, ensure_ascii=False)

    def parse_backup(self, content: str) -> BackupDocument:
        """
        Parse a backup document.

        Raises:
            BackupFormatError: If the content is not JSON or lacks a cards list.
        """
        try:
            data = json.loads(content)
        except json.JSONDecodeError as e:
            raise BackupFormatError(f"Failed to parse backup file: {e}") from e

        if not isinstance(data, dict) or not isinstance(data.get("cards"), list):
            raise BackupFormatError("Invalid backup format: missing or invalid cards array")

        try:
            return BackupDocument.model_validate(data)
        except ValidationError as e:
            raise BackupFormatError(f"Invalid backup format: {e}") from e

    def restore_backup(self, path: Path) -> BackupDocument:
        try:
            content = Path(path).read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise BackupFormatError(f"Failed to read backup file: {e}") from e
        return self.parse_backup(content)

    def write_backup(self, path: Path, cards: list[Card] | None = None) -> Path:
        """Write a backup of ``cards`` (default: the whole store) to ``path``."""
        if cards is None:
            cards = self.store.load_cards()

        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(self.create_backup(cards), encoding="utf-8")
        logger.info(f"Wrote backup of {len(cards)} cards to {path}")
        return path

    def merge_cards(self, existing: list[Card], imported: list[Card]) -> list[Card]:
        return merge_cards(existing, imported)

    def import_backup(self, path: Path, mode: str = "merge") -> list[Card]:
        """
        Restore a backup file into the store.

        Returns:
            The resulting full collection.
        """
        if mode not in IMPORT_MODES:
            raise BackupFormatError(f'Mode must be either "merge" or "overwrite", got {mode!r}')

        imported = self.restore_backup(path).to_cards()

        if mode == "overwrite":
            result = imported
        else:
            result = merge_cards(self.store.load_cards(), imported)

        self.store.save_cards(result)
        logger.info(f"Restored {len(imported)} cards from {path} ({mode})")
        return result
