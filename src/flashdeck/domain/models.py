"""
Domain models for cards and their review statistics.

These are pure data structures with no I/O. The persisted form uses the
camelCase keys of the storage format; attribute names stay snake_case.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from .constants import DEFAULT_CARD_LANGUAGE, DEFAULT_SETTINGS_LANGUAGE, DEFAULT_TTS_ENABLED
from .errors import InvalidInputError


def _is_count(value: Any) -> bool:
    return isinstance(value, int) and not isinstance(value, bool) and value >= 0


def _is_timestamp(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


@dataclass(frozen=True)
class Statistics:
    """
    Review counters embedded in a card.

    Attributes:
        know_count: Number of "knew it" answers.
        dont_know_count: Number of "didn't know" answers.
        last_reviewed: Epoch milliseconds of the latest answer, None if never reviewed.
    """

    know_count: int = 0
    dont_know_count: int = 0
    last_reviewed: int | None = None

    def __post_init__(self):
        if not _is_count(self.know_count) or not _is_count(self.dont_know_count):
            raise InvalidInputError("Statistics counters must be non-negative integers")

    def record_known(self, now: int) -> "Statistics":
        return replace(
            self, know_count=self.know_count + 1, last_reviewed=self._advance(now)
        )

    def record_dont_know(self, now: int) -> "Statistics":
        return replace(
            self, dont_know_count=self.dont_know_count + 1, last_reviewed=self._advance(now)
        )

    def _advance(self, now: int) -> int:
        # last_reviewed never moves backwards, even if the clock does
        if self.last_reviewed is None:
            return now
        return max(self.last_reviewed, now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "knowCount": self.know_count,
            "dontKnowCount": self.dont_know_count,
            "lastReviewed": self.last_reviewed,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Statistics":
        if not isinstance(data, Mapping):
            raise InvalidInputError("Card must have statistics")

        know = data.get("knowCount")
        dont_know = data.get("dontKnowCount")
        if not _is_count(know) or not _is_count(dont_know):
            raise InvalidInputError(
                "Card statistics must contain non-negative integer "
                "'knowCount' and 'dontKnowCount'"
            )

        last_reviewed = data.get("lastReviewed")
        if last_reviewed is not None and not _is_timestamp(last_reviewed):
            raise InvalidInputError("Card statistics 'lastReviewed' must be a timestamp or null")

        return cls(
            know_count=know,
            dont_know_count=dont_know,
            last_reviewed=int(last_reviewed) if last_reviewed is not None else None,
        )


@dataclass
class Card:
    """A single word/translation learning unit."""

    id: str
    word: str
    translation: str
    created_at: int
    updated_at: int
    tags: list[str] = field(default_factory=list)
    language: str = DEFAULT_CARD_LANGUAGE
    statistics: Statistics = field(default_factory=Statistics)

    @property
    def key(self) -> tuple[str, str]:
        """Identity used when merging imported cards."""
        return (self.word, self.translation)

    def touch(self, now: int) -> None:
        self.updated_at = max(self.updated_at, now)

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "word": self.word,
            "translation": self.translation,
            "tags": list(self.tags),
            "language": self.language,
            "statistics": self.statistics.to_dict(),
            "createdAt": self.created_at,
            "updatedAt": self.updated_at,
        }

    @classmethod
    def from_dict(cls, data: Any) -> "Card":
        """
        Build a Card from its persisted form.

        Raises:
            InvalidInputError: If required fields are missing or malformed.
        """
        if not isinstance(data, Mapping):
            raise InvalidInputError("Card record must be an object")

        card_id = data.get("id")
        word = data.get("word")
        translation = data.get("translation")
        if not isinstance(card_id, str) or not card_id:
            raise InvalidInputError("Card record is missing an 'id'")
        if not isinstance(word, str) or not isinstance(translation, str):
            raise InvalidInputError(f"Card {card_id} must have string 'word' and 'translation'")

        tags = data.get("tags") or []
        if not isinstance(tags, list) or not all(isinstance(t, str) for t in tags):
            raise InvalidInputError(f"Card {card_id} tags must be a list of strings")

        created_at = data.get("createdAt") or 0
        updated_at = data.get("updatedAt") or created_at
        if not _is_timestamp(created_at) or not _is_timestamp(updated_at):
            raise InvalidInputError(
                f"Card {card_id} 'createdAt' and 'updatedAt' must be timestamps"
            )

        return cls(
            id=card_id,
            word=word,
            translation=translation,
            tags=list(tags),
            language=data.get("language") or DEFAULT_CARD_LANGUAGE,
            statistics=Statistics.from_dict(data.get("statistics")),
            created_at=int(created_at),
            updated_at=int(updated_at),
        )


@dataclass
class Settings:
    """User preferences persisted next to the cards."""

    language: str = DEFAULT_SETTINGS_LANGUAGE
    tts_enabled: bool = DEFAULT_TTS_ENABLED
    selected_tags: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "language": self.language,
            "ttsEnabled": self.tts_enabled,
            "selectedTags": list(self.selected_tags),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Settings":
        defaults = cls()
        language = data.get("language", defaults.language)
        selected_tags = data.get("selectedTags") or []
        if not isinstance(language, str):
            raise InvalidInputError("Settings 'language' must be a string")
        if not isinstance(selected_tags, list) or not all(
            isinstance(t, str) for t in selected_tags
        ):
            raise InvalidInputError("Settings 'selectedTags' must be a list of strings")

        return cls(
            language=language,
            tts_enabled=bool(data.get("ttsEnabled", defaults.tts_enabled)),
            selected_tags=list(selected_tags),
        )
