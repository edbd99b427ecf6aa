"""Exception hierarchy shared by every layer."""


class FlashdeckError(Exception):
    """Base class for all flashdeck errors."""


class CardNotFoundError(FlashdeckError, LookupError):
    """An operation addressed a card id that is not in the store."""

    def __init__(self, card_id: str):
        self.card_id = card_id
        super().__init__(f"Card with id {card_id} not found")


class InvalidInputError(FlashdeckError, ValueError):
    """A card handed to the selector lacks a usable statistics record."""


class CardValidationError(FlashdeckError, ValueError):
    """Card data failed validation on create, update or import."""

    def __init__(self, errors: list[str], prefix: str = "Card validation failed"):
        self.errors = list(errors)
        super().__init__(f"{prefix}: {', '.join(self.errors)}")


class StorageError(FlashdeckError):
    """The key-value backend could not persist data."""


class BackupFormatError(FlashdeckError, ValueError):
    """A backup document could not be read or has the wrong shape."""


class CsvImportError(FlashdeckError, ValueError):
    """A CSV file could not be turned into cards."""
