# Domain Package
from .errors import (
    BackupFormatError,
    CardNotFoundError,
    CardValidationError,
    CsvImportError,
    FlashdeckError,
    InvalidInputError,
    StorageError,
)
from .models import Card, Settings, Statistics

__all__ = [
    "Card",
    "Settings",
    "Statistics",
    "FlashdeckError",
    "CardNotFoundError",
    "InvalidInputError",
    "CardValidationError",
    "StorageError",
    "BackupFormatError",
    "CsvImportError",
]
