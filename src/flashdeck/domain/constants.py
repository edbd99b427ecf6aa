"""Centralized constants for flashdeck.

Storage keys, defaults and file format markers live here so every layer
imports from a single source of truth.
"""

# ---------- Storage ----------
CARDS_KEY = "flashcard_app_cards"
SETTINGS_KEY = "flashcard_app_settings"

# ---------- Settings defaults ----------
DEFAULT_SETTINGS_LANGUAGE = "en"
DEFAULT_TTS_ENABLED = True

# ---------- Card defaults ----------
DEFAULT_CARD_LANGUAGE = ""
DEFAULT_CSV_LANGUAGE = "en"

# ---------- Import ----------
IMPORT_MODES = ("merge", "overwrite")

# ---------- Backup ----------
BACKUP_VERSION = "1.0"
BACKUP_FILENAME = "flashcards-backup.json"
BACKUP_INDENT = 2

# ---------- CSV ----------
CSV_REQUIRED_COLUMNS = ("word", "translation")
CSV_TAG_SEPARATOR = ";"

# ---------- Logging ----------
SERVER_LOG_FILENAME = "server.log"
