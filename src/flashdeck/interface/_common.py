"""Shared helpers for CLI command modules."""

import logging
from typing import Any

import typer

from flashdeck.application.config import AppConfig, resolve_config
from flashdeck.application.factory import Services, build_services
from flashdeck.domain.errors import (
    BackupFormatError,
    CardNotFoundError,
    CardValidationError,
    CsvImportError,
    FlashdeckError,
    InvalidInputError,
    StorageError,
)

VERBOSITY_LEVELS = {0: logging.WARNING, 1: logging.INFO}


def log_level_for(verbose: int) -> int:
    return VERBOSITY_LEVELS.get(verbose, logging.DEBUG)


def _resolve_with_overrides(ctx: typer.Context | None = None, **overrides: Any) -> AppConfig:
    """Resolve config, layering global options from the root callback under command options."""
    merged: dict[str, Any] = {}
    if ctx is not None and isinstance(ctx.obj, dict):
        merged.update(ctx.obj.get("overrides", {}))
    merged.update(overrides)
    config = resolve_config(merged)
    logging.getLogger("flashdeck").setLevel(log_level_for(config.verbose))
    return config


def _services(ctx: typer.Context | None = None, **overrides: Any) -> Services:
    return build_services(_resolve_with_overrides(ctx, **overrides))


def humanize_error(exc: Exception) -> str:
    """Turn a flashdeck exception into a one-line message for the terminal."""
    if isinstance(exc, CardNotFoundError):
        return f"No card with id '{exc.card_id}'. Run 'flashdeck list' to see ids."
    if isinstance(exc, CardValidationError):
        return "Invalid card: " + "; ".join(exc.errors)
    if isinstance(exc, (BackupFormatError, CsvImportError)):
        return f"Import failed: {exc}"
    if isinstance(exc, InvalidInputError):
        return f"Stored data is malformed: {exc}"
    if isinstance(exc, StorageError):
        return f"Storage error: {exc}"
    return str(exc)


def fail(exc: FlashdeckError) -> typer.Exit:
    """Print ``exc`` in red and return an Exit to raise."""
    typer.secho(humanize_error(exc), fg="red", err=True)
    return typer.Exit(1)
