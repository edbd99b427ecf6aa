"""Backup subgroup: JSON export and restore."""

from pathlib import Path
from typing import Annotated, Literal

import typer

from flashdeck.domain.constants import BACKUP_FILENAME
from flashdeck.domain.errors import FlashdeckError
from flashdeck.interface._common import _services, fail

backup_app = typer.Typer(help="Export and restore JSON backups.", no_args_is_help=True)


@backup_app.command("export")
def export_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Backup file to write.")] = Path(BACKUP_FILENAME),
    tag: Annotated[
        list[str] | None, typer.Option("--tag", "-t", help="Only export cards with this tag.")
    ] = None,
):
    """Write all cards (statistics included) to a JSON backup."""
    services = _services(ctx)
    try:
        cards = services.cards.get_cards_by_tags(tag or [])
        services.backups.write_backup(path, cards)
    except FlashdeckError as e:
        raise fail(e) from e
    typer.secho(f"Backed up {len(cards)} cards to {path}.", fg="green")


@backup_app.command("import")
def import_cmd(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="Backup file to restore.")],
    mode: Annotated[
        Literal["merge", "overwrite"],
        typer.Option(
            help="'merge' keeps existing cards and skips duplicates. "
            "'overwrite' replaces the whole collection."
        ),
    ] = "merge",
    force: Annotated[
        bool, typer.Option("--force", "-f", help="Bypass confirmation for overwrite.")
    ] = False,
):
    """Restore cards from a JSON backup."""
    services = _services(ctx)
    if mode == "overwrite" and not force:
        if not typer.confirm("Overwrite replaces every stored card. Continue?"):
            raise typer.Exit(1)

    try:
        cards = services.backups.import_backup(path, mode=mode)
    except FlashdeckError as e:
        raise fail(e) from e
    typer.secho(f"Restored backup ({mode}): {len(cards)} cards in collection.", fg="green")
