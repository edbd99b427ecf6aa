"""flashdeck CLI: root commands and subgroup registration."""

import json
import logging
import os
import sys
from pathlib import Path
from typing import Annotated

import typer

from flashdeck.application.selection import calculate_probability
from flashdeck.application.study_session import StudySession
from flashdeck.domain.constants import SERVER_LOG_FILENAME
from flashdeck.domain.errors import FlashdeckError
from flashdeck.domain.models import Card
from flashdeck.interface._common import (
    _resolve_with_overrides,
    _services,
    fail,
    log_level_for,
)

# ---------------------------------------------------------------------------
# Root app
# ---------------------------------------------------------------------------

app = typer.Typer(
    help="flashdeck: adaptive word/translation flashcards.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.WARNING,
    format="%(levelname)s:%(name)s:%(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Register subgroups
# ---------------------------------------------------------------------------

from flashdeck.interface.backup_commands import backup_app  # noqa: E402

app.add_typer(backup_app, name="backup")

config_app = typer.Typer(help="Manage flashdeck configuration.", no_args_is_help=True)
app.add_typer(config_app, name="config")

settings_app = typer.Typer(help="Show or change stored study settings.", no_args_is_help=True)
app.add_typer(settings_app, name="settings")


# ---------------------------------------------------------------------------
# Global callback
# ---------------------------------------------------------------------------


@app.callback()
def main_callback(
    ctx: typer.Context,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose", "-v", count=True, help="Increase verbosity. Repeat for more detail."
        ),
    ] = 0,
    data_file: Annotated[
        Path | None, typer.Option("--data-file", help="Storage file to read and write.")
    ] = None,
):
    """Global settings for flashdeck."""
    ctx.ensure_object(dict)
    # Without -v the configured verbosity applies
    ctx.obj["overrides"] = {"data_file": data_file, "verbose": verbose or None}
    if verbose:
        logging.getLogger("flashdeck").setLevel(log_level_for(verbose))


def _card_line(card: Card) -> str:
    stats = card.statistics
    tags = f"  [{', '.join(card.tags)}]" if card.tags else ""
    return (
        f"{card.id}  {card.word} -> {card.translation}{tags}"
        f"  (+{stats.know_count}/-{stats.dont_know_count}, "
        f"weight {calculate_probability(card):.2f})"
    )


# ---------------------------------------------------------------------------
# Card commands
# ---------------------------------------------------------------------------


@app.command()
def add(
    ctx: typer.Context,
    word: Annotated[str, typer.Argument(help="Word to learn.")],
    translation: Annotated[str, typer.Argument(help="Its translation.")],
    tag: Annotated[
        list[str] | None, typer.Option("--tag", "-t", help="Tag for the card. Repeatable.")
    ] = None,
    language: Annotated[str | None, typer.Option(help="Language of the word.")] = None,
):
    """[bold green]Add[/bold green] a new card."""
    services = _services(ctx)
    try:
        card = services.cards.create_card(
            word,
            translation,
            tags=tag or [],
            language=language or services.config.default_language,
        )
    except FlashdeckError as e:
        raise fail(e) from e
    typer.secho(f"Added {card.id}: {card.word} -> {card.translation}", fg="green")


@app.command()
def edit(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Id of the card to edit.")],
    word: Annotated[str | None, typer.Option(help="New word.")] = None,
    translation: Annotated[str | None, typer.Option(help="New translation.")] = None,
    tag: Annotated[
        list[str] | None,
        typer.Option("--tag", "-t", help="Replace tags. Repeatable."),
    ] = None,
    language: Annotated[str | None, typer.Option(help="New language.")] = None,
):
    """Edit a card's text. Statistics are kept."""
    services = _services(ctx)
    try:
        current = services.cards.get_card(card_id)
        card = services.cards.update_card(
            card_id,
            word if word is not None else current.word,
            translation if translation is not None else current.translation,
            tags=tag if tag is not None else current.tags,
            language=language if language is not None else current.language,
        )
    except FlashdeckError as e:
        raise fail(e) from e
    typer.secho(f"Updated {card.id}: {card.word} -> {card.translation}", fg="green")


@app.command()
def delete(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Id of the card to delete.")],
    force: Annotated[bool, typer.Option("--force", "-f", help="Skip confirmation.")] = False,
):
    """Delete a card and its statistics."""
    services = _services(ctx)
    if not force and not typer.confirm(f"Delete card {card_id}?"):
        raise typer.Exit(1)

    try:
        deleted = services.cards.delete_card(card_id)
    except FlashdeckError as e:
        raise fail(e) from e
    if not deleted:
        typer.secho(f"No card with id '{card_id}'.", fg="yellow")
        raise typer.Exit(1)
    typer.secho(f"Deleted {card_id}.", fg="green")


@app.command("list")
def list_cards(
    ctx: typer.Context,
    tag: Annotated[
        list[str] | None, typer.Option("--tag", "-t", help="Only cards with this tag.")
    ] = None,
    json_output: Annotated[bool, typer.Option("--json", help="Output as JSON.")] = False,
):
    """List cards with their statistics and current selection weight."""
    services = _services(ctx)
    try:
        cards = services.cards.get_cards_by_tags(tag or [])
    except FlashdeckError as e:
        raise fail(e) from e

    if json_output:
        typer.echo(json.dumps([c.to_dict() for c in cards], indent=2, ensure_ascii=False))
        return

    if not cards:
        typer.secho("No cards found.", fg="yellow")
        return
    for card in cards:
        typer.echo(_card_line(card))


@app.command()
def stats(
    ctx: typer.Context,
    card_id: Annotated[str, typer.Argument(help="Id of the card.")],
):
    """Show know/don't-know statistics for a card."""
    services = _services(ctx)
    try:
        statistics = services.tracker.read_statistics(card_id)
    except FlashdeckError as e:
        raise fail(e) from e
    typer.echo(json.dumps(statistics.to_dict(), indent=2))


@app.command("import-csv")
def import_csv(
    ctx: typer.Context,
    path: Annotated[Path, typer.Argument(help="CSV file with word,translation[,tags,language].")],
):
    """Append cards from a CSV file."""
    services = _services(ctx)
    try:
        cards = services.csv.import_csv(path)
    except FlashdeckError as e:
        raise fail(e) from e
    typer.secho(f"Imported {len(cards)} cards from {path.name}.", fg="green")


# ---------------------------------------------------------------------------
# Study
# ---------------------------------------------------------------------------


def _ask_known() -> bool | None:
    """Prompt until the learner answers y/n; None means quit."""
    while True:
        answer = typer.prompt("Did you know it? [y/n/q]").strip().lower()
        if answer in ("y", "yes"):
            return True
        if answer in ("n", "no"):
            return False
        if answer in ("q", "quit"):
            return None
        typer.secho("Please answer y, n or q.", fg="yellow")


@app.command()
def study(
    ctx: typer.Context,
    tag: Annotated[
        list[str] | None,
        typer.Option("--tag", "-t", help="Study only these tags. Defaults to saved settings."),
    ] = None,
    limit: Annotated[int | None, typer.Option(help="Stop after this many cards.")] = None,
    seed: Annotated[int | None, typer.Option(help="Seed for reproducible card order.")] = None,
):
    """[bold green]Study[/bold green] cards, favouring the ones you miss."""
    services = _services(ctx, seed=seed)
    try:
        tags = tag if tag else services.store.load_settings().selected_tags
    except FlashdeckError as e:
        raise fail(e) from e
    session = StudySession(services.cards, services.tracker, services.selector, tags=tags)

    try:
        while limit is None or session.tally.reviewed < limit:
            card = session.next_card()
            if card is None:
                typer.secho("No cards to study.", fg="yellow")
                break

            typer.secho(f"\n{card.word}", bold=True)
            typer.prompt("Press Enter to reveal", default="", show_default=False)
            typer.echo(f"  -> {card.translation}")

            known = _ask_known()
            if known is None:
                break
            session.answer(card.id, known)
    except FlashdeckError as e:
        raise fail(e) from e

    tally = session.tally
    typer.echo(
        f"\nReviewed {tally.reviewed}: {tally.known} known, {tally.dont_know} not known."
    )


# ---------------------------------------------------------------------------
# Settings subgroup
# ---------------------------------------------------------------------------


@settings_app.command("show")
def settings_show(ctx: typer.Context):
    """Display stored settings."""
    services = _services(ctx)
    try:
        settings = services.store.load_settings()
    except FlashdeckError as e:
        raise fail(e) from e
    typer.echo(json.dumps(settings.to_dict(), indent=2))


@settings_app.command("set")
def settings_set(
    ctx: typer.Context,
    language: Annotated[str | None, typer.Option(help="Interface/speech language.")] = None,
    tts: Annotated[
        bool | None, typer.Option("--tts/--no-tts", help="Enable text-to-speech.")
    ] = None,
    tag: Annotated[
        list[str] | None,
        typer.Option("--tag", "-t", help="Default study tags. Repeatable."),
    ] = None,
    clear_tags: Annotated[
        bool, typer.Option("--clear-tags", help="Study all cards by default.")
    ] = False,
):
    """Change stored settings."""
    services = _services(ctx)
    try:
        settings = services.store.load_settings()

        if language is not None:
            settings.language = language
        if tts is not None:
            settings.tts_enabled = tts
        if clear_tags:
            settings.selected_tags = []
        elif tag:
            settings.selected_tags = list(tag)

        services.store.save_settings(settings)
    except FlashdeckError as e:
        raise fail(e) from e
    typer.echo(json.dumps(settings.to_dict(), indent=2))


# ---------------------------------------------------------------------------
# Config subgroup
# ---------------------------------------------------------------------------


@config_app.command("show")
def config_show(ctx: typer.Context):
    """Display final resolved configuration."""
    config = _resolve_with_overrides(ctx)
    d = {k: str(v) if isinstance(v, Path) else v for k, v in config.model_dump().items()}
    typer.echo(json.dumps(d, indent=2))


# ---------------------------------------------------------------------------
# Server
# ---------------------------------------------------------------------------


@app.command()
def serve(
    ctx: typer.Context,
    port: Annotated[int | None, typer.Option(help="Port to bind the server to.")] = None,
    host: Annotated[str | None, typer.Option(help="Host to bind the server to.")] = None,
    reload: Annotated[bool, typer.Option(help="Enable auto-reload.")] = False,
):
    """Run the HTTP API."""
    import uvicorn

    config = _resolve_with_overrides(ctx, host=host, port=port)
    # The server process resolves its own config; hand it the storage path.
    os.environ["FLASHDECK_DATA_FILE"] = str(config.data_file)

    config.log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(config.log_dir / SERVER_LOG_FILENAME, encoding="utf-8")
    handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s:%(name)s:%(message)s"))
    package_logger = logging.getLogger("flashdeck")
    package_logger.addHandler(handler)
    try:
        uvicorn.run("flashdeck.server:app", host=config.host, port=config.port, reload=reload)
    finally:
        package_logger.removeHandler(handler)
        handler.close()


@app.command()
def logs(ctx: typer.Context):
    """Open the log directory."""
    import subprocess

    config = _resolve_with_overrides(ctx)
    config.log_dir.mkdir(parents=True, exist_ok=True)
    typer.echo(str(config.log_dir))

    if sys.platform == "darwin":
        subprocess.run(["open", str(config.log_dir)])
    elif sys.platform == "win32":
        os.startfile(str(config.log_dir))
    else:
        subprocess.run(["xdg-open", str(config.log_dir)])
