"""Tests for CLI commands: help, card CRUD, stats, import, settings and config."""

import json
import logging
from unittest.mock import patch

import pytest
from typer.testing import CliRunner

from flashdeck.interface.cli import app

runner = CliRunner()


@pytest.fixture
def data_file(mock_home, tmp_path):
    return tmp_path / "storage.json"


def invoke(data_file, *args, **kwargs):
    return runner.invoke(app, ["--data-file", str(data_file), *args], **kwargs)


def _all_cards(data_file) -> list[dict]:
    result = invoke(data_file, "list", "--json")
    assert result.exit_code == 0
    return json.loads(result.stdout)


# --- Help ---


def test_cli_help():
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "adaptive word/translation flashcards" in result.stdout
    assert "study" in result.stdout
    assert "backup" in result.stdout


# --- Cards ---


def test_add_and_list(data_file):
    result = invoke(data_file, "add", "hund", "dog", "-t", "animals", "--language", "de")
    assert result.exit_code == 0
    assert "Added" in result.stdout

    cards = _all_cards(data_file)
    assert len(cards) == 1
    assert cards[0]["word"] == "hund"
    assert cards[0]["tags"] == ["animals"]
    assert cards[0]["language"] == "de"
    assert cards[0]["statistics"] == {"knowCount": 0, "dontKnowCount": 0, "lastReviewed": None}

    listing = invoke(data_file, "list")
    assert "hund -> dog" in listing.stdout
    assert "weight 1.00" in listing.stdout


def test_add_uses_configured_default_language(data_file, monkeypatch):
    monkeypatch.setenv("FLASHDECK_DEFAULT_LANGUAGE", "sv")
    invoke(data_file, "add", "hund", "dog")
    assert _all_cards(data_file)[0]["language"] == "sv"


def test_add_blank_word_fails(data_file):
    result = invoke(data_file, "add", "  ", "dog")
    assert result.exit_code == 1
    assert "Word is required" in result.output


def test_list_empty(data_file):
    result = invoke(data_file, "list")
    assert result.exit_code == 0
    assert "No cards found" in result.stdout


def test_list_by_tag(data_file):
    invoke(data_file, "add", "hund", "dog", "-t", "animals")
    invoke(data_file, "add", "laufen", "run", "-t", "verbs")

    result = invoke(data_file, "list", "--tag", "verbs")
    assert "laufen" in result.stdout
    assert "hund" not in result.stdout


def test_edit_keeps_unspecified_fields(data_file):
    invoke(data_file, "add", "hund", "dog", "-t", "animals")
    card_id = _all_cards(data_file)[0]["id"]

    result = invoke(data_file, "edit", card_id, "--translation", "hound")
    assert result.exit_code == 0

    card = _all_cards(data_file)[0]
    assert card["word"] == "hund"
    assert card["translation"] == "hound"
    assert card["tags"] == ["animals"]


def test_edit_missing_card(data_file):
    result = invoke(data_file, "edit", "nope", "--word", "x")
    assert result.exit_code == 1
    assert "No card with id 'nope'" in result.output


def test_delete(data_file):
    invoke(data_file, "add", "hund", "dog")
    card_id = _all_cards(data_file)[0]["id"]

    declined = invoke(data_file, "delete", card_id, input="n\n")
    assert declined.exit_code == 1
    assert len(_all_cards(data_file)) == 1

    result = invoke(data_file, "delete", card_id, "--force")
    assert result.exit_code == 0
    assert _all_cards(data_file) == []

    again = invoke(data_file, "delete", card_id, "--force")
    assert again.exit_code == 1


def test_stats_command(data_file):
    invoke(data_file, "add", "hund", "dog")
    card_id = _all_cards(data_file)[0]["id"]

    result = invoke(data_file, "stats", card_id)
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {
        "knowCount": 0,
        "dontKnowCount": 0,
        "lastReviewed": None,
    }


def test_stats_missing_card(data_file):
    result = invoke(data_file, "stats", "missing")
    assert result.exit_code == 1


# --- Import ---


def test_import_csv(data_file, tmp_path):
    csv_path = tmp_path / "words.csv"
    csv_path.write_text("word,translation,tags\nhund,dog,animals;noun\nkatze,cat,\n")

    result = invoke(data_file, "import-csv", str(csv_path))

    assert result.exit_code == 0
    assert "Imported 2 cards" in result.stdout
    assert [c["word"] for c in _all_cards(data_file)] == ["hund", "katze"]


def test_import_csv_bad_header(data_file, tmp_path):
    csv_path = tmp_path / "words.csv"
    csv_path.write_text("front,back\na,b\n")

    result = invoke(data_file, "import-csv", str(csv_path))

    assert result.exit_code == 1
    assert "Import failed" in result.output


def test_import_csv_non_utf8_file(data_file, tmp_path):
    csv_path = tmp_path / "latin1.csv"
    csv_path.write_bytes("word,translation\nstraße,street\n".encode("latin-1"))

    result = invoke(data_file, "import-csv", str(csv_path))

    assert result.exit_code == 1
    assert "Import failed" in result.output
    assert not isinstance(result.exception, UnicodeDecodeError)


def _write_malformed_storage(data_file, cards="[]", settings="{}"):
    data_file.write_text(
        json.dumps({"flashcard_app_cards": cards, "flashcard_app_settings": settings})
    )


@pytest.mark.parametrize(
    "args",
    [
        ["delete", "a", "--force"],
        ["list"],
        ["study", "--tag", "x"],
    ],
)
def test_malformed_card_record_is_reported(data_file, args):
    _write_malformed_storage(data_file, cards='[{"id": "a", "word": "x", "translation": "y"}]')

    result = invoke(data_file, *args)

    assert result.exit_code == 1
    assert "Stored data is malformed" in result.output


@pytest.mark.parametrize(
    "args", [["settings", "show"], ["settings", "set", "--language", "de"], ["study"]]
)
def test_malformed_settings_record_is_reported(data_file, args):
    _write_malformed_storage(data_file, settings='{"selectedTags": 5}')

    result = invoke(data_file, *args)

    assert result.exit_code == 1
    assert "Stored data is malformed" in result.output


# --- Settings / Config ---


def test_settings_show_defaults(data_file):
    result = invoke(data_file, "settings", "show")
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"language": "en", "ttsEnabled": True, "selectedTags": []}


def test_settings_set(data_file):
    result = invoke(data_file, "settings", "set", "--language", "de", "--no-tts", "-t", "verbs")
    assert result.exit_code == 0

    shown = json.loads(invoke(data_file, "settings", "show").stdout)
    assert shown == {"language": "de", "ttsEnabled": False, "selectedTags": ["verbs"]}

    invoke(data_file, "settings", "set", "--clear-tags")
    assert json.loads(invoke(data_file, "settings", "show").stdout)["selectedTags"] == []


def test_config_show(data_file):
    result = invoke(data_file, "config", "show")
    assert result.exit_code == 0
    output = json.loads(result.stdout)
    assert output["data_file"] == str(data_file)
    assert output["seed"] is None
    assert output["verbose"] == 0


@pytest.mark.parametrize(
    "flags,verbose,level",
    [
        ([], 0, logging.WARNING),
        (["-v"], 1, logging.INFO),
        (["-vv"], 2, logging.DEBUG),
        (["-v", "-v", "-v"], 3, logging.DEBUG),
    ],
)
def test_verbose_flag_raises_log_level(data_file, flags, verbose, level):
    result = runner.invoke(app, [*flags, "--data-file", str(data_file), "config", "show"])

    assert result.exit_code == 0
    assert json.loads(result.stdout)["verbose"] == verbose
    assert logging.getLogger("flashdeck").level == level


def test_configured_verbosity_applies_without_flag(data_file, monkeypatch):
    monkeypatch.setenv("FLASHDECK_VERBOSE", "1")
    result = invoke(data_file, "config", "show")

    assert result.exit_code == 0
    assert json.loads(result.stdout)["verbose"] == 1
    assert logging.getLogger("flashdeck").level == logging.INFO


@patch("uvicorn.run")
def test_serve_command(mock_run, data_file, monkeypatch):
    # serve exports the storage path for the server process; restore it afterwards
    monkeypatch.setenv("FLASHDECK_DATA_FILE", "unused")
    result = invoke(data_file, "serve", "--port", "9000")
    assert result.exit_code == 0
    mock_run.assert_called_with("flashdeck.server:app", host="127.0.0.1", port=9000, reload=False)


@patch("uvicorn.run")
def test_serve_logs_to_log_dir(mock_run, data_file, tmp_path, monkeypatch):
    log_dir = tmp_path / "logs"
    monkeypatch.setenv("FLASHDECK_DATA_FILE", "unused")
    monkeypatch.setenv("FLASHDECK_LOG_DIR", str(log_dir))
    mock_run.side_effect = lambda *a, **kw: logging.getLogger("flashdeck.server").warning(
        "listening"
    )

    result = invoke(data_file, "serve")

    assert result.exit_code == 0
    assert "listening" in (log_dir / "server.log").read_text()
    assert not any(
        isinstance(h, logging.FileHandler) for h in logging.getLogger("flashdeck").handlers
    )


@patch("subprocess.run")
def test_logs_command_opens_log_dir(mock_run, data_file, tmp_path, monkeypatch):
    log_dir = tmp_path / "logs"
    monkeypatch.setenv("FLASHDECK_LOG_DIR", str(log_dir))
    monkeypatch.setattr("sys.platform", "linux")

    result = invoke(data_file, "logs")

    assert result.exit_code == 0
    assert log_dir.is_dir()
    assert str(log_dir) in result.stdout
    mock_run.assert_called_once_with(["xdg-open", str(log_dir)])
