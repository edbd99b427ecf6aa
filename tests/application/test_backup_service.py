import json

import pytest

from flashdeck.application.backup_service import BackupService
from flashdeck.domain.constants import BACKUP_VERSION
from flashdeck.domain.errors import BackupFormatError


@pytest.fixture
def backups(store, clock):
    return BackupService(store, clock=clock)


def test_create_backup_document(backups, card_factory):
    cards = [card_factory("a", know=2, dont_know=1, tags=["x"])]

    doc = json.loads(backups.create_backup(cards))

    assert doc["version"] == BACKUP_VERSION
    assert isinstance(doc["timestamp"], int)
    assert doc["cards"][0]["id"] == "a"
    assert doc["cards"][0]["statistics"] == {
        "knowCount": 2,
        "dontKnowCount": 1,
        "lastReviewed": None,
    }


def test_backup_is_indented(backups, card_factory):
    text = backups.create_backup([card_factory("a")])
    assert text.startswith('{\n  "version"')


def test_write_then_import_overwrite_restores_cards(backups, card_manager, tracker, store, tmp_path):
    card = card_manager.create_card("hund", "dog", tags=["animals"])
    tracker.record_known(card.id)
    original = [c.to_dict() for c in store.load_cards()]

    path = backups.write_backup(tmp_path / "nested" / "backup.json")
    store.clear_all()
    assert store.load_cards() == []

    backups.import_backup(path, mode="overwrite")

    assert [c.to_dict() for c in store.load_cards()] == original


def test_import_merge_keeps_existing(backups, card_manager, store, tmp_path, card_factory):
    card_manager.create_card("hund", "dog")
    path = tmp_path / "backup.json"
    path.write_text(
        backups.create_backup(
            [
                card_factory("b1", word="hund", translation="dog"),
                card_factory("b2", word="maus", translation="mouse"),
            ]
        )
    )

    result = backups.import_backup(path)

    assert [c.word for c in result] == ["hund", "maus"]
    assert len(store.load_cards()) == 2


@pytest.mark.parametrize(
    "content",
    [
        "not json",
        "[]",
        '{"version": "1.0"}',
        '{"cards": {"a": 1}}',
    ],
)
def test_parse_backup_rejects_bad_documents(backups, content):
    with pytest.raises(BackupFormatError):
        backups.parse_backup(content)


def test_parse_backup_with_malformed_card(backups):
    doc = backups.parse_backup('{"cards": [{"id": "a", "word": "x", "translation": "y"}]}')
    with pytest.raises(BackupFormatError):
        doc.to_cards()


def test_restore_missing_file(backups, tmp_path):
    with pytest.raises(BackupFormatError):
        backups.restore_backup(tmp_path / "nope.json")


def test_restore_non_utf8_file(backups, tmp_path):
    path = tmp_path / "backup.json"
    path.write_bytes('{"cards": [{"word": "straße"}]}'.encode("latin-1"))
    with pytest.raises(BackupFormatError, match="Failed to read backup file"):
        backups.restore_backup(path)


def test_import_backup_invalid_mode(backups, tmp_path):
    with pytest.raises(BackupFormatError):
        backups.import_backup(tmp_path / "x.json", mode="replace")


def test_import_backup_from_browser_export(backups, store, tmp_path):
    # Shape written by the original web app's backup download
    path = tmp_path / "flashcards-backup.json"
    path.write_text(
        json.dumps(
            {
                "version": "1.0",
                "timestamp": 1700000000000,
                "cards": [
                    {
                        "id": "4f1c2a9e-0b7d-4c3e-9a51-2d8e6f0b1c77",
                        "word": "gato",
                        "translation": "cat",
                        "tags": ["animals"],
                        "language": "es",
                        "statistics": {
                            "knowCount": 3,
                            "dontKnowCount": 4,
                            "lastReviewed": 1699999999000,
                        },
                        "createdAt": 1690000000000,
                        "updatedAt": 1699999999000,
                    }
                ],
            }
        )
    )

    backups.import_backup(path)

    card = store.load_cards()[0]
    assert card.id == "4f1c2a9e-0b7d-4c3e-9a51-2d8e6f0b1c77"
    assert card.statistics.dont_know_count == 4
    assert card.statistics.last_reviewed == 1699999999000
