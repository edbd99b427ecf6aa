import logging

import pytest

from flashdeck.application.card_manager import CardManager
from flashdeck.application.statistics_tracker import StatisticsTracker
from flashdeck.domain.models import Card, Statistics
from flashdeck.infrastructure.storage import MemoryStorage, StorageManager


class FakeClock:
    """Deterministic millisecond clock that advances on every call."""

    def __init__(self, start: int = 1_700_000_000_000, step: int = 1000):
        self.now = start
        self.step = step

    def __call__(self) -> int:
        self.now += self.step
        return self.now


def make_card(card_id: str, know: int = 0, dont_know: int = 0, **kwargs) -> Card:
    return Card(
        id=card_id,
        word=kwargs.pop("word", f"word-{card_id}"),
        translation=kwargs.pop("translation", f"translation-{card_id}"),
        created_at=kwargs.pop("created_at", 1000),
        updated_at=kwargs.pop("updated_at", 1000),
        statistics=Statistics(know_count=know, dont_know_count=dont_know),
        **kwargs,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return StorageManager(MemoryStorage())


@pytest.fixture
def card_manager(store, clock):
    return CardManager(store, clock=clock)


@pytest.fixture
def tracker(store, clock):
    return StatisticsTracker(store, clock=clock)


@pytest.fixture
def mock_home(tmp_path, monkeypatch):
    """Mocks Path.home() to point to a temp dir."""
    home = tmp_path / "home"
    home.mkdir()

    # Mocking HOME to a temp directory to isolate config/storage
    monkeypatch.setenv("HOME", str(home))
    for var in (
        "FLASHDECK_DATA_FILE",
        "FLASHDECK_SEED",
        "FLASHDECK_DEFAULT_LANGUAGE",
        "FLASHDECK_VERBOSE",
        "FLASHDECK_LOG_DIR",
    ):
        monkeypatch.delenv(var, raising=False)
    return home


@pytest.fixture
def card_factory():
    return make_card


@pytest.fixture(autouse=True)
def restore_log_level():
    """The CLI sets the flashdeck logger level; put it back after each test."""
    logger = logging.getLogger("flashdeck")
    level = logger.level
    yield
    logger.setLevel(level)
