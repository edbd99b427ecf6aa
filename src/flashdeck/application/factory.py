"""
Service Factory
Centralizes wiring of storage and application services from an AppConfig.
"""

from dataclasses import dataclass

from flashdeck.application.backup_service import BackupService
from flashdeck.application.card_manager import CardManager
from flashdeck.application.config import AppConfig
from flashdeck.application.csv_importer import CsvImporter
from flashdeck.application.selection import (
    SelectionAlgorithm,
    default_random_source,
    seeded_random_source,
)
from flashdeck.application.statistics_tracker import StatisticsTracker
from flashdeck.domain.ports import CardStore
from flashdeck.infrastructure.storage import JsonFileStorage, StorageManager


@dataclass
class Services:
    config: AppConfig
    store: CardStore
    cards: CardManager
    tracker: StatisticsTracker
    selector: SelectionAlgorithm
    backups: BackupService
    csv: CsvImporter


def get_card_store(config: AppConfig) -> CardStore:
    return StorageManager(JsonFileStorage(config.data_file))


def make_selector(seed: int | None = None) -> SelectionAlgorithm:
    """Seeded selectors replay the same draws; unseeded ones use system randomness."""
    rng = seeded_random_source(seed) if seed is not None else default_random_source()
    return SelectionAlgorithm(rng)


def build_services(
    config: AppConfig,
    store: CardStore | None = None,
    selector: SelectionAlgorithm | None = None,
) -> Services:
    """
    Returns the full set of application services sharing one store.

    Pass ``selector`` to keep one random stream across several builds.
    """
    store = store or get_card_store(config)
    return Services(
        config=config,
        store=store,
        cards=CardManager(store),
        tracker=StatisticsTracker(store),
        selector=selector if selector is not None else make_selector(config.seed),
        backups=BackupService(store),
        csv=CsvImporter(store),
    )
