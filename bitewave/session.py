"""Composition root wiring storage, record store and services for one session."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path

from bitewave.billing import BillingEngine
from bitewave.catalog import Catalog
from bitewave.config import BILLS_DIRNAME, DB_FILENAME, resolve_data_dir
from bitewave.directory import Directory
from bitewave.errors import PersistenceFailure
from bitewave.models import RecordKind, User
from bitewave.orders import Clock, OrderLedger, utc_now
from bitewave.persistence import SqliteStorage
from bitewave.record_store import RecordStore, Storage
from bitewave.statements import StatementArchive

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DashboardStats:
    staff: int
    items: int
    orders: int
    bills: int


def _prepare(storage: SqliteStorage) -> None:
    """Create the schema, replacing a database file that cannot be opened."""
    try:
        storage.bootstrap_schema()
        return
    except PersistenceFailure as exc:
        logger.error("Database unusable, starting a fresh one: %s", exc)
    try:
        storage.set_aside()
        storage.bootstrap_schema()
    except PersistenceFailure as exc:
        logger.error("Continuing without durable storage: %s", exc)


class Restaurant:
    """One open session over the restaurant's records."""

    def __init__(self, storage: Storage, archive: StatementArchive, clock: Clock = utc_now) -> None:
        self.store = RecordStore(storage)
        self.directory = Directory(self.store)
        self.catalog = Catalog(self.store)
        self.orders = OrderLedger(self.store, self.catalog, self.directory, clock=clock)
        self.billing = BillingEngine(self.orders, archive, clock=clock)

    @classmethod
    def open(cls, data_dir: str | Path | None = None, clock: Clock = utc_now) -> Restaurant:
        """Load every collection from the data directory and ensure the admin exists."""
        root = resolve_data_dir(data_dir)
        storage = SqliteStorage(root / DB_FILENAME)
        _prepare(storage)
        restaurant = cls(storage, StatementArchive(root / BILLS_DIRNAME), clock=clock)
        restaurant.store.load_all()
        logger.info("Session opened on %s", root)
        return restaurant

    def login(self, username: str, password: str) -> User:
        return self.directory.authenticate(username.strip(), password.strip())

    def dashboard_stats(self) -> DashboardStats:
        return DashboardStats(
            staff=self.directory.count_staff(),
            items=self.store.count(RecordKind.ITEMS),
            orders=self.store.count(RecordKind.ORDERS),
            bills=self.store.count(RecordKind.BILLS),
        )

    def close(self) -> None:
        # Every mutation is persisted as it happens; nothing is buffered.
        logger.info("Session closed")
