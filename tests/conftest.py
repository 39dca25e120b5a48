"""
Pytest fixtures for bitewave tests.

Provides a temporary SQLite data directory, a controllable clock and an open
Restaurant session with one staff member.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from typing import Iterable, Mapping

import pytest

from bitewave.errors import PersistenceFailure
from bitewave.models import Record, RecordKind
from bitewave.session import Restaurant


class FixedClock:
    """Clock returning a set instant; advance() moves it forward."""

    def __init__(self, start: datetime) -> None:
        self.now = start

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now = self.now + timedelta(**kwargs)


class MemoryStorage:
    """Storage double keeping saved collections in a dict."""

    def __init__(self, data: dict[RecordKind, list[Record]] | None = None) -> None:
        self.data: dict[RecordKind, list[Record]] = dict(data or {})
        self.failing_loads: set[RecordKind] = set()
        self.failing_saves: set[RecordKind] = set()
        self.saves: list[RecordKind] = []

    def load(self, kind: RecordKind) -> list[Record]:
        if kind in self.failing_loads:
            raise PersistenceFailure(f"corrupt {kind.value}")
        return list(self.data.get(kind, []))

    def save(self, kind: RecordKind, records: Iterable[Record]) -> None:
        if kind in self.failing_saves:
            raise PersistenceFailure(f"disk full while saving {kind.value}")
        self.data[kind] = list(records)
        self.saves.append(kind)

    def save_many(self, collections: Mapping[RecordKind, Iterable[Record]]) -> None:
        failing = [kind for kind in collections if kind in self.failing_saves]
        if failing:
            raise PersistenceFailure(f"disk full while saving {failing[0].value}")
        for kind, records in collections.items():
            self.save(kind, records)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(datetime(2024, 3, 9, 18, 30, 5, tzinfo=timezone.utc))


@pytest.fixture
def data_dir(tmp_path):
    return tmp_path / "data"


@pytest.fixture
def restaurant(data_dir, clock) -> Restaurant:
    restaurant = Restaurant.open(data_dir, clock=clock)
    restaurant.directory.create_staff("sam", "pw1", "Sam Lee")
    yield restaurant
    restaurant.close()


@pytest.fixture
def menu(restaurant):
    """Two catalog items: Burger at 10.00 and Fries at 5.00."""
    burger = restaurant.catalog.create_item("Burger", "10.00", 20, "Beef burger")
    fries = restaurant.catalog.create_item("Fries", "5.00", 50, "Salted")
    return burger, fries


@pytest.fixture
def memory_storage() -> MemoryStorage:
    return MemoryStorage()
