"""Identity-keyed in-memory collections with per-kind id allocation."""

from __future__ import annotations

import logging
import threading
from typing import Iterable, Mapping, Protocol

from bitewave.config import ADMIN_DISPLAY_NAME, ADMIN_PASSWORD, ADMIN_USERNAME
from bitewave.errors import PersistenceFailure
from bitewave.models import Record, RecordKind, Role, User

logger = logging.getLogger(__name__)


class Storage(Protocol):
    """Durable storage collaborator: whole-collection load and save per kind."""

    def load(self, kind: RecordKind) -> list[Record]: ...

    def save(self, kind: RecordKind, records: Iterable[Record]) -> None: ...

    def save_many(self, collections: Mapping[RecordKind, Iterable[Record]]) -> None: ...


class RecordStore:
    """Holds users, items, orders and bills keyed by id."""

    def __init__(self, storage: Storage) -> None:
        self.storage = storage
        self.lock = threading.RLock()
        self._collections: dict[RecordKind, dict[int, Record]] = {kind: {} for kind in RecordKind}
        self._next_ids: dict[RecordKind, int] = {kind: 1 for kind in RecordKind}

    def allocate(self, kind: RecordKind) -> int:
        """Reserve the next id for kind. Ids are never handed out twice."""
        with self.lock:
            record_id = self._next_ids[kind]
            self._next_ids[kind] = record_id + 1
            return record_id

    def peek_next_id(self, kind: RecordKind) -> int:
        return self._next_ids[kind]

    def put(self, kind: RecordKind, record: Record) -> None:
        with self.lock:
            self._collections[kind][record.id] = record
            # Records put with an explicit id must not collide with later allocations.
            if record.id >= self._next_ids[kind]:
                self._next_ids[kind] = record.id + 1

    def get(self, kind: RecordKind, record_id: int) -> Record | None:
        """Return the record or None when it is absent."""
        return self._collections[kind].get(record_id)

    def remove(self, kind: RecordKind, record_id: int) -> Record | None:
        with self.lock:
            return self._collections[kind].pop(record_id, None)

    def records(self, kind: RecordKind) -> list[Record]:
        """All records of kind, sorted by id ascending."""
        collection = self._collections[kind]
        return [collection[record_id] for record_id in sorted(collection)]

    def count(self, kind: RecordKind) -> int:
        return len(self._collections[kind])

    def load_all(self) -> None:
        """
        Rebuild every collection from storage.

        A kind that fails to load starts empty; the others still load. Allocators
        are re-seeded from the highest loaded id of each kind.
        """
        with self.lock:
            for kind in RecordKind:
                try:
                    loaded = self.storage.load(kind)
                except PersistenceFailure as exc:
                    logger.warning("Starting with empty %s: %s", kind.value, exc)
                    loaded = []
                self._collections[kind] = {record.id: record for record in loaded}
                highest = max(self._collections[kind], default=0)
                self._next_ids[kind] = max(self._next_ids[kind], highest + 1)
                logger.info("Loaded %d %s (next id %d)", len(loaded), kind.value, self._next_ids[kind])
            try:
                self.ensure_default_administrator()
            except PersistenceFailure as exc:
                logger.warning("Default administrator kept in memory only: %s", exc)

    def ensure_default_administrator(self) -> User:
        """Create and persist the sentinel administrator if it is missing."""
        with self.lock:
            for user in self._collections[RecordKind.USERS].values():
                if user.username == ADMIN_USERNAME:
                    return user

            admin = User(
                id=self.allocate(RecordKind.USERS),
                username=ADMIN_USERNAME,
                password=ADMIN_PASSWORD,
                display_name=ADMIN_DISPLAY_NAME,
                role=Role.ADMINISTRATOR,
            )
            self.put(RecordKind.USERS, admin)
            logger.info("Created default administrator %r", admin.username)
            self.persist(RecordKind.USERS)
            return admin

    def persist(self, *kinds: RecordKind) -> None:
        """Write whole collections to storage. Several kinds are written together or not at all."""
        try:
            if len(kinds) == 1:
                self.storage.save(kinds[0], self.records(kinds[0]))
            else:
                self.storage.save_many({kind: self.records(kind) for kind in kinds})
        except PersistenceFailure:
            logger.error("Failed to persist %s", ", ".join(kind.value for kind in kinds))
            raise
