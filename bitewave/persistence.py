"""SQLite persistence for the four record collections."""

from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from decimal import Decimal
from pathlib import Path
from typing import Iterable, Mapping

from bitewave.errors import PersistenceFailure
from bitewave.models import Bill, Item, Order, OrderItem, Record, RecordKind, Role, User

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS users (
    id INTEGER PRIMARY KEY,
    username TEXT NOT NULL UNIQUE,
    password TEXT NOT NULL,
    display_name TEXT NOT NULL,
    role TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS items (
    id INTEGER PRIMARY KEY,
    name TEXT NOT NULL,
    unit_price TEXT NOT NULL,
    quantity_on_hand INTEGER NOT NULL,
    description TEXT NOT NULL DEFAULT ''
);

CREATE TABLE IF NOT EXISTS orders (
    id INTEGER PRIMARY KEY,
    created_at TEXT NOT NULL,
    placed_by_username TEXT NOT NULL,
    billed INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS order_items (
    order_id INTEGER NOT NULL,
    line_index INTEGER NOT NULL,
    item_id INTEGER NOT NULL,
    quantity INTEGER NOT NULL,
    unit_price_snapshot TEXT NOT NULL,
    PRIMARY KEY (order_id, line_index)
);

CREATE TABLE IF NOT EXISTS bills (
    id INTEGER PRIMARY KEY,
    order_id INTEGER NOT NULL,
    issued_at TEXT NOT NULL,
    amount TEXT NOT NULL,
    artifact_name TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_order_items_order_id_line
    ON order_items(order_id, line_index);
"""


class SqliteStorage:
    """Durable storage: one table per record kind, overwritten as a whole on save."""

    def __init__(self, db_path: str | Path) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def bootstrap_schema(self) -> None:
        """Create persistence schema if it does not already exist."""
        try:
            conn = self._connect()
            try:
                conn.executescript(_SCHEMA)
            finally:
                conn.close()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceFailure(f"Cannot prepare database {self.db_path}: {exc}") from exc

    def set_aside(self) -> Path | None:
        """Move an unreadable database file out of the way so a fresh one can be created."""
        if not self.db_path.exists():
            return None
        backup = self.db_path.with_name(f"{self.db_path.name}.corrupted_{datetime.now().strftime('%Y%m%d_%H%M%S')}")
        try:
            self.db_path.replace(backup)
        except OSError as exc:
            raise PersistenceFailure(f"Cannot move damaged database {self.db_path}: {exc}") from exc
        logger.warning("Moved damaged database to %s", backup)
        return backup

    def load(self, kind: RecordKind) -> list[Record]:
        """Read every record of one kind."""
        try:
            conn = self._connect()
            try:
                return list(_LOADERS[kind](conn))
            finally:
                conn.close()
        except (OSError, sqlite3.Error, ValueError, ArithmeticError, TypeError) as exc:
            raise PersistenceFailure(f"Cannot load {kind.value}: {exc}", details={"kind": kind.value}) from exc

    def save(self, kind: RecordKind, records: Iterable[Record]) -> None:
        """Replace every stored record of one kind in a single transaction."""
        self.save_many({kind: records})

    def save_many(self, collections: Mapping[RecordKind, Iterable[Record]]) -> None:
        """Replace several kinds at once; either all of them are written or none."""
        rows = {kind: list(records) for kind, records in collections.items()}
        names = ", ".join(kind.value for kind in rows)
        try:
            conn = self._connect()
            try:
                with conn:
                    for kind, records in rows.items():
                        _SAVERS[kind](conn, records)
            finally:
                conn.close()
        except (OSError, sqlite3.Error) as exc:
            raise PersistenceFailure(f"Cannot save {names}: {exc}", details={"kinds": [kind.value for kind in rows]}) from exc
        logger.debug("saved %s", names)


def _load_users(conn: sqlite3.Connection) -> Iterable[User]:
    for row in conn.execute("SELECT id, username, password, display_name, role FROM users ORDER BY id"):
        yield User(id=int(row[0]), username=row[1], password=row[2], display_name=row[3], role=Role(row[4]))


def _load_items(conn: sqlite3.Connection) -> Iterable[Item]:
    for row in conn.execute(
        "SELECT id, name, unit_price, quantity_on_hand, description FROM items ORDER BY id"
    ):
        yield Item(
            id=int(row[0]),
            name=row[1],
            unit_price=Decimal(row[2]),
            quantity_on_hand=int(row[3]),
            description=row[4],
        )


def _load_orders(conn: sqlite3.Connection) -> Iterable[Order]:
    lines_by_order: dict[int, list[OrderItem]] = {}
    for row in conn.execute(
        """
        SELECT order_id, item_id, quantity, unit_price_snapshot
        FROM order_items
        ORDER BY order_id, line_index
        """
    ):
        lines_by_order.setdefault(int(row[0]), []).append(
            OrderItem(item_id=int(row[1]), quantity=int(row[2]), unit_price_snapshot=Decimal(row[3]))
        )

    for row in conn.execute("SELECT id, created_at, placed_by_username, billed FROM orders ORDER BY id"):
        order_id = int(row[0])
        yield Order(
            id=order_id,
            created_at=datetime.fromisoformat(row[1]),
            placed_by_username=row[2],
            lines=lines_by_order.get(order_id, []),
            billed=bool(row[3]),
        )


def _load_bills(conn: sqlite3.Connection) -> Iterable[Bill]:
    for row in conn.execute("SELECT id, order_id, issued_at, amount, artifact_name FROM bills ORDER BY id"):
        yield Bill(
            id=int(row[0]),
            order_id=int(row[1]),
            issued_at=datetime.fromisoformat(row[2]),
            amount=Decimal(row[3]),
            artifact_name=row[4],
        )


def _save_users(conn: sqlite3.Connection, users: list[User]) -> None:
    conn.execute("DELETE FROM users")
    conn.executemany(
        "INSERT INTO users (id, username, password, display_name, role) VALUES (?, ?, ?, ?, ?)",
        [(u.id, u.username, u.password, u.display_name, u.role.value) for u in users],
    )


def _save_items(conn: sqlite3.Connection, items: list[Item]) -> None:
    conn.execute("DELETE FROM items")
    conn.executemany(
        "INSERT INTO items (id, name, unit_price, quantity_on_hand, description) VALUES (?, ?, ?, ?, ?)",
        [(i.id, i.name, str(i.unit_price), i.quantity_on_hand, i.description) for i in items],
    )


def _save_orders(conn: sqlite3.Connection, orders: list[Order]) -> None:
    conn.execute("DELETE FROM order_items")
    conn.execute("DELETE FROM orders")
    for order in orders:
        conn.execute(
            "INSERT INTO orders (id, created_at, placed_by_username, billed) VALUES (?, ?, ?, ?)",
            (order.id, order.created_at.isoformat(), order.placed_by_username, int(order.billed)),
        )
        conn.executemany(
            """
            INSERT INTO order_items (order_id, line_index, item_id, quantity, unit_price_snapshot)
            VALUES (?, ?, ?, ?, ?)
            """,
            [
                (order.id, idx, line.item_id, line.quantity, str(line.unit_price_snapshot))
                for idx, line in enumerate(order.lines)
            ],
        )


def _save_bills(conn: sqlite3.Connection, bills: list[Bill]) -> None:
    conn.execute("DELETE FROM bills")
    conn.executemany(
        "INSERT INTO bills (id, order_id, issued_at, amount, artifact_name) VALUES (?, ?, ?, ?, ?)",
        [(b.id, b.order_id, b.issued_at.isoformat(), str(b.amount), b.artifact_name) for b in bills],
    )


_LOADERS = {
    RecordKind.USERS: _load_users,
    RecordKind.ITEMS: _load_items,
    RecordKind.ORDERS: _load_orders,
    RecordKind.BILLS: _load_bills,
}

_SAVERS = {
    RecordKind.USERS: _save_users,
    RecordKind.ITEMS: _save_items,
    RecordKind.ORDERS: _save_orders,
    RecordKind.BILLS: _save_bills,
}
