"""Domain models for the restaurant record store."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum


class RecordKind(str, Enum):
    """The four identity-keyed collections held by the record store."""

    USERS = "users"
    ITEMS = "items"
    ORDERS = "orders"
    BILLS = "bills"


class Role(str, Enum):
    ADMINISTRATOR = "administrator"
    STAFF = "staff"

    @property
    def label(self) -> str:
        """Human-facing role name."""
        match self:
            case Role.ADMINISTRATOR:
                return "Admin"
            case Role.STAFF:
                return "Employee"
        raise ValueError(self)


@dataclass
class User:
    """An administrator or staff account."""

    id: int
    username: str
    password: str
    display_name: str
    role: Role = Role.STAFF

    @property
    def is_administrator(self) -> bool:
        return self.role is Role.ADMINISTRATOR

    def __str__(self) -> str:
        return f"{self.display_name} ({self.username}) - {self.role.label}"


@dataclass
class Item:
    """A menu catalog entry."""

    id: int
    name: str
    unit_price: Decimal
    quantity_on_hand: int
    description: str = ""


@dataclass
class OrderItem:
    """A line of an order with the unit price captured when it was added."""

    item_id: int
    quantity: int
    unit_price_snapshot: Decimal

    @property
    def subtotal(self) -> Decimal:
        return self.quantity * self.unit_price_snapshot


@dataclass
class Order:
    """A customer order; lines keep the order they were added in."""

    id: int
    created_at: datetime
    placed_by_username: str
    lines: list[OrderItem] = field(default_factory=list)
    billed: bool = False

    @property
    def total(self) -> Decimal:
        return sum((line.subtotal for line in self.lines), Decimal("0"))

    def line_for_item(self, item_id: int) -> OrderItem | None:
        for line in self.lines:
            if line.item_id == item_id:
                return line
        return None


@dataclass(frozen=True)
class Bill:
    """An issued bill. Created once per order and never changed."""

    id: int
    order_id: int
    issued_at: datetime
    amount: Decimal
    artifact_name: str


@dataclass(frozen=True)
class OrderLineView:
    """Display row for one order line."""

    number: int
    item_id: int
    name: str
    quantity: int
    unit_price: Decimal
    subtotal: Decimal


@dataclass(frozen=True)
class OrderSummary:
    """Display row for one order in the orders listing."""

    order_id: int
    placed_by_username: str
    created_at: datetime
    line_count: int
    billed: bool
    total: Decimal


Record = User | Item | Order | Bill
