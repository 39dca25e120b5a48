"""Order lifecycle: creation, line editing with price snapshots, deletion."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from decimal import Decimal
from typing import Callable

from bitewave.catalog import Catalog, parse_whole_number
from bitewave.directory import Directory
from bitewave.errors import AlreadyBilled, NotFound, ValidationError
from bitewave.models import Order, OrderItem, OrderLineView, OrderSummary, RecordKind
from bitewave.record_store import RecordStore

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def total(order: Order) -> Decimal:
    """Sum of quantity x snapshot price over the order's lines."""
    return order.total


def _positive_quantity(value: str | int) -> int:
    quantity = parse_whole_number(value, "quantity", "Invalid qty.")
    if quantity <= 0:
        raise ValidationError("Invalid qty.", details={"quantity": value})
    return quantity


class OrderLedger:
    """
    Owns orders and their lines.

    Lines are addressed by zero-based index in the order they were added. A billed
    order is frozen: every line mutation and deletion raises AlreadyBilled.
    """

    def __init__(
        self,
        store: RecordStore,
        catalog: Catalog,
        directory: Directory,
        clock: Clock = utc_now,
    ) -> None:
        self.store = store
        self.catalog = catalog
        self.directory = directory
        self.clock = clock

    def get_order(self, order_id: int) -> Order:
        order = self.store.get(RecordKind.ORDERS, order_id)
        if order is None:
            raise NotFound(f"Order {order_id} not found", details={"order_id": order_id})
        return order

    def list_orders(self) -> list[Order]:
        return self.store.records(RecordKind.ORDERS)

    def _open_order(self, order_id: int) -> Order:
        order = self.get_order(order_id)
        if order.billed:
            raise AlreadyBilled(f"Order {order_id} already billed.", details={"order_id": order_id})
        return order

    @staticmethod
    def _line_index(order: Order, value: str | int) -> int:
        line_index = parse_whole_number(value, "line_index", f"Order {order.id} has no line {value!r}")
        if not (0 <= line_index < len(order.lines)):
            raise ValidationError(
                f"Order {order.id} has no line {line_index}",
                details={"order_id": order.id, "line_index": line_index},
            )
        return line_index

    def create_order(self, placed_by_username: str) -> Order:
        """Start an empty, unbilled order placed by a staff member."""
        if self.directory.count_staff() == 0:
            raise ValidationError("No employees exist. Create one before placing orders.")
        if not placed_by_username:
            raise ValidationError("Select the employee who places the order.")

        with self.store.lock:
            order = Order(
                id=self.store.allocate(RecordKind.ORDERS),
                created_at=self.clock(),
                placed_by_username=placed_by_username,
            )
            self.store.put(RecordKind.ORDERS, order)
            self.store.persist(RecordKind.ORDERS)
        logger.info("Created order %d placed by %r", order.id, placed_by_username)
        return order

    def add_or_update_line(self, order_id: int, item_id: int, quantity_delta: str | int) -> OrderItem:
        """
        Add quantity of an item to an order.

        An existing line for the item accumulates quantity and keeps the price it
        was first added at. Otherwise a new line snapshots the current catalog price.
        """
        quantity_delta = _positive_quantity(quantity_delta)

        with self.store.lock:
            order = self._open_order(order_id)
            line = order.line_for_item(item_id)
            if line is not None:
                line.quantity += quantity_delta
            else:
                item = self.catalog.find_item(item_id)
                if item is None:
                    raise ValidationError(f"Item {item_id} is not in the catalog", details={"item_id": item_id})
                line = OrderItem(item_id=item_id, quantity=quantity_delta, unit_price_snapshot=item.unit_price)
                order.lines.append(line)
            self.store.persist(RecordKind.ORDERS)

        logger.info("Order %d: item %d now x%d", order_id, item_id, line.quantity)
        return line

    def set_line_quantity(self, order_id: int, line_index: str | int, new_quantity: str | int) -> OrderItem:
        new_quantity = _positive_quantity(new_quantity)

        with self.store.lock:
            order = self._open_order(order_id)
            line_index = self._line_index(order, line_index)
            line = order.lines[line_index]
            line.quantity = new_quantity
            self.store.persist(RecordKind.ORDERS)
        return line

    def remove_line(self, order_id: int, line_index: str | int) -> OrderItem:
        with self.store.lock:
            order = self._open_order(order_id)
            line_index = self._line_index(order, line_index)
            line = order.lines.pop(line_index)
            self.store.persist(RecordKind.ORDERS)
        logger.info("Order %d: removed line %d (item %d)", order_id, line_index, line.item_id)
        return line

    def total(self, order: Order) -> Decimal:
        return total(order)

    def delete_order(self, order_id: int) -> None:
        with self.store.lock:
            self._open_order(order_id)
            self.store.remove(RecordKind.ORDERS, order_id)
            self.store.persist(RecordKind.ORDERS)
        logger.info("Deleted order %d", order_id)

    def order_lines(self, order_id: int) -> list[OrderLineView]:
        """Display rows for an order, numbered from 1."""
        order = self.get_order(order_id)
        return [
            OrderLineView(
                number=idx,
                item_id=line.item_id,
                name=self.catalog.display_name(line.item_id),
                quantity=line.quantity,
                unit_price=line.unit_price_snapshot,
                subtotal=line.subtotal,
            )
            for idx, line in enumerate(order.lines, start=1)
        ]

    def order_summaries(self) -> list[OrderSummary]:
        return [
            OrderSummary(
                order_id=order.id,
                placed_by_username=order.placed_by_username,
                created_at=order.created_at,
                line_count=len(order.lines),
                billed=order.billed,
                total=order.total,
            )
            for order in self.list_orders()
        ]
