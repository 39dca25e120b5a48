"""Menu catalog: items with price, stock quantity and description."""

from __future__ import annotations

import logging
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation

from bitewave.config import PLACEHOLDER_ITEM_NAME
from bitewave.errors import NotFound, ValidationError
from bitewave.models import Item, RecordKind
from bitewave.record_store import RecordStore

logger = logging.getLogger(__name__)


_CENT = Decimal("0.01")


def parse_whole_number(value: str | int, field: str, message: str = "Invalid number.") -> int:
    """Parse an integer from form input or an int. Floats and bools are refused."""
    if isinstance(value, bool) or not isinstance(value, (int, str)):
        raise ValidationError(message, details={field: value})
    try:
        return int(str(value).strip())
    except ValueError as exc:
        raise ValidationError(message, details={field: value}) from exc


def parse_price(value: str | int | float | Decimal) -> Decimal:
    """Parse a non-negative price from form input or a number, rounded to cents."""
    if isinstance(value, bool):
        raise ValidationError("Invalid price/qty.", details={"price": value})
    try:
        price = Decimal(str(value).strip())
        if not price.is_finite() or price < 0:
            raise ValidationError("Invalid price/qty.", details={"price": value})
        # Prices too large to carry two decimals in the default context are refused.
        return price.quantize(_CENT, rounding=ROUND_HALF_UP)
    except (InvalidOperation, ValueError) as exc:
        raise ValidationError("Invalid price/qty.", details={"price": value}) from exc


def parse_quantity(value: str | int) -> int:
    """Parse a non-negative whole quantity from form input or a number."""
    quantity = parse_whole_number(value, "quantity", "Invalid price/qty.")
    if quantity < 0:
        raise ValidationError("Invalid price/qty.", details={"quantity": value})
    return quantity


def placeholder_name(item_id: int) -> str:
    return PLACEHOLDER_ITEM_NAME.format(item_id=item_id)


class Catalog:
    def __init__(self, store: RecordStore) -> None:
        self.store = store

    def _validated(
        self,
        name: str,
        price: str | int | float | Decimal,
        quantity: str | int,
        description: str,
    ) -> tuple[str, Decimal, int, str]:
        name = name.strip()
        if not name:
            raise ValidationError("Name required.")
        return name, parse_price(price), parse_quantity(quantity), (description or "").strip()

    def create_item(
        self,
        name: str,
        price: str | int | float | Decimal,
        quantity: str | int = 0,
        description: str = "",
    ) -> Item:
        name, unit_price, quantity_on_hand, description = self._validated(name, price, quantity, description)
        with self.store.lock:
            item = Item(
                id=self.store.allocate(RecordKind.ITEMS),
                name=name,
                unit_price=unit_price,
                quantity_on_hand=quantity_on_hand,
                description=description,
            )
            self.store.put(RecordKind.ITEMS, item)
            self.store.persist(RecordKind.ITEMS)
        logger.info("Created item %d %r at %s", item.id, item.name, item.unit_price)
        return item

    def edit_item(
        self,
        item_id: int,
        name: str,
        price: str | int | float | Decimal,
        quantity: str | int,
        description: str = "",
    ) -> Item:
        """Overwrite every mutable field of an item."""
        with self.store.lock:
            item = self.get_item(item_id)
            item.name, item.unit_price, item.quantity_on_hand, item.description = self._validated(
                name, price, quantity, description
            )
            self.store.persist(RecordKind.ITEMS)
        logger.info("Edited item %d", item_id)
        return item

    def delete_item(self, item_id: int) -> None:
        """Remove an item. Order lines that reference it keep their snapshot."""
        with self.store.lock:
            removed = self.store.remove(RecordKind.ITEMS, item_id)
            self.store.persist(RecordKind.ITEMS)
        if removed is not None:
            logger.info("Deleted item %d %r", item_id, removed.name)

    def find_item(self, item_id: int) -> Item | None:
        return self.store.get(RecordKind.ITEMS, item_id)

    def get_item(self, item_id: int) -> Item:
        item = self.find_item(item_id)
        if item is None:
            raise NotFound(f"Item {item_id} not found", details={"item_id": item_id})
        return item

    def display_name(self, item_id: int) -> str:
        """Item name, or a placeholder when the item no longer exists."""
        item = self.find_item(item_id)
        if item is None:
            return placeholder_name(item_id)
        return item.name

    def list_items(self) -> list[Item]:
        return self.store.records(RecordKind.ITEMS)
