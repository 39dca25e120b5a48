from decimal import Decimal

import pytest

from bitewave.errors import NotFound, ValidationError
from bitewave.session import Restaurant


def test_create_item_parses_form_input(restaurant):
    item = restaurant.catalog.create_item(" Lassi ", "3.5", "12", " Sweet ")

    assert item.name == "Lassi"
    assert item.unit_price == Decimal("3.5")
    assert item.quantity_on_hand == 12
    assert item.description == "Sweet"


@pytest.mark.parametrize(
    "name,price,quantity",
    [
        ("", "1.00", 1),
        ("Tea", "abc", 1),
        ("Tea", "-1", 1),
        ("Tea", "NaN", 1),
        ("Tea", "1e30", 1),
        ("Tea", "Infinity", 1),
        ("Tea", True, 1),
        ("Tea", "1.00", "two"),
        ("Tea", "1.00", -3),
        ("Tea", "1.00", "1.5"),
    ],
)
def test_create_item_rejects_bad_input(restaurant, name, price, quantity):
    with pytest.raises(ValidationError):
        restaurant.catalog.create_item(name, price, quantity)

    assert restaurant.catalog.list_items() == []


def test_price_is_stored_rounded_to_cents(restaurant):
    item = restaurant.catalog.create_item("Chai", "3.456", 1)

    assert item.unit_price == Decimal("3.46")
    assert str(item.unit_price) == "3.46"


def test_largest_accepted_price_can_be_billed(restaurant):
    item = restaurant.catalog.create_item("Caviar", "1e25", 1000)
    order = restaurant.orders.create_order("sam")
    restaurant.orders.add_or_update_line(order.id, item.id, 1000)

    bill = restaurant.billing.issue_bill(order.id)

    assert bill.amount == Decimal("1e28")
    assert "Total: Rs 10000000000000000000000000000.00" in restaurant.billing.read_statement(bill.artifact_name)


def test_item_ids_increase_and_listing_is_sorted(restaurant):
    a = restaurant.catalog.create_item("A", 1, 0)
    b = restaurant.catalog.create_item("B", 2, 0)
    restaurant.catalog.delete_item(a.id)
    c = restaurant.catalog.create_item("C", 3, 0)

    assert a.id < b.id < c.id
    assert [item.name for item in restaurant.catalog.list_items()] == ["B", "C"]


def test_edit_item_overwrites_fields(restaurant, menu):
    burger, _ = menu

    restaurant.catalog.edit_item(burger.id, "Cheeseburger", "12.25", "8", "With cheese")

    item = restaurant.catalog.get_item(burger.id)
    assert (item.name, item.unit_price, item.quantity_on_hand, item.description) == (
        "Cheeseburger",
        Decimal("12.25"),
        8,
        "With cheese",
    )


def test_edit_item_validates_and_keeps_old_values(restaurant, menu):
    burger, _ = menu

    with pytest.raises(ValidationError):
        restaurant.catalog.edit_item(burger.id, "Burger", "free", 1)

    assert restaurant.catalog.get_item(burger.id).unit_price == Decimal("10.00")


def test_edit_missing_item_is_not_found(restaurant):
    with pytest.raises(NotFound):
        restaurant.catalog.edit_item(404, "X", 1, 1)


def test_display_name_uses_placeholder_for_deleted_item(restaurant, menu):
    burger, _ = menu

    restaurant.catalog.delete_item(burger.id)

    assert restaurant.catalog.display_name(burger.id) == f"Item#{burger.id}"
    with pytest.raises(NotFound):
        restaurant.catalog.get_item(burger.id)


def test_items_survive_reopen(restaurant, menu, data_dir, clock):
    reopened = Restaurant.open(data_dir, clock=clock)

    assert [(i.name, i.unit_price) for i in reopened.catalog.list_items()] == [
        ("Burger", Decimal("10.00")),
        ("Fries", Decimal("5.00")),
    ]
