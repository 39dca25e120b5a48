from datetime import datetime, timezone
from decimal import Decimal

import pytest

from bitewave.errors import NotFound
from bitewave.rendering import format_money
from bitewave.statements import StatementArchive, is_statement_name, statement_name


def test_statement_name_format():
    issued = datetime(2023, 12, 31, 23, 59, 1)

    assert statement_name(12, issued) == "bill_order_12_20231231_235901.txt"


def test_statement_name_uses_local_time():
    issued = datetime(2023, 12, 31, 23, 59, 1, tzinfo=timezone.utc)
    local = issued.astimezone().strftime("%Y%m%d_%H%M%S")

    assert statement_name(12, issued) == f"bill_order_12_{local}.txt"


@pytest.mark.parametrize(
    "name,expected",
    [
        ("bill_order_1_20240101_000000.txt", True),
        ("bill_order_1_20240101_000000.log", False),
        ("invoice_1.txt", False),
        ("../bill_order_1.txt", False),
    ],
)
def test_is_statement_name(name, expected):
    assert is_statement_name(name) is expected


def test_list_names_filters_and_sorts(tmp_path):
    archive = StatementArchive(tmp_path)
    archive.write("bill_order_2_20240102_090000.txt", "b")
    archive.write("bill_order_1_20240101_090000.txt", "a")
    (tmp_path / "notes.txt").write_text("ignored")

    assert archive.list_names() == [
        "bill_order_1_20240101_090000.txt",
        "bill_order_2_20240102_090000.txt",
    ]


def test_list_names_tolerates_missing_directory(tmp_path):
    assert StatementArchive(tmp_path / "nowhere").list_names() == []


def test_read_round_trips_text(tmp_path):
    archive = StatementArchive(tmp_path / "bills")
    archive.write("bill_order_3_20240101_090000.txt", "Total: Rs 1.00\n")

    assert archive.read("bill_order_3_20240101_090000.txt") == "Total: Rs 1.00\n"


def test_read_missing_statement_is_not_found(tmp_path):
    archive = StatementArchive(tmp_path)

    with pytest.raises(NotFound):
        archive.read("bill_order_9_20240101_090000.txt")
    with pytest.raises(NotFound):
        archive.read("../secrets.txt")


@pytest.mark.parametrize(
    "amount,expected",
    [
        (Decimal("25"), "Rs 25.00"),
        (Decimal("0.125"), "Rs 0.13"),
        (Decimal("3.5"), "Rs 3.50"),
        (Decimal("1E+30"), "Rs 1000000000000000000000000000000.00"),
    ],
)
def test_format_money(amount, expected):
    assert format_money(amount) == expected


def test_discard_removes_statement(tmp_path):
    archive = StatementArchive(tmp_path)
    archive.write("bill_order_4_20240101_090000.txt", "x")

    archive.discard("bill_order_4_20240101_090000.txt")
    archive.discard("bill_order_4_20240101_090000.txt")

    assert archive.list_names() == []
