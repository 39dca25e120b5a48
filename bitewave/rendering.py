"""Rendering helpers for money amounts and bill statements."""

from __future__ import annotations

import io
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, localcontext

from rich import box
from rich.console import Console
from rich.table import Table

from bitewave.config import CURRENCY_SYMBOL, STATEMENT_WIDTH
from bitewave.models import Order, OrderLineView

_CENT = Decimal("0.01")
DISPLAY_TIME_FORMAT = "%Y-%m-%d %H:%M"


def format_money(amount: Decimal) -> str:
    """Render an amount with the currency symbol and two decimals."""
    with localcontext() as ctx:
        # Enough digits for every whole-number digit plus the cents.
        ctx.prec = max(ctx.prec, amount.adjusted() + 3)
        return f"{CURRENCY_SYMBOL} {amount.quantize(_CENT, rounding=ROUND_HALF_UP)}"


def format_timestamp(value: datetime) -> str:
    """Local-time display form of an instant."""
    return value.astimezone().strftime(DISPLAY_TIME_FORMAT)


def _plain_console(width: int) -> Console:
    return Console(
        file=io.StringIO(),
        width=width,
        record=True,
        color_system=None,
        force_terminal=False,
        markup=False,
        emoji=False,
        highlight=False,
    )


def build_lines_table(rows: list[OrderLineView]) -> Table:
    """Itemized table of order lines."""
    table = Table(box=box.ASCII, show_edge=False, pad_edge=False)
    table.add_column("No", justify="right")
    table.add_column("Name")
    table.add_column("Qty", justify="right")
    table.add_column("Price", justify="right")
    table.add_column("Subtotal", justify="right")
    for row in rows:
        table.add_row(
            str(row.number),
            row.name,
            str(row.quantity),
            format_money(row.unit_price),
            format_money(row.subtotal),
        )
    return table


def render_statement(order: Order, rows: list[OrderLineView], issued_at: datetime) -> str:
    """Plain-text bill statement for an order."""
    console = _plain_console(STATEMENT_WIDTH)
    console.print("====== RESTAURANT BILL ======")
    console.print(f"Order ID: {order.id}")
    console.print(f"Placed by: {order.placed_by_username}")
    console.print(f"Date: {format_timestamp(issued_at)}")
    console.print()
    console.print(build_lines_table(rows))
    console.print("-" * 33)
    console.print(f"Total: {format_money(order.total)}")
    console.print()
    console.print("Thank you!")
    return console.export_text()
