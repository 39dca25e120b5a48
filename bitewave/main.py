"""Command-line entry point: print a summary of the restaurant's records."""

from __future__ import annotations

import argparse
import logging

from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from bitewave.errors import BiteWaveError
from bitewave.rendering import format_money, format_timestamp
from bitewave.session import Restaurant


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(rich_tracebacks=True, show_path=False)],
    )


def build_orders_table(restaurant: Restaurant) -> Table:
    table = Table(title="Orders")
    for column in ("OrderID", "PlacedBy", "Date", "Items", "Billed", "Total"):
        table.add_column(column)
    for summary in restaurant.orders.order_summaries():
        table.add_row(
            str(summary.order_id),
            summary.placed_by_username,
            format_timestamp(summary.created_at),
            str(summary.line_count),
            "yes" if summary.billed else "no",
            format_money(summary.total),
        )
    return table


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="bitewave", description="Restaurant records summary")
    parser.add_argument("--data-dir", help="directory holding bitewave.db and bills/")
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    configure_logging(args.verbose)
    console = Console()

    try:
        restaurant = Restaurant.open(args.data_dir)
    except BiteWaveError as exc:
        console.print(f"[red]{exc.message}[/red]")
        return 1

    try:
        stats = restaurant.dashboard_stats()
        console.print(
            f"[bold]Employees[/bold] {stats.staff}  [bold]Items[/bold] {stats.items}  "
            f"[bold]Orders[/bold] {stats.orders}  [bold]Bills[/bold] {stats.bills}"
        )
        console.print(build_orders_table(restaurant))

        statements = restaurant.billing.list_statements()
        console.print("Bills:" if statements else "No bills yet.")
        for name in statements:
            console.print(f"  {name}", markup=False)
    finally:
        restaurant.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
