"""Billing: the one-way transition of an order from open to billed."""

from __future__ import annotations

import logging

from bitewave.errors import AlreadyBilled, EmptyOrder, PersistenceFailure
from bitewave.models import Bill, RecordKind
from bitewave.orders import Clock, OrderLedger, utc_now
from bitewave.rendering import render_statement
from bitewave.statements import StatementArchive, statement_name

logger = logging.getLogger(__name__)


class BillingEngine:
    def __init__(self, ledger: OrderLedger, archive: StatementArchive, clock: Clock = utc_now) -> None:
        self.ledger = ledger
        self.store = ledger.store
        self.archive = archive
        self.clock = clock

    def issue_bill(self, order_id: int) -> Bill:
        """
        Bill an order exactly once.

        The statement file is written first; if that fails nothing is recorded and
        the order stays open. Otherwise the bill is stored, the order is marked
        billed and both collections are persisted in one write. When that write
        fails the bill and the billed flag are undone and the statement removed,
        so the order can be billed again.
        """
        with self.store.lock:
            order = self.ledger.get_order(order_id)
            if not order.lines:
                raise EmptyOrder("Order has no items.", details={"order_id": order_id})
            if order.billed:
                raise AlreadyBilled("Order already billed.", details={"order_id": order_id})

            amount = self.ledger.total(order)
            issued_at = self.clock()
            name = statement_name(order.id, issued_at)
            text = render_statement(order, self.ledger.order_lines(order.id), issued_at)
            self.archive.write(name, text)

            bill = Bill(
                id=self.store.allocate(RecordKind.BILLS),
                order_id=order.id,
                issued_at=issued_at,
                amount=amount,
                artifact_name=name,
            )
            self.store.put(RecordKind.BILLS, bill)
            order.billed = True
            try:
                self.store.persist(RecordKind.ORDERS, RecordKind.BILLS)
            except PersistenceFailure:
                self.store.remove(RecordKind.BILLS, bill.id)
                order.billed = False
                self.archive.discard(name)
                logger.error("Bill for order %d not recorded; order left open", order.id)
                raise

        logger.info("Issued bill %d for order %d: %s (%s)", bill.id, order.id, amount, name)
        return bill

    def list_bills(self) -> list[Bill]:
        return self.store.records(RecordKind.BILLS)

    def list_statements(self) -> list[str]:
        return self.archive.list_names()

    def read_statement(self, name: str) -> str:
        return self.archive.read(name)
