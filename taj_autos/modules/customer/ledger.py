from __future__ import annotations

import sqlite3
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List

from ...database.repositories import (
    Customer,
    CustomersRepo,
    PaymentsRepo,
    ReportingRepo,
    SalesRepo,
)
from ...utils.helpers import money

KIND_SALE = "sale"
KIND_PAYMENT = "payment"

# sales sort ahead of payments stamped with the same instant
_KIND_ORDER = {KIND_SALE: 0, KIND_PAYMENT: 1}


@dataclass
class LedgerEntry:
    date: datetime
    kind: str
    reference: str
    description: str
    debit: float
    credit: float
    balance: float


@dataclass
class CustomerStatement:
    customer: Customer
    entries: List[LedgerEntry] = field(default_factory=list)

    @property
    def closing_balance(self) -> float:
        return self.entries[-1].balance if self.entries else 0.0

    @property
    def total_debit(self) -> float:
        return money(sum(e.debit for e in self.entries))

    @property
    def total_credit(self) -> float:
        return money(sum(e.credit for e in self.entries))

    @property
    def matches_stored_balance(self) -> bool:
        return money(self.closing_balance) == money(self.customer.total_debt)


class CreditLedgerService:
    """
    Presenter/service for a customer's credit statement.

    Pulls data from:
      - sales with a matching customer_id (each one a debit of total_amount)
      - payments with a matching customer_id (each one a credit of amount)

    The running balance is derived from history alone; it never reads or
    writes customers.total_debt. reconcile() puts the two side by side.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.customers = CustomersRepo(conn)
        self.sales = SalesRepo(conn)
        self.payments = PaymentsRepo(conn)
        self.reporting = ReportingRepo(conn)

    def statement(self, customer_id: str) -> CustomerStatement:
        customer = self.customers.require(customer_id)

        raw: list[tuple[datetime, str, str, str, float, float]] = []
        for s in self.sales.list_by_customer(customer_id):
            n = len(s.items)
            raw.append(
                (s.date, KIND_SALE, s.sale_id, f"Sale - {n} item{'s' if n != 1 else ''}",
                 s.total_amount, 0.0)
            )
        for p in self.payments.list_by_customer(customer_id):
            raw.append((p.date, KIND_PAYMENT, p.payment_id, "Payment Received", 0.0, p.amount))

        raw.sort(key=lambda r: (r[0], _KIND_ORDER[r[1]], r[2]))

        entries: list[LedgerEntry] = []
        balance = 0.0
        for date, kind, ref, desc, debit, credit in raw:
            balance = money(balance + debit - credit)
            entries.append(LedgerEntry(date, kind, ref, desc, debit, credit, balance))
        return CustomerStatement(customer=customer, entries=entries)

    def reconcile(self, customer_id: str) -> Dict[str, Any]:
        """
        Compare the stored balance with the ledger and with raw history sums.

        Returns:
          - 'stored':     customers.total_debt
          - 'ledger':     closing running balance of statement()
          - 'history':    sum(credit sales) - sum(payments)
          - 'difference': stored - ledger (0.0 when consistent)
          - 'consistent': bool
        """
        stmt = self.statement(customer_id)
        totals = self.reporting.customer_history_totals(customer_id)
        stored = money(stmt.customer.total_debt)
        ledger = money(stmt.closing_balance)
        history = money(totals["debits"] - totals["credits"])
        return {
            "stored": stored,
            "ledger": ledger,
            "history": history,
            "difference": money(stored - ledger),
            "consistent": stored == ledger == history,
        }
