from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import sqlite3
from typing import Optional

from .. import transaction
from ...utils.helpers import from_iso, to_iso


@dataclass
class Payment:
    payment_id: str
    customer_id: str
    customer_name: str
    amount: float
    date: datetime
    sale_id: Optional[str] = None
    created_at: Optional[datetime] = None


_COLUMNS = "payment_id, customer_id, customer_name, amount, date, sale_id, created_at"


def _to_payment(r: sqlite3.Row) -> Payment:
    d = dict(r)
    d["date"] = from_iso(d["date"])
    d["created_at"] = from_iso(d["created_at"])
    return Payment(**d)


class PaymentsRepo:
    """
    Repository for customer payments against outstanding credit.

    Lifecycle:
      • insert(...) appends a payment; rows are never edited or deleted.
      • Decrementing Customer.total_debt is PaymentsService's job, inside
        the same transaction.
      • list_by_customer(...) and list_between(...) feed the ledger and reports.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    def get(self, payment_id: str) -> Payment | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM payments WHERE payment_id=?", (payment_id,)
        ).fetchone()
        return _to_payment(r) if r else None

    def list_payments(self) -> list[Payment]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM payments ORDER BY date DESC, payment_id DESC"
        ).fetchall()
        return [_to_payment(r) for r in rows]

    def list_by_customer(self, customer_id: str) -> list[Payment]:
        """Chronological."""
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM payments WHERE customer_id=? ORDER BY date, payment_id",
            (customer_id,),
        ).fetchall()
        return [_to_payment(r) for r in rows]

    def list_between(self, ts_from: str, ts_to: str) -> list[Payment]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM payments WHERE date >= ? AND date <= ? "
            "ORDER BY date, payment_id",
            (ts_from, ts_to),
        ).fetchall()
        return [_to_payment(r) for r in rows]

    def insert(self, p: Payment) -> None:
        with transaction(self.conn):
            self.conn.execute(
                f"INSERT INTO payments ({_COLUMNS}) VALUES (?,?,?,?,?,?,?)",
                (
                    p.payment_id,
                    p.customer_id,
                    p.customer_name,
                    p.amount,
                    to_iso(p.date),
                    p.sale_id,
                    to_iso(p.created_at or p.date),
                ),
            )
