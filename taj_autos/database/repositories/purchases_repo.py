from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
import sqlite3
from typing import Optional

from .. import transaction
from ...utils.helpers import from_iso, to_iso


@dataclass
class Purchase:
    purchase_id: str
    date: datetime
    vendor_id: str
    vendor_name: str
    product_id: str
    product_name: str
    quantity: int
    unit_price: float
    total_amount: float
    location: str
    created_at: Optional[datetime] = None


_COLUMNS = (
    "purchase_id, date, vendor_id, vendor_name, product_id, product_name, "
    "quantity, unit_price, total_amount, location, created_at"
)


def _to_purchase(r: sqlite3.Row) -> Purchase:
    d = dict(r)
    d["date"] = from_iso(d["date"])
    d["created_at"] = from_iso(d["created_at"])
    return Purchase(**d)


class PurchasesRepo:
    """
    Append-only vendor purchases. Vendor and product names are snapshotted
    on each row so history reads the same after edits or deletes.
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    def get(self, purchase_id: str) -> Purchase | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM purchases WHERE purchase_id=?", (purchase_id,)
        ).fetchone()
        return _to_purchase(r) if r else None

    def list_purchases(self) -> list[Purchase]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM purchases ORDER BY date DESC, purchase_id DESC"
        ).fetchall()
        return [_to_purchase(r) for r in rows]

    def list_by_vendor(self, vendor_id: str) -> list[Purchase]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM purchases WHERE vendor_id=? ORDER BY date DESC, purchase_id DESC",
            (vendor_id,),
        ).fetchall()
        return [_to_purchase(r) for r in rows]

    def list_by_product(self, product_id: str) -> list[Purchase]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM purchases WHERE product_id=? ORDER BY date DESC, purchase_id DESC",
            (product_id,),
        ).fetchall()
        return [_to_purchase(r) for r in rows]

    def list_between(self, ts_from: str, ts_to: str) -> list[Purchase]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM purchases WHERE date >= ? AND date <= ? "
            "ORDER BY date, purchase_id",
            (ts_from, ts_to),
        ).fetchall()
        return [_to_purchase(r) for r in rows]

    def insert(self, p: Purchase) -> None:
        with transaction(self.conn):
            self.conn.execute(
                f"INSERT INTO purchases ({_COLUMNS}) VALUES (?,?,?,?,?,?,?,?,?,?,?)",
                (
                    p.purchase_id,
                    to_iso(p.date),
                    p.vendor_id,
                    p.vendor_name,
                    p.product_id,
                    p.product_name,
                    p.quantity,
                    p.unit_price,
                    p.total_amount,
                    p.location,
                    to_iso(p.created_at or p.date),
                ),
            )
