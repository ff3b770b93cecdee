from __future__ import annotations
from dataclasses import dataclass, field
from datetime import datetime
import sqlite3
from typing import Optional

from .. import transaction
from ...utils.helpers import from_iso, to_iso


@dataclass
class SaleItem:
    product_id: str
    product_name: str
    quantity: int
    price: float
    total: float


@dataclass
class Sale:
    sale_id: str
    date: datetime
    total_amount: float
    payment_type: str
    items: list[SaleItem] = field(default_factory=list)
    customer_id: Optional[str] = None
    customer_name: Optional[str] = None
    customer_contact: Optional[str] = None
    customer_address: Optional[str] = None
    created_at: Optional[datetime] = None


_HEADER_COLUMNS = (
    "sale_id, date, total_amount, payment_type, customer_id, "
    "customer_name, customer_contact, customer_address, created_at"
)


class SalesRepo:
    """
    Sales are append-only: there is an insert path and read paths, nothing else.

    Key behavior:
      - A sale is a header row in `sales` plus ordered rows in `sale_items`
        (line_no keeps the order the items were entered in).
      - Line items carry product name and unit price snapshots.
      - Stock and customer balance side effects belong to SalesService.
    """

    def __init__(self, conn: sqlite3.Connection):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---------------------------------------------------------------------
    # INTERNAL
    # ---------------------------------------------------------------------
    def _hydrate(self, headers: list[sqlite3.Row]) -> list[Sale]:
        if not headers:
            return []
        sale_ids = [h["sale_id"] for h in headers]
        placeholders = ",".join(["?"] * len(sale_ids))
        rows = self.conn.execute(
            f"""
            SELECT sale_id, product_id, product_name, quantity, price, total
            FROM sale_items
            WHERE sale_id IN ({placeholders})
            ORDER BY sale_id, line_no
            """,
            sale_ids,
        ).fetchall()

        items_by_sale: dict[str, list[SaleItem]] = {}
        for r in rows:
            items_by_sale.setdefault(r["sale_id"], []).append(
                SaleItem(
                    product_id=r["product_id"],
                    product_name=r["product_name"],
                    quantity=int(r["quantity"]),
                    price=float(r["price"]),
                    total=float(r["total"]),
                )
            )

        out: list[Sale] = []
        for h in headers:
            d = dict(h)
            d["date"] = from_iso(d["date"])
            d["created_at"] = from_iso(d["created_at"])
            out.append(Sale(items=items_by_sale.get(h["sale_id"], []), **d))
        return out

    # ---------------------------------------------------------------------
    # READ
    # ---------------------------------------------------------------------
    def get(self, sale_id: str) -> Sale | None:
        rows = self.conn.execute(
            f"SELECT {_HEADER_COLUMNS} FROM sales WHERE sale_id=?", (sale_id,)
        ).fetchall()
        sales = self._hydrate(rows)
        return sales[0] if sales else None

    def list_sales(self, limit: int | None = None) -> list[Sale]:
        """Newest first."""
        sql = f"SELECT {_HEADER_COLUMNS} FROM sales ORDER BY date DESC, sale_id DESC"
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (int(limit),)
        return self._hydrate(self.conn.execute(sql, params).fetchall())

    def list_by_customer(self, customer_id: str) -> list[Sale]:
        """Chronological."""
        rows = self.conn.execute(
            f"SELECT {_HEADER_COLUMNS} FROM sales WHERE customer_id=? ORDER BY date, sale_id",
            (customer_id,),
        ).fetchall()
        return self._hydrate(rows)

    def list_between(self, ts_from: str, ts_to: str) -> list[Sale]:
        """
        Sales with ts_from <= date <= ts_to (stored-format timestamps, inclusive).
        """
        rows = self.conn.execute(
            f"SELECT {_HEADER_COLUMNS} FROM sales WHERE date >= ? AND date <= ? "
            "ORDER BY date, sale_id",
            (ts_from, ts_to),
        ).fetchall()
        return self._hydrate(rows)

    # ---------------------------------------------------------------------
    # WRITE
    # ---------------------------------------------------------------------
    def insert(self, sale: Sale) -> None:
        with transaction(self.conn):
            self.conn.execute(
                f"INSERT INTO sales ({_HEADER_COLUMNS}) VALUES (?,?,?,?,?,?,?,?,?)",
                (
                    sale.sale_id,
                    to_iso(sale.date),
                    sale.total_amount,
                    sale.payment_type,
                    sale.customer_id,
                    sale.customer_name,
                    sale.customer_contact,
                    sale.customer_address,
                    to_iso(sale.created_at or sale.date),
                ),
            )
            self.conn.executemany(
                """
                INSERT INTO sale_items (
                    sale_id, line_no, product_id, product_name, quantity, price, total
                ) VALUES (?,?,?,?,?,?,?)
                """,
                [
                    (sale.sale_id, n, it.product_id, it.product_name, it.quantity, it.price, it.total)
                    for n, it in enumerate(sale.items, start=1)
                ],
            )
