# taj_autos/database/repositories/reporting_repo.py
from __future__ import annotations

import sqlite3
from typing import Any, Optional


def _to_float(x: Optional[Any]) -> float:
    try:
        return float(x or 0.0)
    except (TypeError, ValueError):
        return 0.0


class ReportingRepo:
    """
    Read-only aggregate queries for reports and the dashboard.

    Notes on date handling:
      • Bounds are stored-format timestamps ('YYYY-MM-DDTHH:MM:SS.ffffff'),
        built by utils.helpers.day_bounds(); both ends are inclusive.
      • Columns are compared directly (no DATE() wrapper) so the date indexes
        stay usable.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self.conn = conn
        self.conn.row_factory = sqlite3.Row

    def _scalar(self, sql: str, params: tuple) -> float:
        row = self.conn.execute(sql, params).fetchone()
        return _to_float(row[0] if row else None)

    def sales_total(self, ts_from: str, ts_to: str) -> float:
        return self._scalar(
            "SELECT COALESCE(SUM(total_amount), 0.0) FROM sales WHERE date >= ? AND date <= ?",
            (ts_from, ts_to),
        )

    def sales_total_by_type(self, ts_from: str, ts_to: str) -> dict[str, float]:
        rows = self.conn.execute(
            """
            SELECT payment_type, COALESCE(SUM(total_amount), 0.0) AS total
            FROM sales
            WHERE date >= ? AND date <= ?
            GROUP BY payment_type
            """,
            (ts_from, ts_to),
        ).fetchall()
        out = {"cash": 0.0, "credit": 0.0}
        for r in rows:
            out[r["payment_type"]] = _to_float(r["total"])
        return out

    def customer_history_totals(self, customer_id: str) -> dict[str, float]:
        """
        Credit sales and payments summed straight from history, used to
        reconcile against customers.total_debt.
        """
        debits = self._scalar(
            "SELECT COALESCE(SUM(total_amount), 0.0) FROM sales "
            "WHERE customer_id = ? AND payment_type = 'credit'",
            (customer_id,),
        )
        credits = self._scalar(
            "SELECT COALESCE(SUM(amount), 0.0) FROM payments WHERE customer_id = ?",
            (customer_id,),
        )
        return {"debits": debits, "credits": credits}
