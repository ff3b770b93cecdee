from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Union

from ...constants import DASHBOARD_LOW_STOCK_LIMIT, DEFAULT_REPORT_DAYS
from ...database.repositories import (
    CustomersRepo,
    Payment,
    PaymentsRepo,
    Product,
    ProductsRepo,
    Purchase,
    PurchasesRepo,
    ReportingRepo,
    Sale,
    SalesRepo,
)
from ...errors import ValidationError
from ...utils.helpers import day_bounds, default_report_window, money, parse_date

_log = logging.getLogger(__name__)

DateLike = Union[str, date]


@dataclass
class PeriodReport:
    """
    Sales, purchases and collections for an inclusive date window.

    profit is revenue minus purchase spend in the same window. It is not
    matched cost of goods sold: stock bought in the window but not yet sold
    still counts as cost.
    """
    start: date
    end: date
    sales: List[Sale] = field(default_factory=list)
    purchases: List[Purchase] = field(default_factory=list)
    payments: List[Payment] = field(default_factory=list)
    total_revenue: float = 0.0
    cash_revenue: float = 0.0
    credit_revenue: float = 0.0
    total_cost: float = 0.0
    profit: float = 0.0
    total_collections: float = 0.0


@dataclass
class DashboardSummary:
    total_products: int
    low_stock_count: int
    low_stock_items: List[Product]
    today_sales: float
    total_outstanding: float


class ReportingService:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.repo = ReportingRepo(conn)
        self.sales = SalesRepo(conn)
        self.purchases = PurchasesRepo(conn)
        self.payments = PaymentsRepo(conn)
        self.products = ProductsRepo(conn)
        self.customers = CustomersRepo(conn)

    @staticmethod
    def default_window(today: Optional[date] = None) -> tuple[date, date]:
        """Last DEFAULT_REPORT_DAYS days up to and including today."""
        return default_report_window(DEFAULT_REPORT_DAYS, today)

    def period_report(self, start: DateLike, end: DateLike) -> PeriodReport:
        try:
            d_from, d_to = parse_date(start), parse_date(end)
        except ValueError as e:
            raise ValidationError("Dates must be in YYYY-MM-DD format.") from e
        if d_from > d_to:
            raise ValidationError("Start date must be on or before end date.")

        lo, hi = day_bounds(d_from, d_to)
        sales = self.sales.list_between(lo, hi)
        purchases = self.purchases.list_between(lo, hi)
        payments = self.payments.list_between(lo, hi)

        revenue = money(sum(s.total_amount for s in sales))
        by_type = self.repo.sales_total_by_type(lo, hi)
        cost = money(sum(p.total_amount for p in purchases))
        collections = money(sum(p.amount for p in payments))

        _log.debug("report %s..%s: %d sales, %d purchases, %d payments",
                   d_from, d_to, len(sales), len(purchases), len(payments))
        return PeriodReport(
            start=d_from,
            end=d_to,
            sales=sales,
            purchases=purchases,
            payments=payments,
            total_revenue=revenue,
            cash_revenue=money(by_type["cash"]),
            credit_revenue=money(by_type["credit"]),
            total_cost=cost,
            profit=money(revenue - cost),
            total_collections=collections,
        )

    def dashboard(self, today: Optional[date] = None) -> DashboardSummary:
        day = today or date.today()
        lo, hi = day_bounds(day, day)
        low = self.products.low_stock()
        return DashboardSummary(
            total_products=self.products.count(),
            low_stock_count=len(low),
            low_stock_items=low[:DASHBOARD_LOW_STOCK_LIMIT],
            today_sales=money(self.repo.sales_total(lo, hi)),
            total_outstanding=self.customers.total_outstanding(),
        )
