# database/repositories/__init__.py
"""
Repository layer public API.

Usage:
    from taj_autos.database.repositories import (
        CustomersRepo, Customer,
        PaymentsRepo, Payment,
        ProductsRepo, Product,
        PurchasesRepo, Purchase,
        ReportingRepo,
        SalesRepo, Sale, SaleItem,
        VendorsRepo, Vendor,
    )

Every repository takes the same sqlite3.Connection from
database.get_connection(); none of them opens its own.
"""

# ---------------- Customers ----------------
from .customers_repo import CustomersRepo, Customer

# ---------------- Payments -----------------
from .payments_repo import PaymentsRepo, Payment

# ---------------- Products -----------------
from .products_repo import ProductsRepo, Product

# ---------------- Purchases ----------------
from .purchases_repo import PurchasesRepo, Purchase

# ---------------- Reporting ----------------
from .reporting_repo import ReportingRepo

# ------------------ Sales ------------------
from .sales_repo import SalesRepo, Sale, SaleItem

# ----------------- Vendors -----------------
from .vendors_repo import VendorsRepo, Vendor

__all__ = [
    "CustomersRepo",
    "Customer",
    "PaymentsRepo",
    "Payment",
    "ProductsRepo",
    "Product",
    "PurchasesRepo",
    "Purchase",
    "ReportingRepo",
    "SalesRepo",
    "Sale",
    "SaleItem",
    "VendorsRepo",
    "Vendor",
]
