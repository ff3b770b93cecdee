from __future__ import annotations

import logging
import sqlite3
from datetime import datetime
from typing import Optional

from ...constants import LOCATION_SHELF, LOCATIONS
from ...database import transaction
from ...database.repositories import ProductsRepo, Purchase, PurchasesRepo, VendorsRepo
from ...errors import ValidationError
from ...utils.helpers import money, new_id, now
from ...utils.validators import require_amount, require_count

_log = logging.getLogger(__name__)


class PurchasingService:
    """
    Records stock bought from vendors.

    A purchase adds `quantity` units to exactly one of the product's two
    counters (shelf or store); there is no upper limit on stock.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.vendors = VendorsRepo(conn)
        self.products = ProductsRepo(conn)
        self.purchases = PurchasesRepo(conn)

    def record_purchase(
        self,
        vendor_id: str,
        product_id: str,
        quantity: int,
        unit_price: float,
        location: str,
        *,
        date: Optional[datetime] = None,
    ) -> Purchase:
        try:
            with transaction(self.conn):
                vendor = self.vendors.require(vendor_id)
                product = self.products.require(product_id)
                qty = require_count(quantity, "Quantity", positive=True)
                price = require_amount(unit_price, "Unit price")
                if location not in LOCATIONS:
                    raise ValidationError("Location must be shelf or store.")

                ts = date or now()
                purchase = Purchase(
                    purchase_id=new_id(),
                    date=ts,
                    vendor_id=vendor.vendor_id,
                    vendor_name=vendor.name,
                    product_id=product.product_id,
                    product_name=product.name,
                    quantity=qty,
                    unit_price=price,
                    total_amount=money(qty * price),
                    location=location,
                    created_at=now(),
                )
                self.purchases.insert(purchase)
                if location == LOCATION_SHELF:
                    self.products.adjust_stock(product.product_id, qty, 0)
                else:
                    self.products.adjust_stock(product.product_id, 0, qty)
        except ValidationError as e:
            _log.warning("purchase rejected: %s", e)
            raise

        _log.info(
            "purchase %s committed: %d x %s from %s into %s",
            purchase.purchase_id, qty, product.name, vendor.name, location,
        )
        return purchase

    def purchases_for_vendor(self, vendor_id: str) -> list[Purchase]:
        return self.purchases.list_by_vendor(vendor_id)

    def purchases_for_product(self, product_id: str) -> list[Purchase]:
        return self.purchases.list_by_product(product_id)
