from __future__ import annotations

import logging
import sqlite3

from ...constants import LOCATION_SHELF, LOCATION_STORE, LOCATIONS
from ...database import transaction
from ...database.repositories import Product, ProductsRepo
from ...errors import ValidationError
from ...utils.validators import require_count

_log = logging.getLogger(__name__)


class InventoryService:
    """Stock movements that are not sales or purchases."""

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.products = ProductsRepo(conn)

    def transfer(self, product_id: str, source: str, quantity: int) -> Product:
        """
        Move `quantity` units from `source` ('shelf' or 'store') to the other
        location. Total stock is unchanged.
        """
        try:
            with transaction(self.conn):
                if source not in LOCATIONS:
                    raise ValidationError("Source must be shelf or store.")
                qty = require_count(quantity, "Quantity", positive=True)
                product = self.products.require(product_id)
                available = product.shelf_stock if source == LOCATION_SHELF else product.store_stock
                if qty > available:
                    raise ValidationError(f"Not enough stock in {source}.")

                if source == LOCATION_SHELF:
                    self.products.adjust_stock(product_id, -qty, qty)
                else:
                    self.products.adjust_stock(product_id, qty, -qty)
        except ValidationError as e:
            _log.warning("transfer rejected: %s", e)
            raise

        dest = LOCATION_STORE if source == LOCATION_SHELF else LOCATION_SHELF
        _log.info("transferred %d x %s from %s to %s", qty, product.name, source, dest)
        return self.products.get(product_id)

    def low_stock(self, limit: int | None = None) -> list[Product]:
        return self.products.low_stock(limit)
