# taj_autos/database/repositories/products_repo.py
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
import sqlite3

from .. import transaction
from ...errors import ValidationError
from ...utils.helpers import from_iso, money, new_id, now, to_iso
from ...utils.validators import require_count, require_non_negative, require_text


@dataclass
class Product:
    product_id: str
    name: str
    model: str
    purchase_price: float
    selling_price: float
    shelf_stock: int
    store_stock: int
    min_stock_level: int
    created_at: datetime
    updated_at: datetime

    @property
    def total_stock(self) -> int:
        return self.shelf_stock + self.store_stock

    @property
    def is_low_stock(self) -> bool:
        """Derived only; never stored."""
        return self.total_stock < self.min_stock_level


_COLUMNS = (
    "product_id, name, model, purchase_price, selling_price, "
    "shelf_stock, store_stock, min_stock_level, created_at, updated_at"
)


def _to_product(r: sqlite3.Row) -> Product:
    d = dict(r)
    d["created_at"] = from_iso(d["created_at"])
    d["updated_at"] = from_iso(d["updated_at"])
    return Product(**d)


class ProductsRepo:
    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        # Use Row for named access; we normalize to dataclasses on the way out.
        self.conn.row_factory = sqlite3.Row

    # ---------------------------- Validation ----------------------------

    @staticmethod
    def _clean(
        name: str,
        model: str,
        purchase_price: float,
        selling_price: float,
        shelf_stock: int,
        store_stock: int,
        min_stock_level: int,
    ) -> tuple:
        return (
            require_text(name, "Product name"),
            require_text(model, "Car model"),
            money(require_non_negative(purchase_price, "Purchase price")),
            money(require_non_negative(selling_price, "Selling price")),
            require_count(shelf_stock, "Shelf stock"),
            require_count(store_stock, "Store stock"),
            require_count(min_stock_level, "Minimum stock level"),
        )

    # ---------------------------- Queries ----------------------------

    def list_products(self) -> list[Product]:
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products ORDER BY created_at DESC, product_id DESC"
        ).fetchall()
        return [_to_product(r) for r in rows]

    def get(self, product_id: str) -> Product | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products WHERE product_id=?",
            (product_id,),
        ).fetchone()
        return _to_product(r) if r else None

    def require(self, product_id: str) -> Product:
        p = self.get(product_id) if product_id else None
        if p is None:
            raise ValidationError("Please select a valid product.")
        return p

    def search(self, term: str) -> list[Product]:
        """
        Case-insensitive match on name, id or car model.
        """
        pattern = f"%{(term or '').strip().lower()}%"
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM products "
            "WHERE lower(name) LIKE ? OR lower(product_id) LIKE ? OR lower(model) LIKE ? "
            "ORDER BY created_at DESC, product_id DESC",
            (pattern, pattern, pattern),
        ).fetchall()
        return [_to_product(r) for r in rows]

    def low_stock(self, limit: int | None = None) -> list[Product]:
        """Products whose shelf+store total is below their minimum level."""
        sql = (
            f"SELECT {_COLUMNS} FROM products "
            "WHERE shelf_stock + store_stock < min_stock_level "
            "ORDER BY (shelf_stock + store_stock) - min_stock_level, name"
        )
        params: tuple = ()
        if limit is not None:
            sql += " LIMIT ?"
            params = (int(limit),)
        return [_to_product(r) for r in self.conn.execute(sql, params).fetchall()]

    def count(self) -> int:
        return int(self.conn.execute("SELECT COUNT(*) FROM products").fetchone()[0])

    # ---------------------------- Mutations ----------------------------

    def create(
        self,
        name: str,
        model: str,
        purchase_price: float,
        selling_price: float,
        shelf_stock: int = 0,
        store_stock: int = 0,
        min_stock_level: int = 10,
    ) -> Product:
        values = self._clean(
            name, model, purchase_price, selling_price, shelf_stock, store_stock, min_stock_level
        )
        ts = now()
        product = Product(new_id(), *values, created_at=ts, updated_at=ts)
        with transaction(self.conn):
            self.conn.execute(
                f"INSERT INTO products({_COLUMNS}) VALUES (?,?,?,?,?,?,?,?,?,?)",
                (
                    product.product_id,
                    product.name,
                    product.model,
                    product.purchase_price,
                    product.selling_price,
                    product.shelf_stock,
                    product.store_stock,
                    product.min_stock_level,
                    to_iso(ts),
                    to_iso(ts),
                ),
            )
        return product

    def update(
        self,
        product_id: str,
        name: str,
        model: str,
        purchase_price: float,
        selling_price: float,
        shelf_stock: int,
        store_stock: int,
        min_stock_level: int,
    ) -> Product:
        values = self._clean(
            name, model, purchase_price, selling_price, shelf_stock, store_stock, min_stock_level
        )
        ts = now()
        with transaction(self.conn):
            cur = self.conn.execute(
                "UPDATE products "
                "SET name=?, model=?, purchase_price=?, selling_price=?, "
                "    shelf_stock=?, store_stock=?, min_stock_level=?, updated_at=? "
                "WHERE product_id=?",
                (*values, to_iso(ts), product_id),
            )
            if cur.rowcount == 0:
                raise ValidationError("Product not found.")
        return self.get(product_id)

    def delete(self, product_id: str) -> None:
        """
        Hard delete. Sale items and purchases keep their own name snapshots,
        so history stays readable after the product is gone.
        """
        with transaction(self.conn):
            cur = self.conn.execute("DELETE FROM products WHERE product_id=?", (product_id,))
            if cur.rowcount == 0:
                raise ValidationError("Product not found.")

    def adjust_stock(self, product_id: str, shelf_delta: int, store_delta: int) -> None:
        """
        Apply both counter deltas in one UPDATE. The CHECK constraints reject
        any result below zero.
        """
        with transaction(self.conn):
            cur = self.conn.execute(
                "UPDATE products "
                "SET shelf_stock = shelf_stock + ?, store_stock = store_stock + ?, updated_at=? "
                "WHERE product_id=?",
                (int(shelf_delta), int(store_delta), to_iso(now()), product_id),
            )
            if cur.rowcount == 0:
                raise ValidationError("Product not found.")
