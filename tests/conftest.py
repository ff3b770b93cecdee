# tests/conftest.py
# ---------------------------------------------------------------------
# Ground rules:
# - Every test gets its own SQLite file under tmp_path (schema applied
#   by get_connection, nothing shared between tests)
# - conn.row_factory = sqlite3.Row, PRAGMA foreign_keys=ON (get_connection)
# - Factory fixtures create products/vendors/customers through the repos
# ---------------------------------------------------------------------

from __future__ import annotations

import sqlite3
import pytest

from taj_autos.database import get_connection
from taj_autos.database.repositories import (
    CustomersRepo,
    ProductsRepo,
    VendorsRepo,
)


@pytest.fixture()
def conn(tmp_path) -> sqlite3.Connection:
    con = get_connection(tmp_path / "taj_autos_test.db")
    try:
        yield con
    finally:
        con.close()


@pytest.fixture()
def products(conn) -> ProductsRepo:
    return ProductsRepo(conn)


@pytest.fixture()
def vendors(conn) -> VendorsRepo:
    return VendorsRepo(conn)


@pytest.fixture()
def customers(conn) -> CustomersRepo:
    return CustomersRepo(conn)


@pytest.fixture()
def make_product(products):
    def _make(
        name="Brake Pad",
        model="Corolla 2015",
        purchase_price=800.0,
        selling_price=1000.0,
        shelf_stock=5,
        store_stock=3,
        min_stock_level=2,
    ):
        return products.create(
            name, model, purchase_price, selling_price, shelf_stock, store_stock, min_stock_level
        )
    return _make


@pytest.fixture()
def vendor(vendors):
    return vendors.create("Karachi Spares", "0300-1234567", "Plaza Market, Karachi")


@pytest.fixture()
def make_customer(customers):
    def _make(name="Aslam", contact="0321-7654321", address="Saddar", total_debt=0.0):
        return customers.create(name, contact, address, total_debt=total_debt)
    return _make
