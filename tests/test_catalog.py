"""
Catalog and party repositories: products, vendors, customers.

Covers CRUD, form-level validation, search, low-stock derivation and the
"fetch-all right after insert returns the record unchanged" property.
"""

from __future__ import annotations

import pytest

from taj_autos.database.repositories import CustomersRepo, ProductsRepo, VendorsRepo
from taj_autos.errors import ValidationError


# ---------------------------------------------------------------------------
# Suite A – Products
# ---------------------------------------------------------------------------

def test_a0_insert_then_fetch_all_is_unchanged(products, make_product):
    """A0: The record returned by create() equals the one read back, field for field."""
    created = make_product(
        name="Oil Filter", model="Civic 2018", purchase_price=350.5, selling_price=499.99,
        shelf_stock=4, store_stock=11, min_stock_level=6,
    )
    listed = products.list_products()
    assert listed == [created]
    assert products.get(created.product_id) == created


def test_a1_update_in_place(products, make_product):
    """A1: update() rewrites fields and bumps updated_at only."""
    p = make_product()
    upd = products.update(p.product_id, "Brake Pad (front)", "Corolla 2016", 850, 1100, 7, 2, 4)
    assert upd.product_id == p.product_id
    assert (upd.name, upd.model, upd.selling_price, upd.shelf_stock, upd.store_stock) == (
        "Brake Pad (front)", "Corolla 2016", 1100.0, 7, 2
    )
    assert upd.created_at == p.created_at
    assert upd.updated_at >= p.updated_at


@pytest.mark.parametrize(
    "kwargs, message",
    [
        ({"name": " "}, "Product name is required"),
        ({"model": ""}, "Car model is required"),
        ({"purchase_price": -1}, "Purchase price must be 0 or greater"),
        ({"selling_price": "abc"}, "Selling price must be 0 or greater"),
        ({"shelf_stock": -1}, "Shelf stock must be 0 or greater"),
        ({"store_stock": 2.5}, "Store stock must be a whole number"),
        ({"min_stock_level": -3}, "Minimum stock level must be 0 or greater"),
    ],
)
def test_a2_product_validation(products, make_product, kwargs, message):
    """A2: Invalid form values are rejected and nothing is stored."""
    with pytest.raises(ValidationError, match=message):
        make_product(**kwargs)
    assert products.list_products() == []


def test_a3_unknown_product_update_delete(products):
    """A3: Update/delete of a missing key is a ValidationError."""
    with pytest.raises(ValidationError):
        products.update("nope", "n", "m", 1, 1, 0, 0, 0)
    with pytest.raises(ValidationError):
        products.delete("nope")


def test_a4_delete(products, make_product):
    """A4: delete() removes the product."""
    p = make_product()
    products.delete(p.product_id)
    assert products.get(p.product_id) is None
    assert products.count() == 0


def test_a5_search_by_name_id_or_model(products, make_product):
    """A5: Case-insensitive search across name, id and car model."""
    pad = make_product(name="Brake Pad", model="Corolla")
    plug = make_product(name="Spark Plug", model="Mehran")
    assert products.search("brake") == [pad]
    assert products.search("MEHRAN") == [plug]
    assert products.search(plug.product_id) == [plug]
    assert {p.product_id for p in products.search("")} == {pad.product_id, plug.product_id}


def test_a6_low_stock_derivation(products, make_product):
    """A6: shelf=2, store=1 is low against min 5 and not low against min 3."""
    low = make_product(name="Low", shelf_stock=2, store_stock=1, min_stock_level=5)
    ok = make_product(name="Ok", shelf_stock=2, store_stock=1, min_stock_level=3)
    assert low.total_stock == 3
    assert low.is_low_stock is True
    assert ok.is_low_stock is False
    assert products.low_stock() == [low]
    assert products.low_stock(limit=0) == []


# ---------------------------------------------------------------------------
# Suite B – Vendors
# ---------------------------------------------------------------------------

def test_b0_vendor_crud(vendors):
    """B0: create / get / list / update / delete."""
    v = vendors.create(" Karachi Spares ", "0300-1", "Plaza")
    assert v.name == "Karachi Spares"
    assert vendors.list_vendors() == [v]
    assert vendors.get(v.vendor_id) == v

    v2 = vendors.update(v.vendor_id, "KS Traders", "0300-2", "Plaza 2")
    assert (v2.name, v2.contact, v2.address) == ("KS Traders", "0300-2", "Plaza 2")

    vendors.delete(v.vendor_id)
    assert vendors.get(v.vendor_id) is None
    with pytest.raises(ValidationError):
        vendors.delete(v.vendor_id)


@pytest.mark.parametrize("field", ["name", "contact", "address"])
def test_b1_vendor_required_fields(vendors, field):
    """B1: Name, contact and address are all required."""
    payload = {"name": "V", "contact": "C", "address": "A"}
    payload[field] = "  "
    with pytest.raises(ValidationError):
        vendors.create(**payload)
    assert vendors.list_vendors() == []


# ---------------------------------------------------------------------------
# Suite C – Customers
# ---------------------------------------------------------------------------

def test_c0_customer_create_and_fetch(customers, make_customer):
    """C0: Customers start at zero debt unless told otherwise; address optional."""
    c = customers.create("Bilal", "0333", None)
    assert c.total_debt == 0.0 and c.address == ""
    assert customers.get(c.customer_id) == c


def test_c1_customer_validation(customers):
    """C1: Name and contact are required."""
    with pytest.raises(ValidationError):
        customers.create("", "0333")
    with pytest.raises(ValidationError):
        customers.create("Bilal", " ")


def test_c2_update_keeps_debt(customers, make_customer):
    """C2: update() changes contact details but never the balance."""
    c = make_customer(total_debt=500)
    upd = customers.update(c.customer_id, "Aslam Khan", "0321-0000000", "Clifton")
    assert upd.name == "Aslam Khan"
    assert upd.total_debt == 500.0


def test_c3_listing_search_and_outstanding(customers, make_customer):
    """C3: Listed by debt (highest first); search by name/contact; outstanding total."""
    a = make_customer(name="Aslam", contact="0321", total_debt=100)
    b = make_customer(name="Bilal", contact="0333", total_debt=900)
    assert [c.customer_id for c in customers.list_customers()] == [b.customer_id, a.customer_id]
    assert customers.search("bil") == [customers.get(b.customer_id)]
    assert customers.search("0321") == [customers.get(a.customer_id)]
    assert customers.total_outstanding() == 1000.0


def test_c4_find_by_name_and_contact(customers, make_customer):
    """C4: Exact, trimmed, case-insensitive match on both fields."""
    a = make_customer(name="Aslam", contact="0321")
    make_customer(name="Aslam", contact="0999")
    assert customers.find_by_name_and_contact("  aslam ", "0321") == [a]
    assert customers.find_by_name_and_contact("Aslam", "0000") == []


def test_c5_debt_shift(customers, make_customer):
    """C5: add_debt / reduce_debt move the stored balance, rounded to 2 places."""
    c = make_customer()
    customers.add_debt(c.customer_id, 0.1)
    customers.add_debt(c.customer_id, 0.2)
    assert customers.get(c.customer_id).total_debt == 0.3
    customers.reduce_debt(c.customer_id, 0.3)
    assert customers.get(c.customer_id).total_debt == 0.0
    with pytest.raises(ValidationError):
        customers.add_debt("missing", 1)


def test_c6_repos_share_one_handle(conn):
    """C6: Repositories work off the handle they are given; none opens its own."""
    assert ProductsRepo(conn).conn is conn
    assert VendorsRepo(conn).conn is conn
    assert CustomersRepo(conn).conn is conn


@pytest.mark.parametrize("opening", [-5, "abc", float("nan")])
def test_c7_opening_balance_validated(customers, opening):
    """C7: A bad opening balance is user input, not a storage failure."""
    with pytest.raises(ValidationError, match="Opening balance must be 0 or greater"):
        customers.create("Aslam", "0321", "Saddar", total_debt=opening)
    assert customers.list_customers() == []


def test_c8_opening_balance_rounded(customers):
    """C8: Opening balances are stored to 2 places."""
    c = customers.create("Aslam", "0321", total_debt=120.456)
    assert c.total_debt == 120.46
    assert customers.get(c.customer_id).total_debt == 120.46
