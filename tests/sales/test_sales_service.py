"""
Sales engine: validation before commit, shelf-first deduction, credit
customer handling and all-or-nothing commits.
"""

from __future__ import annotations

import pytest

from taj_autos.constants import PAYMENT_CASH, PAYMENT_CREDIT
from taj_autos.database.repositories import CustomersRepo, SalesRepo
from taj_autos.errors import InvariantError, StorageError, ValidationError
from taj_autos.modules.sales.service import (
    ExistingCustomer,
    NewCustomer,
    SaleRequestItem,
    SalesService,
    split_shelf_first,
)
from tests.helpers import at


@pytest.fixture()
def svc(conn) -> SalesService:
    return SalesService(conn)


def _stock(products, product_id):
    p = products.get(product_id)
    return p.shelf_stock, p.store_stock


# ---------------------------------------------------------------------------
# Suite S – shelf-first split
# ---------------------------------------------------------------------------

@pytest.mark.parametrize(
    "shelf, store, qty, expected",
    [
        (5, 3, 7, (5, 2)),
        (5, 3, 5, (5, 0)),
        (5, 3, 2, (2, 0)),
        (0, 3, 3, (0, 3)),
        (5, 3, 8, (5, 3)),
    ],
)
def test_s0_split_shelf_first(shelf, store, qty, expected):
    """S0: The shelf is emptied before the store is touched."""
    assert split_shelf_first(shelf, store, qty) == expected


def test_s1_split_beyond_stock_is_invariant_error():
    """S1: Taking more than shelf+store is a programming error, not user input."""
    with pytest.raises(InvariantError):
        split_shelf_first(5, 3, 9)


# ---------------------------------------------------------------------------
# Suite T – committing sales
# ---------------------------------------------------------------------------

def test_t0_cash_sale_deducts_shelf_then_store(svc, products, make_product):
    """T0: shelf=5, store=3, sell 7 leaves shelf=0, store=1."""
    p = make_product(shelf_stock=5, store_stock=3, selling_price=1000)
    sale = svc.complete_sale([SaleRequestItem(p.product_id, 7)], PAYMENT_CASH)

    assert _stock(products, p.product_id) == (0, 1)
    assert sale.payment_type == PAYMENT_CASH
    assert sale.customer_id is None and sale.customer_name is None
    assert sale.total_amount == 7000.0
    assert [(i.product_id, i.product_name, i.quantity, i.price, i.total) for i in sale.items] == [
        (p.product_id, "Brake Pad", 7, 1000.0, 7000.0)
    ]


def test_t1_sale_is_persisted_complete(svc, conn, make_product):
    """T1: The returned Sale is exactly what is stored, item order included."""
    a = make_product(name="A", selling_price=10)
    b = make_product(name="B", selling_price=25.5)
    sale = svc.complete_sale(
        [SaleRequestItem(b.product_id, 2), SaleRequestItem(a.product_id, 1)],
        PAYMENT_CASH,
        date=at(3),
    )
    stored = SalesRepo(conn).get(sale.sale_id)
    assert stored == sale
    assert [i.product_name for i in stored.items] == ["B", "A"]
    assert stored.total_amount == 61.0
    assert stored.date == at(3)


def test_t2_several_lines_same_product_checked_together(svc, products, make_product):
    """T2: Two lines of 5 against 8 in stock are rejected as a whole."""
    p = make_product(shelf_stock=5, store_stock=3)
    with pytest.raises(ValidationError, match="Only 8 units"):
        svc.complete_sale(
            [SaleRequestItem(p.product_id, 5), SaleRequestItem(p.product_id, 5)], PAYMENT_CASH
        )
    assert _stock(products, p.product_id) == (5, 3)


def test_t3_several_lines_same_product_deduct_cumulatively(svc, products, make_product):
    """T3: Lines of 4 and 3 against shelf=5/store=3 leave 0/1."""
    p = make_product(shelf_stock=5, store_stock=3)
    svc.complete_sale(
        [SaleRequestItem(p.product_id, 4), SaleRequestItem(p.product_id, 3)], PAYMENT_CASH
    )
    assert _stock(products, p.product_id) == (0, 1)


@pytest.mark.parametrize("qty", [0, -1, 9, 1.5])
def test_t4_bad_quantity_rejected_without_effects(svc, conn, products, make_product, qty):
    """T4: Non-positive, fractional or excessive quantities write nothing."""
    p = make_product(shelf_stock=5, store_stock=3)
    with pytest.raises(ValidationError):
        svc.complete_sale([SaleRequestItem(p.product_id, qty)], PAYMENT_CASH)
    assert _stock(products, p.product_id) == (5, 3)
    assert SalesRepo(conn).list_sales() == []


def test_t5_empty_sale_and_unknown_product(svc, make_product):
    """T5: No items, or an item for a product that is not on file."""
    with pytest.raises(ValidationError, match="at least one item"):
        svc.complete_sale([], PAYMENT_CASH)
    with pytest.raises(ValidationError, match="valid product"):
        svc.complete_sale([SaleRequestItem("missing", 1)], PAYMENT_CASH)


def test_t6_unknown_payment_type(svc, make_product):
    """T6: Only cash and credit are accepted."""
    p = make_product()
    with pytest.raises(ValidationError):
        svc.complete_sale([SaleRequestItem(p.product_id, 1)], "cheque")


def test_t7_stock_checked_against_current_record(svc, products, make_product):
    """T7: Availability is re-read at commit, not taken from an earlier snapshot."""
    p = make_product(shelf_stock=5, store_stock=3)
    svc.complete_sale([SaleRequestItem(p.product_id, 6)], PAYMENT_CASH)
    # p still says 8 in hand; the store only has 2 left
    with pytest.raises(ValidationError, match="Only 2 units"):
        svc.complete_sale([SaleRequestItem(p.product_id, 3)], PAYMENT_CASH)
    assert _stock(products, p.product_id) == (0, 2)


def test_t8_price_snapshot_survives_product_edit(svc, conn, products, make_product):
    """T8: Later product edits or deletes do not rewrite the sale."""
    p = make_product(selling_price=1000)
    sale = svc.complete_sale([SaleRequestItem(p.product_id, 1)], PAYMENT_CASH)
    products.update(p.product_id, "Renamed", p.model, 1, 5000, 4, 3, 0)
    products.delete(p.product_id)
    stored = SalesRepo(conn).get(sale.sale_id)
    assert stored.items[0].product_name == "Brake Pad"
    assert stored.items[0].price == 1000.0


# ---------------------------------------------------------------------------
# Suite U – credit sales
# ---------------------------------------------------------------------------

def test_u0_credit_sale_new_customer(svc, conn, make_product):
    """U0: A new customer is opened with total_debt equal to the sale total."""
    p = make_product(selling_price=1500)
    sale = svc.complete_sale(
        [SaleRequestItem(p.product_id, 2)],
        PAYMENT_CREDIT,
        NewCustomer(" Aslam ", " 0321-7654321 ", "Saddar"),
    )
    c = CustomersRepo(conn).get(sale.customer_id)
    assert c is not None
    assert (c.name, c.contact, c.address, c.total_debt) == ("Aslam", "0321-7654321", "Saddar", 3000.0)
    assert (sale.customer_name, sale.customer_contact, sale.customer_address) == (
        "Aslam", "0321-7654321", "Saddar"
    )


def test_u1_credit_sale_existing_customer(svc, conn, make_product, make_customer):
    """U1: An existing customer's balance grows by the sale total."""
    c = make_customer(total_debt=500)
    p = make_product(selling_price=250)
    sale = svc.complete_sale(
        [SaleRequestItem(p.product_id, 2)], PAYMENT_CREDIT, ExistingCustomer(c.customer_id)
    )
    assert sale.customer_id == c.customer_id
    assert sale.customer_name == c.name
    assert CustomersRepo(conn).get(c.customer_id).total_debt == 1000.0
    assert len(CustomersRepo(conn).list_customers()) == 1


@pytest.mark.parametrize(
    "ref",
    [None, NewCustomer("", "0321"), NewCustomer("Aslam", "  "), ExistingCustomer("missing")],
)
def test_u2_credit_sale_needs_customer(svc, conn, products, make_product, ref):
    """U2: Credit sales without a usable customer are rejected before any write."""
    p = make_product(shelf_stock=5, store_stock=3)
    with pytest.raises(ValidationError):
        svc.complete_sale([SaleRequestItem(p.product_id, 1)], PAYMENT_CREDIT, ref)
    assert _stock(products, p.product_id) == (5, 3)
    assert SalesRepo(conn).list_sales() == []
    assert CustomersRepo(conn).list_customers() == []


def test_u3_cash_sale_ignores_customer(svc, conn, make_product, make_customer):
    """U3: A customer passed with a cash sale is not charged or attached."""
    c = make_customer()
    p = make_product()
    sale = svc.complete_sale(
        [SaleRequestItem(p.product_id, 1)], PAYMENT_CASH, ExistingCustomer(c.customer_id)
    )
    assert sale.customer_id is None
    assert CustomersRepo(conn).get(c.customer_id).total_debt == 0.0


def test_u4_new_customer_twice_is_two_accounts(svc, conn, make_product):
    """U4: NewCustomer always opens an account; merging is the caller's decision."""
    p = make_product()
    svc.complete_sale([SaleRequestItem(p.product_id, 1)], PAYMENT_CREDIT, NewCustomer("Aslam", "0321"))
    svc.complete_sale([SaleRequestItem(p.product_id, 1)], PAYMENT_CREDIT, NewCustomer("Aslam", "0321"))
    repo = CustomersRepo(conn)
    assert len(repo.find_by_name_and_contact("Aslam", "0321")) == 2


# ---------------------------------------------------------------------------
# Suite V – atomicity and collaborators
# ---------------------------------------------------------------------------

def test_v0_storage_failure_leaves_nothing_behind(svc, conn, products, make_product, monkeypatch):
    """V0: A failure after the sale row is written rolls back sale, stock and debt."""
    p = make_product(shelf_stock=5, store_stock=3)

    def boom(*a, **k):
        conn.execute("INSERT INTO nonexistent_table VALUES (1)")

    monkeypatch.setattr(svc.products, "adjust_stock", boom)
    with pytest.raises(StorageError):
        svc.complete_sale(
            [SaleRequestItem(p.product_id, 2)], PAYMENT_CREDIT, NewCustomer("Aslam", "0321")
        )
    assert _stock(products, p.product_id) == (5, 3)
    assert SalesRepo(conn).list_sales() == []
    assert CustomersRepo(conn).list_customers() == []


def test_v1_invoice_renderer_receives_committed_sale(conn, make_product):
    """V1: The renderer is called once, after commit, with the stored sale."""
    seen = []

    def renderer(sale):
        seen.append((sale, SalesRepo(conn).get(sale.sale_id)))

    p = make_product()
    sale = SalesService(conn, invoice_renderer=renderer).complete_sale(
        [SaleRequestItem(p.product_id, 1)], PAYMENT_CASH
    )
    assert len(seen) == 1
    passed, stored = seen[0]
    assert passed is sale
    assert stored == sale


def test_v2_invoice_failure_does_not_undo_sale(conn, products, make_product):
    """V2: A renderer error is logged; the sale stays committed."""
    def renderer(sale):
        raise OSError("printer offline")

    p = make_product(shelf_stock=5, store_stock=3)
    sale = SalesService(conn, invoice_renderer=renderer).complete_sale(
        [SaleRequestItem(p.product_id, 1)], PAYMENT_CASH
    )
    assert SalesRepo(conn).get(sale.sale_id) is not None
    assert _stock(products, p.product_id) == (4, 3)


def test_v3_recent_sales_newest_first(svc, make_product):
    """V3: recent_sales() lists newest first and honours the limit."""
    p = make_product(shelf_stock=20, store_stock=0)
    ids = [
        svc.complete_sale([SaleRequestItem(p.product_id, 1)], PAYMENT_CASH, date=at(d)).sale_id
        for d in (1, 2, 3)
    ]
    assert [s.sale_id for s in svc.recent_sales(limit=2)] == [ids[2], ids[1]]
