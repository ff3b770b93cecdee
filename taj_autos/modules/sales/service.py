"""
modules/sales/service.py

Purpose
-------
Validate and commit a sale: persist it, take the sold units off the shelf
first and then the store, and move the customer's balance for credit sales.

Public interface
----------------
- SalesService.check_items(items) -> list[SaleLine]
- SalesService.complete_sale(items, payment_type, customer=None, date=None) -> Sale
- SalesService.recent_sales(limit) -> list[Sale]
- split_shelf_first(shelf, store, quantity) -> (from_shelf, from_store)
"""

from __future__ import annotations

import logging
import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Iterable, Optional, Union

from ...constants import PAYMENT_CREDIT, PAYMENT_TYPES, RECENT_SALES_LIMIT
from ...database import transaction
from ...database.repositories import (
    Customer,
    CustomersRepo,
    Product,
    ProductsRepo,
    Sale,
    SaleItem,
    SalesRepo,
)
from ...errors import InvariantError, ValidationError
from ...utils.helpers import money, new_id, now
from ...utils.validators import optional_text, require_count, require_text

_log = logging.getLogger(__name__)


@dataclass(frozen=True)
class SaleRequestItem:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class ExistingCustomer:
    """Credit sale against a customer already on file."""
    customer_id: str


@dataclass(frozen=True)
class NewCustomer:
    """Credit sale that opens a new customer account."""
    name: str
    contact: str
    address: str = ""


CustomerRef = Union[ExistingCustomer, NewCustomer]


@dataclass(frozen=True)
class SaleLine:
    product: Product
    quantity: int


def split_shelf_first(shelf: int, store: int, quantity: int) -> tuple[int, int]:
    """
    How many of `quantity` units come from the shelf and how many from the
    store. The shelf is always emptied before the store is touched.
    """
    from_shelf = min(shelf, quantity)
    from_store = quantity - from_shelf
    if from_store > store:
        raise InvariantError(
            f"cannot take {quantity} units from shelf={shelf}, store={store}"
        )
    return from_shelf, from_store


class SalesService:
    def __init__(
        self,
        conn: sqlite3.Connection,
        invoice_renderer: Optional[Callable[[Sale], Any]] = None,
    ):
        self.conn = conn
        self.products = ProductsRepo(conn)
        self.customers = CustomersRepo(conn)
        self.sales = SalesRepo(conn)
        self.invoice_renderer = invoice_renderer

    # ------------------------------------------------------------------
    # Validation
    # ------------------------------------------------------------------
    def check_items(self, items: Iterable[SaleRequestItem]) -> list[SaleLine]:
        """
        Re-read every product and check the requested quantities against its
        current shelf+store stock. Lines for the same product are checked
        against their combined quantity.
        """
        items = list(items)
        if not items:
            raise ValidationError("Please add at least one item.")

        lines: list[SaleLine] = []
        requested: dict[str, int] = {}
        for it in items:
            product = self.products.require(it.product_id)
            qty = require_count(it.quantity, "Quantity", positive=True)
            requested[product.product_id] = requested.get(product.product_id, 0) + qty
            if requested[product.product_id] > product.total_stock:
                raise ValidationError(
                    f"Only {product.total_stock} units of {product.name} available."
                )
            lines.append(SaleLine(product, qty))
        return lines

    def _resolve_customer(self, customer: Optional[CustomerRef]) -> Customer | NewCustomer:
        if customer is None:
            raise ValidationError("Customer name and contact are required for credit sales.")
        if isinstance(customer, ExistingCustomer):
            return self.customers.require(customer.customer_id)
        if isinstance(customer, NewCustomer):
            try:
                name = require_text(customer.name, "Customer name")
                contact = require_text(customer.contact, "Customer contact")
            except ValidationError as e:
                raise ValidationError(
                    "Customer name and contact are required for credit sales."
                ) from e
            return NewCustomer(name, contact, optional_text(customer.address))
        raise TypeError(f"unsupported customer reference: {customer!r}")

    # ------------------------------------------------------------------
    # Commit
    # ------------------------------------------------------------------
    def complete_sale(
        self,
        items: Iterable[SaleRequestItem],
        payment_type: str,
        customer: Optional[CustomerRef] = None,
        *,
        date: Optional[datetime] = None,
    ) -> Sale:
        """
        Validate and commit one sale as a single transaction.

        Nothing is written when validation fails. The committed Sale is
        returned (and handed to the invoice renderer, if one is set).
        """
        if payment_type not in PAYMENT_TYPES:
            raise ValidationError("Payment type must be cash or credit.")
        items = list(items)

        try:
            with transaction(self.conn):
                lines = self.check_items(items)
                party = (
                    self._resolve_customer(customer) if payment_type == PAYMENT_CREDIT else None
                )

                sale_items = [
                    SaleItem(
                        product_id=ln.product.product_id,
                        product_name=ln.product.name,
                        quantity=ln.quantity,
                        price=ln.product.selling_price,
                        total=money(ln.quantity * ln.product.selling_price),
                    )
                    for ln in lines
                ]
                total = money(sum(it.total for it in sale_items))

                if isinstance(party, NewCustomer):
                    party = self.customers.create(
                        party.name, party.contact, party.address, total_debt=total
                    )
                elif isinstance(party, Customer):
                    self.customers.add_debt(party.customer_id, total)

                ts = date or now()
                sale = Sale(
                    sale_id=new_id(),
                    date=ts,
                    total_amount=total,
                    payment_type=payment_type,
                    items=sale_items,
                    customer_id=party.customer_id if party else None,
                    customer_name=party.name if party else None,
                    customer_contact=party.contact if party else None,
                    customer_address=party.address if party else None,
                    created_at=now(),
                )
                self.sales.insert(sale)

                for it in sale_items:
                    self._deduct(it.product_id, it.quantity)
        except ValidationError as e:
            _log.warning("sale rejected: %s", e)
            raise

        _log.info(
            "sale %s committed: %d line(s), %s %.2f%s",
            sale.sale_id,
            len(sale.items),
            sale.payment_type,
            sale.total_amount,
            f", customer {sale.customer_id}" if sale.customer_id else "",
        )
        self._render_invoice(sale)
        return sale

    def _deduct(self, product_id: str, quantity: int) -> None:
        # re-read: an earlier line of this sale may have touched the same product
        product = self.products.require(product_id)
        from_shelf, from_store = split_shelf_first(
            product.shelf_stock, product.store_stock, quantity
        )
        self.products.adjust_stock(product_id, -from_shelf, -from_store)

    def _render_invoice(self, sale: Sale) -> None:
        if self.invoice_renderer is None:
            return
        try:
            self.invoice_renderer(sale)
        except Exception:
            # the sale is already committed; a failed printout must not undo it
            _log.exception("invoice rendering failed for sale %s", sale.sale_id)

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    def recent_sales(self, limit: int = RECENT_SALES_LIMIT) -> list[Sale]:
        return self.sales.list_sales(limit=limit)
