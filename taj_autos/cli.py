"""
Command line front end.

    taj-autos [--db PATH] init
    taj-autos products [--search TERM]
    taj-autos low-stock
    taj-autos add-product NAME MODEL PURCHASE_PRICE SELLING_PRICE [--shelf N] [--store N] [--min-stock N]
    taj-autos add-vendor NAME CONTACT ADDRESS
    taj-autos sell PRODUCT_ID:QTY [...] [--credit (--customer-id ID | --name N --contact C [--address A])]
                   [--invoice-dir DIR [--pdf]]
    taj-autos transfer PRODUCT_ID {shelf,store} QTY
    taj-autos purchase VENDOR_ID PRODUCT_ID QTY UNIT_PRICE {shelf,store}
    taj-autos pay CUSTOMER_ID AMOUNT
    taj-autos customers
    taj-autos ledger CUSTOMER_ID
    taj-autos report [--from YYYY-MM-DD] [--to YYYY-MM-DD]
    taj-autos dashboard
"""

from __future__ import annotations

import argparse
import sys

from .config import DB_PATH
from .constants import APP_NAME, CURRENCY, LOCATIONS, PAYMENT_CASH, PAYMENT_CREDIT
from .database import get_connection
from .database.repositories import CustomersRepo, ProductsRepo, VendorsRepo
from .errors import DomainError, ValidationError
from .modules.customer.ledger import CreditLedgerService
from .modules.inventory.service import InventoryService
from .modules.payments.service import PaymentsService
from .modules.purchase.service import PurchasingService
from .modules.reporting.service import ReportingService
from .modules.sales.invoice import InvoiceRenderer
from .modules.sales.service import ExistingCustomer, NewCustomer, SaleRequestItem, SalesService
from .utils.helpers import fmt_money
from .utils.loggers import get_logger


def _rs(v) -> str:
    return f"{CURRENCY} {fmt_money(v)}"


def _print_products(products) -> None:
    for p in products:
        flag = "  LOW" if p.is_low_stock else ""
        print(
            f"{p.product_id}  {p.name} ({p.model})  shelf={p.shelf_stock} store={p.store_stock} "
            f"min={p.min_stock_level}  sell={_rs(p.selling_price)}{flag}"
        )


def cmd_init(conn, args) -> None:
    print(f"{APP_NAME} database ready at {args.db}")


def cmd_products(conn, args) -> None:
    repo = ProductsRepo(conn)
    _print_products(repo.search(args.search) if args.search else repo.list_products())


def cmd_low_stock(conn, args) -> None:
    _print_products(InventoryService(conn).low_stock())


def cmd_add_product(conn, args) -> None:
    p = ProductsRepo(conn).create(
        args.name, args.model, args.purchase_price, args.selling_price,
        args.shelf, args.store, args.min_stock,
    )
    print(f"product {p.product_id}: {p.name} ({p.model}) shelf={p.shelf_stock} store={p.store_stock}")


def cmd_add_vendor(conn, args) -> None:
    v = VendorsRepo(conn).create(args.name, args.contact, args.address)
    print(f"vendor {v.vendor_id}: {v.name}")


def _parse_item(text: str) -> SaleRequestItem:
    product_id, sep, qty = text.rpartition(":")
    if not sep or not product_id.strip():
        raise ValidationError(f"Item '{text}' must look like PRODUCT_ID:QTY.")
    try:
        return SaleRequestItem(product_id.strip(), int(qty))
    except ValueError as e:
        raise ValidationError(f"Quantity in '{text}' must be a whole number.") from e


def _sale_customer(conn, args):
    if args.customer_id:
        return ExistingCustomer(args.customer_id)
    if args.name is None and args.contact is None:
        return None
    # a name + contact already on file is the same customer
    matches = CustomersRepo(conn).find_by_name_and_contact(args.name, args.contact)
    if matches:
        return ExistingCustomer(matches[0].customer_id)
    return NewCustomer(args.name or "", args.contact or "", args.address or "")


def cmd_sell(conn, args) -> None:
    items = [_parse_item(t) for t in args.items]
    payment_type = PAYMENT_CREDIT if args.credit else PAYMENT_CASH
    renderer = InvoiceRenderer(args.invoice_dir, as_pdf=args.pdf) if args.invoice_dir else None
    sale = SalesService(conn, invoice_renderer=renderer).complete_sale(
        items, payment_type, _sale_customer(conn, args) if args.credit else None
    )
    print(f"sale {sale.sale_id}: {payment_type} {_rs(sale.total_amount)}")
    for it in sale.items:
        print(f"  {it.quantity} x {it.product_name} @ {_rs(it.price)} = {_rs(it.total)}")
    if sale.customer_id:
        c = CustomersRepo(conn).get(sale.customer_id)
        print(f"customer {c.customer_id}: {c.name}, balance {_rs(c.total_debt)}")


def cmd_transfer(conn, args) -> None:
    p = InventoryService(conn).transfer(args.product_id, args.source, args.quantity)
    print(f"{p.name}: shelf={p.shelf_stock} store={p.store_stock}")


def cmd_purchase(conn, args) -> None:
    p = PurchasingService(conn).record_purchase(
        args.vendor_id, args.product_id, args.quantity, args.unit_price, args.location
    )
    print(f"purchase {p.purchase_id}: {p.quantity} x {p.product_name} = {_rs(p.total_amount)}")


def cmd_pay(conn, args) -> None:
    p = PaymentsService(conn).record_payment(args.customer_id, args.amount)
    c = CustomersRepo(conn).get(p.customer_id)
    print(f"payment {p.payment_id}: {_rs(p.amount)} from {p.customer_name}, balance {_rs(c.total_debt)}")


def cmd_customers(conn, args) -> None:
    repo = CustomersRepo(conn)
    for c in repo.list_customers():
        print(f"{c.customer_id}  {c.name}  {c.contact}  owes {_rs(c.total_debt)}")
    print(f"Total outstanding: {_rs(repo.total_outstanding())}")


def cmd_ledger(conn, args) -> None:
    stmt = CreditLedgerService(conn).statement(args.customer_id)
    print(f"Ledger - {stmt.customer.name} ({stmt.customer.contact})")
    for e in stmt.entries:
        print(
            f"{e.date:%Y-%m-%d %H:%M}  {e.description:<20} "
            f"debit {fmt_money(e.debit):>12}  credit {fmt_money(e.credit):>12}  "
            f"balance {fmt_money(e.balance):>12}"
        )
    print(f"Current balance: {_rs(stmt.customer.total_debt)}")


def cmd_report(conn, args) -> None:
    svc = ReportingService(conn)
    start, end = svc.default_window()
    r = svc.period_report(args.date_from or start, args.date_to or end)
    print(f"Report {r.start} .. {r.end}")
    print(f"  Sales:       {len(r.sales):>5}  {_rs(r.total_revenue)}"
          f"  (cash {_rs(r.cash_revenue)}, credit {_rs(r.credit_revenue)})")
    print(f"  Purchases:   {len(r.purchases):>5}  {_rs(r.total_cost)}")
    print(f"  Profit:             {_rs(r.profit)}")
    print(f"  Collections: {len(r.payments):>5}  {_rs(r.total_collections)}")


def cmd_dashboard(conn, args) -> None:
    d = ReportingService(conn).dashboard()
    print(f"Total products:    {d.total_products}")
    print(f"Low stock:         {d.low_stock_count}")
    print(f"Today's sales:     {_rs(d.today_sales)}")
    print(f"Total outstanding: {_rs(d.total_outstanding)}")
    _print_products(d.low_stock_items)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="taj-autos", description=f"{APP_NAME} point of sale")
    parser.add_argument("--db", default=str(DB_PATH), help="Path to SQLite DB")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init", help="Create the database").set_defaults(func=cmd_init)

    p = sub.add_parser("products", help="List or search products")
    p.add_argument("--search", help="Match name, id or car model")
    p.set_defaults(func=cmd_products)

    sub.add_parser("low-stock", help="Products below minimum stock").set_defaults(func=cmd_low_stock)

    p = sub.add_parser("add-product", help="Add a product to the catalog")
    p.add_argument("name")
    p.add_argument("model", help="Car model")
    p.add_argument("purchase_price", type=float)
    p.add_argument("selling_price", type=float)
    p.add_argument("--shelf", type=int, default=0, help="Opening shelf stock")
    p.add_argument("--store", type=int, default=0, help="Opening store stock")
    p.add_argument("--min-stock", type=int, default=10, help="Low-stock threshold")
    p.set_defaults(func=cmd_add_product)

    p = sub.add_parser("add-vendor", help="Add a vendor")
    p.add_argument("name")
    p.add_argument("contact")
    p.add_argument("address")
    p.set_defaults(func=cmd_add_vendor)

    p = sub.add_parser("sell", help="Record a cash or credit sale")
    p.add_argument("items", nargs="+", metavar="PRODUCT_ID:QTY")
    p.add_argument("--credit", action="store_true", help="Credit sale (default: cash)")
    who = p.add_mutually_exclusive_group()
    who.add_argument("--customer-id", help="Existing customer")
    who.add_argument("--name", help="Customer name (looked up with --contact, created if new)")
    p.add_argument("--contact", help="Customer contact")
    p.add_argument("--address", help="Customer address for a new customer")
    p.add_argument("--invoice-dir", help="Write the invoice into this directory")
    p.add_argument("--pdf", action="store_true", help="Write the invoice as PDF instead of HTML")
    p.set_defaults(func=cmd_sell)

    p = sub.add_parser("transfer", help="Move units between shelf and store")
    p.add_argument("product_id")
    p.add_argument("source", choices=LOCATIONS)
    p.add_argument("quantity", type=int)
    p.set_defaults(func=cmd_transfer)

    p = sub.add_parser("purchase", help="Record a vendor purchase")
    p.add_argument("vendor_id")
    p.add_argument("product_id")
    p.add_argument("quantity", type=int)
    p.add_argument("unit_price", type=float)
    p.add_argument("location", choices=LOCATIONS)
    p.set_defaults(func=cmd_purchase)

    p = sub.add_parser("pay", help="Record a customer payment")
    p.add_argument("customer_id")
    p.add_argument("amount", type=float)
    p.set_defaults(func=cmd_pay)

    sub.add_parser("customers", help="Customers by outstanding balance").set_defaults(func=cmd_customers)

    p = sub.add_parser("ledger", help="Customer credit statement")
    p.add_argument("customer_id")
    p.set_defaults(func=cmd_ledger)

    p = sub.add_parser("report", help="Sales/purchase/profit report")
    p.add_argument("--from", dest="date_from", help="Start date YYYY-MM-DD (default: 30 days ago)")
    p.add_argument("--to", dest="date_to", help="End date YYYY-MM-DD (default: today)")
    p.set_defaults(func=cmd_report)

    sub.add_parser("dashboard", help="Shop summary").set_defaults(func=cmd_dashboard)
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    log = get_logger()
    try:
        conn = get_connection(args.db)
    except DomainError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    try:
        args.func(conn, args)
    except DomainError as e:
        log.debug("command %s failed", args.command, exc_info=True)
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        conn.close()
    return 0


if __name__ == "__main__":
    sys.exit(main())
