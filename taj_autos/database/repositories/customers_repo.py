from __future__ import annotations
from dataclasses import dataclass
from datetime import datetime
import sqlite3

from .. import transaction
from ...errors import ValidationError
from ...utils.helpers import from_iso, money, new_id, now, to_iso
from ...utils.validators import optional_text, require_non_negative, require_text


@dataclass
class Customer:
    customer_id: str
    name: str
    contact: str
    address: str
    total_debt: float
    created_at: datetime
    updated_at: datetime


_COLUMNS = "customer_id, name, contact, address, total_debt, created_at, updated_at"


def _to_customer(r: sqlite3.Row) -> Customer:
    d = dict(r)
    d["created_at"] = from_iso(d["created_at"])
    d["updated_at"] = from_iso(d["updated_at"])
    return Customer(**d)


class CustomersRepo:
    """
    Credit customers. total_debt is the authoritative running balance; only
    the sales and payments services move it, through add_debt()/reduce_debt().
    """

    def __init__(self, conn: sqlite3.Connection):
        conn.row_factory = sqlite3.Row
        self.conn = conn

    # ---- Internal helpers -------------------------------------------------

    @staticmethod
    def _clean(name: str, contact: str, address: str | None) -> tuple[str, str, str]:
        return (
            require_text(name, "Customer name"),
            require_text(contact, "Contact"),
            optional_text(address),
        )

    # ---- Queries ----------------------------------------------------------

    def list_customers(self) -> list[Customer]:
        """Highest outstanding balance first."""
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM customers ORDER BY total_debt DESC, name"
        ).fetchall()
        return [_to_customer(r) for r in rows]

    def search(self, term: str) -> list[Customer]:
        """
        Case-insensitive match on name or contact.
        """
        pattern = f"%{(term or '').strip().lower()}%"
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM customers "
            "WHERE lower(name) LIKE ? OR lower(contact) LIKE ? "
            "ORDER BY total_debt DESC, name",
            (pattern, pattern),
        ).fetchall()
        return [_to_customer(r) for r in rows]

    def get(self, customer_id: str) -> Customer | None:
        r = self.conn.execute(
            f"SELECT {_COLUMNS} FROM customers WHERE customer_id=?",
            (customer_id,),
        ).fetchone()
        return _to_customer(r) if r else None

    def require(self, customer_id: str) -> Customer:
        c = self.get(customer_id) if customer_id else None
        if c is None:
            raise ValidationError("Customer not found.")
        return c

    def find_by_name_and_contact(self, name: str, contact: str) -> list[Customer]:
        """
        Exact (trimmed, case-insensitive) name + contact matches, oldest first.

        Callers use this to decide between an existing customer and a new one
        before committing a credit sale.
        """
        rows = self.conn.execute(
            f"SELECT {_COLUMNS} FROM customers "
            "WHERE lower(trim(name)) = lower(trim(?)) AND lower(trim(contact)) = lower(trim(?)) "
            "ORDER BY created_at, customer_id",
            (name or "", contact or ""),
        ).fetchall()
        return [_to_customer(r) for r in rows]

    def total_outstanding(self) -> float:
        row = self.conn.execute("SELECT COALESCE(SUM(total_debt), 0.0) FROM customers").fetchone()
        return money(row[0])

    # ---- Mutations --------------------------------------------------------

    def create(
        self,
        name: str,
        contact: str,
        address: str | None = None,
        total_debt: float = 0.0,
    ) -> Customer:
        name, contact, address = self._clean(name, contact, address)
        opening = money(require_non_negative(total_debt, "Opening balance"))
        ts = now()
        customer = Customer(new_id(), name, contact, address, opening, ts, ts)
        with transaction(self.conn):
            self.conn.execute(
                f"INSERT INTO customers({_COLUMNS}) VALUES (?,?,?,?,?,?,?)",
                (
                    customer.customer_id,
                    name,
                    contact,
                    address,
                    customer.total_debt,
                    to_iso(ts),
                    to_iso(ts),
                ),
            )
        return customer

    def update(self, customer_id: str, name: str, contact: str, address: str | None) -> Customer:
        """
        Update contact details. total_debt is not editable here.
        """
        name, contact, address = self._clean(name, contact, address)
        with transaction(self.conn):
            cur = self.conn.execute(
                "UPDATE customers SET name=?, contact=?, address=?, updated_at=? WHERE customer_id=?",
                (name, contact, address, to_iso(now()), customer_id),
            )
            if cur.rowcount == 0:
                raise ValidationError("Customer not found.")
        return self.get(customer_id)

    def add_debt(self, customer_id: str, amount: float) -> None:
        self._shift_debt(customer_id, money(amount))

    def reduce_debt(self, customer_id: str, amount: float) -> None:
        self._shift_debt(customer_id, -money(amount))

    def _shift_debt(self, customer_id: str, delta: float) -> None:
        with transaction(self.conn):
            cur = self.conn.execute(
                "UPDATE customers SET total_debt = ROUND(total_debt + ?, 2), updated_at=? "
                "WHERE customer_id=?",
                (delta, to_iso(now()), customer_id),
            )
            if cur.rowcount == 0:
                raise ValidationError("Customer not found.")
