from dataclasses import dataclass
from datetime import datetime
import sqlite3

from .. import transaction
from ...errors import ValidationError
from ...utils.helpers import from_iso, new_id, now, to_iso
from ...utils.validators import require_text


@dataclass
class Vendor:
    vendor_id: str
    name: str
    contact: str
    address: str
    created_at: datetime
    updated_at: datetime


def _to_vendor(r: sqlite3.Row) -> Vendor:
    d = dict(r)
    d["created_at"] = from_iso(d["created_at"])
    d["updated_at"] = from_iso(d["updated_at"])
    return Vendor(**d)


class VendorsRepo:
    def __init__(self, conn: sqlite3.Connection):
        # ensure rows behave like dicts/tuples
        conn.row_factory = sqlite3.Row
        self.conn = conn

    @staticmethod
    def _clean(name: str, contact: str, address: str) -> tuple[str, str, str]:
        return (
            require_text(name, "Vendor name"),
            require_text(contact, "Contact"),
            require_text(address, "Address"),
        )

    def list_vendors(self) -> list[Vendor]:
        rows = self.conn.execute(
            "SELECT vendor_id, name, contact, address, created_at, updated_at "
            "FROM vendors ORDER BY created_at DESC, vendor_id DESC"
        ).fetchall()
        return [_to_vendor(r) for r in rows]

    def get(self, vendor_id: str) -> Vendor | None:
        r = self.conn.execute(
            "SELECT vendor_id, name, contact, address, created_at, updated_at "
            "FROM vendors WHERE vendor_id=?",
            (vendor_id,)
        ).fetchone()
        return _to_vendor(r) if r else None

    def require(self, vendor_id: str) -> Vendor:
        v = self.get(vendor_id) if vendor_id else None
        if v is None:
            raise ValidationError("Please select a valid vendor.")
        return v

    def create(self, name: str, contact: str, address: str) -> Vendor:
        name, contact, address = self._clean(name, contact, address)
        ts = now()
        vendor = Vendor(new_id(), name, contact, address, ts, ts)
        with transaction(self.conn):
            self.conn.execute(
                "INSERT INTO vendors(vendor_id, name, contact, address, created_at, updated_at) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (vendor.vendor_id, name, contact, address, to_iso(ts), to_iso(ts))
            )
        return vendor

    def update(self, vendor_id: str, name: str, contact: str, address: str) -> Vendor:
        name, contact, address = self._clean(name, contact, address)
        with transaction(self.conn):
            cur = self.conn.execute(
                "UPDATE vendors SET name=?, contact=?, address=?, updated_at=? WHERE vendor_id=?",
                (name, contact, address, to_iso(now()), vendor_id)
            )
            if cur.rowcount == 0:
                raise ValidationError("Vendor not found.")
        return self.get(vendor_id)

    def delete(self, vendor_id: str) -> None:
        # purchases carry vendor_name, so their history survives
        with transaction(self.conn):
            cur = self.conn.execute("DELETE FROM vendors WHERE vendor_id=?", (vendor_id,))
            if cur.rowcount == 0:
                raise ValidationError("Vendor not found.")
