"""Taj Autos: point-of-sale and inventory ledger for a small auto-parts shop."""

__version__ = "1.0.0"
