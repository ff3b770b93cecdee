import sqlite3

SQL = r"""
PRAGMA foreign_keys = ON;

/* ======================== CATALOG ======================== */

CREATE TABLE IF NOT EXISTS products (
    product_id      TEXT PRIMARY KEY,
    name            TEXT NOT NULL,
    model           TEXT NOT NULL,
    purchase_price  REAL NOT NULL DEFAULT 0 CHECK (purchase_price >= 0),
    selling_price   REAL NOT NULL DEFAULT 0 CHECK (selling_price >= 0),
    shelf_stock     INTEGER NOT NULL DEFAULT 0 CHECK (shelf_stock >= 0),
    store_stock     INTEGER NOT NULL DEFAULT 0 CHECK (store_stock >= 0),
    min_stock_level INTEGER NOT NULL DEFAULT 0 CHECK (min_stock_level >= 0),
    created_at      TEXT NOT NULL,
    updated_at      TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_products_name ON products(name);

/* ======================== PARTIES ======================== */

CREATE TABLE IF NOT EXISTS vendors (
    vendor_id  TEXT PRIMARY KEY,
    name       TEXT NOT NULL,
    contact    TEXT NOT NULL,
    address    TEXT NOT NULL DEFAULT '',
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_vendors_name ON vendors(name);

CREATE TABLE IF NOT EXISTS customers (
    customer_id TEXT PRIMARY KEY,
    name        TEXT NOT NULL,
    contact     TEXT NOT NULL,
    address     TEXT NOT NULL DEFAULT '',
    total_debt  REAL NOT NULL DEFAULT 0 CHECK (total_debt >= 0),
    created_at  TEXT NOT NULL,
    updated_at  TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_customers_name ON customers(name);

/* ======================== SALES ======================== */

/* product ids on history rows are plain references: products stay deletable */
CREATE TABLE IF NOT EXISTS sales (
    sale_id          TEXT PRIMARY KEY,
    date             TEXT NOT NULL,
    total_amount     REAL NOT NULL CHECK (total_amount >= 0),
    payment_type     TEXT NOT NULL CHECK (payment_type IN ('cash','credit')),
    customer_id      TEXT,
    customer_name    TEXT,
    customer_contact TEXT,
    customer_address TEXT,
    created_at       TEXT NOT NULL,
    FOREIGN KEY (customer_id) REFERENCES customers(customer_id),
    CHECK (payment_type = 'cash' OR customer_id IS NOT NULL)
);
CREATE INDEX IF NOT EXISTS idx_sales_date ON sales(date);
CREATE INDEX IF NOT EXISTS idx_sales_customer ON sales(customer_id);

CREATE TABLE IF NOT EXISTS sale_items (
    sale_id      TEXT NOT NULL,
    line_no      INTEGER NOT NULL,
    product_id   TEXT NOT NULL,
    product_name TEXT NOT NULL,
    quantity     INTEGER NOT NULL CHECK (quantity > 0),
    price        REAL NOT NULL CHECK (price >= 0),
    total        REAL NOT NULL CHECK (total >= 0),
    PRIMARY KEY (sale_id, line_no),
    FOREIGN KEY (sale_id) REFERENCES sales(sale_id) ON DELETE CASCADE
);

/* ======================== PURCHASES ======================== */

CREATE TABLE IF NOT EXISTS purchases (
    purchase_id  TEXT PRIMARY KEY,
    date         TEXT NOT NULL,
    vendor_id    TEXT NOT NULL,
    vendor_name  TEXT NOT NULL,
    product_id   TEXT NOT NULL,
    product_name TEXT NOT NULL,
    quantity     INTEGER NOT NULL CHECK (quantity > 0),
    unit_price   REAL NOT NULL CHECK (unit_price > 0),
    total_amount REAL NOT NULL CHECK (total_amount > 0),
    location     TEXT NOT NULL CHECK (location IN ('shelf','store')),
    created_at   TEXT NOT NULL
);
CREATE INDEX IF NOT EXISTS idx_purchases_date ON purchases(date);
CREATE INDEX IF NOT EXISTS idx_purchases_vendor ON purchases(vendor_id);
CREATE INDEX IF NOT EXISTS idx_purchases_product ON purchases(product_id);

/* ======================== PAYMENTS ======================== */

CREATE TABLE IF NOT EXISTS payments (
    payment_id    TEXT PRIMARY KEY,
    customer_id   TEXT NOT NULL,
    customer_name TEXT NOT NULL,
    amount        REAL NOT NULL CHECK (amount > 0),
    date          TEXT NOT NULL,
    sale_id       TEXT,
    created_at    TEXT NOT NULL,
    FOREIGN KEY (customer_id) REFERENCES customers(customer_id)
);
CREATE INDEX IF NOT EXISTS idx_payments_date ON payments(date);
CREATE INDEX IF NOT EXISTS idx_payments_customer ON payments(customer_id);
"""


def init_schema(conn: sqlite3.Connection) -> None:
    """Apply the DDL; every statement is idempotent (CREATE ... IF NOT EXISTS)."""
    conn.executescript(SQL)


TABLES = ("products", "vendors", "customers", "sales", "sale_items", "purchases", "payments")
