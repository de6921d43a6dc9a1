"""SQLite database schema definition."""

import sqlite3
from pathlib import Path

SCHEMA_VERSION = 1

SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS schema_version (
    version INTEGER PRIMARY KEY,
    applied_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS trades (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    side TEXT NOT NULL,
    trade_date TEXT NOT NULL,
    trade_time TEXT NOT NULL DEFAULT '00:00',
    amount TEXT NOT NULL,
    rate TEXT NOT NULL,
    currency TEXT NOT NULL,
    commission_pct TEXT,
    bank_commission TEXT NOT NULL DEFAULT '0',
    bank TEXT,
    gain TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS movements (
    seq INTEGER PRIMARY KEY AUTOINCREMENT,
    id TEXT NOT NULL UNIQUE,
    direction TEXT NOT NULL,
    account TEXT NOT NULL,
    movement_date TEXT NOT NULL,
    movement_time TEXT NOT NULL DEFAULT '00:00',
    amount TEXT NOT NULL,
    reference_rate TEXT,
    bank TEXT,
    description TEXT,
    created_at TEXT NOT NULL DEFAULT (datetime('now'))
);

CREATE TABLE IF NOT EXISTS lots (
    position INTEGER PRIMARY KEY,
    id TEXT NOT NULL,
    acquired_date TEXT NOT NULL,
    acquired_time TEXT NOT NULL DEFAULT '00:00',
    unit_cost TEXT NOT NULL,
    original_quantity TEXT NOT NULL,
    remaining_quantity TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS last_rates (
    kind TEXT NOT NULL,
    currency TEXT NOT NULL,
    rate TEXT NOT NULL,
    PRIMARY KEY (kind, currency)
);

CREATE TABLE IF NOT EXISTS recompute_runs (
    id TEXT PRIMARY KEY,
    run_at TEXT NOT NULL DEFAULT (datetime('now')),
    reason TEXT NOT NULL,
    trades INTEGER NOT NULL DEFAULT 0,
    movements INTEGER NOT NULL DEFAULT 0,
    lots INTEGER NOT NULL DEFAULT 0,
    total_quantity TEXT NOT NULL,
    total_gain TEXT NOT NULL
);

CREATE TABLE IF NOT EXISTS audit_log (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    timestamp TEXT NOT NULL DEFAULT (datetime('now')),
    engine TEXT NOT NULL,
    operation TEXT NOT NULL,
    inputs TEXT NOT NULL,
    output TEXT NOT NULL,
    notes TEXT
);
"""


def create_schema(db_path: Path) -> sqlite3.Connection:
    """Create the database schema. Returns the connection."""
    conn = sqlite3.connect(str(db_path))
    conn.execute("PRAGMA journal_mode=WAL")
    conn.execute("PRAGMA foreign_keys=ON")
    conn.executescript(SCHEMA_SQL)
    conn.execute(
        "INSERT OR IGNORE INTO schema_version (version) VALUES (?)",
        (SCHEMA_VERSION,),
    )
    conn.commit()
    return conn
