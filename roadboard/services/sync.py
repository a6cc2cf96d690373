"""
Copy every roadboard table from another database into the app database,
e.g. a legacy SQLite file into PostgreSQL. Ids are kept as-is.

Modes:
  merge   - rows whose primary key already exists in the target are skipped,
            so re-runs are safe.
  replace - target tables are emptied first (children before parents).
"""
from __future__ import annotations

from typing import Dict

from flask import current_app
from sqlalchemy import create_engine, inspect, select
from sqlalchemy.engine import Engine

from roadboard.extensions import db

SYNC_MODES = ("merge", "replace")


def _source_rows(source: Engine, table) -> list:
    insp = inspect(source)
    if not insp.has_table(table.name):
        return []
    # Older sources may lack newer columns (e.g. user_feedback.sort_order)
    present = {c["name"] for c in insp.get_columns(table.name)}
    cols = [c for c in table.columns if c.name in present]
    with source.connect() as conn:
        return [dict(row._mapping) for row in conn.execute(select(*cols))]


def _existing_keys(conn, table) -> set:
    pk = list(table.primary_key.columns)
    return {tuple(row) for row in conn.execute(select(*pk))}


def sync_database(source_url: str, *, mode: str = "merge", target: Engine = None) -> Dict[str, int]:
    """Returns {table name: rows inserted}."""
    if mode not in SYNC_MODES:
        raise ValueError(f"unknown sync mode {mode!r}")

    source = create_engine(source_url)
    target = target or db.engine
    tables = list(db.metadata.sorted_tables)
    inserted: Dict[str, int] = {}

    try:
        rows_by_table = {t.name: _source_rows(source, t) for t in tables}
    finally:
        source.dispose()

    with target.begin() as conn:
        if mode == "replace":
            for table in reversed(tables):
                conn.execute(table.delete())

        for table in tables:
            rows = rows_by_table[table.name]
            if rows and mode == "merge":
                existing = _existing_keys(conn, table)
                pk_names = [c.name for c in table.primary_key.columns]
                rows = [r for r in rows if tuple(r.get(n) for n in pk_names) not in existing]
            if rows:
                conn.execute(table.insert(), rows)
            inserted[table.name] = len(rows)

    current_app.logger.info("db_sync_done", extra={"event": "db_sync_done", "mode": mode, "inserted": inserted})
    return inserted
