"""DuckDB connection manager for the lead store."""

from __future__ import annotations

import logging
from pathlib import Path

import duckdb

logger = logging.getLogger(__name__)

_DEFAULT_DB = "out/sourcing.duckdb"


class Database:
    """Thin wrapper around a duckdb connection with fetch helpers.

    DuckDB holds an exclusive lock on the file while a read-write connection
    is open, so a second process connecting to the same file fails here.
    """

    def __init__(self, db_path: str = _DEFAULT_DB):
        self.db_path = db_path
        self.conn: duckdb.DuckDBPyConnection | None = None

    def connect(self) -> None:
        if self.db_path != ":memory:":
            Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)
        self.conn = duckdb.connect(self.db_path)
        logger.debug("Connected to %s", self.db_path)

    def close(self) -> None:
        if self.conn:
            self.conn.close()
            self.conn = None

    def execute(self, sql: str, params: list | tuple = ()) -> duckdb.DuckDBPyConnection:
        assert self.conn, "Database not connected"
        return self.conn.execute(sql, list(params))

    def fetchone(self, sql: str, params: list | tuple = ()) -> tuple | None:
        return self.execute(sql, params).fetchone()

    def fetchall(self, sql: str, params: list | tuple = ()) -> list[tuple]:
        return self.execute(sql, params).fetchall()

    def query(self, sql: str, params: list | tuple = ()) -> tuple[list[str], list[tuple]]:
        """Run a SELECT and return (column names, rows)."""
        cur = self.execute(sql, params)
        columns = [d[0] for d in cur.description]
        return columns, cur.fetchall()

    def update(self, sql: str, params: list | tuple = ()) -> int:
        """Run an INSERT/UPDATE/DELETE and return the affected row count."""
        row = self.execute(sql, params).fetchone()
        return int(row[0]) if row else 0
