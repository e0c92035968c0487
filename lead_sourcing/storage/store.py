"""DuckDB-backed lead store: name lookup, upsert-merge, CSV export and filtered delete."""

from __future__ import annotations

import csv
import logging
from datetime import date, datetime
from pathlib import Path

from lead_sourcing.models import DeleteFilters, Lead
from lead_sourcing.storage.database import Database

logger = logging.getLogger(__name__)

_SCHEMA = """
CREATE TABLE IF NOT EXISTS leads (
    abn TEXT PRIMARY KEY,
    name TEXT,
    category TEXT,
    sources TEXT,
    entity_type TEXT,
    entity_status TEXT,
    state TEXT,
    postcode TEXT,
    registration_date DATE,
    gst_registered BOOLEAN,
    found_at_url TEXT,
    business_url TEXT,
    updated_at TIMESTAMP
)
"""

_LEAD_COLUMNS = [
    "abn", "name", "category", "sources", "entity_type", "entity_status",
    "state", "postcode", "registration_date", "gst_registered",
    "found_at_url", "business_url",
]

EXPORT_COLUMNS = [
    "abn", "name", "category", "sources", "state", "postcode",
    "registration_date", "found_at_url",
]


class LeadStore:
    """Authoritative set of selected leads, keyed by ABN.

    Not safe for concurrent writers; the pipeline calls it from a single task.
    """

    def __init__(self, db: Database):
        self.db = db

    @classmethod
    def open(cls, db_path: str) -> LeadStore:
        db = Database(db_path)
        db.connect()
        store = cls(db)
        store.init()
        return store

    def init(self) -> None:
        self.db.execute(_SCHEMA)
        # Databases created before business_url was tracked
        self.db.execute("ALTER TABLE leads ADD COLUMN IF NOT EXISTS business_url TEXT")

    def close(self) -> None:
        self.db.close()

    # --- Identity lookup ---

    def lookup_by_name(self, name: str) -> Lead | None:
        """Case-insensitive exact match on name. Returns None when absent."""
        row = self.db.fetchone(
            f"SELECT {', '.join(_LEAD_COLUMNS)} FROM leads WHERE lower(name) = ? LIMIT 1",
            [name.strip().lower()],
        )
        if row is None:
            return None
        return _row_to_lead(row)

    def count(self) -> int:
        row = self.db.fetchone("SELECT COUNT(*) FROM leads")
        return int(row[0]) if row else 0

    # --- Upsert ---

    def upsert(self, lead: Lead) -> bool:
        """Insert a new lead or merge sources into the stored one.

        Returns True when the ABN was not stored before. On an existing ABN
        only ``sources`` (set union) and ``updated_at`` change.
        """
        if not lead.abn:
            raise ValueError(f"cannot store lead {lead.name!r} without an ABN")

        now = datetime.now()
        row = self.db.fetchone("SELECT sources FROM leads WHERE abn = ?", [lead.abn])
        if row is None:
            self.db.execute(
                f"INSERT INTO leads ({', '.join(_LEAD_COLUMNS)}, updated_at) "
                f"VALUES ({', '.join('?' * (len(_LEAD_COLUMNS) + 1))})",
                [
                    lead.abn, lead.name, lead.category, ",".join(lead.sources),
                    lead.entity_type, lead.entity_status, lead.state, lead.postcode,
                    lead.registration_date, lead.gst_registered,
                    lead.found_at_url, lead.business_url, now,
                ],
            )
            return True

        merged = Lead(sources=row[0])
        merged.add_sources(*lead.sources)
        self.db.execute(
            "UPDATE leads SET sources = ?, updated_at = ? WHERE abn = ?",
            [",".join(merged.sources), now, lead.abn],
        )
        return False

    # --- Export ---

    def export_csv(
        self,
        path: str | Path,
        min_age: int,
        states: list[str] | tuple[str, ...] = (),
        sources: list[str] | tuple[str, ...] = (),
        today: date | None = None,
    ) -> int:
        """Write eligible leads to ``path`` ordered by registration date.

        The age cutoff is recomputed from ``min_age`` here, independent of the
        check made at ingestion time. An unknown registration date counts as
        age 0, so those leads pass only when ``min_age`` is 0. Returns the
        number of rows written.
        """
        cutoff = years_before(today or date.today(), min_age)
        where = [
            "(registration_date <= ? OR (registration_date IS NULL AND ? = 0))",
            "gst_registered = TRUE",
            "lower(entity_type) NOT LIKE '%public company%'",
            "lower(entity_type) NOT LIKE '%government%'",
        ]
        params: list = [cutoff, min_age]
        _add_state_filter(where, params, states)

        wanted = [s.strip().upper() for s in sources if s and s.strip()]
        if wanted:
            where.append("(" + " OR ".join("contains(upper(sources), ?)" for _ in wanted) + ")")
            params.extend(wanted)

        columns, rows = self.db.query(
            f"SELECT {', '.join(EXPORT_COLUMNS)} FROM leads "
            f"WHERE {' AND '.join(where)} "
            "ORDER BY registration_date ASC, abn ASC",
            params,
        )
        _write_csv(path, columns, rows)
        logger.info("Exported %d leads to %s", len(rows), path)
        return len(rows)

    def search_csv(
        self,
        path: str | Path,
        name: str | None = None,
        states: list[str] | tuple[str, ...] = (),
        min_age: int = 0,
        today: date | None = None,
    ) -> int:
        """Maintenance search: GST-registered leads matching the given filters, all columns."""
        where = ["gst_registered = TRUE"]
        params: list = []
        if name:
            where.append("contains(lower(name), ?)")
            params.append(name.strip().lower())
        _add_state_filter(where, params, states)
        if min_age > 0:
            where.append("registration_date <= ?")
            params.append(years_before(today or date.today(), min_age))

        columns, rows = self.db.query(
            f"SELECT * FROM leads WHERE {' AND '.join(where)} "
            "ORDER BY registration_date ASC, abn ASC",
            params,
        )
        _write_csv(path, columns, rows)
        logger.info("Search matched %d leads, written to %s", len(rows), path)
        return len(rows)

    # --- Delete ---

    def delete(self, filters: DeleteFilters, today: date | None = None) -> int:
        """Delete leads matching every given predicate. Returns rows deleted.

        Raises ValueError if no predicate is set.
        """
        active = filters.active()
        if not active:
            raise ValueError("no filters provided")

        conditions: list[str] = []
        params: list = []
        if "name" in active:
            conditions.append("lower(name) = ?")
            params.append(str(active["name"]).strip().lower())
        if "abn" in active:
            conditions.append("abn = ?")
            params.append(str(active["abn"]).replace(" ", ""))
        if "age" in active:
            age = int(active["age"])
            today = today or date.today()
            # Leads whose age in whole years is exactly ``age``
            conditions.append("registration_date > ? AND registration_date <= ?")
            params.extend([years_before(today, age + 1), years_before(today, age)])
        if "source" in active:
            conditions.append("contains(upper(sources), ?)")
            params.append(str(active["source"]).strip().upper())

        deleted = self.db.update(f"DELETE FROM leads WHERE {' AND '.join(conditions)}", params)
        logger.info("Deleted %d leads matching %s", deleted, active)
        return deleted


def years_before(today: date, years: int) -> date:
    """``today`` shifted back by whole years; 29 Feb rolls to 1 Mar."""
    try:
        return today.replace(year=today.year - years)
    except ValueError:
        return date(today.year - years, 3, 1)


def _add_state_filter(where: list[str], params: list, states) -> None:
    wanted = [s.strip().upper() for s in states if s and s.strip()]
    if wanted:
        where.append(f"upper(state) IN ({', '.join('?' * len(wanted))})")
        params.extend(wanted)


def _row_to_lead(row: tuple) -> Lead:
    data = dict(zip(_LEAD_COLUMNS, row))
    return Lead(**{k: v for k, v in data.items() if v is not None})


def _format_cell(value) -> str:
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (date, datetime)):
        return value.isoformat()
    return str(value)


def _write_csv(path: str | Path, columns: list[str], rows: list[tuple]) -> None:
    with Path(path).open("w", newline="", encoding="utf-8") as handle:
        writer = csv.writer(handle)
        writer.writerow(columns)
        for row in rows:
            writer.writerow([_format_cell(v) for v in row])
