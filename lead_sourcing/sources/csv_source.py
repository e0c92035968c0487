"""Local CSV file as a lead source."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path

import pandas as pd

from lead_sourcing.models import Lead

logger = logging.getLogger(__name__)


class CSVSource:
    """Reads ``abn, name, category, state, url`` columns (any case, any order)."""

    name = "CSV"

    def __init__(self, path: str):
        self.path = path

    async def fetch(self) -> list[Lead]:
        return await asyncio.to_thread(self._read)

    def _read(self) -> list[Lead]:
        path = Path(self.path)
        if not path.exists():
            raise FileNotFoundError(f"could not open csv: {self.path}")

        df = pd.read_csv(path, dtype=str).fillna("")
        df.columns = [str(c).strip().lower() for c in df.columns]

        def get(row, key: str) -> str:
            return str(row[key]).strip() if key in row else ""

        leads = []
        for _, row in df.iterrows():
            leads.append(Lead(
                abn=get(row, "abn"),
                name=get(row, "name"),
                category=get(row, "category"),
                state=get(row, "state").upper(),
                found_at_url=get(row, "url"),
                sources=[self.name],
            ))
        logger.info("Read %d rows from %s", len(leads), self.path)
        return leads
