from __future__ import annotations

from datetime import date
from pathlib import Path

import pytest

from lead_sourcing.enrich.base import NoIdentifierError
from lead_sourcing.models import Lead
from lead_sourcing.storage.store import LeadStore

TODAY = date(2026, 6, 15)


class FakeSource:
    def __init__(self, name: str, leads: list[Lead] | None = None, error: Exception | None = None):
        self.name = name
        self.leads = leads or []
        self.error = error
        self.calls = 0

    async def fetch(self) -> list[Lead]:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return [lead.model_copy(deep=True) for lead in self.leads]


class FakeEnricher:
    """Fills leads from a name -> attributes table; unknown names fail."""

    def __init__(self, registry: dict[str, dict] | None = None):
        self.registry = registry or {}
        self.calls: list[str] = []

    async def enrich(self, lead: Lead) -> None:
        self.calls.append(lead.name)
        attrs = self.registry.get(lead.name)
        if attrs is None:
            raise NoIdentifierError(f"no ABN found for {lead.name!r}")
        for key, value in attrs.items():
            setattr(lead, key, value)


def eligible_attrs(abn: str, **overrides) -> dict:
    attrs = {
        "abn": abn,
        "entity_type": "Australian Private Company",
        "entity_status": "Active",
        "state": "VIC",
        "postcode": "3000",
        "registration_date": date(2005, 3, 1),
        "gst_registered": True,
    }
    attrs.update(overrides)
    return attrs


def make_lead(abn: str = "11111111111", name: str = "Acme Pty Ltd", **overrides) -> Lead:
    return Lead(name=name, sources=overrides.pop("sources", ["TestSource"]), **eligible_attrs(abn, **overrides))


@pytest.fixture()
def store(tmp_path: Path):
    s = LeadStore.open(str(tmp_path / "leads.duckdb"))
    yield s
    s.close()
