"""Enricher contract and failure types."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from lead_sourcing.models import Lead


class EnrichmentError(Exception):
    """The lead could not be enriched and is dropped for this run."""


class NoIdentifierError(EnrichmentError):
    """Name search returned no ABN candidates."""


class NoBusinessDataError(EnrichmentError):
    """ABN lookup response contained none of the expected registry fields."""

    def __init__(self, abn: str, snippet: str):
        super().__init__(f"no business data found for ABN {abn}")
        self.abn = abn
        self.snippet = snippet


@runtime_checkable
class Enricher(Protocol):
    """Fills the ABN and registry attributes of a lead in place."""

    async def enrich(self, lead: Lead) -> None:
        ...
