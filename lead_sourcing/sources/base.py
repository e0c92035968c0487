"""Source contract shared by every lead adapter."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable

import httpx

from lead_sourcing.config import Config
from lead_sourcing.enrich.abr_client import ABRClient
from lead_sourcing.models import Lead


@runtime_checkable
class Source(Protocol):
    """A fetchable origin of candidate leads.

    ``fetch`` raises on failure; the pipeline isolates it from other sources.
    Implementations must not share mutable state with other sources.
    """

    name: str

    async def fetch(self) -> list[Lead]:
        ...


@dataclass
class SourceContext:
    """Everything a source factory may need to build its adapters."""
    config: Config
    registry: ABRClient
    transport: httpx.AsyncBaseTransport | None = None


STATE_CODES = {"VIC", "NSW", "QLD", "WA", "SA", "TAS", "ACT", "NT"}


def state_from_location(location: str) -> str:
    """Trailing state code of a location like ``"ALEXANDRIA NSW"``, else ``""``."""
    parts = location.split()
    if parts and parts[-1].upper() in STATE_CODES:
        return parts[-1].upper()
    return ""
