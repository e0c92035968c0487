"""Registry enrichment: resolve ABNs and authoritative business attributes."""

from lead_sourcing.enrich.abr_client import ABRClient
from lead_sourcing.enrich.base import (
    Enricher,
    EnrichmentError,
    NoBusinessDataError,
    NoIdentifierError,
)

__all__ = [
    "ABRClient",
    "Enricher",
    "EnrichmentError",
    "NoBusinessDataError",
    "NoIdentifierError",
]
