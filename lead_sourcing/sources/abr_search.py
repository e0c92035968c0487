"""ABR keyword search as a lead source (leads arrive with an ABN already set)."""

from __future__ import annotations

import logging

import httpx

from lead_sourcing.enrich.abr_client import SEARCH_SOURCE_NAME, ABRClient
from lead_sourcing.enrich.base import EnrichmentError
from lead_sourcing.models import Lead

logger = logging.getLogger(__name__)


class ABRSearchSource:
    """Runs one ABR name search per keyword.

    Pacing comes from the shared client, which spaces out every ABR request.
    """

    name = SEARCH_SOURCE_NAME

    def __init__(self, client: ABRClient, keywords: list[str], default_keywords: list[str]):
        clean = [k.strip() for k in keywords if k and k.strip()]
        self.client = client
        self.keywords = clean or list(default_keywords)

    async def fetch(self) -> list[Lead]:
        leads: list[Lead] = []
        for keyword in self.keywords:
            logger.info("Searching ABR for '%s'", keyword)
            try:
                leads.extend(await self.client.search_by_name(keyword))
            except (httpx.HTTPError, EnrichmentError) as e:
                logger.error("ABR search failed for '%s': %s", keyword, e)
        return leads
