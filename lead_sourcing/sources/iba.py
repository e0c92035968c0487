"""Independent Brewers Association member breweries."""

from __future__ import annotations

import logging

import httpx
from bs4 import BeautifulSoup

from lead_sourcing.models import Lead
from lead_sourcing.sources.base import state_from_location
from lead_sourcing.sources.http import fetch_html, new_client

logger = logging.getLogger(__name__)

IBA_MEMBERS = "https://independentbrewers.org.au/brewery-members/"


class IBASource:
    name = "IBA"

    def __init__(self, timeout: float = 15, transport: httpx.AsyncBaseTransport | None = None):
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> list[Lead]:
        logger.info("Starting IBA scrape of %s", IBA_MEMBERS)
        async with new_client(self.timeout, self.transport) as client:
            html = await fetch_html(client, IBA_MEMBERS)
        leads = self.parse(html)
        if not leads:
            logger.warning("IBA scrape yielded 0 results; check whether selectors have changed")
        return leads

    def parse(self, html: str) -> list[Lead]:
        soup = BeautifulSoup(html, "html.parser")
        leads = []
        for card in soup.select(".x-col"):
            title = card.select_one(".x-text-content-text-primary")
            name = title.get_text(strip=True) if title else ""
            if not name:
                continue
            # Location reads like "ALEXANDRIA NSW"; without a code the registry fills it
            location = card.select_one(".x-text.x-content")
            image_link = card.select_one("a.x-image")
            leads.append(Lead(
                name=name,
                category="Brewing/Manufacturing",
                state=state_from_location(location.get_text(" ", strip=True)) if location else "",
                sources=[self.name],
                found_at_url=image_link.get("href", "") if image_link else "",
            ))
        return leads
