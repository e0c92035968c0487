"""SEMMA (South East Melbourne Manufacturers Alliance) members directory."""

from __future__ import annotations

import asyncio
import logging
import random

import httpx
from bs4 import BeautifulSoup

from lead_sourcing.models import Lead
from lead_sourcing.sources.http import USER_AGENTS, fetch_html, get_headers, new_client

logger = logging.getLogger(__name__)

SEMMA_HOME = "https://semma.com.au/"
SEMMA_DIRECTORY = "https://semma.com.au/members-directory/"


class SEMMASource:
    name = "SEMMA"

    def __init__(
        self,
        delay: float = 2.0,
        timeout: float = 15,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.delay = delay
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> list[Lead]:
        ua = random.choice(USER_AGENTS)
        async with new_client(self.timeout, self.transport) as client:
            logger.info("Warming up SEMMA session")
            try:
                await fetch_html(client, SEMMA_HOME, get_headers(ua))
            except httpx.HTTPError as e:
                logger.debug("SEMMA warm-up failed: %s", e)
            await asyncio.sleep(self.delay)
            html = await fetch_html(client, SEMMA_DIRECTORY, get_headers(ua, referer=SEMMA_HOME))
        return self.parse(html)

    def parse(self, html: str) -> list[Lead]:
        soup = BeautifulSoup(html, "html.parser")
        leads = []
        seen: set[str] = set()
        for link in soup.select("h3.entry-title a"):
            name = link.get_text(strip=True)
            if len(name) <= 2 or name in seen:
                continue
            seen.add(name)
            leads.append(Lead(
                name=name,
                category="Manufacturing",
                state="VIC",  # South East Melbourne
                sources=[self.name],
                found_at_url=SEMMA_DIRECTORY,
            ))
        return leads
