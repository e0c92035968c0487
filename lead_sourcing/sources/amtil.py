"""AMTIL (Australian Manufacturing Technology Institute) member directory."""

from __future__ import annotations

import asyncio
import logging
import random

import httpx
from bs4 import BeautifulSoup

from lead_sourcing.models import Lead
from lead_sourcing.sources.base import state_from_location
from lead_sourcing.sources.http import USER_AGENTS, fetch_html, get_headers, new_client

logger = logging.getLogger(__name__)

AMTIL_HOME = "https://amtil.com.au/"
AMTIL_DIRECTORY = "https://amtil.com.au/directory/"


class AMTILSource:
    name = "AMTIL"

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
            # Warm up a session cookie on the home page first
            logger.info("Warming up AMTIL session")
            try:
                await fetch_html(client, AMTIL_HOME, get_headers(ua))
            except httpx.HTTPError as e:
                logger.debug("AMTIL warm-up failed: %s", e)
            await asyncio.sleep(self.delay)
            html = await fetch_html(client, AMTIL_DIRECTORY, get_headers(ua, referer=AMTIL_HOME))
        return self.parse(html)

    def parse(self, html: str) -> list[Lead]:
        soup = BeautifulSoup(html, "html.parser")
        leads = []
        for row in soup.find_all("tr"):
            cells = row.find_all("td")
            if not cells:
                continue
            name = cells[0].get_text(strip=True)
            if len(name) <= 2 or not _is_valid_company(name):
                continue
            location = cells[1].get_text(" ", strip=True) if len(cells) > 1 else ""
            leads.append(Lead(
                name=name,
                category="Manufacturing",
                state=state_from_location(location),
                sources=[self.name],
                found_at_url=AMTIL_DIRECTORY,
            ))
        return leads


def _is_valid_company(name: str) -> bool:
    lower = name.lower()
    return lower not in ("company name", "location") and "amtil" not in lower
