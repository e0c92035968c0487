"""Australian Manufacturing business directory, paged through the theme's AJAX endpoint."""

from __future__ import annotations

import asyncio
import logging

import httpx
from bs4 import BeautifulSoup

from lead_sourcing.models import Lead
from lead_sourcing.sources.http import get_headers, new_client

logger = logging.getLogger(__name__)

AJAX_URL = "https://www.australianmanufacturing.com.au/wp-admin/admin-ajax.php"
BLOCK_ID = "tdi_74"
MAX_PAGES = 100


class AustMfgSource:
    """Pages until an empty page, a failed page or MAX_PAGES."""

    name = "AustMfg"

    def __init__(
        self,
        delay: float = 0.5,
        timeout: float = 15,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.delay = delay
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> list[Lead]:
        all_leads: list[Lead] = []
        async with new_client(self.timeout, self.transport) as client:
            for page in range(1, MAX_PAGES + 1):
                logger.info("Scraping AustMfg AJAX page %d", page)
                try:
                    leads = await self._fetch_page(client, page)
                except httpx.HTTPError as e:
                    logger.error("Error fetching AustMfg page %d: %s", page, e)
                    break
                if not leads:
                    logger.info("No more AustMfg leads after %d", len(all_leads))
                    break
                all_leads.extend(leads)
                await asyncio.sleep(self.delay)
        return all_leads

    async def _fetch_page(self, client: httpx.AsyncClient, page: int) -> list[Lead]:
        form = {
            "action": "td_ajax_block",
            "td_atts[block_id]": BLOCK_ID,
            "td_current_page": str(page),
            "td_column_number": "3",
            "td_block_id": BLOCK_ID,
        }
        r = await client.post(
            AJAX_URL,
            params={"td_theme_name": "Newspaper", "v": "12.6.9"},
            data=form,
            headers=get_headers(),
        )
        r.raise_for_status()
        try:
            payload = r.json()
            html = payload.get("td_data", "") if isinstance(payload, dict) else ""
        except ValueError:
            html = r.text
        return self.parse(html)

    def parse(self, html: str) -> list[Lead]:
        soup = BeautifulSoup(html, "html.parser")
        leads = []
        for card in soup.select(".td_module_wrap"):
            link = card.select_one(".entry-title a")
            if link is None:
                continue
            name = link.get_text(strip=True)
            href = link.get("href", "")
            # Directory entries only, not news posts
            if not name or "/business-directory/" not in href:
                continue
            category = card.select_one(".td-post-category")
            leads.append(Lead(
                name=name,
                category=category.get_text(strip=True) if category else "",
                sources=[self.name],
                found_at_url=href,
            ))
        return leads
