"""NorthLink member directories (Melbourne's north food and manufacturing groups)."""

from __future__ import annotations

import logging

import httpx
from bs4 import BeautifulSoup

from lead_sourcing.models import Lead
from lead_sourcing.sources.http import fetch_html, new_client

logger = logging.getLogger(__name__)

# (url, category, source name)
NORTHLINK_DIRECTORIES = [
    (
        "https://northlink.org.au/melbournes-north-food-group/manufacturer-directory/",
        "Manufacturing",
        "NorthLink-FoodMfg",
    ),
    (
        "https://northlink.org.au/melbournes-north-food-group/service-provider-directory/",
        "Service Provider",
        "NorthLink-FoodSvc",
    ),
    (
        "https://northlink.org.au/melbournes-north-advanced-manufacturing-group/partner-directory/",
        "Manufacturing",
        "NorthLink-MfgPartner",
    ),
]

_PAGE_HEADINGS = {"manufacturers", "service providers"}


class NorthLinkSource:
    """One NorthLink directory page. Each page reports under its own source name."""

    def __init__(
        self,
        url: str,
        category: str,
        name: str,
        timeout: float = 15,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.url = url
        self.category = category
        self.name = name
        self.timeout = timeout
        self.transport = transport

    async def fetch(self) -> list[Lead]:
        logger.info("Starting NorthLink scrape of %s", self.url)
        async with new_client(self.timeout, self.transport) as client:
            html = await fetch_html(client, self.url)
        leads = self.parse(html)
        if not leads:
            logger.warning(
                "%s yielded 0 leads; the page may lazy-load or use a different widget",
                self.name,
            )
        return leads

    def parse(self, html: str) -> list[Lead]:
        soup = BeautifulSoup(html, "html.parser")
        leads = []

        # Heading widgets carry the company name and website
        for widget in soup.select(".elementor-widget-heading"):
            title = widget.select_one(".elementor-heading-title")
            if title is None:
                continue
            name = title.get_text(strip=True)
            if len(name) <= 1 or name.lower() in _PAGE_HEADINGS:
                continue
            link = title.select_one("a") if title.name != "a" else title
            leads.append(Lead(
                name=name,
                category=self.category,
                sources=[self.name],
                found_at_url=(link.get("href", "") if link is not None else ""),
            ))

        # Some pages list names as bold text inside text-editor widgets
        for strong in soup.select(".elementor-widget-text-editor p strong"):
            name = strong.get_text(strip=True)
            if len(name) > 3 and "(" not in name:  # skip phone numbers
                leads.append(Lead(name=name, category=self.category, sources=[self.name]))

        return leads
