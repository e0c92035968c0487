"""HTTP helpers for directory scrapers: browser-like headers, one attempt per request."""

from __future__ import annotations

import logging
import random

import httpx

logger = logging.getLogger(__name__)

# Rotate through realistic user agents to avoid basic bot detection
USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/121.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64; rv:126.0) Gecko/20100101 Firefox/126.0",
]


def get_headers(user_agent: str | None = None, referer: str | None = None) -> dict[str, str]:
    headers = {
        "User-Agent": user_agent or random.choice(USER_AGENTS),
        "Accept": "text/html,application/xhtml+xml,application/xml;q=0.9,*/*;q=0.8",
        "Accept-Language": "en-AU,en;q=0.9",
    }
    if referer:
        headers["Referer"] = referer
    return headers


def new_client(
    timeout: float,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """Client owned by one source for the duration of one fetch."""
    return httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        max_redirects=5,
        transport=transport,
    )


async def fetch_html(
    client: httpx.AsyncClient,
    url: str,
    headers: dict[str, str] | None = None,
) -> str:
    """GET ``url`` and return its body. Raises httpx.HTTPStatusError on 4xx/5xx."""
    response = await client.get(url, headers=headers or get_headers())
    response.raise_for_status()
    logger.debug("Fetched %s (%d bytes)", url, len(response.text))
    return response.text
