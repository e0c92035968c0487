"""Registered Training Organisations from the training.gov.au search API."""

from __future__ import annotations

import logging

import httpx

from lead_sourcing.models import Lead
from lead_sourcing.sources.http import get_headers, new_client

logger = logging.getLogger(__name__)

TGA_SEARCH_URL = "https://training.gov.au/api/search/organisation"
TGA_DETAILS_URL = "https://training.gov.au/organisation/details/{code}"


class RTOSource:
    name = "RTO"

    def __init__(
        self,
        timeout: float = 15,
        page_size: int = 50,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.timeout = timeout
        self.page_size = page_size
        self.transport = transport

    async def fetch(self) -> list[Lead]:
        params = {
            "api-version": "1.0",
            "searchText": "",
            "offset": "0",
            "pageSize": str(self.page_size),
            "includeTotalCount": "true",
            "orderBy": "score desc",
            "filter": "(IsRto eq true)",
        }
        headers = get_headers(referer="https://training.gov.au/search")
        headers["Accept"] = "application/json, text/plain, */*"

        logger.info("Querying RTO API %s", TGA_SEARCH_URL)
        async with new_client(self.timeout, self.transport) as client:
            r = await client.get(TGA_SEARCH_URL, params=params, headers=headers)
            if r.status_code != 200:
                raise RuntimeError(f"TGA API returned status {r.status_code}")
            try:
                data = r.json()
            except ValueError as e:
                raise RuntimeError(f"failed to decode TGA JSON: {e}") from e

        leads = [lead for item in data.get("data", []) or [] if (lead := self._parse_item(item))]
        logger.info(
            "RTO API fetch complete: %s in system, %d ingested",
            data.get("totalCount"), len(leads),
        )
        return leads

    def _parse_item(self, item: dict) -> Lead | None:
        status = ((item.get("registration") or {}).get("statusLabel") or "")
        if status.lower() != "current":
            return None
        abns = item.get("abns") or []
        office = item.get("headOfficeAddress") or {}
        return Lead(
            abn=abns[0] if abns else "",
            name=item.get("legalName", "") or "",
            category="Education/Training",
            state=((office.get("state") or {}).get("abbreviation") or ""),
            postcode=office.get("postCode", "") or "",
            sources=[self.name],
            found_at_url=TGA_DETAILS_URL.format(code=item.get("code", "")),
        )
