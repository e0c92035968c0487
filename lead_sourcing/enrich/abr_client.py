"""Australian Business Register (ABR) XML search client: name search and ABN lookup."""

from __future__ import annotations

import asyncio
import logging
import time
import xml.etree.ElementTree as ET
from datetime import date

import httpx

from lead_sourcing.enrich.base import EnrichmentError, NoBusinessDataError, NoIdentifierError
from lead_sourcing.models import Lead

logger = logging.getLogger(__name__)

ABR_BASE_URL = "https://abr.business.gov.au/abrxmlsearch/ABRXMLSearch.asmx"
NAME_SEARCH_ENDPOINT = "/ABRSearchByNameAdvancedSimpleProtocol2017"
ABN_SEARCH_ENDPOINT = "/SearchByABNv202001"

# ABR encodes "no date" as this value
NULL_DATE = "0001-01-01"
SNIPPET_CHARS = 500
SEARCH_SOURCE_NAME = "ABR-Search"

_ALL_STATES = ("NSW", "SA", "VIC", "QLD", "TAS", "WA", "NT", "ACT")


class ABRClient:
    """Async client for the ABR XML search web services.

    All requests are serialised through a lock with a minimum interval
    between them so the registry is never hit in parallel.
    """

    def __init__(
        self,
        guid: str,
        min_interval: float = 0.5,
        timeout: float = 15,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.guid = guid
        self.min_interval = min_interval
        self.timeout = timeout
        self._transport = transport
        self._client: httpx.AsyncClient | None = None
        self._lock: asyncio.Lock | None = None
        self._last_request_time: float = 0

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=ABR_BASE_URL,
                timeout=self.timeout,
                transport=self._transport,
            )
        return self._client

    def _get_lock(self) -> asyncio.Lock:
        if self._lock is None:
            self._lock = asyncio.Lock()
        return self._lock

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    async def _get(self, endpoint: str, params: dict[str, str]) -> str:
        """Paced GET returning the response body. HTTP errors propagate."""
        async with self._get_lock():
            elapsed = time.monotonic() - self._last_request_time
            if elapsed < self.min_interval:
                await asyncio.sleep(self.min_interval - elapsed)
            client = await self._get_client()
            try:
                r = await client.get(endpoint, params={**params, "authenticationGuid": self.guid})
            finally:
                self._last_request_time = time.monotonic()
            r.raise_for_status()
            return r.text

    async def search_by_name(self, keyword: str) -> list[Lead]:
        """Search active ABNs by legal, business and trading name."""
        params = {
            "name": keyword,
            "postcode": "",
            "legalName": "Y",
            "businessName": "Y",
            "tradingName": "Y",
            **{state: "Y" for state in _ALL_STATES},
            "searchWidth": "Typical",
            "minimumScore": "50",
            "maxSearchResults": "200",
            "activeABNsOnly": "Y",
        }
        body = await self._get(NAME_SEARCH_ENDPOINT, params)
        try:
            leads = parse_name_search(body)
        except ET.ParseError as e:
            raise EnrichmentError(f"unparsable ABR search response for {keyword!r}: {e}") from e
        logger.info("ABR search '%s' returned %d results", keyword, len(leads))
        return leads

    async def enrich(self, lead: Lead) -> None:
        """Resolve the ABN (by name if missing) and fill registry attributes."""
        if not lead.name:
            raise EnrichmentError("cannot enrich a lead without a name")

        if not lead.abn:
            matches = await self.search_by_name(lead.name)
            if not matches:
                raise NoIdentifierError(f"no ABN found for {lead.name!r}")
            best = matches[0]
            lead.abn = best.abn
            if not lead.state:
                lead.state = best.state
            logger.debug("Resolved '%s' to ABN %s", lead.name, lead.abn)

        body = await self._get(
            ABN_SEARCH_ENDPOINT,
            {"searchString": lead.abn, "includeHistoricalDetails": "N"},
        )
        if not apply_abn_details(lead, body):
            snippet = body[:SNIPPET_CHARS]
            logger.error("Enrichment missed data for ABN %s: %s", lead.abn, snippet)
            raise NoBusinessDataError(lead.abn, snippet)


# ---------------------------------------------------------------------------
# XML parsing
# ---------------------------------------------------------------------------

def _local(tag) -> str:
    """Lower-cased tag name without namespace."""
    if not isinstance(tag, str):
        return ""
    return tag.rsplit("}", 1)[-1].lower()


def _child(elem: ET.Element, *path: str) -> ET.Element | None:
    for name in path:
        if elem is None:
            return None
        elem = next((c for c in elem if _local(c.tag) == name.lower()), None)
    return elem


def _text(elem: ET.Element | None) -> str:
    if elem is None or elem.text is None:
        return ""
    return elem.text.strip()


def parse_name_search(body: str) -> list[Lead]:
    """Extract ABN candidates from a name search response."""
    root = ET.fromstring(body)
    leads: list[Lead] = []
    for record in root.iter():
        if _local(record.tag) != "searchresultsrecord":
            continue
        abn = _text(_child(record, "ABN", "identifierValue"))
        if not abn:
            continue
        name = (
            _text(_child(record, "mainName", "organisationName"))
            or _text(_child(record, "businessName", "organisationName"))
            or _text(_child(record, "mainTradingName", "organisationName"))
        )
        address = _child(record, "mainBusinessPhysicalAddress")
        leads.append(Lead(
            abn=abn,
            name=name,
            state=_text(_child(address, "stateCode")) if address is not None else "",
            postcode=_text(_child(address, "postcode")) if address is not None else "",
            sources=[SEARCH_SOURCE_NAME],
        ))
    return leads


def _walk(elem: ET.Element):
    """Document-order traversal that does not descend into GST records."""
    yield elem
    if _local(elem.tag) == "goodsandservicestax":
        return
    for child in elem:
        yield from _walk(child)


def apply_abn_details(lead: Lead, body: str) -> bool:
    """Copy registry fields from an ABN lookup into ``lead``.

    Tags are matched wherever they appear. Returns False when the response
    has no entity description (including unparsable responses).
    """
    try:
        root = ET.fromstring(body)
    except ET.ParseError:
        return False

    found_data = False
    for elem in _walk(root):
        tag = _local(elem.tag)
        if tag == "entitydescription":
            lead.entity_type = _text(elem)
            found_data = True
        elif tag == "entitystatuscode":
            lead.entity_status = _text(elem)
        elif tag == "goodsandservicestax":
            effective_from = _text(_child(elem, "effectiveFrom"))
            effective_to = _text(_child(elem, "effectiveTo"))
            if effective_from and effective_to in ("", NULL_DATE):
                lead.gst_registered = True
        elif tag == "effectivefrom":
            # First date only; later entries are history
            if lead.registration_date is None:
                value = _text(elem)
                if value and value != NULL_DATE:
                    try:
                        lead.registration_date = date.fromisoformat(value[:10])
                    except ValueError:
                        logger.debug("Unparsable effectiveFrom %r for ABN %s", value, lead.abn)
        elif tag == "statecode":
            if not lead.state:
                lead.state = _text(elem)
        elif tag == "postcode":
            if not lead.postcode:
                lead.postcode = _text(elem)
    return found_data
