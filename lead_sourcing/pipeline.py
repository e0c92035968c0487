"""Async pipeline orchestration: concurrent source fetch, then single-writer consolidation."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import date
from pathlib import Path

import duckdb
import httpx

from lead_sourcing.eligibility import EligibilityPolicy, evaluate
from lead_sourcing.enrich.base import Enricher, EnrichmentError
from lead_sourcing.models import Lead
from lead_sourcing.sources.base import Source
from lead_sourcing.stats import RunStats
from lead_sourcing.storage.store import LeadStore

logger = logging.getLogger(__name__)


@dataclass
class FetchResult:
    """Everything one source produced in a run: leads, or the error that replaced them."""
    source: str
    leads: list[Lead] = field(default_factory=list)
    error: Exception | None = None


@dataclass
class PipelineResult:
    stats: RunStats
    export_path: Path | None = None
    exported: int = 0
    export_error: str | None = None


class SourcingPipeline:
    """Fetch all sources concurrently, then enrich, filter and store each candidate.

    Sources run as parallel tasks feeding one queue. A single consumer drains
    the queue, so the store and the enricher are only ever used by one task.
    """

    def __init__(
        self,
        sources: list[Source],
        enricher: Enricher,
        store: LeadStore,
        policy: EligibilityPolicy,
        source_timeout: float = 300,
        today: date | None = None,
    ):
        self.sources = list(sources)
        self.enricher = enricher
        self.store = store
        self.policy = policy
        self.source_timeout = source_timeout
        self.today = today

    async def run(
        self,
        export_path: str | Path | None = None,
        export_sources: list[str] | tuple[str, ...] = (),
    ) -> PipelineResult:
        """Consolidate every source, then export if ``export_path`` is given.

        The export step runs no matter how many candidates failed.
        """
        stats = RunStats()
        result = PipelineResult(stats=stats)

        if not self.sources:
            logger.warning("No sources configured")

        queue: asyncio.Queue[FetchResult | None] = asyncio.Queue(maxsize=len(self.sources) + 1)
        producer = asyncio.create_task(self._fan_out(queue))
        try:
            while (fetched := await queue.get()) is not None:
                if fetched.error is None:
                    await self._consolidate(fetched, stats)
        finally:
            if not producer.done():
                producer.cancel()
            await asyncio.gather(producer, return_exceptions=True)

        counts = stats.as_dict()
        logger.info(
            "Pipeline complete: found=%d selected=%d new=%d updated=%d skipped=%d errors=%d",
            counts["found"], counts["selected"], counts["new"],
            counts["updated"], counts["skipped"], counts["error"],
        )

        if export_path is not None:
            result.export_path = Path(export_path)
            try:
                result.exported = self.export(export_path, export_sources)
            except (duckdb.Error, OSError) as e:
                logger.error("Export failed: %s", e)
                stats.incr("error")
                result.export_error = str(e)
        return result

    def export(self, path: str | Path, sources: list[str] | tuple[str, ...] = ()) -> int:
        return self.store.export_csv(
            path,
            self.policy.min_age,
            states=self.policy.states,
            sources=sources,
            today=self.today,
        )

    # --- Fan-out ---

    async def _fan_out(self, queue: asyncio.Queue) -> None:
        """Run every source at once; enqueue the end marker after all have finished."""
        try:
            outcomes = await asyncio.gather(
                *(self._fetch_one(s, queue) for s in self.sources),
                return_exceptions=True,
            )
            for source, outcome in zip(self.sources, outcomes):
                if isinstance(outcome, BaseException):
                    logger.error(
                        "Worker for %s crashed: %s: %s",
                        source.name, type(outcome).__name__, outcome,
                    )
        finally:
            # Each worker puts at most one result, so there is always room
            queue.put_nowait(None)

    async def _fetch_one(self, source: Source, queue: asyncio.Queue) -> None:
        try:
            leads = list(await asyncio.wait_for(source.fetch(), timeout=self.source_timeout) or [])
        except Exception as e:
            logger.error("Fetch failed for %s: %s: %s", source.name, type(e).__name__, e)
            queue.put_nowait(FetchResult(source=source.name, error=e))
            return

        if not leads:
            logger.warning("%s returned 0 leads", source.name)
        else:
            logger.info("%s returned %d leads", source.name, len(leads))
        queue.put_nowait(FetchResult(source=source.name, leads=leads))

    # --- Consolidation (single consumer) ---

    async def _consolidate(self, fetched: FetchResult, stats: RunStats) -> None:
        for candidate in fetched.leads:
            stats.incr("found")

            if not candidate.name.strip():
                stats.incr("skipped")
                continue
            if not candidate.sources:
                candidate.add_sources(fetched.source)

            lead = await self._resolve(candidate, fetched.source)
            if lead is None:
                stats.incr("error")
                continue

            verdict = evaluate(lead, self.policy, self.today)
            if not verdict.selected:
                stats.incr("skipped")
                logger.debug(
                    "[%s] Skipped '%s' (failed %s check; age=%d state=%s gst=%s type=%s)",
                    fetched.source, lead.name, verdict.failed_check,
                    lead.age_years(self.today), lead.state or "-",
                    lead.gst_registered, lead.entity_type or "-",
                )
                continue

            try:
                is_new = self.store.upsert(lead)
            except (duckdb.Error, ValueError) as e:
                logger.error("[%s] Save failed for '%s': %s", fetched.source, lead.name, e)
                stats.incr("error")
                continue

            stats.incr("selected")
            if is_new:
                stats.incr("new")
                logger.info(
                    "[%s] Saved new lead '%s' (ABN %s, age %d)",
                    fetched.source, lead.name, lead.abn, lead.age_years(self.today),
                )
            else:
                stats.incr("updated")

    async def _resolve(self, candidate: Lead, source_name: str) -> Lead | None:
        """Stored record for this name, else the enriched candidate. None on failure."""
        try:
            existing = self.store.lookup_by_name(candidate.name)
        except duckdb.Error as e:
            logger.warning("[%s] Lookup failed for '%s': %s", source_name, candidate.name, e)
            existing = None

        if existing is not None:
            existing.add_sources(*candidate.sources)
            return existing

        try:
            await self.enricher.enrich(candidate)
        except (EnrichmentError, httpx.HTTPError) as e:
            logger.error(
                "[%s] Enrichment failed for '%s' (ABN %s): %s",
                source_name, candidate.name, candidate.abn or "-", e,
            )
            return None
        return candidate


def default_export_path(
    out_dir: str | Path,
    sources: list[str],
    states: list[str],
    min_age: int,
    today: date | None = None,
) -> Path:
    """``sources-rto-abr-min-age-15-states-vic-nsw-20250101.csv`` style file name."""
    name = f"sources-{'-'.join(s.lower() for s in sources)}-min-age-{min_age}"
    if states:
        name += f"-states-{'-'.join(s.lower() for s in states)}"
    name += f"-{(today or date.today()).strftime('%Y%m%d')}.csv"
    return Path(out_dir) / name
