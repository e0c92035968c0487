"""Lead sources and the token -> adapter registration table."""

from __future__ import annotations

import logging
from typing import Callable

from lead_sourcing.config import DEFAULT_KEYWORDS
from lead_sourcing.sources.abr_search import ABRSearchSource
from lead_sourcing.sources.amtil import AMTILSource
from lead_sourcing.sources.austmfg import AustMfgSource
from lead_sourcing.sources.base import Source, SourceContext
from lead_sourcing.sources.csv_source import CSVSource
from lead_sourcing.sources.iba import IBASource
from lead_sourcing.sources.northlink import NORTHLINK_DIRECTORIES, NorthLinkSource
from lead_sourcing.sources.rto import RTOSource
from lead_sourcing.sources.semma import SEMMASource

logger = logging.getLogger(__name__)


def _abr(ctx: SourceContext) -> list[Source]:
    return [ABRSearchSource(ctx.registry, ctx.config.keywords, DEFAULT_KEYWORDS)]


def _csv(ctx: SourceContext) -> list[Source]:
    if not ctx.config.csv_path:
        logger.warning("Source 'csv' requested without a CSV path; skipping")
        return []
    return [CSVSource(ctx.config.csv_path)]


def _northlink(ctx: SourceContext) -> list[Source]:
    return [
        NorthLinkSource(url, category, name, timeout=ctx.config.http_timeout, transport=ctx.transport)
        for url, category, name in NORTHLINK_DIRECTORIES
    ]


SOURCE_REGISTRY: dict[str, Callable[[SourceContext], list[Source]]] = {
    "abr": _abr,
    "csv": _csv,
    "rto": lambda ctx: [RTOSource(timeout=ctx.config.http_timeout, transport=ctx.transport)],
    "amtil": lambda ctx: [AMTILSource(
        delay=ctx.config.request_delay, timeout=ctx.config.http_timeout, transport=ctx.transport,
    )],
    "semma": lambda ctx: [SEMMASource(
        delay=ctx.config.request_delay, timeout=ctx.config.http_timeout, transport=ctx.transport,
    )],
    "northlink": _northlink,
    "iba": lambda ctx: [IBASource(timeout=ctx.config.http_timeout, transport=ctx.transport)],
    "austmfg": lambda ctx: [AustMfgSource(
        delay=ctx.config.request_delay, timeout=ctx.config.http_timeout, transport=ctx.transport,
    )],
}


def build_sources(tokens: list[str], ctx: SourceContext) -> list[Source]:
    """Instantiate the adapters for ``tokens`` (case-insensitive, unknown ones skipped)."""
    sources: list[Source] = []
    for token in tokens:
        key = token.strip().lower()
        factory = SOURCE_REGISTRY.get(key)
        if factory is None:
            logger.warning("Unknown source '%s' ignored (known: %s)", token, ", ".join(SOURCE_REGISTRY))
            continue
        sources.extend(factory(ctx))
    return sources


__all__ = [
    "SOURCE_REGISTRY",
    "Source",
    "SourceContext",
    "build_sources",
    "ABRSearchSource",
    "AMTILSource",
    "AustMfgSource",
    "CSVSource",
    "IBASource",
    "NorthLinkSource",
    "RTOSource",
    "SEMMASource",
]
