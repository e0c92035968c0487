"""Configuration management via environment variables and .env file."""

from __future__ import annotations

import os
import sys

from dotenv import load_dotenv
from pydantic import BaseModel, Field

from lead_sourcing.models import PostcodeRange

DEFAULT_SOURCES = ["rto", "amtil", "semma", "northlink", "abr"]
DEFAULT_KEYWORDS = ["Precision Engineering", "CNC Machining", "Steel Fabrication"]


class Config(BaseModel):
    """Application configuration loaded from environment."""

    # ABR web services authentication GUID
    abr_guid: str = ""

    # Storage / output
    db_path: str = "out/sourcing.duckdb"
    out_dir: str = "out"

    # Filters
    min_age: int = 15
    states: list[str] = Field(default_factory=list)
    postcode_ranges: list[PostcodeRange] = Field(default_factory=list)

    # Sources
    sources: list[str] = Field(default_factory=lambda: list(DEFAULT_SOURCES))
    keywords: list[str] = Field(default_factory=lambda: list(DEFAULT_KEYWORDS))
    csv_path: str = ""

    # Rate limiting
    enrich_delay: float = 0.5   # Between consecutive ABR requests
    request_delay: float = 2.0  # Between pages of a single directory site

    # Timeouts
    http_timeout: int = 15
    source_timeout: int = 300   # Whole fetch() of one source


def parse_csv_list(raw: str | None, upper: bool = False) -> list[str]:
    """Split ``"a, b,,c"`` into ``["a", "b", "c"]``."""
    if not raw:
        return []
    items = [part.strip() for part in raw.split(",")]
    return [p.upper() if upper else p for p in items if p]


def parse_postcode_ranges(raw: str | None) -> list[PostcodeRange]:
    """Parse ``"3000-3999,2000-2999"``. Malformed entries raise ValueError."""
    return [PostcodeRange.parse(part) for part in parse_csv_list(raw)]


def load_config(require_guid: bool = True) -> Config:
    """Load configuration from .env file and environment variables.

    Environment variables override .env values.
    Exits with an error message if ABR_GUID is required but missing.
    """
    load_dotenv()

    abr_guid = os.getenv("ABR_GUID", "")
    if require_guid and not abr_guid:
        print("Configuration error:", file=sys.stderr)
        print("  - ABR_GUID environment variable not set", file=sys.stderr)
        print("\nSet it in a .env file or as an environment variable.", file=sys.stderr)
        sys.exit(1)

    return Config(
        abr_guid=abr_guid,
        db_path=os.getenv("SOURCING_DB", "out/sourcing.duckdb"),
        out_dir=os.getenv("SOURCING_OUTDIR", "out"),
        enrich_delay=float(os.getenv("ENRICH_DELAY", "0.5")),
        request_delay=float(os.getenv("REQUEST_DELAY", "2.0")),
        http_timeout=int(os.getenv("HTTP_TIMEOUT", "15")),
        source_timeout=int(os.getenv("SOURCE_TIMEOUT", "300")),
    )
