"""Investment-eligibility checks applied before a lead is persisted.

Checks run in a fixed order and stop at the first failure:

1. age          business registered at least ``min_age`` years ago
2. jurisdiction state allow-list (or postcode ranges when no states are set)
3. gst          actively GST registered
4. private      entity type is not public, government, sole trader or trust
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from pydantic import BaseModel, Field

from lead_sourcing.models import Lead, PostcodeRange

# Entity-type fragments that disqualify a lead. Anything else counts as private.
EXCLUDED_ENTITY_TYPES = (
    "public company",
    "government",
    "sole trader",
    "individual",
    "other incorporated entity",
    "trust",
)


class EligibilityPolicy(BaseModel):
    """Filter settings for one run."""
    min_age: int = 15
    states: list[str] = Field(default_factory=list)
    postcode_ranges: list[PostcodeRange] = Field(default_factory=list)


@dataclass(frozen=True)
class Verdict:
    selected: bool
    failed_check: str | None = None


def is_veteran(lead: Lead, min_age: int, today: date | None = None) -> bool:
    return lead.age_years(today) >= min_age


def is_investable(
    lead: Lead,
    states: list[str],
    postcode_ranges: list[PostcodeRange],
) -> bool:
    """Location check. A state allow-list takes precedence over postcode ranges."""
    if states:
        wanted = lead.state.strip().lower()
        return any(wanted == s.strip().lower() for s in states)
    if postcode_ranges:
        return any(r.contains(lead.postcode) for r in postcode_ranges)
    return True


def is_private_entity(lead: Lead) -> bool:
    lower_type = lead.entity_type.lower()
    return not any(fragment in lower_type for fragment in EXCLUDED_ENTITY_TYPES)


def evaluate(lead: Lead, policy: EligibilityPolicy, today: date | None = None) -> Verdict:
    checks = (
        ("age", lambda: is_veteran(lead, policy.min_age, today)),
        ("jurisdiction", lambda: is_investable(lead, policy.states, policy.postcode_ranges)),
        ("gst", lambda: lead.gst_registered),
        ("private", lambda: is_private_entity(lead)),
    )
    for name, check in checks:
        if not check():
            return Verdict(selected=False, failed_check=name)
    return Verdict(selected=True)
