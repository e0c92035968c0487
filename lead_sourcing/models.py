"""Pydantic data models for the lead sourcing pipeline."""

from __future__ import annotations

from datetime import date

from pydantic import BaseModel, Field, field_validator


# ---------------------------------------------------------------------------
# Lead
# ---------------------------------------------------------------------------

class Lead(BaseModel):
    """A business record, partial when it comes from a source, full once enriched."""
    abn: str = ""  # Primary key once known
    name: str = ""
    category: str = ""
    sources: list[str] = Field(default_factory=list)  # Append-only, set semantics
    entity_type: str = ""
    entity_status: str = ""
    state: str = ""
    postcode: str = ""
    registration_date: date | None = None
    gst_registered: bool = False
    found_at_url: str = ""  # Where we found the lead (directory page etc.)
    business_url: str = ""  # The business's own website

    @field_validator("abn", mode="before")
    @classmethod
    def clean_abn(cls, v):
        if v is None:
            return ""
        return str(v).replace(" ", "").strip()

    @field_validator("sources", mode="before")
    @classmethod
    def dedupe_sources(cls, v):
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split(",")
        return _union([], v)

    def add_sources(self, *names: str) -> None:
        """Union ``names`` into ``sources``, keeping first-seen order."""
        self.sources = _union(self.sources, names)

    def age_years(self, today: date | None = None) -> int:
        """Whole years since registration; 0 when unknown or in the future."""
        if self.registration_date is None:
            return 0
        today = today or date.today()
        reg = self.registration_date
        years = today.year - reg.year
        if today.timetuple().tm_yday < reg.timetuple().tm_yday:
            years -= 1
        return max(years, 0)


def _union(existing: list[str], incoming) -> list[str]:
    merged = list(existing)
    for name in incoming:
        name = str(name).strip()
        if name and name not in merged:
            merged.append(name)
    return merged


# ---------------------------------------------------------------------------
# Filter inputs
# ---------------------------------------------------------------------------

class PostcodeRange(BaseModel):
    """Inclusive postcode bounds, e.g. 3000-3999."""
    min: int
    max: int

    @classmethod
    def parse(cls, text: str) -> PostcodeRange:
        """Parse ``"3000-3999"``. Raises ValueError on anything else."""
        low, sep, high = text.strip().partition("-")
        if not sep:
            raise ValueError(f"Invalid postcode range: {text!r} (expected MIN-MAX)")
        return cls(min=int(low), max=int(high))

    def contains(self, postcode: str | int) -> bool:
        try:
            value = int(str(postcode).strip())
        except ValueError:
            return False
        return self.min <= value <= self.max


# ---------------------------------------------------------------------------
# Persistence helpers
# ---------------------------------------------------------------------------

class DeleteFilters(BaseModel):
    """Predicates for a filtered delete. At least one must be set."""
    name: str | None = None
    abn: str | None = None
    age: int | None = None
    source: str | None = None

    def active(self) -> dict[str, object]:
        return {
            k: v for k, v in self.model_dump().items()
            if v not in (None, "") and not (k == "age" and v <= 0)
        }
