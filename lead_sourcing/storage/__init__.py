"""Persistent lead storage."""

from lead_sourcing.storage.database import Database
from lead_sourcing.storage.store import LeadStore, years_before

__all__ = ["Database", "LeadStore", "years_before"]
