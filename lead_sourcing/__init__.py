"""Business lead sourcing: multi-source fetch, ABR enrichment, eligibility filtering."""

__version__ = "0.1.0"
