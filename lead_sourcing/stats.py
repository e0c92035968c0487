"""Per-run counters shared between pipeline workers."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field

FIELDS = ("found", "new", "updated", "skipped", "selected", "error")


@dataclass
class RunStats:
    found: int = 0
    new: int = 0
    updated: int = 0
    skipped: int = 0
    selected: int = 0
    error: int = 0
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def incr(self, name: str, n: int = 1) -> None:
        if name not in FIELDS:
            raise KeyError(f"Unknown counter: {name}")
        with self._lock:
            setattr(self, name, getattr(self, name) + n)

    def as_dict(self) -> dict[str, int]:
        with self._lock:
            return {name: getattr(self, name) for name in FIELDS}
