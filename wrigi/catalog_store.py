"""Thread-safe holder for the in-memory release catalog."""

from __future__ import annotations

import threading
from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import Callable

from wrigi.models import Catalog

DEFAULT_COOLDOWN = timedelta(minutes=5)


@dataclass(frozen=True)
class RefreshOutcome:
    """Result of a refresh attempt."""

    applied: bool
    reason: str | None = None
    updated: int = 0
    failed: int = 0

    @classmethod
    def skipped(cls, reason: str) -> RefreshOutcome:
        return cls(applied=False, reason=reason)

    @classmethod
    def applied_with(cls, updated: int, failed: int) -> RefreshOutcome:
        return cls(applied=True, updated=updated, failed=failed)


class CatalogStore:
    """Holds the current catalog and serializes refreshes.

    Readers get the published catalog tuple without locking. A refresh builds
    a new tuple and publishes it with one reference assignment, so a reader
    sees either the old catalog or the new one, never a mix.
    """

    def __init__(self, catalog: Catalog, cooldown: timedelta = DEFAULT_COOLDOWN) -> None:
        self.cooldown = cooldown
        self._catalog = tuple(catalog)
        self._last_refresh_at: datetime | None = None
        self._lock = threading.Lock()

    @property
    def last_refresh_at(self) -> datetime | None:
        return self._last_refresh_at

    def snapshot(self) -> Catalog:
        """Return the currently published catalog."""
        return self._catalog

    def apply_refresh(
        self,
        mutator: Callable[[Catalog], tuple[Catalog, RefreshOutcome]],
        now: datetime,
    ) -> RefreshOutcome:
        """Run ``mutator`` on the current catalog unless still in cooldown.

        The lock is held for the whole call, including any I/O the mutator
        does. ``last_refresh_at`` moves to ``now`` before the mutator runs,
        so a pass that fails everywhere still restarts the cooldown.
        """
        with self._lock:
            if self._last_refresh_at is not None and now - self._last_refresh_at < self.cooldown:
                return RefreshOutcome.skipped("cooldown")
            self._last_refresh_at = now
            catalog, outcome = mutator(self._catalog)
            self._catalog = tuple(catalog)
            return outcome
