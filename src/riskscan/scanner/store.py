"""Deduplicating, insertion-ordered collection of findings for one scan session."""

from __future__ import annotations

import threading
from collections.abc import Iterable

from riskscan.events import EventBus, FindingsChanged
from riskscan.scanner.models import Finding


class FindingStore:
    """Findings for the active session, in discovery order.

    ``add_all`` drops findings whose identity key is already stored.
    Duplicates *inside* a single batch are kept; only keys that were present
    before the call are filtered out.
    """

    def __init__(self, bus: EventBus) -> None:
        self._bus = bus
        self._findings: list[Finding] = []
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def findings(self) -> tuple[Finding, ...]:
        with self._lock:
            return tuple(self._findings)

    @property
    def generation(self) -> int:
        """Bumped on every clear(); identifies the current session."""
        return self._generation

    def __len__(self) -> int:
        with self._lock:
            return len(self._findings)

    async def clear(self) -> None:
        """Empty the store and tell subscribers to reset per-session ids."""
        with self._lock:
            self._findings = []
            self._generation += 1
        await self._bus.publish(FindingsChanged(findings=(), reset=True))

    async def add_all(self, batch: Iterable[Finding]) -> list[Finding]:
        """Append findings with unseen keys; returns the ones that were kept."""
        with self._lock:
            existing = {f.key for f in self._findings}
            survivors = [f for f in batch if f.key not in existing]
            self._findings.extend(survivors)
            snapshot = tuple(self._findings)

        await self._bus.publish(
            FindingsChanged(findings=snapshot, added=tuple(survivors))
        )
        return survivors
