"""Typed publish/subscribe channel for scan lifecycle signals.

The orchestrator owns one ``EventBus`` and injects it into the finding store
and both presentation adapters. Every event carries immutable snapshots, so
subscribers can keep references without copying.
"""

from __future__ import annotations

import inspect
import logging
import threading
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Union

from riskscan.scanner.models import Finding, ScanState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ScanningStarted:
    """A scan began; the state is empty and ``scanning`` is true."""

    state: ScanState


@dataclass(frozen=True)
class FindingsChanged:
    """The finding store was cleared or grew.

    ``reset`` is true only for the notification emitted by ``clear()``.
    """

    findings: tuple[Finding, ...]
    added: tuple[Finding, ...] = ()
    reset: bool = False


@dataclass(frozen=True)
class ScanningEnded:
    """A scan finished (successfully or not) with its final state."""

    state: ScanState


ScanEvent = Union[ScanningStarted, FindingsChanged, ScanningEnded]
Handler = Callable[[ScanEvent], Union[None, Awaitable[None]]]


class EventBus:
    """Dispatches each event to the handlers subscribed to its type, in order."""

    def __init__(self) -> None:
        self._handlers: dict[type, list[Handler]] = {}
        self._lock = threading.Lock()

    def subscribe(self, event_type: type, handler: Handler) -> Callable[[], None]:
        """Register a handler; returns a callable that unsubscribes it."""
        with self._lock:
            self._handlers.setdefault(event_type, []).append(handler)

        def _unsubscribe() -> None:
            with self._lock:
                handlers = self._handlers.get(event_type, [])
                if handler in handlers:
                    handlers.remove(handler)

        return _unsubscribe

    async def publish(self, event: ScanEvent) -> None:
        """Deliver ``event`` to every subscriber, awaiting async handlers."""
        with self._lock:
            handlers = list(self._handlers.get(type(event), []))

        logger.debug("Publishing %s to %d handler(s)", type(event).__name__, len(handlers))
        for handler in handlers:
            result = handler(event)
            if inspect.isawaitable(result):
                await result
