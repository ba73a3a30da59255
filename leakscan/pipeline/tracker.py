"""Completion tracker — counting wait-group for one scan run.

The counter goes up once per submitted work item and once per produced
Result, always BEFORE the unit is handed off, and goes down once each unit
is fully handled. The main flow awaits ``wait()``; it wakes only when the
counter is back at zero. There is no polling.

Thread-safety:
    Single-threaded asyncio use only. Every add()/done() happens on the
    event-loop thread (blocking I/O is offloaded, counting never is).
"""

from __future__ import annotations

import asyncio


class CompletionTracker:
    """Outstanding-work counter with an awaitable zero state.

    Usage::

        tracker = CompletionTracker()
        tracker.add()          # before enqueuing a unit
        ...
        tracker.done()         # after the unit is fully handled
        await tracker.wait()   # returns once the counter is zero
    """

    def __init__(self) -> None:
        self._count = 0
        self._total = 0
        self._zero = asyncio.Event()
        self._zero.set()

    # ── Mutation ──────────────────────────────────────────────────────────────

    def add(self, n: int = 1) -> None:
        """Register ``n`` new outstanding units."""
        if n < 0:
            raise ValueError(f"CompletionTracker.add() needs n >= 0, got {n}")
        if n == 0:
            return
        self._count += n
        self._total += n
        self._zero.clear()

    def done(self) -> None:
        """Mark one outstanding unit as fully handled.

        Raises:
            ValueError: If nothing is outstanding (the counter would go negative).
        """
        if self._count <= 0:
            raise ValueError("CompletionTracker.done() called with no outstanding work")
        self._count -= 1
        if self._count == 0:
            self._zero.set()

    # ── Waiting ───────────────────────────────────────────────────────────────

    async def wait(self) -> None:
        """Block until the counter is zero."""
        await self._zero.wait()

    # ── Introspection ─────────────────────────────────────────────────────────

    @property
    def outstanding(self) -> int:
        """Units added but not yet done."""
        return self._count

    @property
    def total(self) -> int:
        """Units ever added during this run."""
        return self._total
