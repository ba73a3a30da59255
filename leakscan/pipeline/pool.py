"""Worker pool — fixed set of fetch+match workers.

Each worker loops until the work channel is closed and drained:

  1. receive a work item (blocks on an empty channel)
  2. fetch its content from the ContentSource
  3. run the regex engine over it (unless scanning is disabled)
  4. put every Result on the results channel (blocks on a full channel)
  5. mark the work item done on the CompletionTracker

A fetch failure still reaches step 5: the item counts as processed with
zero results. Pool size is fixed at ``start()``; there is no resizing.
"""

from __future__ import annotations

import asyncio

from leakscan.models.scan import Result, WorkItem
from leakscan.pipeline.channel import Channel, ChannelClosed
from leakscan.pipeline.sources import ContentSource, FetchError
from leakscan.pipeline.tracker import CompletionTracker
from leakscan.scanner.regex_engine import match
from leakscan.scanner.rules import RuleSet
from leakscan.utils.logger import get_logger, set_worker_id

logger = get_logger(__name__)


class WorkerPool:
    """Fixed-size set of asyncio worker tasks.

    Args:
        size:         Number of workers to start (0 is allowed: nothing to do).
        work:         Channel of work items (URLs or file paths).
        results:      Channel receiving Result events.
        source:       ContentSource used to fetch every work item.
        rules:        Loaded rule set (read-only, shared by all workers).
        tracker:      Completion tracker for the run.
        scan_enabled: False with ``--no-scan``: content is fetched, never matched.
    """

    def __init__(
        self,
        size: int,
        work: Channel[WorkItem],
        results: Channel[Result],
        source: ContentSource,
        rules: RuleSet,
        tracker: CompletionTracker,
        scan_enabled: bool = True,
    ) -> None:
        self.size = size
        self._work = work
        self._results = results
        self._source = source
        self._rules = rules
        self._tracker = tracker
        self._scan_enabled = scan_enabled
        self._tasks: list[asyncio.Task] = []  # type: ignore[type-arg]

        self.processed = 0
        self.failed = 0
        self.matches = 0

    # ── Lifecycle ─────────────────────────────────────────────────────────────

    def start(self) -> "WorkerPool":
        if self._tasks:
            raise RuntimeError("WorkerPool already started")
        self._tasks = [
            asyncio.create_task(self._worker(worker_id), name=f"leakscan-worker-{worker_id}")
            for worker_id in range(self.size)
        ]
        logger.debug("Worker pool started", workers=self.size)
        return self

    async def join(self) -> None:
        """Wait for every worker to exit (work channel closed and drained)."""
        if self._tasks:
            await asyncio.gather(*self._tasks)
        logger.debug(
            "Worker pool stopped",
            processed=self.processed,
            failed=self.failed,
            matches=self.matches,
        )

    # ── Worker loop ───────────────────────────────────────────────────────────

    async def _worker(self, worker_id: int) -> None:
        set_worker_id(worker_id)
        while True:
            try:
                location = await self._work.get()
            except ChannelClosed:
                return
            try:
                await self._process(location)
            except asyncio.CancelledError:
                raise
            except Exception as exc:  # noqa: BLE001
                # Never let one bad item kill a worker: the remaining items
                # would never be consumed and the run would hang.
                self.failed += 1
                logger.error(
                    "Unexpected error while scanning",
                    location=location,
                    error=str(exc),
                    error_type=type(exc).__name__,
                    exc_info=True,
                )
            finally:
                self._tracker.done()

    async def _process(self, location: WorkItem) -> None:
        try:
            blob = await self._source.fetch(location)
        except FetchError as exc:
            self.failed += 1
            logger.warning("Fetch failed — skipping", location=location, error=exc.reason)
            return

        self.processed += 1
        if not self._scan_enabled:
            return

        results = match(blob, self._rules, self._tracker)
        for result in results:
            await self._results.put(result)
        self.matches += len(results)
