"""Scan run orchestration.

Wires one run together:

  1. open_input()              → input stream + clamped worker count
  2. Channel × 2               → work and results, both bounded to the concurrency
  3. ResultAggregator.start()  → single consumer of results
  4. WorkerPool.start()        → N fetch+match workers
  5. dispatch()                → one tracked work item per input line
  6. tracker.wait()            → every item and every Result fully handled
  7. shutdown (reverse order)  → close work → join pool → close results →
                                 join aggregator → close content source

Step 7 runs on every exit path so no task is left behind.
"""

from __future__ import annotations

import time
from typing import Optional, TextIO

from leakscan.config import InputMode, ScanConfig
from leakscan.models.scan import Result, RunSummary, WorkItem
from leakscan.pipeline.aggregator import ResultAggregator
from leakscan.pipeline.channel import Channel
from leakscan.pipeline.dispatcher import dispatch, open_input
from leakscan.pipeline.pool import WorkerPool
from leakscan.pipeline.sources import ContentSource, FileContentSource, HttpContentSource
from leakscan.pipeline.tracker import CompletionTracker
from leakscan.scanner.rules import RuleSet
from leakscan.utils.logger import get_logger

logger = get_logger(__name__)


def make_source(config: ScanConfig) -> ContentSource:
    """HTTP for stdin / URL-list input, filesystem for path input."""
    if config.input_mode is InputMode.PATH:
        return FileContentSource()
    return HttpContentSource.from_settings(
        user_agent=config.user_agent,
        timeout=config.timeout,
        max_connections=config.concurrency,
    )


async def execute(
    config: ScanConfig,
    rules: RuleSet,
    *,
    source: Optional[ContentSource] = None,
    stdin: Optional[TextIO] = None,
    output: Optional[TextIO] = None,
    started: Optional[float] = None,
) -> RunSummary:
    """Run one complete scan and return its summary.

    Args:
        config: Immutable run configuration.
        rules:  Loaded rule set.
        source: ContentSource override (default: chosen from the input mode).
        stdin:  Stream used in stdin mode (default: sys.stdin).
        output: Stream the aggregator writes to (default: sys.stdout).
        started: ``time.perf_counter()`` reading taken at process start; the
                 summary's elapsed time counts from here (default: now).

    Raises:
        InputError: If the URL list or target path cannot be opened.
    """
    if started is None:
        started = time.perf_counter()

    with open_input(config, stdin=stdin) as plan:
        tracker = CompletionTracker()
        work: Channel[WorkItem] = Channel(config.concurrency, name="work queue")
        results: Channel[Result] = Channel(config.concurrency, name="results queue")
        source = source if source is not None else make_source(config)

        aggregator = ResultAggregator(
            results,
            tracker,
            json_output=config.json_output,
            stream=output,
        ).start()
        pool = WorkerPool(
            plan.workers,
            work,
            results,
            source,
            rules,
            tracker,
            scan_enabled=config.scan_enabled,
        ).start()

        submitted = 0
        try:
            submitted = await dispatch(plan.stream, work, tracker)
            await tracker.wait()
        finally:
            await work.close()
            await pool.join()
            await results.close()
            await aggregator.join()
            await source.aclose()

    elapsed = time.perf_counter() - started
    summary = RunSummary(
        units_scanned=submitted,
        rules_loaded=len(rules),
        matches=pool.matches,
        elapsed_seconds=elapsed,
    )
    logger.info(
        f"Scan done: {summary.units_scanned} files with {summary.rules_loaded} "
        f"regex patterns scanned in {summary.elapsed_seconds:.2f} seconds",
        matches=summary.matches,
        failed=pool.failed,
    )
    return summary
