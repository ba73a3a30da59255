"""Result aggregator — the single consumer of the results channel.

For each Result: classify it, write one output line, mark it done on the
CompletionTracker. It is the only writer to the output stream, so lines
from concurrent workers never interleave. Order is arrival order.

Output formats:
  plain  ``[<category>] <match> [<location>]`` (category prefix omitted when empty;
         verbose signatures append `` (<pattern>)``)
  json   one object per line: Match, Url, Regex, Category, ContentLength
"""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Mapping, Optional, TextIO

from leakscan.models.scan import Result
from leakscan.pipeline.channel import Channel
from leakscan.pipeline.tracker import CompletionTracker
from leakscan.scanner.classifier import Classification, classify
from leakscan.scanner.definitions import WELL_KNOWN_SIGNATURES, Signature
from leakscan.utils.logger import get_logger

logger = get_logger(__name__)


def format_plain(result: Result, classification: Classification) -> str:
    line = f"{result.match} [{result.location}]"
    if classification.category:
        line = f"[{classification.category}] {line}"
    if classification.verbose:
        line = f"{line} ({result.pattern})"
    return line


def format_json(result: Result, classification: Classification) -> str:
    return json.dumps(result.to_json_dict(classification.category))


class ResultAggregator:
    """Drain the results channel into an output stream.

    Args:
        results:     Channel of Result events.
        tracker:     Completion tracker; one ``done()`` per consumed Result.
        json_output: Emit JSON lines instead of plain text.
        stream:      Output stream (default: sys.stdout at construction time).
        signatures:  Well-known signature table used by the classifier.
    """

    def __init__(
        self,
        results: Channel[Result],
        tracker: CompletionTracker,
        json_output: bool = False,
        stream: Optional[TextIO] = None,
        signatures: Mapping[str, Signature] = WELL_KNOWN_SIGNATURES,
    ) -> None:
        self._results = results
        self._tracker = tracker
        self._formatter = format_json if json_output else format_plain
        self._stream = stream if stream is not None else sys.stdout
        self._signatures = signatures
        self._task: Optional[asyncio.Task] = None  # type: ignore[type-arg]

        self.emitted = 0
        self.suppressed = 0

    def start(self) -> "ResultAggregator":
        if self._task is not None:
            raise RuntimeError("ResultAggregator already started")
        self._task = asyncio.create_task(self.run(), name="leakscan-aggregator")
        return self

    async def join(self) -> None:
        """Wait for the aggregator to drain a closed results channel."""
        if self._task is not None:
            await self._task

    async def run(self) -> None:
        async for result in self._results:
            try:
                self.emit(result)
            except Exception as exc:  # noqa: BLE001
                # Keep draining: every Result must reach done().
                logger.error(
                    "Could not write result",
                    location=result.location,
                    error=str(exc),
                    error_type=type(exc).__name__,
                )
            finally:
                self._tracker.done()
        logger.debug("Aggregator stopped", emitted=self.emitted, suppressed=self.suppressed)

    def emit(self, result: Result) -> bool:
        """Write ``result`` if it classifies; return False when suppressed."""
        classification = classify(result, self._signatures)
        if classification is None:
            self.suppressed += 1
            return False
        self._stream.write(self._formatter(result, classification) + "\n")
        self._stream.flush()
        self.emitted += 1
        return True
