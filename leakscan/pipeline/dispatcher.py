"""Work dispatcher — turns input lines into queued work items.

Provides:
  - count_lines():     pre-count pass used to clamp the worker pool
  - effective_workers(): min(concurrency, pre-counted lines)
  - path_listing():    scoped temporary file listing every file under a target
  - open_input():      picks stdin / URL list / path listing for a ScanConfig
  - dispatch():        reads the input and enqueues one work item per line

Blank lines are skipped by both the pre-count and the dispatch so the
worker count and the number of work items always agree.
"""

from __future__ import annotations

import asyncio
import os
import sys
import tempfile
from contextlib import ExitStack, contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Iterator, Optional, TextIO, Union

from leakscan.config import InputMode, ScanConfig
from leakscan.constants import LISTING_PREFIX
from leakscan.models.scan import WorkItem
from leakscan.pipeline.channel import Channel
from leakscan.pipeline.tracker import CompletionTracker
from leakscan.utils.logger import get_logger

logger = get_logger(__name__)


class InputError(Exception):
    """The scan input (URL list or target path) cannot be opened."""


# ─── Counting / clamping ─────────────────────────────────────────────────────


def count_lines(path: Union[str, os.PathLike]) -> int:
    """Number of non-blank lines in ``path``.

    Raises:
        OSError: If the file cannot be read.
    """
    with open(path, encoding="utf-8", errors="replace") as fh:
        return sum(1 for line in fh if line.strip())


def effective_workers(concurrency: int, line_count: Optional[int]) -> int:
    """Worker pool size: never more workers than there are lines.

    ``line_count`` is None when the input cannot be pre-counted (stdin).
    """
    if line_count is None:
        return concurrency
    return max(0, min(concurrency, line_count))


# ─── Path listing ─────────────────────────────────────────────────────────────


def enumerate_files(target: Path) -> list[str]:
    """Every regular file under ``target`` (sorted), or ``target`` itself."""
    if not target.is_dir():
        return [str(target)]
    files: list[str] = []
    for root, dirs, names in os.walk(target):
        dirs.sort()
        for name in sorted(names):
            candidate = Path(root) / name
            if candidate.is_file():
                files.append(str(candidate))
    return files


@contextmanager
def path_listing(target: Union[str, os.PathLike]) -> Iterator[tuple[Path, int]]:
    """Write the files to scan into a temporary listing, one path per line.

    Yields ``(listing_path, file_count)``. The listing is removed on exit,
    whether the run finished, failed, or was cancelled.

    Raises:
        InputError: If ``target`` does not exist or cannot be accessed.
    """
    target_path = Path(target)
    try:
        target_path.stat()
    except OSError as exc:
        raise InputError(f"Could not open Directory {target}: {exc.strerror or exc}") from exc

    files = enumerate_files(target_path)
    fd, name = tempfile.mkstemp(prefix=LISTING_PREFIX, suffix=".txt")
    listing = Path(name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            for file_path in files:
                fh.write(file_path + "\n")
        logger.debug("Path listing written", target=str(target), files=len(files))
        yield listing, len(files)
    finally:
        try:
            listing.unlink()
        except FileNotFoundError:
            pass


# ─── Input selection ──────────────────────────────────────────────────────────


@dataclass
class InputPlan:
    """Resolved input for one run."""

    stream: TextIO
    workers: int
    mode: InputMode


@contextmanager
def open_input(config: ScanConfig, stdin: Optional[TextIO] = None) -> Iterator[InputPlan]:
    """Open the one active input source and size the worker pool for it.

    Raises:
        InputError: If the URL list or target path cannot be opened.
    """
    mode = config.input_mode
    with ExitStack() as stack:
        if mode is InputMode.STDIN:
            workers = config.concurrency
            stream = stdin if stdin is not None else sys.stdin
            logger.debug("Input is stdin")

        elif mode is InputMode.URL_LIST:
            try:
                lines = count_lines(config.url_list)
                stream = stack.enter_context(
                    open(config.url_list, encoding="utf-8", errors="replace")
                )
            except OSError as exc:
                raise InputError(
                    f"Could not open URL list {config.url_list}: {exc.strerror or exc}"
                ) from exc
            workers = effective_workers(config.concurrency, lines)

        else:
            listing, files = stack.enter_context(path_listing(config.target_path))
            if Path(config.target_path).is_dir():
                workers = effective_workers(config.concurrency, files)
            else:
                workers = 1
            stream = stack.enter_context(open(listing, encoding="utf-8"))

        logger.debug("Threads open", workers=workers, mode=mode.value)
        yield InputPlan(stream=stream, workers=workers, mode=mode)


# ─── Dispatch ─────────────────────────────────────────────────────────────────


async def dispatch(
    stream: TextIO,
    work: Channel[WorkItem],
    tracker: CompletionTracker,
) -> int:
    """Enqueue one work item per non-blank line of ``stream``, in order.

    The tracker is incremented BEFORE each put so the counter can never
    read zero while an item is in flight. Blocks while the work channel is
    full. Lines are read on a worker thread (stdin may block indefinitely).

    Returns:
        Number of work items submitted.
    """
    submitted = 0
    while True:
        line = await asyncio.to_thread(stream.readline)
        if not line:
            break
        item = line.strip()
        if not item:
            continue
        tracker.add()
        await work.put(item)
        submitted += 1
    logger.debug("Dispatch complete", submitted=submitted)
    return submitted
