"""Regex engine — applies a loaded RuleSet to one content blob.

Provides:
  - ``match()``: every non-overlapping match of every rule, as Result events.

Ordering: rules in load order, then matches in the order they occur in
the content. Running ``match()`` twice on the same input yields the same
list.

IMPORT RULES:
  - Rules arrive compiled by google-re2 (see rules.py). ``import re`` is
    PROHIBITED in this file.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Optional

from leakscan.models.scan import ContentBlob, Result
from leakscan.scanner.rules import RuleSet
from leakscan.utils.logger import get_logger

if TYPE_CHECKING:
    from leakscan.pipeline.tracker import CompletionTracker

logger = get_logger(__name__)


def match(
    blob: ContentBlob,
    rules: RuleSet,
    tracker: Optional["CompletionTracker"] = None,
) -> list[Result]:
    """Apply every rule to ``blob`` and return one Result per match.

    When ``tracker`` is given it is incremented once per Result, after every
    rule has run and before any Result is handed back for queueing. The
    caller owns the matching ``done()`` (the aggregator calls it after output).

    Args:
        blob:    Content to scan. Not modified.
        rules:   Loaded rule set (read-only).
        tracker: Completion tracker for the current run, if any.

    Returns:
        Results in rule-load order, then occurrence order.
    """
    text = blob.text
    size_kb = blob.size_kb
    results: list[Result] = []

    for rule in rules:
        for found in rule.regex.finditer(text):
            results.append(
                Result(
                    match=found.group(0),
                    location=blob.location,
                    pattern=rule.pattern,
                    category=rule.category,
                    content_size_kb=size_kb,
                )
            )

    if tracker is not None:
        tracker.add(len(results))

    if results:
        logger.debug("Matches found", location=blob.location, count=len(results))
    return results

