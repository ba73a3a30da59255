"""Scan pipeline data contracts.

  - ContentBlob — bytes fetched for one work item, owned by one worker
  - Result      — one regex match event, flows to the aggregator
  - RunSummary  — totals reported when the run completes
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from leakscan.constants import BYTES_PER_KB

# A work item is a single input line: a URL or a file path.
WorkItem = str


# ─── ContentBlob ──────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class ContentBlob:
    """Raw content of one location.

    Never persisted. Lives only while one worker processes one work item.
    """

    location: str
    content: bytes

    @property
    def size_kb(self) -> float:
        """Raw byte length in kilobytes (1 KB = 1024 bytes)."""
        return len(self.content) / BYTES_PER_KB

    @property
    def text(self) -> str:
        """Content decoded as UTF-8 (errors replaced) for regex matching."""
        return self.content.decode("utf-8", errors="replace")


# ─── Result ───────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Result:
    """One regex match found in one content blob.

    Fields:
        match:           The matched substring.
        location:        URL or path the content came from.
        pattern:         Raw pattern text of the rule that matched.
        category:        Category declared by the rule ("" when none).
        content_size_kb: Size of the whole blob in kilobytes.
    """

    match: str
    location: str
    pattern: str
    category: str
    content_size_kb: float

    def to_json_dict(self, category: str) -> dict[str, Any]:
        """Serialisable record using the external JSON field names.

        ``category`` is the display category chosen by the classifier,
        which may differ from the rule's own category.
        """
        return {
            "Match": self.match,
            "Url": self.location,
            "Regex": self.pattern,
            "Category": category,
            "ContentLength": self.content_size_kb,
        }


# ─── RunSummary ───────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class RunSummary:
    """Totals for a finished run."""

    units_scanned: int
    rules_loaded: int
    matches: int
    elapsed_seconds: float
