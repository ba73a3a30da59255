"""Result classification.

Resolution order:
  1. Pattern text found in ``WELL_KNOWN_SIGNATURES`` → the table's label.
  2. Empty pattern text → suppressed (``None``).
  3. Otherwise → the category declared by the rule (may be "").
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from leakscan.models.scan import Result
from leakscan.scanner.definitions import WELL_KNOWN_SIGNATURES, Signature


@dataclass(frozen=True)
class Classification:
    """Display category for one Result."""

    category: str
    verbose: bool = False


def classify(
    result: Result,
    signatures: Mapping[str, Signature] = WELL_KNOWN_SIGNATURES,
) -> Optional[Classification]:
    """Return the display category for ``result``, or None to suppress it."""
    signature = signatures.get(result.pattern)
    if signature is not None:
        return Classification(category=signature.label, verbose=signature.verbose)
    if result.pattern == "":
        return None
    return Classification(category=result.category)
