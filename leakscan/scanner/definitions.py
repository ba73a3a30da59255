"""Well-known signature table.

Maps the exact pattern text of popular signatures to a friendly display
label. The classifier consults this mapping before falling back to the
category declared in the rule file. It is data: adding a signature means
adding an entry here, never a new branch in the classifier.

The same table seeds the starter rule file written on first run.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from leakscan.constants import RULE_SEPARATOR


# ---------------------------------------------------------------------------
# Signature dataclass
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class Signature:
    """Presentation metadata for one well-known pattern.

    Fields:
        label:   Display category shown instead of the rule's own category.
        verbose: True when plain-text output should also show the pattern
                 (signatures whose matches are hard to recognise on their own).
    """
    label: str
    verbose: bool = False


# ===========================================================================
# WELL-KNOWN SIGNATURES
# Keys are raw pattern text and must match rule-file lines byte for byte.
# ===========================================================================

_SIGNATURES: dict[str, Signature] = {
    # ─── Cloud / messaging credentials ──────────────────────────────────
    r"AAAA[A-Za-z0-9_-]{7}:[A-Za-z0-9_-]{140}": Signature("Firebase"),
    r"sq0csp-[ 0-9A-Za-z\-_]{43}|sq0[a-z]{3}-[0-9A-Za-z\-_]{22,43}": Signature("Square oauth secret"),
    r"sqOatp-[0-9A-Za-z\-_]{22}|EAAA[a-zA-Z0-9]{60}": Signature("Square access token"),
    r"AC[a-zA-Z0-9_\-]{32}": Signature("Twilio account SID"),
    r"AP[a-zA-Z0-9_\-]{32}": Signature("Twilio APP SID"),
    r"[A-Za-z0-9]{125}": Signature("Facebook"),
    r"s3\.amazonaws.com[/]+|[a-zA-Z0-9_-]*\.s3\.amazonaws.com": Signature("S3 bucket"),
    r"6L[0-9A-Za-z-_]{38}|^6[0-9a-zA-Z_-]{39}": Signature("Google Recaptcha", verbose=True),
    r"key-[0-9a-zA-Z]{32}": Signature("Mailgun", verbose=True),
    # ─── Network / identifiers ──────────────────────────────────────────
    r"\b(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)(\.(25[0-5]|2[0-4][0-9]|[01]?[0-9][0-9]?)){3}\b": Signature("IPv4"),
    r"[a-f0-9]{32}": Signature("MD5 hash"),
    r"[0-9a-f]{8}-[0-9a-f]{4}-[0-5][0-9a-f]{3}-[089ab][0-9a-f]{3}-[0-9a-f]{12}": Signature("UUID"),
    r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}": Signature("UUID"),
    # ─── Encoded blobs / pages ──────────────────────────────────────────
    r"(eyJ|YTo|Tzo|PD[89]|aHR0cHM6L|aHR0cDo|rO0)[a-zA-Z0-9+/]+={0,2}": Signature("Base64", verbose=True),
    r"<h1>Index of (.*?)</h1>": Signature("Index page"),
}

#: Read-only view: shared by every aggregator, never mutated after import.
WELL_KNOWN_SIGNATURES: Mapping[str, Signature] = MappingProxyType(_SIGNATURES)


def starter_rules() -> str:
    """Render the signature table as rule-file text.

    One ``<pattern>\\t\\t<label>`` line per signature, in table order.
    """
    lines = [
        f"{pattern}{RULE_SEPARATOR}{signature.label}"
        for pattern, signature in WELL_KNOWN_SIGNATURES.items()
    ]
    return "\n".join(lines) + "\n"
