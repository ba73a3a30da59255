"""Shared constants for leakscan.

All defaults and numeric caps used across modules are defined here.
No magic numbers in other modules; import from here.
"""

# ─── Identity ────────────────────────────────────────────────────────────────

VERSION: str = "v1.9.6"

# ─── Rule file format ────────────────────────────────────────────────────────

# Separator between the regex and its category on one rule-file line.
# Anything after the first separator (including further separators) is the category.
RULE_SEPARATOR: str = "\t\t"

# ─── Default locations ───────────────────────────────────────────────────────

# Resolved against the user's home directory at startup.
CONFIG_DIR_NAME: str = ".config/leakscan"
DEFAULT_RULE_FILENAME: str = "regex.txt"
DEFAULT_CONFIG_FILENAME: str = "config.yaml"

# ─── Scan defaults (CLI flag defaults) ───────────────────────────────────────

DEFAULT_USER_AGENT: str = (
    "Mozilla/5.0 (Windows NT 12.0; rv:88.0) Gecko/20100101 Firefox/88.0"
)

# Worker pool size and queue capacity.
DEFAULT_CONCURRENCY: int = 50

# Per-request HTTP timeout in seconds.
DEFAULT_TIMEOUT_S: int = 10

# ─── Output ──────────────────────────────────────────────────────────────────

# Content size in the Result is reported in kilobytes.
BYTES_PER_KB: float = 1024.0

# Prefix for the temporary directory-listing file.
LISTING_PREFIX: str = "leakscan_"
