"""First-run setup.

Creates ``~/.config/leakscan/`` and writes the starter rule file when it is
missing, so a bare ``leakscan`` invocation has something to scan with.
Failure here is surfaced as an error log by the caller, never fatal.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from leakscan.config import config_dir
from leakscan.constants import DEFAULT_RULE_FILENAME
from leakscan.scanner.definitions import starter_rules
from leakscan.utils.logger import get_logger

logger = get_logger(__name__)


def first_time_setup(base_dir: Optional[Path] = None) -> Optional[Path]:
    """Ensure the config directory and the starter rule file exist.

    Args:
        base_dir: Config directory override (defaults to ``~/.config/leakscan``).

    Returns:
        Path of the rule file written, or None when it already existed.

    Raises:
        OSError:      The directory or file could not be created.
        RuntimeError: The home directory could not be resolved.
    """
    directory = base_dir if base_dir is not None else config_dir()
    rule_file = directory / DEFAULT_RULE_FILENAME
    if rule_file.exists():
        return None

    directory.mkdir(parents=True, exist_ok=True)
    rule_file.write_text(starter_rules(), encoding="utf-8")
    logger.info("Starter rule file created", path=str(rule_file))
    return rule_file
