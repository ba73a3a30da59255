"""Root test configuration for leakscan.

Points HOME at a per-test temporary directory so first-run setup and the
default config/rule paths never touch the real ``~/.config/leakscan``, and
clears the LEAKSCAN_* environment overrides.
"""

from __future__ import annotations

from pathlib import Path

import pytest

from leakscan.scanner.rules import RuleSet, parse_rules
from leakscan.utils.logger import configure_logging


@pytest.fixture(autouse=True)
def isolated_home(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Give every test its own empty home directory."""
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.delenv("LEAKSCAN_CONFIG", raising=False)
    monkeypatch.delenv("LEAKSCAN_CONCURRENCY", raising=False)
    monkeypatch.delenv("LEAKSCAN_JSON_LOGS", raising=False)
    return home


@pytest.fixture(autouse=True)
def reset_logging():
    """Undo any -b / -s logging change a test made through the entry point."""
    yield
    configure_logging()


@pytest.fixture
def make_rules():
    """Build a RuleSet from ``(pattern, category)`` pairs or raw lines."""

    def _make(*entries) -> RuleSet:
        lines = []
        for entry in entries:
            if isinstance(entry, tuple):
                pattern, category = entry
                lines.append(f"{pattern}\t\t{category}" if category else pattern)
            else:
                lines.append(entry)
        return parse_rules(lines)

    return _make
