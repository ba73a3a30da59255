"""Rule file loader.

Reads a newline-delimited rule file of ``<regex>\\t\\t<category>`` records,
compiles every pattern up front, and returns an ordered, read-only
``RuleSet``. A pattern that fails to compile aborts startup: no scanning
ever happens with a partially valid rule set.

IMPORT RULES:
  - ``import re2`` ONLY — ``import re`` is PROHIBITED in this file.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Any, Iterable, Iterator, Optional, TextIO, Union

import re2  # google-re2, NOT stdlib re

from leakscan.constants import RULE_SEPARATOR
from leakscan.utils.logger import PerformanceLogger, get_logger

logger = get_logger(__name__)


# ─── Errors ───────────────────────────────────────────────────────────────────


class RuleFileError(Exception):
    """The rule file could not be opened or read."""

    def __init__(self, path: str, reason: str) -> None:
        super().__init__(f"Unable to open regex file {path}: {reason}")
        self.path = path
        self.reason = reason


class InvalidPatternError(Exception):
    """A rule line holds a pattern the regex engine refuses to compile.

    Attributes:
        line: 1-based line number in the rule source.
        text: The offending line (whitespace-trimmed).
    """

    def __init__(self, line: int, text: str, reason: str = "") -> None:
        message = f"Regex on line {line} not valid: {text}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.line = line
        self.text = text
        self.reason = reason


# ─── Rule / RuleSet ───────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Rule:
    """A compiled pattern with its declared category.

    Fields:
        pattern:  Raw pattern text, exactly as written in the rule file.
        category: Text after the first separator ("" when absent).
        regex:    Compiled re2 pattern. Compiled once at load time.
    """

    pattern: str
    category: str
    regex: Any  # re2._Regexp


class RuleSet:
    """Ordered, immutable collection of rules.

    Iteration follows load order. Safe for concurrent reads: nothing
    mutates a RuleSet after ``load_rules()`` returns it.
    """

    def __init__(self, rules: Iterable[Rule], source: Optional[str] = None) -> None:
        self._rules: tuple[Rule, ...] = tuple(rules)
        self.source = source

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules)

    def __len__(self) -> int:
        return len(self._rules)


# ─── Parsing ──────────────────────────────────────────────────────────────────


def split_rule_line(line: str) -> tuple[str, str]:
    """Split one trimmed rule line into ``(pattern, category)``.

    Only the first separator splits; any further separators are kept
    verbatim inside the category.
    """
    parts = line.split(RULE_SEPARATOR)
    pattern = parts[0]
    category = RULE_SEPARATOR.join(parts[1:]) if len(parts) > 1 else ""
    return pattern, category


def parse_rules(lines: Iterable[str], source: Optional[str] = None) -> RuleSet:
    """Compile every non-blank line of ``lines`` into a RuleSet.

    Duplicate pattern text keeps the first position in load order and the
    last category seen.

    Raises:
        InvalidPatternError: On the first pattern that fails to compile.
    """
    compiled: dict[str, Rule] = {}

    for line_number, raw_line in enumerate(lines, start=1):
        line_text = raw_line.strip()
        if not line_text:
            continue

        pattern, category = split_rule_line(line_text)
        try:
            regex = re2.compile(pattern)
        except re2.error as exc:
            raise InvalidPatternError(line_number, line_text, str(exc)) from exc

        if pattern in compiled:
            logger.debug(
                "Duplicate regex — keeping last category",
                line=line_number,
                regex=pattern,
            )
        compiled[pattern] = Rule(pattern=pattern, category=category, regex=regex)

    for rule in compiled.values():
        logger.debug("Rule loaded", regex=rule.pattern, category=rule.category)

    return RuleSet(compiled.values(), source=source)


def load_rules(source: Union[str, os.PathLike, TextIO]) -> RuleSet:
    """Load and validate a rule file.

    Args:
        source: Path to the rule file, or an already-open text stream.

    Returns:
        RuleSet in load order.

    Raises:
        RuleFileError:       The file could not be opened or read.
        InvalidPatternError: A pattern failed to compile (1-based line number).
    """
    if not isinstance(source, (str, os.PathLike)):
        with PerformanceLogger("Rule loading", logger):
            return parse_rules(source, source=getattr(source, "name", None))

    path = os.fspath(source)
    try:
        with open(path, encoding="utf-8") as fh:
            with PerformanceLogger("Rule loading", logger):
                rules = parse_rules(fh, source=path)
    except OSError as exc:
        raise RuleFileError(path, exc.strerror or str(exc)) from exc
    except UnicodeDecodeError as exc:
        raise RuleFileError(path, f"not valid UTF-8: {exc}") from exc

    logger.debug("Rule file loaded", path=path, count=len(rules))
    return rules
