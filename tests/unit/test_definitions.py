"""Unit tests for leakscan/scanner/definitions.py."""

from __future__ import annotations

import pytest

from leakscan.constants import RULE_SEPARATOR
from leakscan.scanner.definitions import WELL_KNOWN_SIGNATURES, Signature, starter_rules
from leakscan.scanner.rules import parse_rules


class TestWellKnownSignatures:
    def test_table_is_read_only(self):
        with pytest.raises(TypeError):
            WELL_KNOWN_SIGNATURES["x"] = Signature("X")  # type: ignore[index]

    def test_expected_labels_present(self):
        labels = {sig.label for sig in WELL_KNOWN_SIGNATURES.values()}
        assert {
            "Firebase",
            "Square oauth secret",
            "Square access token",
            "Twilio account SID",
            "Twilio APP SID",
            "Facebook",
            "S3 bucket",
            "Google Recaptcha",
            "Mailgun",
            "IPv4",
            "MD5 hash",
            "UUID",
            "Base64",
            "Index page",
        } <= labels

    def test_only_three_verbose_labels(self):
        verbose = {sig.label for sig in WELL_KNOWN_SIGNATURES.values() if sig.verbose}
        assert verbose == {"Google Recaptcha", "Mailgun", "Base64"}


class TestStarterRules:
    def test_one_line_per_signature(self):
        lines = starter_rules().splitlines()
        assert len(lines) == len(WELL_KNOWN_SIGNATURES)

    def test_lines_use_rule_separator(self):
        for line in starter_rules().splitlines():
            assert RULE_SEPARATOR in line

    def test_starter_rules_parse_and_classify_back(self):
        rules = parse_rules(starter_rules().splitlines())
        assert [r.pattern for r in rules] == list(WELL_KNOWN_SIGNATURES.keys())
        for rule in rules:
            assert rule.category == WELL_KNOWN_SIGNATURES[rule.pattern].label

    def test_ends_with_newline(self):
        assert starter_rules().endswith("\n")
