"""Command-line flags.

Flags that can also come from the YAML defaults file default to ``None``
so ``leakscan.config.build_config()`` can tell "not given" from "given".
"""

from __future__ import annotations

import argparse
from typing import Optional, Sequence


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="leakscan",
        description=(
            "Scan URLs or local files for leaked secrets using a regex rule file. "
            "Reads URLs from stdin unless -u or -d is given."
        ),
        epilog=(
            "Rule file: one pattern per line, optionally followed by two tabs and "
            "a category. Patterns use RE2 syntax: lookahead, lookbehind and "
            "backreferences are rejected. An invalid pattern aborts startup and is "
            "reported by its line number in the file, blank lines included."
        ),
    )
    parser.add_argument(
        "-r", dest="rules", default=None, metavar="FILE",
        help="Regex file (default: ~/.config/leakscan/regex.txt)",
    )
    parser.add_argument(
        "-a", dest="user_agent", default=None, metavar="UA",
        help="User-Agent",
    )
    parser.add_argument(
        "-s", dest="silent", action="store_true",
        help="Silent Mode",
    )
    parser.add_argument(
        "-c", dest="concurrency", type=int, default=None, metavar="N",
        help="Set the concurrency level (default: 50)",
    )
    parser.add_argument(
        "-u", dest="urls", default=None, metavar="FILE",
        help="List of URLs to scan",
    )
    parser.add_argument(
        "-b", dest="debug", action="store_true",
        help="Debug mode",
    )
    parser.add_argument(
        "--timeout", dest="timeout", type=float, default=None, metavar="SECONDS",
        help="Timeout in seconds (default: 10)",
    )
    parser.add_argument(
        "--version", dest="version", action="store_true",
        help="Prints version information",
    )
    parser.add_argument(
        "-d", dest="target", default=None, metavar="PATH",
        help="Directory to scan all the files (or a single file)",
    )
    parser.add_argument(
        "--no-scan", dest="no_scan", action="store_true",
        help="Disable all pattern scanning (fetch only)",
    )
    parser.add_argument(
        "--json", dest="json_output", action="store_true",
        help="Enable json output",
    )
    parser.add_argument(
        "--config", dest="config", default=None, metavar="FILE",
        help="YAML defaults file (default: ~/.config/leakscan/config.yaml)",
    )
    return parser


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    return build_parser().parse_args(argv)
