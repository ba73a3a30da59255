"""Startup banner and version string."""

from __future__ import annotations

import sys
from typing import Optional, TextIO

from colorama import Fore, Style

from leakscan.constants import VERSION

BANNER = r"""
 _            _
| | ___  __ _| | _____  ___ __ _ _ __
| |/ _ \/ _` | |/ / __|/ __/ _` | '_ \
| |  __/ (_| |   <\__ \ (_| (_| | | | |
|_|\___|\__,_|_|\_\___/\___\__,_|_| |_|
"""


def version_string() -> str:
    return f"leakscan {VERSION}"


def print_banner(stream: Optional[TextIO] = None) -> None:
    """Write the banner to stderr (stdout is reserved for results)."""
    stream = stream or sys.stderr
    print(f"{Fore.MAGENTA}{BANNER}{Style.RESET_ALL}", file=stream)
    print(f"{Fore.YELLOW}{VERSION}{Style.RESET_ALL}\n", file=stream)
