"""Command-line entry point for leakscan.

Startup sequence:
  1. parse_args()          → ``--version`` prints and exits with status 1
  2. load_file_defaults()  → optional YAML defaults (fatal if invalid)
  3. build_config()        → immutable ScanConfig (fatal on -u with -d)
  4. configure_logging()   → -b debug / -s silent
  5. print_banner()        → stderr, unless silent
  6. first_time_setup()    → starter rule file; failure logged, never fatal
  7. load_rules()          → fatal on unreadable file or invalid pattern
  8. execute()             → the scan; summary logged at the end

Usage:
    python -m leakscan -u urls.txt
    cat urls.txt | leakscan -c 20 --json
    leakscan -d ./static/js
"""

from __future__ import annotations

import asyncio
import sys
import time
from typing import NoReturn, Optional, Sequence

from leakscan.banner import print_banner, version_string
from leakscan.cli import parse_args
from leakscan.config import ScanConfig, build_config, load_file_defaults
from leakscan.first_run import first_time_setup
from leakscan.models.scan import RunSummary
from leakscan.pipeline.dispatcher import InputError
from leakscan.pipeline.runner import execute
from leakscan.scanner.rules import InvalidPatternError, RuleFileError, RuleSet, load_rules
from leakscan.utils.logger import configure_logging, get_logger

logger = get_logger(__name__)


def _fatal(msg: str) -> NoReturn:
    print(f"ERROR: {msg}", file=sys.stderr)
    raise SystemExit(1)


def prepare(argv: Optional[Sequence[str]] = None) -> tuple[ScanConfig, RuleSet]:
    """Steps 1–7: everything that can abort before scanning starts.

    Raises:
        SystemExit: On ``--version`` (status 1) and on every fatal startup error.
    """
    args = parse_args(argv)

    # --version exits 1, not 0.
    if args.version:
        print(version_string())
        raise SystemExit(1)

    config = build_config(args, load_file_defaults(args.config))

    configure_logging(
        log_level="DEBUG" if config.debug else "INFO",
        json_output=config.json_logs,
        silent=config.silent,
    )
    if not config.silent:
        print_banner()

    try:
        first_time_setup()
    except (OSError, RuntimeError) as exc:
        logger.error("First-run setup failed", error=str(exc))

    try:
        rules = load_rules(config.rule_file)
    except (RuleFileError, InvalidPatternError) as exc:
        _fatal(str(exc))

    logger.debug(
        "Scan configured",
        rules=len(rules),
        rule_file=rules.source,
        input=config.input_mode.value,
        concurrency=config.concurrency,
        timeout=config.timeout,
        json=config.json_output,
    )
    return config, rules


def main(argv: Optional[Sequence[str]] = None) -> RunSummary:
    """Run leakscan with the given arguments (default: sys.argv[1:])."""
    started = time.perf_counter()
    config, rules = prepare(argv)
    try:
        return asyncio.run(execute(config, rules, started=started))
    except InputError as exc:
        _fatal(str(exc))
    except KeyboardInterrupt:
        print("Interrupted", file=sys.stderr)
        raise SystemExit(130)


def cli() -> None:
    """Console-script wrapper: exit status 0 after a completed run."""
    main()
    raise SystemExit(0)


if __name__ == "__main__":
    cli()
