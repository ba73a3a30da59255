"""Config loading for leakscan.

Two layers, merged once at startup into an immutable ``ScanConfig``:

  1. Optional YAML defaults file (``~/.config/leakscan/config.yaml``)
  2. Command-line flags (always win over the file)

Config file search order:
  1. ``--config`` argument (if provided)
  2. LEAKSCAN_CONFIG environment variable (if set)
  3. ``~/.config/leakscan/config.yaml``

Environment variable overrides:
  LEAKSCAN_CONCURRENCY: overrides the file's concurrency (CLI ``-c`` still wins)
  LEAKSCAN_JSON_LOGS: "true" renders log lines as JSON (results are unaffected)

Every invalid setting writes a ``CONFIG ERROR`` line to stderr and raises
SystemExit(1) before any scanning begins.
"""

from __future__ import annotations

import enum
import os
import sys
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, NoReturn, Optional

import yaml

from leakscan.constants import (
    CONFIG_DIR_NAME,
    DEFAULT_CONCURRENCY,
    DEFAULT_CONFIG_FILENAME,
    DEFAULT_RULE_FILENAME,
    DEFAULT_TIMEOUT_S,
    DEFAULT_USER_AGENT,
)
from leakscan.utils.logger import get_logger

logger = get_logger(__name__)

# ─── Version constants ────────────────────────────────────────────────────────

SUPPORTED_CONFIG_VERSION = 1

SUPPORTED_VERSIONS: frozenset[int] = frozenset({1})

# Keys read from the YAML file; anything else is ignored with a warning.
KNOWN_FILE_KEYS: frozenset[str] = frozenset(
    {"version", "rules", "user_agent", "concurrency", "timeout", "json"}
)


def _fail(msg: str) -> NoReturn:
    print(f"CONFIG ERROR: {msg}", file=sys.stderr)
    raise SystemExit(1)


# ─── Paths ────────────────────────────────────────────────────────────────────


def config_dir() -> Path:
    """``~/.config/leakscan`` for the current user.

    Raises:
        RuntimeError: If the home directory cannot be resolved.
    """
    return Path.home() / CONFIG_DIR_NAME


def default_rule_path() -> Path:
    """Default rule file location (``~/.config/leakscan/regex.txt``)."""
    return config_dir() / DEFAULT_RULE_FILENAME


# ─── Dataclasses ─────────────────────────────────────────────────────────────


class InputMode(str, enum.Enum):
    """Where work items come from. Exactly one is active per run."""

    STDIN = "stdin"
    URL_LIST = "url_list"
    PATH = "path"


@dataclass(frozen=True)
class FileDefaults:
    """Values loaded from the YAML defaults file.

    ``None`` means "not set in the file"; the built-in default applies.
    """

    rules: Optional[str] = None
    user_agent: Optional[str] = None
    concurrency: Optional[int] = None
    timeout: Optional[float] = None
    json_output: bool = False
    path: Optional[str] = None  # Path of the file these values came from

    @classmethod
    def from_dict(cls, raw: dict, path: Optional[str] = None) -> "FileDefaults":
        """Construct FileDefaults from a parsed YAML dict.

        Raises:
            SystemExit(1): On a value of the wrong type.
        """
        unknown = sorted(set(raw) - KNOWN_FILE_KEYS)
        if unknown:
            logger.warning("Unknown config keys ignored", keys=unknown, path=path)

        rules = raw.get("rules")
        if rules is not None and not isinstance(rules, str):
            _fail(f"{path}: 'rules' must be a path string.")

        user_agent = raw.get("user_agent")
        if user_agent is not None and not isinstance(user_agent, str):
            _fail(f"{path}: 'user_agent' must be a string.")

        concurrency = raw.get("concurrency")
        if concurrency is not None and (
            isinstance(concurrency, bool) or not isinstance(concurrency, int)
        ):
            _fail(f"{path}: 'concurrency' must be an integer.")

        timeout = raw.get("timeout")
        if timeout is not None and (
            isinstance(timeout, bool) or not isinstance(timeout, (int, float))
        ):
            _fail(f"{path}: 'timeout' must be a number of seconds.")

        return cls(
            rules=rules,
            user_agent=user_agent,
            concurrency=concurrency,
            timeout=float(timeout) if timeout is not None else None,
            json_output=bool(raw.get("json", False)),
            path=path,
        )


@dataclass(frozen=True)
class ScanConfig:
    """Immutable run configuration, built once and passed to every component.

    All fields have safe defaults: leakscan runs without any config file.
    """

    rule_file: str = ""
    user_agent: str = DEFAULT_USER_AGENT
    silent: bool = False
    concurrency: int = DEFAULT_CONCURRENCY
    url_list: Optional[str] = None
    debug: bool = False
    timeout: float = DEFAULT_TIMEOUT_S
    target_path: Optional[str] = None
    no_scan: bool = False
    json_output: bool = False
    json_logs: bool = False

    @property
    def input_mode(self) -> InputMode:
        if self.target_path:
            return InputMode.PATH
        if self.url_list:
            return InputMode.URL_LIST
        return InputMode.STDIN

    @property
    def scan_enabled(self) -> bool:
        return not self.no_scan


# ─── YAML defaults loading ───────────────────────────────────────────────────


def _search_paths(config_path: Optional[str]) -> list[str]:
    search_paths: list[str] = []
    if config_path:
        search_paths.append(config_path)
    env_config = os.environ.get("LEAKSCAN_CONFIG")
    if env_config:
        search_paths.append(env_config)
    try:
        search_paths.append(str(config_dir() / DEFAULT_CONFIG_FILENAME))
    except RuntimeError:
        logger.debug("Home directory unavailable — skipping default config path")
    return search_paths


def load_file_defaults(config_path: Optional[str] = None) -> FileDefaults:
    """Load the optional YAML defaults file.

    If no file is found, returns empty FileDefaults (not an error).
    If a file is found but invalid, writes an error to stderr and raises
    SystemExit(1).

    After loading, ``LEAKSCAN_CONCURRENCY`` is applied as an override.

    Raises:
        SystemExit(1): On YAML parse error, unreadable file, non-mapping
                       YAML, missing or unsupported ``version``, a value of
                       the wrong type, or an invalid ``LEAKSCAN_CONCURRENCY``.
    """
    search_paths = _search_paths(config_path)

    found_path: Optional[str] = None
    for candidate in search_paths:
        expanded = os.path.expanduser(candidate)
        if os.path.isfile(expanded):
            found_path = expanded
            break

    # ── No config file found ─────────────────────────────────────────────────
    if found_path is None:
        logger.debug("No config file found — using defaults", searched=search_paths)
        return _apply_env_overrides(FileDefaults())

    # ── Parse config file ─────────────────────────────────────────────────────
    try:
        with open(found_path) as fh:
            raw = yaml.safe_load(fh)
    except yaml.YAMLError as exc:
        _fail(f"Failed to parse {found_path}: {exc}")
    except OSError as exc:
        _fail(f"Could not read {found_path}: {exc}")

    if not isinstance(raw, dict):
        if raw is None:
            _fail(
                f"{found_path} is missing the required 'version' field.\n"
                "Add 'version: 1' to the top of your config file."
            )
        _fail(
            f"{found_path} is not a valid YAML mapping.\n"
            "The config file must be a YAML dictionary at the top level."
        )

    # ── Version validation ────────────────────────────────────────────────────
    version = raw.get("version")
    if version is None:
        _fail(
            f"{found_path} is missing the required 'version' field.\n"
            "Add 'version: 1' to the top of your config file."
        )
    if version not in SUPPORTED_VERSIONS:
        _fail(
            f"Unsupported config version: {version}. "
            f"Supported versions: {sorted(SUPPORTED_VERSIONS)}."
        )

    defaults = _apply_env_overrides(FileDefaults.from_dict(raw, path=found_path))
    logger.debug("Config loaded", path=found_path)
    return defaults


def _apply_env_overrides(defaults: FileDefaults) -> FileDefaults:
    """Apply LEAKSCAN_CONCURRENCY on top of the file values.

    Raises:
        SystemExit(1): If LEAKSCAN_CONCURRENCY is set but not a valid integer.
    """
    env_concurrency = os.environ.get("LEAKSCAN_CONCURRENCY")
    if env_concurrency is None:
        return defaults
    try:
        return replace(defaults, concurrency=int(env_concurrency))
    except ValueError:
        _fail(
            "LEAKSCAN_CONCURRENCY environment variable is not a valid "
            f"integer: '{env_concurrency}'"
        )


# ─── Merge with CLI flags ────────────────────────────────────────────────────


def build_config(args: Any, defaults: Optional[FileDefaults] = None) -> ScanConfig:
    """Merge parsed CLI flags over the file defaults into a ScanConfig.

    ``args`` is the namespace returned by ``leakscan.cli.parse_args()``;
    flags left at ``None`` fall through to the file, then to built-ins.

    Raises:
        SystemExit(1): On conflicting input methods (``-u`` with ``-d``),
                       concurrency < 1, timeout <= 0, or an unresolvable
                       home directory when the default rule path is needed.
    """
    defaults = defaults or FileDefaults()

    if args.urls and args.target:
        _fail("You can only specify one input method (-d or -u).")

    concurrency = _first_set(args.concurrency, defaults.concurrency, DEFAULT_CONCURRENCY)
    if concurrency < 1:
        _fail(f"Concurrency must be at least 1, got {concurrency}.")

    timeout = _first_set(args.timeout, defaults.timeout, DEFAULT_TIMEOUT_S)
    if timeout <= 0:
        _fail(f"Timeout must be greater than 0 seconds, got {timeout}.")

    rule_file = _first_set(args.rules, defaults.rules)
    if rule_file is None:
        try:
            rule_file = str(default_rule_path())
        except RuntimeError as exc:
            _fail(f"Could not resolve the home directory for the default rule file: {exc}")
    else:
        rule_file = os.path.expanduser(rule_file)

    return ScanConfig(
        rule_file=rule_file,
        user_agent=_first_set(args.user_agent, defaults.user_agent, DEFAULT_USER_AGENT),
        silent=bool(args.silent),
        concurrency=concurrency,
        url_list=args.urls or None,
        debug=bool(args.debug),
        timeout=timeout,
        target_path=args.target or None,
        no_scan=bool(args.no_scan),
        json_output=bool(args.json_output or defaults.json_output),
        json_logs=_env_flag("LEAKSCAN_JSON_LOGS"),
    )


def _env_flag(name: str) -> bool:
    return os.getenv(name, "false").lower() == "true"


def _first_set(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None
