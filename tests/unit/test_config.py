"""Unit tests for leakscan/config.py and leakscan/cli.py.

Verifies:
  - YAML defaults: search order, version validation, type validation
  - LEAKSCAN_CONCURRENCY override (and fatal on a bad value)
  - build_config(): CLI > file > built-in precedence, fatal startup checks
  - ScanConfig: input mode selection, immutability, LEAKSCAN_JSON_LOGS
"""

from __future__ import annotations

from pathlib import Path

import pytest

from leakscan.cli import build_parser, parse_args
from leakscan.config import (
    FileDefaults,
    InputMode,
    ScanConfig,
    build_config,
    default_rule_path,
    load_file_defaults,
)
from leakscan.constants import DEFAULT_CONCURRENCY, DEFAULT_TIMEOUT_S, DEFAULT_USER_AGENT


def _write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text)
    return path


# ─── Command-line flags ──────────────────────────────────────────────────────


class TestParseArgs:
    def test_defaults_are_unset(self):
        args = parse_args([])
        assert args.rules is None
        assert args.concurrency is None
        assert args.timeout is None
        assert args.user_agent is None
        assert args.silent is False
        assert args.json_output is False
        assert args.no_scan is False
        assert args.version is False

    def test_help_describes_rule_file_errors(self):
        text = " ".join(build_parser().format_help().split())
        assert "line number in the file, blank lines included" in text
        assert "lookahead, lookbehind and backreferences are rejected" in text

    def test_all_flags(self):
        args = parse_args([
            "-r", "rules.txt", "-a", "UA/1", "-s", "-c", "5", "-u", "urls.txt",
            "-b", "--timeout", "2.5", "--no-scan", "--json", "--config", "c.yaml",
        ])
        assert (args.rules, args.user_agent, args.concurrency) == ("rules.txt", "UA/1", 5)
        assert (args.urls, args.timeout, args.config) == ("urls.txt", 2.5, "c.yaml")
        assert args.silent and args.debug and args.no_scan and args.json_output

    def test_directory_flag(self):
        assert parse_args(["-d", "./site"]).target == "./site"

    def test_non_integer_concurrency_rejected(self):
        with pytest.raises(SystemExit):
            parse_args(["-c", "many"])


# ─── YAML defaults ────────────────────────────────────────────────────────────


class TestLoadFileDefaults:
    def test_missing_file_returns_empty_defaults(self):
        assert load_file_defaults() == FileDefaults()

    def test_default_location(self, isolated_home):
        path = _write(
            isolated_home / ".config" / "leakscan" / "config.yaml",
            "version: 1\nconcurrency: 8\n",
        )
        defaults = load_file_defaults()
        assert defaults.concurrency == 8
        assert defaults.path == str(path)

    def test_explicit_path_wins_over_env(self, tmp_path, monkeypatch):
        explicit = _write(tmp_path / "explicit.yaml", "version: 1\ntimeout: 3\n")
        env = _write(tmp_path / "env.yaml", "version: 1\ntimeout: 9\n")
        monkeypatch.setenv("LEAKSCAN_CONFIG", str(env))
        assert load_file_defaults(str(explicit)).timeout == 3.0

    def test_env_path_used(self, tmp_path, monkeypatch):
        env = _write(tmp_path / "env.yaml", "version: 1\nuser_agent: env-agent\n")
        monkeypatch.setenv("LEAKSCAN_CONFIG", str(env))
        assert load_file_defaults().user_agent == "env-agent"

    def test_all_keys(self, tmp_path):
        path = _write(
            tmp_path / "c.yaml",
            "version: 1\nrules: ~/rules.txt\nuser_agent: ua\nconcurrency: 4\n"
            "timeout: 2.5\njson: true\n",
        )
        defaults = load_file_defaults(str(path))
        assert defaults == FileDefaults(
            rules="~/rules.txt",
            user_agent="ua",
            concurrency=4,
            timeout=2.5,
            json_output=True,
            path=str(path),
        )

    def test_unknown_keys_ignored(self, tmp_path):
        path = _write(tmp_path / "c.yaml", "version: 1\ncolour: blue\n")
        assert load_file_defaults(str(path)).concurrency is None

    def test_missing_version_is_fatal(self, tmp_path, capsys):
        path = _write(tmp_path / "c.yaml", "concurrency: 4\n")
        with pytest.raises(SystemExit) as exc_info:
            load_file_defaults(str(path))
        assert exc_info.value.code == 1
        assert "CONFIG ERROR" in capsys.readouterr().err

    def test_empty_file_is_fatal(self, tmp_path):
        path = _write(tmp_path / "c.yaml", "")
        with pytest.raises(SystemExit):
            load_file_defaults(str(path))

    def test_unsupported_version_is_fatal(self, tmp_path, capsys):
        path = _write(tmp_path / "c.yaml", "version: 2\n")
        with pytest.raises(SystemExit):
            load_file_defaults(str(path))
        assert "Unsupported config version" in capsys.readouterr().err

    def test_non_mapping_is_fatal(self, tmp_path):
        path = _write(tmp_path / "c.yaml", "- a\n- b\n")
        with pytest.raises(SystemExit):
            load_file_defaults(str(path))

    def test_invalid_yaml_is_fatal(self, tmp_path):
        path = _write(tmp_path / "c.yaml", "version: [1\n")
        with pytest.raises(SystemExit):
            load_file_defaults(str(path))

    @pytest.mark.parametrize(
        "line",
        ["concurrency: many", "concurrency: true", "timeout: soon", "rules: [a]", "user_agent: 5"],
    )
    def test_wrong_types_are_fatal(self, tmp_path, line):
        path = _write(tmp_path / "c.yaml", f"version: 1\n{line}\n")
        with pytest.raises(SystemExit):
            load_file_defaults(str(path))


class TestEnvOverride:
    def test_concurrency_env_override(self, monkeypatch):
        monkeypatch.setenv("LEAKSCAN_CONCURRENCY", "12")
        assert load_file_defaults().concurrency == 12

    def test_env_overrides_file(self, tmp_path, monkeypatch):
        path = _write(tmp_path / "c.yaml", "version: 1\nconcurrency: 4\n")
        monkeypatch.setenv("LEAKSCAN_CONCURRENCY", "16")
        assert load_file_defaults(str(path)).concurrency == 16

    def test_invalid_env_is_fatal(self, monkeypatch, capsys):
        monkeypatch.setenv("LEAKSCAN_CONCURRENCY", "lots")
        with pytest.raises(SystemExit):
            load_file_defaults()
        assert "LEAKSCAN_CONCURRENCY" in capsys.readouterr().err


# ─── build_config() ───────────────────────────────────────────────────────────


class TestBuildConfig:
    def test_builtin_defaults(self, isolated_home):
        config = build_config(parse_args([]))
        assert config.concurrency == DEFAULT_CONCURRENCY
        assert config.timeout == DEFAULT_TIMEOUT_S
        assert config.user_agent == DEFAULT_USER_AGENT
        assert config.rule_file == str(isolated_home / ".config" / "leakscan" / "regex.txt")
        assert config.rule_file == str(default_rule_path())
        assert config.input_mode is InputMode.STDIN
        assert config.scan_enabled

    def test_cli_wins_over_file(self):
        defaults = FileDefaults(concurrency=4, timeout=2.0, user_agent="file-ua", rules="file.txt")
        args = parse_args(["-c", "9", "--timeout", "7", "-a", "cli-ua", "-r", "cli.txt"])
        config = build_config(args, defaults)
        assert (config.concurrency, config.timeout) == (9, 7.0)
        assert (config.user_agent, config.rule_file) == ("cli-ua", "cli.txt")

    def test_file_wins_over_builtin(self):
        defaults = FileDefaults(concurrency=4, timeout=2.0, json_output=True)
        config = build_config(parse_args([]), defaults)
        assert (config.concurrency, config.timeout, config.json_output) == (4, 2.0, True)

    def test_rule_path_tilde_expanded(self, isolated_home):
        config = build_config(parse_args(["-r", "~/my-rules.txt"]))
        assert config.rule_file == str(isolated_home / "my-rules.txt")

    def test_url_list_and_directory_conflict(self, capsys):
        with pytest.raises(SystemExit) as exc_info:
            build_config(parse_args(["-u", "urls.txt", "-d", "./site"]))
        assert exc_info.value.code == 1
        assert "You can only specify one input method (-d or -u)." in capsys.readouterr().err

    @pytest.mark.parametrize("value", ["0", "-3"])
    def test_concurrency_below_one_fatal(self, value):
        with pytest.raises(SystemExit):
            build_config(parse_args(["-c", value]))

    @pytest.mark.parametrize("value", ["0", "-1.5"])
    def test_non_positive_timeout_fatal(self, value):
        with pytest.raises(SystemExit):
            build_config(parse_args(["--timeout", value]))

    def test_input_modes(self):
        assert build_config(parse_args(["-u", "urls.txt"])).input_mode is InputMode.URL_LIST
        assert build_config(parse_args(["-d", "site"])).input_mode is InputMode.PATH

    def test_no_scan_disables_scanning(self):
        assert build_config(parse_args(["--no-scan"])).scan_enabled is False


class TestScanConfig:
    def test_frozen(self):
        config = ScanConfig()
        with pytest.raises((AttributeError, TypeError)):
            config.concurrency = 3  # type: ignore[misc]

    def test_json_logs_off_by_default(self):
        assert build_config(parse_args([])).json_logs is False

    def test_json_logs_env_flag(self, monkeypatch):
        monkeypatch.setenv("LEAKSCAN_JSON_LOGS", "TRUE")
        assert build_config(parse_args([])).json_logs is True

    def test_json_logs_env_other_value(self, monkeypatch):
        monkeypatch.setenv("LEAKSCAN_JSON_LOGS", "1")
        assert build_config(parse_args([])).json_logs is False
