"""Unit tests for command-line parsing"""

import pytest

import main
from readall.providers.base import SelectScope


class TestBuildParser:
    """Test argument defaults and overrides"""

    def test_defaults(self, monkeypatch):
        """Without flags or environment the unread scope and Gmail URL are used"""
        monkeypatch.delenv("READ_ALL_URL", raising=False)
        monkeypatch.delenv("READ_ALL_GMAIL_SCOPE", raising=False)

        args = main.build_parser().parse_args([])

        assert args.url == main.DEFAULT_URL
        assert args.scope == SelectScope.UNREAD_ONLY.value
        assert args.check_only is False
        assert args.select_pause_ms is None

    def test_environment_defaults(self, monkeypatch):
        """Environment variables feed the defaults"""
        monkeypatch.setenv("READ_ALL_URL", "https://outlook.live.com/mail/0/")
        monkeypatch.setenv("READ_ALL_GMAIL_SCOPE", "all")

        args = main.build_parser().parse_args([])

        assert args.url == "https://outlook.live.com/mail/0/"
        assert SelectScope(args.scope) == SelectScope.FULL_HISTORY

    def test_rejects_unknown_scope(self):
        """Only unread and all are valid scopes"""
        with pytest.raises(SystemExit):
            main.build_parser().parse_args(["--scope", "starred"])


class TestBuildTimings:
    """Test pause resolution"""

    def test_flags_override_environment(self, monkeypatch):
        """Command-line pauses win over READ_ALL_* variables"""
        monkeypatch.setenv("READ_ALL_SELECT_PAUSE_MS", "700")
        monkeypatch.setenv("READ_ALL_MARK_PAUSE_MS", "2500")
        args = main.build_parser().parse_args(["--mark-pause-ms", "4000"])

        timings = main.build_timings(args)

        assert timings.select_pause_ms == 700
        assert timings.mark_pause_ms == 4000

    def test_defaults_without_overrides(self, monkeypatch):
        monkeypatch.delenv("READ_ALL_SELECT_PAUSE_MS", raising=False)
        monkeypatch.delenv("READ_ALL_MARK_PAUSE_MS", raising=False)

        timings = main.build_timings(main.build_parser().parse_args([]))

        assert timings.select_pause_ms == 500
        assert timings.mark_pause_ms == 2000
