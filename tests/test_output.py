"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet and verbose modes
- JSON and table output
- Routing of ``cmdref.*`` log records
- Global instance management
"""

from __future__ import annotations

import json
import logging

import pytest

from cmdref import output as output_module
from cmdref.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
    get_output,
    reset_output,
    set_output,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture(autouse=True)
def _reset_global_output():
    """Ensure the global output instance and logger are reset between tests."""
    reset_output()
    yield
    reset_output()
    logger = logging.getLogger("cmdref")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.setLevel(logging.NOTSET)


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("cmdref.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("cmdref.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        assert OutputManager(format=OutputFormat.AUTO).format == OutputFormat.RICH

    def test_no_color_flag_forces_plain(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO, no_color=True)
        assert mgr.format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, tty):
        assert OutputManager(format=OutputFormat.JSON).format == OutputFormat.JSON


class TestColorDisabling:
    def test_no_color_env_any_value(self, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "")
        assert _should_disable_color() is True

    def test_term_dumb_disables_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "dumb")
        assert _should_disable_color() is True

    def test_normal_term_keeps_color(self, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.setenv("TERM", "xterm-256color")
        assert _should_disable_color() is False


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        OutputManager(format=OutputFormat.PLAIN, no_color=True).print_data("https://auth/url")
        captured = capfd.readouterr()
        assert captured.out == "https://auth/url\n"
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "success", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, capfd, non_tty, method):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("diagnostic")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "diagnostic" in captured.err

    def test_error_prefix(self, capfd, non_tty):
        OutputManager(no_color=True).error("boom")
        assert capfd.readouterr().err == "Error: boom\n"


class TestQuietAndVerbose:
    @pytest.mark.parametrize("method", ["info", "success", "suggest"])
    def test_quiet_suppresses(self, capfd, non_tty, method):
        mgr = OutputManager(no_color=True, quiet=True)
        getattr(mgr, method)("hidden")
        assert capfd.readouterr().err == ""

    @pytest.mark.parametrize("method", ["warning", "error"])
    def test_quiet_keeps_problems(self, capfd, non_tty, method):
        mgr = OutputManager(no_color=True, quiet=True)
        getattr(mgr, method)("shown")
        assert "shown" in capfd.readouterr().err

    def test_quiet_keeps_data(self, capfd, non_tty):
        OutputManager(no_color=True, quiet=True).print_data("data")
        assert capfd.readouterr().out == "data\n"

    def test_debug_hidden_by_default(self, capfd, non_tty):
        OutputManager(no_color=True).debug("details")
        assert capfd.readouterr().err == ""

    def test_debug_shown_with_verbose(self, capfd, non_tty):
        mgr = OutputManager(no_color=True, verbose=True)
        assert mgr.is_verbose
        mgr.debug("details")
        assert capfd.readouterr().err == "[debug] details\n"


# ------------------------------------------------------------------ #
# Structured output
# ------------------------------------------------------------------ #


class TestStructuredOutput:
    def test_print_json_plain(self, capfd, non_tty):
        OutputManager(format=OutputFormat.JSON).print_json({"id": 1, "tags": ["a"]})
        out = capfd.readouterr().out
        assert json.loads(out) == {"id": 1, "tags": ["a"]}
        assert "\n  " in out

    def test_table_plain_is_tab_separated(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_table(["ID", "Title"], [["1", "List files"], ["2", "Docker ps"]])
        assert capfd.readouterr().out == "ID\tTitle\n1\tList files\n2\tDocker ps\n"

    def test_table_json_records(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON)
        mgr.print_table(["ID", "Title"], [["1", "List files"]])
        assert json.loads(capfd.readouterr().out) == [{"ID": "1", "Title": "List files"}]

    def test_table_rich(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.print_table(["ID", "Title"], [["1", "List files"]], title="Saved Commands")
        out = capfd.readouterr().out
        assert "Saved Commands" in out
        assert "List files" in out


# ------------------------------------------------------------------ #
# Logging
# ------------------------------------------------------------------ #


class TestConfigureLogging:
    def test_silent_without_verbose(self, capfd, non_tty):
        OutputManager(no_color=True).configure_logging()
        logging.getLogger("cmdref.auth.callback_server").debug("hidden record")
        assert "hidden record" not in capfd.readouterr().err

    def test_verbose_routes_to_stderr(self, capfd, non_tty):
        OutputManager(no_color=True, verbose=True).configure_logging()
        logging.getLogger("cmdref.auth.callback_server").debug("visible record")
        captured = capfd.readouterr()
        assert "visible record" in captured.err
        assert captured.out == ""

    def test_reconfigure_replaces_handlers(self, non_tty):
        mgr = OutputManager(no_color=True, verbose=True)
        mgr.configure_logging()
        mgr.configure_logging()
        assert len(logging.getLogger("cmdref").handlers) == 1


# ------------------------------------------------------------------ #
# Global instance
# ------------------------------------------------------------------ #


class TestGlobalInstance:
    def test_get_output_creates_default(self):
        assert isinstance(get_output(), OutputManager)

    def test_set_output_installs(self):
        mgr = OutputManager(quiet=True)
        set_output(mgr)
        assert get_output() is mgr

    def test_convenience_functions_delegate(self, capfd, non_tty):
        set_output(OutputManager(no_color=True))
        output_module.info("via module")
        output_module.print_data("data line")
        captured = capfd.readouterr()
        assert "via module" in captured.err
        assert captured.out == "data line\n"
