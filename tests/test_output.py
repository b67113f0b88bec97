"""Tests for the output formatting system.

Covers:
- OutputFormat resolution (auto -> rich/plain based on TTY)
- NO_COLOR / TERM=dumb color disabling
- stdout vs stderr discipline
- Quiet mode suppression rules
- Verbose mode debug and trace output
- JSON, plain and Rich renderers
- Output file redirection
"""

from __future__ import annotations

import json

import pytest

from netkit.output import (
    OutputFormat,
    OutputManager,
    _should_disable_color,
)


# ------------------------------------------------------------------ #
# Fixtures
# ------------------------------------------------------------------ #


@pytest.fixture()
def non_tty(monkeypatch):
    """Patch stdout.isatty() to return False."""
    monkeypatch.setattr("netkit.output._is_tty", lambda: False)


@pytest.fixture()
def tty(monkeypatch):
    """Patch stdout.isatty() to return True."""
    monkeypatch.setattr("netkit.output._is_tty", lambda: True)


# ------------------------------------------------------------------ #
# OutputFormat resolution
# ------------------------------------------------------------------ #


class TestOutputFormatResolution:
    """Test that AUTO format resolves correctly based on environment."""

    def test_auto_resolves_to_plain_when_not_tty(self, non_tty):
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.PLAIN

    def test_auto_resolves_to_rich_when_tty(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.RICH

    def test_auto_resolves_to_plain_when_tty_but_no_color(self, tty, monkeypatch):
        monkeypatch.setenv("NO_COLOR", "1")
        mgr = OutputManager(format=OutputFormat.AUTO)
        assert mgr.format == OutputFormat.PLAIN

    def test_explicit_json_stays_json(self, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON)
        assert mgr.format == OutputFormat.JSON

    def test_explicit_rich_stays_rich(self, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH)
        assert mgr.format == OutputFormat.RICH

    def test_enum_from_string(self):
        assert OutputFormat("plain") is OutputFormat.PLAIN
        with pytest.raises(ValueError):
            OutputFormat("yaml")


# ------------------------------------------------------------------ #
# NO_COLOR / TERM=dumb detection
# ------------------------------------------------------------------ #


class TestColorDisabling:
    """Test that NO_COLOR and TERM=dumb are respected."""

    def test_no_color_env_disables_color(self, monkeypatch):
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

    def test_no_color_flag_overrides(self, tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.AUTO, no_color=True)
        assert mgr.format == OutputFormat.PLAIN


# ------------------------------------------------------------------ #
# stdout vs stderr discipline
# ------------------------------------------------------------------ #


class TestStdoutStderrDiscipline:
    """Test that data goes to stdout and diagnostics go to stderr."""

    def test_print_data_goes_to_stdout(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.print_data("hello world")
        captured = capfd.readouterr()
        assert "hello world" in captured.out
        assert captured.err == ""

    @pytest.mark.parametrize("method", ["info", "warning", "error", "suggest"])
    def test_diagnostics_go_to_stderr(self, method, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        getattr(mgr, method)("diagnostic text")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "diagnostic text" in captured.err

    def test_trace_goes_to_stderr(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
        mgr.trace("*** Request: GET https://api.example.com/")
        captured = capfd.readouterr()
        assert captured.out == ""
        assert "*** Request: GET https://api.example.com/" in captured.err

    def test_no_diagnostics_leak_to_stdout_in_json(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True, verbose=True)
        mgr.info("HTTP 200 OK")
        mgr.trace("*** Response: https://api.example.com/ 200")
        mgr.format_response({"result": "ok"})
        captured = capfd.readouterr()
        assert json.loads(captured.out) == {"result": "ok"}
        assert "HTTP 200 OK" in captured.err
        assert "*** Response" in captured.err


# ------------------------------------------------------------------ #
# Quiet and verbose modes
# ------------------------------------------------------------------ #


class TestQuietMode:
    """Test that --quiet suppresses info/suggest but not warning/error."""

    @pytest.mark.parametrize("method", ["info", "suggest"])
    def test_quiet_suppresses(self, method, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("should not appear")
        assert capfd.readouterr().err == ""

    @pytest.mark.parametrize("method", ["warning", "error"])
    def test_quiet_does_not_suppress(self, method, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        getattr(mgr, method)("important")
        assert "important" in capfd.readouterr().err

    def test_quiet_does_not_suppress_stdout_data(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, quiet=True)
        mgr.print_data("important data")
        assert "important data" in capfd.readouterr().out

    def test_is_quiet_property(self, non_tty):
        assert OutputManager(quiet=True).is_quiet is True
        assert OutputManager().is_quiet is False


class TestVerboseMode:
    """Test that --verbose enables debug and trace output."""

    def test_debug_hidden_by_default(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.debug("should not appear")
        assert capfd.readouterr().err == ""

    def test_debug_prefix_in_no_color(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
        mgr.debug("details")
        assert "[debug] details" in capfd.readouterr().err

    def test_trace_hidden_by_default(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.trace("*** Request: GET https://api.example.com/")
        assert capfd.readouterr().err == ""

    def test_trace_printed_verbatim(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, verbose=True)
        mgr.trace("*** Request: POST https://x.example\nHeaders: {}\nBody: a=1")
        assert capfd.readouterr().err == "*** Request: POST https://x.example\nHeaders: {}\nBody: a=1\n"

    def test_trace_escapes_markup(self, capfd, non_tty, monkeypatch):
        monkeypatch.delenv("NO_COLOR", raising=False)
        monkeypatch.delenv("TERM", raising=False)
        mgr = OutputManager(format=OutputFormat.PLAIN, verbose=True)
        mgr.trace('Body: {"tags": ["[bold]a[/bold]"]}')
        assert '["[bold]a[/bold]"]' in capfd.readouterr().err

    def test_verbose_property(self, non_tty):
        assert OutputManager(verbose=True).is_verbose is True
        assert OutputManager().is_verbose is False


# ------------------------------------------------------------------ #
# Renderers
# ------------------------------------------------------------------ #


class TestJsonFormat:
    """Test that JSON format outputs valid JSON to stdout."""

    def test_dict_as_json(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        data = {"users": [{"id": 1, "name": "Alice"}]}
        mgr.format_response(data)
        assert json.loads(capfd.readouterr().out) == data

    def test_string_that_is_json(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.format_response('{"key": "value"}')
        assert json.loads(capfd.readouterr().out) == {"key": "value"}

    def test_plain_string_as_json(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.format_response("hello world")
        assert "hello world" in capfd.readouterr().out

    def test_json_output_is_indented(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.JSON, no_color=True)
        mgr.format_response({"key": "value"})
        assert "\n  " in capfd.readouterr().out


class TestPlainFormat:
    """Test plain format outputs tab-separated or simple text."""

    def test_dict_as_key_value(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.format_response({"name": "Alice", "age": "30"})
        lines = capfd.readouterr().out.strip().split("\n")
        assert lines == ["name\tAlice", "age\t30"]

    def test_list_of_dicts_as_rows(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.format_response([{"id": 1, "name": "Alice"}, {"id": 2, "name": "Bob"}])
        lines = capfd.readouterr().out.strip().split("\n")
        assert lines == ["1\tAlice", "2\tBob"]

    def test_number_as_plain(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True)
        mgr.format_response(42)
        assert "42" in capfd.readouterr().out


class TestRichFormat:
    """Test Rich format outputs syntax-highlighted content."""

    def test_dict_produces_output(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.format_response({"key": "value"})
        captured = capfd.readouterr()
        assert "key" in captured.out
        assert "value" in captured.out

    def test_html_string(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.format_response("<p>hi</p>", "text/html")
        assert "hi" in capfd.readouterr().out

    def test_number_in_rich(self, capfd, non_tty):
        mgr = OutputManager(format=OutputFormat.RICH, no_color=True)
        mgr.format_response(99)
        assert "99" in capfd.readouterr().out


# ------------------------------------------------------------------ #
# Output file
# ------------------------------------------------------------------ #


class TestOutputFile:
    def test_format_response_writes_to_file(self, tmp_path, capfd, non_tty):
        target = tmp_path / "out.json"
        mgr = OutputManager(format=OutputFormat.PLAIN, no_color=True, output_file=str(target))
        mgr.format_response({"id": 1})

        assert capfd.readouterr().out == ""
        assert json.loads(target.read_text(encoding="utf-8")) == {"id": 1}

    def test_output_file_ends_with_newline(self, tmp_path, non_tty):
        target = tmp_path / "out.txt"
        mgr = OutputManager(format=OutputFormat.PLAIN, output_file=str(target))
        mgr.format_response("body")
        assert target.read_text(encoding="utf-8") == "body\n"

    def test_print_data_appends_to_file(self, tmp_path, non_tty):
        target = tmp_path / "log.txt"
        mgr = OutputManager(format=OutputFormat.PLAIN, output_file=str(target))
        mgr.print_data("one")
        mgr.print_data("two\n")
        assert target.read_text(encoding="utf-8") == "one\ntwo\n"


class TestDiagnosticFormatting:
    def test_warning_prefix(self, capfd, non_tty):
        OutputManager(no_color=True).warning("careful")
        assert capfd.readouterr().err == "Warning: careful\n"

    def test_error_prefix(self, capfd, non_tty):
        OutputManager(no_color=True).error("broken")
        assert capfd.readouterr().err == "Error: broken\n"

    def test_suggest_has_arrow(self, capfd, non_tty):
        OutputManager(no_color=True).suggest("Run: netkit request --help")
        assert "→ Run: netkit request --help" in capfd.readouterr().err
