"""Output formatting system with strict stdout/stderr discipline.

Follows `clig.dev <https://clig.dev/>`_ conventions:

* **stdout** -- primary data only (response bodies). This is what
  downstream tools pipe and parse.
* **stderr** -- all diagnostics (status lines, request traces, warnings,
  errors, suggestions). Never contaminates the data stream.
* **TTY detection** -- Rich formatting when stdout is an interactive
  terminal, plain text when piped to another process.
* **Colour control** -- respects ``NO_COLOR``, ``TERM=dumb``, and the
  ``--no-color`` CLI flag.

There is no process-wide instance: an :class:`OutputManager` is constructed
by whoever needs one (the CLI callback, a test, an embedding application)
and handed explicitly to the :class:`~netkit.client.Provider` and to
:func:`~netkit.client.response.format_outcome`.
"""

from __future__ import annotations

import json
import os
import sys
from enum import Enum
from typing import Any, Optional

from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax


class OutputFormat(str, Enum):
    """Enumeration of supported output formats.

    ``AUTO`` resolves to ``RICH`` when stdout is an interactive TTY and colour
    is not disabled, or to ``PLAIN`` otherwise. Callers can force a specific
    format via the ``--json`` or ``--plain`` CLI flags.
    """

    AUTO = "auto"
    JSON = "json"
    PLAIN = "plain"
    RICH = "rich"


class OutputManager:
    """Central manager for all output with stdout/stderr discipline.

    Maintains two Rich :class:`~rich.console.Console` instances -- one for
    stdout (data) and one for stderr (diagnostics) -- and routes every
    output call to the correct stream with appropriate formatting.

    Args:
        format: Desired output format. ``AUTO`` resolves based on TTY
            detection.
        no_color: Disable all colour and Rich markup.
        quiet: Suppress non-essential informational messages on stderr.
        verbose: Enable debug-level messages and request/response traces
            on stderr.
        output_file: If set, redirect primary data output to this file
            path instead of stdout.
    """

    def __init__(
        self,
        format: OutputFormat = OutputFormat.AUTO,
        no_color: bool = False,
        quiet: bool = False,
        verbose: bool = False,
        output_file: Optional[str] = None,
    ) -> None:
        self._no_color = no_color or _should_disable_color()
        self._quiet = quiet
        self._verbose = verbose
        self._output_file = output_file

        # Resolve format: AUTO picks RICH for interactive TTY, PLAIN otherwise
        if format == OutputFormat.AUTO:
            self._format = (
                OutputFormat.RICH if _is_tty() and not self._no_color else OutputFormat.PLAIN
            )
        else:
            self._format = format

        self._stdout = Console(
            file=sys.stdout,
            no_color=self._no_color,
            force_terminal=(self._format == OutputFormat.RICH),
        )
        self._stderr = Console(
            file=sys.stderr,
            no_color=self._no_color,
            stderr=True,
        )

    @property
    def format(self) -> OutputFormat:
        """The resolved output format."""
        return self._format

    @property
    def is_quiet(self) -> bool:
        """Whether quiet mode is enabled."""
        return self._quiet

    @property
    def is_verbose(self) -> bool:
        """Whether verbose mode is enabled."""
        return self._verbose

    # ------------------------------------------------------------------ #
    # Data output (stdout)
    # ------------------------------------------------------------------ #

    def format_response(self, data: Any, content_type: str = "application/json") -> None:
        """Format and output response data to stdout.

        Dispatches to the appropriate renderer (JSON, plain, or Rich) based
        on the resolved :attr:`format`. When an ``output_file`` was
        configured, data is written there instead of stdout.

        Args:
            data: Response payload -- typically a dict, list, or raw string.
            content_type: MIME type hint used by the Rich renderer to choose
                syntax highlighting.
        """
        if self._output_file:
            self._write_to_file(data)
            return

        if self._format == OutputFormat.JSON:
            self._print_json(data)
        elif self._format == OutputFormat.PLAIN:
            self._print_plain(data)
        else:
            self._print_rich(data, content_type)

    def print_data(self, text: str) -> None:
        """Print raw text to stdout (or to the configured output file).

        Args:
            text: The string to write. A trailing newline is appended if
                missing.
        """
        if self._output_file:
            with open(self._output_file, "a", encoding="utf-8") as f:
                f.write(text)
                if not text.endswith("\n"):
                    f.write("\n")
        else:
            print(text, file=sys.stdout, flush=True)

    # ------------------------------------------------------------------ #
    # Diagnostics (stderr)
    # ------------------------------------------------------------------ #

    def info(self, message: str) -> None:
        """Print an informational message to stderr. Suppressed by ``--quiet``."""
        if not self._quiet:
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(message)

    def warning(self, message: str) -> None:
        """Print a yellow warning to stderr. NOT suppressed by ``--quiet``."""
        if self._no_color:
            print(f"Warning: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[yellow]Warning:[/yellow] {message}")

    def error(self, message: str) -> None:
        """Print a bold-red error to stderr. Never suppressed."""
        if self._no_color:
            print(f"Error: {message}", file=sys.stderr, flush=True)
        else:
            self._stderr.print(f"[bold red]Error:[/bold red] {message}")

    def suggest(self, message: str) -> None:
        """Print a dimmed next-step suggestion to stderr. Suppressed by ``--quiet``.

        Args:
            message: The suggestion text (prefixed with an arrow on output).
        """
        if not self._quiet:
            formatted = f"→ {message}"
            if self._no_color:
                print(formatted, file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim]{formatted}[/dim]")

    def debug(self, message: str) -> None:
        """Print a debug message to stderr. Only shown when ``--verbose`` is active.

        Args:
            message: The debug text (prefixed with ``[debug]`` on output).
        """
        if self._verbose:
            if self._no_color:
                print(f"[debug] {message}", file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[dim]\\[debug] {message}[/dim]")

    def trace(self, message: str) -> None:
        """Print a cyan request/response trace to stderr. Only shown when verbose.

        The message is printed verbatim; Rich markup inside it (brackets in a
        JSON body, for instance) is escaped.

        Args:
            message: A multi-line trace block.
        """
        if self._verbose:
            if self._no_color:
                print(message, file=sys.stderr, flush=True)
            else:
                self._stderr.print(f"[cyan]{escape(message)}[/cyan]")

    # ------------------------------------------------------------------ #
    # Private helpers
    # ------------------------------------------------------------------ #

    def _print_json(self, data: Any) -> None:
        """Print data as raw JSON to stdout."""
        if isinstance(data, (dict, list)):
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))
        elif isinstance(data, str):
            # Try to parse as JSON for re-formatting; otherwise output as-is
            try:
                parsed = json.loads(data)
                self.print_data(json.dumps(parsed, indent=2, ensure_ascii=False, default=str))
            except (json.JSONDecodeError, TypeError):
                self.print_data(data)
        else:
            self.print_data(json.dumps(data, indent=2, ensure_ascii=False, default=str))

    def _print_plain(self, data: Any) -> None:
        """Print data as plain text to stdout."""
        if isinstance(data, dict):
            for key, value in data.items():
                self.print_data(f"{key}\t{value}")
        elif isinstance(data, list):
            for item in data:
                if isinstance(item, dict):
                    self.print_data("\t".join(str(v) for v in item.values()))
                else:
                    self.print_data(str(item))
        elif isinstance(data, str):
            self.print_data(data)
        else:
            self.print_data(str(data))

    def _print_rich(self, data: Any, content_type: str) -> None:
        """Print data with Rich formatting to stdout."""
        if isinstance(data, (dict, list)):
            json_str = json.dumps(data, indent=2, ensure_ascii=False, default=str)
            self._stdout.print(Syntax(json_str, "json", theme="monokai", word_wrap=True))
        elif isinstance(data, str):
            try:
                parsed = json.loads(data)
                json_str = json.dumps(parsed, indent=2, ensure_ascii=False, default=str)
                self._stdout.print(Syntax(json_str, "json", theme="monokai", word_wrap=True))
            except (json.JSONDecodeError, TypeError):
                lexer = "html" if "html" in content_type else "xml" if "xml" in content_type else None
                if lexer:
                    self._stdout.print(Syntax(data, lexer, theme="monokai", word_wrap=True))
                else:
                    self._stdout.print(data, markup=False)
        else:
            self._stdout.print(str(data), markup=False)

    def _write_to_file(self, data: Any) -> None:
        """Write data to the configured output file."""
        assert self._output_file is not None
        if isinstance(data, (dict, list)):
            content = json.dumps(data, indent=2, ensure_ascii=False, default=str)
        elif isinstance(data, str):
            content = data
        else:
            content = str(data)

        with open(self._output_file, "w", encoding="utf-8") as f:
            f.write(content)
            if not content.endswith("\n"):
                f.write("\n")


# ------------------------------------------------------------------ #
# Module-level helpers
# ------------------------------------------------------------------ #


def _is_tty() -> bool:
    """Check if stdout is a TTY."""
    return hasattr(sys.stdout, "isatty") and sys.stdout.isatty()


def _should_disable_color() -> bool:
    """Check if color should be disabled per clig.dev.

    Returns True when NO_COLOR env var is set (any value) or TERM=dumb.
    """
    if os.environ.get("NO_COLOR") is not None:
        return True
    if os.environ.get("TERM") == "dumb":
        return True
    return False
