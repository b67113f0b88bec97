"""Typer application factory and CLI entry point for netkit.

This module wires together the top-level Typer application and registers
the built-in ``request`` command.  The root callback resolves the effective
configuration (see :func:`netkit.config.resolve_config`) and constructs the
:class:`~netkit.output.OutputManager` that every command receives through
``ctx.obj``.

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``.  Unhandled exceptions are written to a crash log under
the data directory.

See Also:
    :mod:`netkit.config`: Configuration precedence.
    :mod:`netkit.commands.request`: The ``request`` command.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from netkit import __version__
from netkit.commands.request import request_command
from netkit.exit_codes import EXIT_GENERIC_FAILURE


app = typer.Typer(
    name="netkit",
    help="Send declarative HTTP requests from the command line.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)

app.command("request")(request_command)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"netkit {__version__}")
        raise typer.Exit()


@app.callback()
def main_callback(
    ctx: typer.Context,
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show version and exit.",
    ),
    json_output: bool = typer.Option(
        False, "--json", help="JSON output format."
    ),
    plain_output: bool = typer.Option(
        False, "--plain", help="Plain text output."
    ),
    no_color: bool = typer.Option(
        False, "--no-color", help="Disable color output."
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress non-essential output."
    ),
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Trace requests and responses on stderr."
    ),
    stub: bool = typer.Option(
        False, "--stub", help="Do not send anything; answer with empty sample data."
    ),
    output_file: Optional[str] = typer.Option(
        None, "-o", "--output", help="Output file path."
    ),
) -> None:
    """Root callback executed before every sub-command.

    Resolves configuration from CLI flags, environment, project and user
    config files, builds the :class:`~netkit.output.OutputManager`, and
    stores both in the Typer context (``ctx.obj["config"]`` and
    ``ctx.obj["output"]``).
    """
    from netkit.config import resolve_config
    from netkit.exceptions import ConfigurationError
    from netkit.output import OutputFormat, OutputManager

    cli_format: Optional[str] = None
    if json_output:
        cli_format = OutputFormat.JSON.value
    elif plain_output:
        cli_format = OutputFormat.PLAIN.value

    config = resolve_config(
        cli_verbose=True if verbose else None,
        cli_stub=True if stub else None,
        cli_format=cli_format,
    )

    try:
        fmt = OutputFormat(config.output.format)
    except ValueError as exc:
        raise ConfigurationError(f"Unknown output format '{config.output.format}'") from exc

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=config.provider.verbose,
        output_file=output_file,
    )

    output.debug(
        f"Config: verbose={config.provider.verbose} stub={config.provider.stub} "
        f"format={fmt.value}"
    )

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["output"] = output


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from netkit.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(traceback.format_exc())
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``netkit`` console script.

    Unhandled :class:`~netkit.exceptions.NetkitError` instances cause a
    clean exit with the error's ``exit_code``.  All other exceptions
    produce a crash log and a generic failure exit.

    Raises:
        SystemExit: Always raised (either by Typer or explicitly).
    """
    _setup_signal_handlers()
    try:
        app()
    except SystemExit:
        raise
    except KeyboardInterrupt:
        sys.stderr.write("\nCancelled.\n")
        sys.exit(130)
    except Exception as exc:
        from netkit.exceptions import NetkitError
        from netkit.output import OutputManager

        output = OutputManager()
        if isinstance(exc, NetkitError):
            output.error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            output.error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
