"""Typer application and CLI entry point for cmdref.

This module wires together the top-level Typer application and registers
the built-in commands (``login``, ``logout``, ``whoami``, ``add``,
``list``, ``search``, ``show``, ``copy``, ``run``, ``rm``).

The :func:`main` function is the console-script entry point declared in
``pyproject.toml``. It installs signal handlers and invokes the Typer app.
Unhandled exceptions are written to a crash log under the data directory.

See Also:
    :mod:`cmdref.config`: Settings resolution.
    :mod:`cmdref.output`: Output formatting initialised in :func:`main_callback`.
"""

from __future__ import annotations

import signal
import sys
import traceback
from datetime import datetime
from typing import Any, Optional

import typer

from cmdref import __version__
from cmdref.exit_codes import EXIT_CANCELLED, EXIT_GENERIC_FAILURE

app = typer.Typer(
    name="cmdref",
    help="Save, search, and run your shell commands from anywhere.",
    no_args_is_help=True,
    add_completion=False,
    rich_markup_mode="rich",
)


def _version_callback(value: bool) -> None:
    """Print version and exit when --version is passed."""
    if value:
        typer.echo(f"cmdref {__version__}")
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
    api_base: Optional[str] = typer.Option(
        None, "--api-base", help="Backend base URL (overrides CMDREF_API_BASE)."
    ),
    login_timeout: Optional[float] = typer.Option(
        None,
        "--login-timeout",
        help="Seconds to wait for the browser redirect (overrides CMDREF_LOGIN_TIMEOUT).",
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
        False, "--verbose", "-v", help="Enable debug output."
    ),
) -> None:
    """Root callback executed before every command.

    Initialises the global :class:`~cmdref.output.OutputManager` and the
    ``cmdref`` logger from CLI flags, and stores ``--api-base`` and
    ``--login-timeout`` in ``ctx.obj`` for :func:`cmdref.commands.get_settings`.
    """
    from cmdref.output import OutputFormat, OutputManager, set_output

    fmt = OutputFormat.AUTO
    if json_output:
        fmt = OutputFormat.JSON
    elif plain_output:
        fmt = OutputFormat.PLAIN

    output = OutputManager(
        format=fmt,
        no_color=no_color,
        quiet=quiet,
        verbose=verbose,
    )
    output.configure_logging()
    set_output(output)

    ctx.ensure_object(dict)
    ctx.obj["api_base"] = api_base
    ctx.obj["login_timeout"] = login_timeout
    ctx.obj["verbose"] = verbose


def register_commands() -> None:
    """Attach the built-in commands to :data:`app`."""
    from cmdref.commands.auth import login_command, logout_command, whoami_command
    from cmdref.commands.catalog import (
        add_command,
        copy_command,
        list_command,
        rm_command,
        run_command,
        search_command,
        show_command,
    )

    app.command("login")(login_command)
    app.command("logout")(logout_command)
    app.command("whoami")(whoami_command)
    app.command("add")(add_command)
    app.command("list")(list_command)
    app.command("search")(search_command)
    app.command("show")(show_command)
    app.command("copy")(copy_command)
    app.command("run")(run_command)
    app.command("rm")(rm_command)


register_commands()


def _setup_signal_handlers() -> None:
    """Install a SIGINT handler so Ctrl-C exits cleanly."""

    def _handler(signum: int, frame: Any) -> None:  # noqa: ANN401
        sys.stderr.write("\nCancelled.\n")
        sys.exit(EXIT_CANCELLED)

    signal.signal(signal.SIGINT, _handler)


def _write_crash_log(exc: Exception) -> str:
    """Write a crash traceback to disk and return the log file path."""
    from cmdref.config import get_data_dir

    logs_dir = get_data_dir() / "logs"
    logs_dir.mkdir(parents=True, exist_ok=True)
    timestamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    log_path = logs_dir / f"crash-{timestamp}.log"
    log_path.write_text(
        "".join(traceback.format_exception(type(exc), exc, exc.__traceback__))
    )
    return str(log_path)


def main() -> None:
    """CLI entry point invoked by the ``cmdref`` console script.

    :class:`~cmdref.exceptions.CmdrefError` instances that escape a command
    cause a clean exit with the error's ``exit_code``. All other exceptions
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
        sys.exit(EXIT_CANCELLED)
    except Exception as exc:
        from cmdref.exceptions import CmdrefError
        from cmdref.output import error

        if isinstance(exc, CmdrefError):
            error(str(exc))
            sys.exit(exc.exit_code)
        else:
            log_path = _write_crash_log(exc)
            error(f"Unexpected error. Debug log: {log_path}")
            sys.exit(EXIT_GENERIC_FAILURE)
