"""Built-in CLI commands for cmdref.

This package groups the Typer command callbacks registered on the root app:

* :mod:`~cmdref.commands.auth` -- ``login``, ``logout``, ``whoami``.
* :mod:`~cmdref.commands.catalog` -- ``add``, ``list``, ``search``,
  ``show``, ``copy``, ``run``, ``rm``.

Each module exports plain callback functions registered directly on the
root app in :func:`cmdref.app.register_commands`. The helpers below are
shared by both modules.
"""

from __future__ import annotations

from typing import NoReturn

import typer

from cmdref.exceptions import CmdrefError, InvalidUsageError
from cmdref.models import Settings
from cmdref.output import error


def get_settings(ctx: typer.Context) -> Settings:
    """Resolve settings, honouring the root ``--api-base`` and ``--login-timeout`` options."""
    from cmdref.config import resolve_settings

    obj = ctx.obj if isinstance(ctx.obj, dict) else {}
    return resolve_settings(
        cli_api_base=obj.get("api_base"),
        cli_login_timeout=obj.get("login_timeout"),
    )


def fail(exc: CmdrefError) -> NoReturn:
    """Report *exc* on stderr and exit with its exit code."""
    error(str(exc))
    raise typer.Exit(code=exc.exit_code)


def parse_id(raw: str) -> int:
    """Parse a command id given on the command line.

    Raises:
        InvalidUsageError: If *raw* is not a positive integer.
    """
    try:
        value = int(raw)
    except ValueError:
        value = 0
    if value <= 0:
        raise InvalidUsageError(f"Invalid id: {raw}")
    return value
