"""Auth commands -- log in, log out, and show the current session.

Typical workflow::

    cmdref login    # browser-based Google login
    cmdref whoami   # show who is logged in
    cmdref logout   # forget the local session
"""

from __future__ import annotations

import typer

from cmdref.commands import fail, get_settings
from cmdref.exceptions import CmdrefError
from cmdref.output import get_output, info, success, suggest


def login_command(ctx: typer.Context) -> None:
    """Log in through the browser and store a session.

    Starts a temporary loopback server, opens the Google consent page, and
    exchanges the returned code through the cmdref backend. The resulting
    session replaces any previous one.

    Example::

        cmdref login
    """
    from cmdref.auth import LoginFlow, SessionStore

    try:
        settings = get_settings(ctx)
        session = LoginFlow(settings, SessionStore()).run()
    except CmdrefError as exc:
        fail(exc)

    success("Login successful")
    info(f"Logged in as: {session.email or session.name or 'unknown user'}")


def logout_command() -> None:
    """Remove the stored session.

    Example::

        cmdref logout
    """
    from cmdref.auth import SessionStore

    try:
        SessionStore().clear()
    except CmdrefError as exc:
        fail(exc)
    success("Logged out")


def whoami_command() -> None:
    """Show the logged-in user.

    Prints the email to stdout, or a hint on stderr when no session exists.
    With ``--json`` the session's identity fields are printed instead (the
    token itself is never shown).

    Example::

        cmdref whoami
        cmdref --json whoami
    """
    from cmdref.auth import SessionStore
    from cmdref.output import OutputFormat

    try:
        session = SessionStore().load()
    except CmdrefError as exc:
        fail(exc)

    if session is None:
        info("Not logged in.")
        suggest("Run: cmdref login")
        return

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json(
            session.model_dump(mode="json", by_alias=True, exclude={"token"}, exclude_none=True)
        )
        return
    output.print_data(f"Logged in as: {session.email}")
