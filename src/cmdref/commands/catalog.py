"""Catalog commands -- save, find, show, copy, run, and remove commands.

All of them talk to the backend through
:class:`~cmdref.client.CatalogClient` and therefore require a session
(``cmdref login``).

Examples::

    cmdref add --title "List files" --cmd "ls -la" --tags shell,mac
    cmdref search adb
    cmdref show 2
    cmdref copy 2
    cmdref run 2
    cmdref rm 2
"""

from __future__ import annotations

import shutil
import subprocess
import sys
from typing import TYPE_CHECKING, Optional

import typer

from cmdref.commands import fail, get_settings, parse_id
from cmdref.exceptions import CmdrefError, CommandExecutionError, InvalidUsageError
from cmdref.models import CommandCreate, CommandItem
from cmdref.output import OutputFormat, get_output, info, success, suggest

if TYPE_CHECKING:
    from cmdref.client import CatalogClient


def _client(ctx: typer.Context) -> CatalogClient:
    from cmdref.auth import SessionStore
    from cmdref.client import CatalogClient

    return CatalogClient(get_settings(ctx), SessionStore())


def _fetch(ctx: typer.Context, raw_id: str) -> CommandItem:
    item_id = parse_id(raw_id)
    with _client(ctx) as client:
        return client.get(item_id)


def _print_items(items: list[CommandItem], empty_hint: str) -> None:
    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json([it.model_dump(mode="json", by_alias=True) for it in items])
        return
    if not items:
        info(empty_hint)
        return
    rows = [[str(it.id), it.title, ",".join(it.tags)] for it in items]
    output.print_table(["ID", "Title", "Tags"], rows, title="Saved Commands")


def add_command(
    ctx: typer.Context,
    title: str = typer.Option("", "--title", help="Title for the command."),
    cmd: str = typer.Option("", "--cmd", help="The command to save."),
    tags: str = typer.Option("", "--tags", help="Comma-separated tags."),
    notes: str = typer.Option("", "--notes", help="Optional notes."),
) -> None:
    """Save a command to the catalog.

    Tags are lower-cased, de-duplicated, and sorted before saving.

    Example::

        cmdref add --title "List files" --cmd "ls -la" --tags shell,mac
    """
    try:
        if not title.strip() or not cmd.strip():
            raise InvalidUsageError("--title and --cmd are required")
        payload = CommandCreate(title=title, command=cmd, tags=tags, notes=notes)
        with _client(ctx) as client:
            created = client.create(payload)
    except CmdrefError as exc:
        fail(exc)

    if get_output().format == OutputFormat.JSON:
        get_output().print_json(created.model_dump(mode="json", by_alias=True))
        return
    success(f"Saved #{created.id}: {created.title}")


def list_command(ctx: typer.Context) -> None:
    """List all saved commands."""
    try:
        with _client(ctx) as client:
            items = client.list()
    except CmdrefError as exc:
        fail(exc)
    _print_items(items, "(empty) add one with: cmdref add --title ... --cmd ...")


def search_command(
    ctx: typer.Context,
    query: list[str] = typer.Argument(None, help="Search terms."),
) -> None:
    """Search saved commands.

    All arguments are joined with spaces into one query.

    Example::

        cmdref search docker compose
    """
    try:
        text = " ".join(query or []).strip()
        if not text:
            raise InvalidUsageError("search requires a query")
        with _client(ctx) as client:
            items = client.search(text)
    except CmdrefError as exc:
        fail(exc)
    _print_items(items, "(no matches)")


def show_command(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., metavar="ID", help="Command id."),
) -> None:
    """Show one saved command in full."""
    try:
        item = _fetch(ctx, item_id)
    except CmdrefError as exc:
        fail(exc)

    output = get_output()
    if output.format == OutputFormat.JSON:
        output.print_json(item.model_dump(mode="json", by_alias=True))
        return
    output.print_data(f"#{item.id} {item.title}")
    if item.tags:
        output.print_data(f"Tags: {', '.join(item.tags)}")
    if item.notes:
        output.print_data(f"Notes: {item.notes}")
    output.print_data(f"Command:\n{item.command}")


def _clipboard_command() -> Optional[list[str]]:
    """Return the first available clipboard tool for this platform."""
    if sys.platform == "darwin":
        candidates = [["pbcopy"]]
    elif sys.platform == "win32":
        candidates = [["clip"]]
    else:
        candidates = [["wl-copy"], ["xclip", "-selection", "clipboard"], ["xsel", "--clipboard", "--input"]]
    for candidate in candidates:
        if shutil.which(candidate[0]):
            return candidate
    return None


def copy_to_clipboard(text: str) -> None:
    """Copy *text* to the system clipboard.

    Raises:
        CommandExecutionError: If no clipboard tool is available or it fails.
    """
    command = _clipboard_command()
    if command is None:
        raise CommandExecutionError("No clipboard tool found (pbcopy, wl-copy, xclip, xsel, clip)")
    try:
        subprocess.run(command, input=text, text=True, check=True)
    except (OSError, subprocess.CalledProcessError) as exc:
        raise CommandExecutionError(f"Copying to clipboard failed: {exc}") from exc


def copy_command(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., metavar="ID", help="Command id."),
) -> None:
    """Copy a saved command to the clipboard."""
    try:
        item = _fetch(ctx, item_id)
        copy_to_clipboard(item.command)
    except CmdrefError as exc:
        fail(exc)
    success(f"Copied #{item.id} to clipboard")


def run_command(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., metavar="ID", help="Command id."),
) -> None:
    """Run a saved command in a login shell.

    The command runs as ``<shell> -lc "<command>"`` with the terminal's
    stdin, stdout and stderr, so the user's PATH and aliases apply. cmdref
    exits with the command's own exit code, or 128 + N when the command
    was killed by signal N.
    """
    try:
        item = _fetch(ctx, item_id)
        shell = get_settings(ctx).shell
        get_output().debug(f"Running #{item.id} with {shell}")
        try:
            completed = subprocess.run([shell, "-lc", item.command])
        except OSError as exc:
            raise CommandExecutionError(f"Could not start {shell}: {exc}") from exc
    except CmdrefError as exc:
        fail(exc)

    code = completed.returncode
    if code < 0:
        code = 128 - code
    if code != 0:
        raise typer.Exit(code=code)


def rm_command(
    ctx: typer.Context,
    item_id: str = typer.Argument(..., metavar="ID", help="Command id."),
) -> None:
    """Remove a saved command."""
    try:
        value = parse_id(item_id)
        with _client(ctx) as client:
            client.delete(value)
    except CmdrefError as exc:
        fail(exc)
    success(f"Removed #{value}")
    suggest("List what is left: cmdref list")
