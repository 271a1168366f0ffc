"""Best-effort browser launcher for the authorization URL."""

from __future__ import annotations

import logging
import subprocess
import sys
import webbrowser

logger = logging.getLogger(__name__)


def _opener_command(url: str) -> list[str] | None:
    """Return the platform's opener command line, or ``None`` if unknown."""
    if sys.platform == "darwin":
        return ["open", url]
    if sys.platform.startswith("linux") or "bsd" in sys.platform:
        return ["xdg-open", url]
    if sys.platform == "win32":
        return ["rundll32", "url.dll,FileProtocolHandler", url]
    return None


def open_browser(url: str) -> bool:
    """Open *url* in the user's browser without waiting for it.

    The opener runs in its own session with stdio detached from the
    terminal. Failures are logged and reported through the return value
    and never raise; the caller always prints the URL as a fallback.

    Returns:
        ``True`` if an opener was started.
    """
    command = _opener_command(url)
    if command is None:
        try:
            return webbrowser.open(url)
        except webbrowser.Error as exc:
            logger.debug("webbrowser could not open URL: %s", exc)
            return False

    try:
        subprocess.Popen(
            command,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=(sys.platform != "win32"),
        )
    except OSError as exc:
        logger.debug("Could not start %s: %s", command[0], exc)
        return False
    return True
