"""Exception hierarchy for cmdref.

All exceptions inherit from :class:`CmdrefError`, which carries an
``exit_code`` attribute mapped to a constant from :mod:`cmdref.exit_codes`.
The top-level error handler in :func:`cmdref.app.main` catches
``CmdrefError`` and exits with the appropriate code, while unexpected
exceptions produce a crash log and exit with :data:`EXIT_GENERIC_FAILURE`.

Subclass hierarchy::

    CmdrefError (exit 1)
    +-- InvalidUsageError          (exit 2)
    +-- AuthError                  (exit 3)
    |   +-- AuthorizationError     (exit 3)
    |       +-- LoginTimeoutError  (exit 7)
    +-- NotFoundError              (exit 4)
    +-- ServerError                (exit 5)
    |   +-- ExchangeError          (exit 5)
    +-- ConnectionError_           (exit 6)
    +-- SessionError               (exit 8)
    +-- CommandExecutionError      (exit 9)
    +-- ConfigError                (exit 1)
"""

from __future__ import annotations

from typing import Optional

from cmdref.exit_codes import (
    EXIT_AUTH_FAILURE,
    EXIT_CONNECTION_ERROR,
    EXIT_EXECUTION_ERROR,
    EXIT_GENERIC_FAILURE,
    EXIT_INVALID_USAGE,
    EXIT_LOGIN_TIMEOUT,
    EXIT_NOT_FOUND,
    EXIT_SERVER_ERROR,
    EXIT_SESSION_ERROR,
)


class CmdrefError(Exception):
    """Base exception for all cmdref errors.

    Every subclass sets a class-level ``exit_code`` corresponding to one of
    the constants in :mod:`cmdref.exit_codes`. The entry point catches
    this exception type and calls ``sys.exit(exc.exit_code)``.

    Args:
        message: Human-readable error description printed to stderr.
        exit_code: Optional override for the class-level exit code.
    """

    exit_code: int = EXIT_GENERIC_FAILURE

    def __init__(self, message: str, exit_code: int | None = None):
        super().__init__(message)
        if exit_code is not None:
            self.exit_code = exit_code


class InvalidUsageError(CmdrefError):
    """Raised for invalid CLI arguments, bad ids, or otherwise invalid input."""

    exit_code = EXIT_INVALID_USAGE


class AuthError(CmdrefError):
    """Raised when the user is not logged in or the backend rejects the session."""

    exit_code = EXIT_AUTH_FAILURE


class AuthorizationError(AuthError):
    """Raised when the browser authorization step fails.

    Covers provider-reported errors (including the user denying consent).
    The login flow is never resumable, so the only remedy is a fresh
    ``cmdref login``.

    Args:
        message: Human-readable error description.
        error: The provider's ``error`` code, when one was reported.
        description: The provider's ``error_description``, if any.
    """

    def __init__(
        self,
        message: str,
        error: Optional[str] = None,
        description: Optional[str] = None,
    ):
        super().__init__(message)
        self.error = error
        self.description = description


class LoginTimeoutError(AuthorizationError):
    """Raised when no callback arrives within the login wait window."""

    exit_code = EXIT_LOGIN_TIMEOUT


class NotFoundError(CmdrefError):
    """Raised when the API returns HTTP 404 (command not found)."""

    exit_code = EXIT_NOT_FOUND


class ServerError(CmdrefError):
    """Raised on non-2xx responses and malformed response bodies."""

    exit_code = EXIT_SERVER_ERROR


class ExchangeError(ServerError):
    """Raised when the authorization code cannot be exchanged for a session token."""


class ConnectionError_(CmdrefError):
    """Raised on network-level failures (timeout, DNS resolution, connection refused).

    Named with a trailing underscore to avoid shadowing the built-in
    ``ConnectionError``.
    """

    exit_code = EXIT_CONNECTION_ERROR


class SessionError(CmdrefError):
    """Raised when the session file cannot be read, parsed, or written."""

    exit_code = EXIT_SESSION_ERROR


class CommandExecutionError(CmdrefError):
    """Raised when a helper process (clipboard tool, shell) cannot be started."""

    exit_code = EXIT_EXECUTION_ERROR


class ConfigError(CmdrefError):
    """Raised for configuration problems such as invalid environment overrides."""

    exit_code = EXIT_GENERIC_FAILURE
