"""Numeric process exit codes following `clig.dev <https://clig.dev/>`_ conventions.

Each constant maps to a specific error category and is referenced by the
corresponding :class:`~cmdref.exceptions.CmdrefError` subclass.
Shell wrappers can inspect the exit code to determine the failure class
without parsing stderr.

Example::

    $ cmdref show 42
    $ echo $?
    4   # EXIT_NOT_FOUND -- no saved command with that id

``cmdref run`` is the exception: it exits with the executed command's own
exit code.
"""

EXIT_SUCCESS = 0
"""The command completed successfully."""

EXIT_GENERIC_FAILURE = 1
"""An unclassified error occurred."""

EXIT_INVALID_USAGE = 2
"""The command was invoked with invalid arguments or missing required parameters."""

EXIT_AUTH_FAILURE = 3
"""Not logged in, credentials were rejected, or the authorization was refused."""

EXIT_NOT_FOUND = 4
"""The requested command was not found in the catalog (HTTP 404)."""

EXIT_SERVER_ERROR = 5
"""The backend returned an error status or a malformed response."""

EXIT_CONNECTION_ERROR = 6
"""A network-level error occurred (timeout, DNS failure, connection refused)."""

EXIT_LOGIN_TIMEOUT = 7
"""The browser login did not complete within the wait window."""

EXIT_SESSION_ERROR = 8
"""The local session file could not be read or written."""

EXIT_EXECUTION_ERROR = 9
"""A helper process (clipboard tool, shell) could not be started."""

EXIT_CANCELLED = 130
"""The user interrupted the command with Ctrl-C."""
