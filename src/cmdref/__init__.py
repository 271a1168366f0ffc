"""cmdref -- save, recall, and re-run shell commands from the terminal.

Commands are stored in a remote catalog that is reached over an
authenticated JSON API. Authentication uses a browser-based OAuth 2.0
Authorization Code flow with PKCE: a short-lived loopback HTTP server
captures the redirect, the code is exchanged through the backend for a
``cmdref`` session token, and the token is persisted for later commands.

Typical workflow::

    cmdref login
    cmdref add --title "List files" --cmd "ls -la" --tags shell
    cmdref search list
    cmdref run 1

Modules:
    app: Typer application and CLI entry point.
    models: Pydantic models shared across the package.
    config: XDG-aware paths and environment-driven settings.
    exceptions: Exception hierarchy with exit-code mapping.
    exit_codes: Numeric exit codes following clig.dev conventions.
    output: stdout/stderr formatting system with Rich support.
"""

__version__ = "0.1.0"
