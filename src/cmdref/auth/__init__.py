"""Browser-based authentication for cmdref.

The package implements the OAuth 2.0 Authorization Code flow with PKCE
against a loopback redirect, and the local session that results from it.

The main entry points are:

- :class:`LoginFlow` -- runs one interactive login and persists the session.
- :class:`SessionStore` -- load, save, and clear the persisted session.
- :class:`CallbackServer` -- the ephemeral loopback redirect listener.
- :func:`generate_pkce` -- verifier / challenge / state generation.
- :func:`exchange_code` -- code-for-token exchange through the backend.

Typical usage::

    from cmdref.auth import LoginFlow, SessionStore
    from cmdref.config import resolve_settings

    session = LoginFlow(resolve_settings(), SessionStore()).run()
"""

from cmdref.auth.browser import open_browser
from cmdref.auth.callback_server import CallbackServer
from cmdref.auth.exchange import exchange_code
from cmdref.auth.login import LoginFlow, LoginState, build_authorization_url
from cmdref.auth.pkce import code_challenge_s256, generate_pkce
from cmdref.auth.session_store import SessionStore

__all__ = [
    "CallbackServer",
    "LoginFlow",
    "LoginState",
    "SessionStore",
    "build_authorization_url",
    "code_challenge_s256",
    "exchange_code",
    "generate_pkce",
    "open_browser",
]
