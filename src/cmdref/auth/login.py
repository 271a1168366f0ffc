"""Browser login: OAuth 2.0 Authorization Code flow with PKCE.

:class:`LoginFlow` drives one login attempt through these states::

    IDLE -> LISTENING -> WAITING_FOR_CALLBACK -> EXCHANGING -> SUCCEEDED
                                  |                   |
                                  +------> FAILED <---+

1. Generate a fresh PKCE verifier/challenge and CSRF state.
2. Bind the loopback :class:`~cmdref.auth.callback_server.CallbackServer`
   and derive the redirect URI from its port.
3. Print the authorization URL and try to open it in the browser.
4. Wait for the first of: an authorization code, a provider error, or the
   login timeout. The callback server is shut down before going further,
   whichever event wins.
5. Exchange the code through the backend and persist the session.

Nothing is resumable: after any failure the verifier, state, and port are
discarded and the user runs ``cmdref login`` again.
"""

from __future__ import annotations

import enum
from typing import Callable, Optional
from urllib.parse import urlencode

from cmdref.auth.browser import open_browser
from cmdref.auth.callback_server import CallbackServer
from cmdref.auth.exchange import exchange_code
from cmdref.auth.pkce import generate_pkce
from cmdref.auth.session_store import SessionStore
from cmdref.exceptions import AuthorizationError, LoginTimeoutError
from cmdref.models import ExchangeResponse, Session, Settings
from cmdref.output import OutputFormat, get_output

BrowserOpener = Callable[[str], bool]
CodeExchanger = Callable[[Settings, str, str, str], ExchangeResponse]


class LoginState(str, enum.Enum):
    IDLE = "idle"
    LISTENING = "listening"
    WAITING_FOR_CALLBACK = "waiting_for_callback"
    EXCHANGING = "exchanging"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


def build_authorization_url(
    settings: Settings,
    redirect_uri: str,
    state: str,
    code_challenge: str,
) -> str:
    """Build the provider authorization URL for one attempt.

    ``access_type=offline`` and ``prompt=consent`` ask the provider for a
    long-lived grant on every login, so the backend reliably receives a
    refresh credential.
    """
    params: dict[str, str] = {
        "client_id": settings.client_id,
        "redirect_uri": redirect_uri,
        "response_type": "code",
        "scope": " ".join(settings.scopes),
        "state": state,
        "code_challenge": code_challenge,
        "code_challenge_method": "S256",
        "access_type": "offline",
        "prompt": "consent",
    }
    separator = "&" if "?" in settings.authorization_url else "?"
    return f"{settings.authorization_url}{separator}{urlencode(params)}"


class LoginFlow:
    """One interactive login attempt.

    Args:
        settings: Effective configuration (client id, endpoints, timeout).
        session_store: Where the resulting session is persisted.
        browser: Callable that opens a URL and reports success. Defaults to
            :func:`~cmdref.auth.browser.open_browser`.
        exchanger: Callable performing the code exchange. Defaults to
            :func:`~cmdref.auth.exchange.exchange_code`.

    Example::

        session = LoginFlow(resolve_settings(), SessionStore()).run()
    """

    def __init__(
        self,
        settings: Settings,
        session_store: SessionStore,
        *,
        browser: BrowserOpener = open_browser,
        exchanger: CodeExchanger = exchange_code,
    ) -> None:
        self._settings = settings
        self._store = session_store
        self._browser = browser
        self._exchanger = exchanger
        self.state = LoginState.IDLE
        self.redirect_uri: Optional[str] = None

    def run(self) -> Session:
        """Perform the login and return the persisted session.

        Raises:
            AuthorizationError: The provider reported an error (including
                the user denying consent).
            LoginTimeoutError: No callback arrived within
                ``settings.login_timeout`` seconds.
            ExchangeError: The backend exchange failed.
            SessionError: The session could not be written.
        """
        if self.state is not LoginState.IDLE:
            raise RuntimeError("A LoginFlow can only be run once")
        try:
            code, verifier = self._authorize()
            self.state = LoginState.EXCHANGING
            session = self._exchange(code, verifier)
        except BaseException:
            self.state = LoginState.FAILED
            raise
        self.state = LoginState.SUCCEEDED
        return session

    def _authorize(self) -> tuple[str, str]:
        """Run the browser leg and return ``(code, verifier)``."""
        output = get_output()
        params = generate_pkce()

        with CallbackServer(expected_state=params.state) as server:
            self.state = LoginState.LISTENING
            self.redirect_uri = server.redirect_uri
            auth_url = build_authorization_url(
                self._settings, self.redirect_uri, params.state, params.challenge
            )

            self.state = LoginState.WAITING_FOR_CALLBACK
            output.info("Opening browser for Google login...")
            output.info("If the browser does not open, visit this URL:")
            if output.format == OutputFormat.JSON:
                output.print_json({"authorization_url": auth_url})
            else:
                output.print_data(auth_url)
            if not self._browser(auth_url):
                output.warning("Could not open a browser; open the URL above manually.")

            output.debug(f"Waiting up to {self._settings.login_timeout:g}s for the callback")
            result = server.wait(timeout=self._settings.login_timeout)

        if result is None:
            raise LoginTimeoutError(
                "Login timed out waiting for the browser. Run 'cmdref login' again."
            )
        if not result.ok:
            message = f"Authorization failed: {result.error}"
            if result.error_description:
                message += f" ({result.error_description})"
            raise AuthorizationError(
                message, error=result.error, description=result.error_description
            )

        assert result.code is not None
        return result.code, params.verifier

    def _exchange(self, code: str, verifier: str) -> Session:
        assert self.redirect_uri is not None
        response = self._exchanger(self._settings, code, verifier, self.redirect_uri)
        return self._store.save(
            Session(
                token=response.token,
                email=response.email,
                name=response.name,
                picture=response.picture,
            )
        )
