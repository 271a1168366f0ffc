"""Loopback HTTP server that captures one OAuth redirect.

:class:`CallbackServer` binds ``127.0.0.1`` on an OS-assigned port, serves
``GET /callback`` from a background thread, and hands the first valid
outcome (an authorization code or a provider error) to whoever calls
:meth:`CallbackServer.wait`.

Request handling:

1. ``state`` does not match the attempt's state -> HTTP 400, nothing
   delivered.
2. ``error`` present -> failure page, error outcome delivered.
3. ``code`` present -> success page, code delivered.
4. anything else -> HTTP 400, nothing delivered.

Delivery goes through a one-slot queue guarded by a lock, so a second
valid request (browser retry, link prefetch) is answered but can neither
block the handler nor replace the captured result.

Use it as a context manager; leaving the block always stops the serve
loop, closes the listening socket and joins the thread::

    with CallbackServer(expected_state=params.state) as server:
        open_browser(url_for(server.redirect_uri))
        result = server.wait(timeout=180)
"""

from __future__ import annotations

import html
import logging
import queue
import secrets
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from typing import Any, Optional
from urllib.parse import parse_qs, urlparse

from cmdref.models import AuthorizationResult

logger = logging.getLogger(__name__)

CALLBACK_PATH = "/callback"

_SUCCESS_PAGE = (
    "<html><body><h3>Login successful.</h3>"
    "<p>You can close this window and return to the terminal.</p></body></html>"
)
_FAILURE_PAGE = (
    "<html><body><h3>Login failed.</h3><p>{detail}</p>"
    "<p>Return to the terminal and run <code>cmdref login</code> again.</p></body></html>"
)


class CallbackServer:
    """Single-outcome loopback listener for the authorization redirect.

    Args:
        expected_state: The ``state`` value sent in this attempt's
            authorization URL. Requests carrying any other value are
            rejected.
        host: Interface to bind. Only loopback addresses make sense.
        port: Port to bind; ``0`` lets the OS choose a free one.
        request_timeout: Socket timeout for a single request. The server is
            single-threaded, so this bounds how long an idle connection
            (a browser preconnect, say) can hold up the real redirect.
    """

    def __init__(
        self,
        expected_state: str,
        host: str = "127.0.0.1",
        port: int = 0,
        request_timeout: float = 1.0,
    ) -> None:
        self._expected_state = expected_state
        self._host = host
        self._port = port
        self._request_timeout = request_timeout
        self._results: queue.Queue[AuthorizationResult] = queue.Queue(maxsize=1)
        self._lock = threading.Lock()
        self._delivered = False
        self._server: Optional[HTTPServer] = None
        self._thread: Optional[threading.Thread] = None

    # ------------------------------------------------------------------ #
    # Lifecycle
    # ------------------------------------------------------------------ #

    def __enter__(self) -> CallbackServer:
        self.start()
        return self

    def __exit__(self, *args: object) -> None:
        self.stop()

    def start(self) -> None:
        """Bind the listening socket and start serving in a background thread."""
        if self._server is not None:
            return
        self._server = HTTPServer((self._host, self._port), self._make_handler())
        self._thread = threading.Thread(
            target=self._server.serve_forever,
            kwargs={"poll_interval": 0.1},
            name="cmdref-callback-server",
            daemon=True,
        )
        self._thread.start()
        logger.debug("Callback server listening on %s", self.redirect_uri)

    def stop(self) -> None:
        """Stop serving and release the port.

        ``shutdown()`` waits for the serve loop to exit, which lets a request
        that is already being handled finish first.
        """
        server, thread = self._server, self._thread
        self._server = None
        self._thread = None
        if server is None:
            return
        server.shutdown()
        server.server_close()
        if thread is not None:
            thread.join()
        logger.debug("Callback server stopped")

    @property
    def is_running(self) -> bool:
        return self._server is not None

    @property
    def port(self) -> int:
        """The bound port (OS-assigned when constructed with ``port=0``)."""
        if self._server is None:
            raise RuntimeError("Callback server is not running")
        return self._server.server_address[1]

    @property
    def redirect_uri(self) -> str:
        return f"http://{self._host}:{self.port}{CALLBACK_PATH}"

    # ------------------------------------------------------------------ #
    # Result delivery
    # ------------------------------------------------------------------ #

    def wait(self, timeout: float) -> Optional[AuthorizationResult]:
        """Block until an outcome is captured or *timeout* seconds elapse.

        Returns:
            The captured :class:`~cmdref.models.AuthorizationResult`, or
            ``None`` on timeout.
        """
        try:
            return self._results.get(timeout=timeout)
        except queue.Empty:
            return None

    def deliver(self, result: AuthorizationResult) -> bool:
        """Record *result* if no outcome has been delivered yet.

        Never blocks. Returns ``True`` only for the call that won.
        """
        with self._lock:
            if self._delivered:
                return False
            self._delivered = True
            self._results.put_nowait(result)
            return True

    # ------------------------------------------------------------------ #
    # Request handling
    # ------------------------------------------------------------------ #

    def handle_callback(self, query: dict[str, list[str]]) -> tuple[int, str]:
        """Process one ``/callback`` query string and return ``(status, body)``."""

        def first(name: str) -> str:
            values = query.get(name)
            return values[0] if values else ""

        if not secrets.compare_digest(
            first("state").encode("utf-8"), self._expected_state.encode("utf-8")
        ):
            logger.debug("Rejected callback with mismatched state")
            return 400, "Invalid state"

        error = first("error")
        if error:
            description = first("error_description")
            self.deliver(
                AuthorizationResult(error=error, error_description=description or None)
            )
            detail = html.escape(f"{error}: {description}" if description else error)
            return 200, _FAILURE_PAGE.format(detail=detail)

        code = first("code")
        if code:
            if not self.deliver(AuthorizationResult(code=code)):
                logger.debug("Ignoring repeated callback; an outcome was already captured")
            return 200, _SUCCESS_PAGE

        return 400, "Missing code"

    def _make_handler(self) -> type[BaseHTTPRequestHandler]:
        owner = self

        class CallbackHandler(BaseHTTPRequestHandler):
            timeout = owner._request_timeout

            def do_GET(self) -> None:
                parsed = urlparse(self.path)
                if parsed.path != CALLBACK_PATH:
                    self._respond(404, "Not found", "text/plain")
                    return
                status, body = owner.handle_callback(parse_qs(parsed.query))
                content_type = "text/html" if status == 200 else "text/plain"
                self._respond(status, body, content_type)
                logger.debug("GET %s -> %d", parsed.path, status)

            def _respond(self, status: int, body: str, content_type: str) -> None:
                payload = body.encode("utf-8")
                self.send_response(status)
                self.send_header("Content-Type", f"{content_type}; charset=utf-8")
                self.send_header("Content-Length", str(len(payload)))
                self.end_headers()
                self.wfile.write(payload)

            def log_message(self, format: str, *args: Any) -> None:
                # The query string carries the code; keep it out of logs.
                pass

        return CallbackHandler
