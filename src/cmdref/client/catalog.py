"""Synchronous client for the command catalog API.

:class:`CatalogClient` wraps :class:`httpx.Client` and layers on:

- **Session injection** -- the bearer token from the stored
  :class:`~cmdref.models.Session` is sent with every request; entering the
  client without a session raises :class:`~cmdref.exceptions.AuthError`.
- **Typed payloads** -- requests and responses are validated through
  :class:`~cmdref.models.CommandCreate` and
  :class:`~cmdref.models.CommandItem`.
- **Error mapping** -- HTTP and network failures become the exceptions of
  :mod:`cmdref.exceptions`, each with its own exit code.

Requests are never retried.
"""

from __future__ import annotations

from typing import Any, Optional

import httpx
from pydantic import TypeAdapter, ValidationError

from cmdref.auth.session_store import SessionStore
from cmdref.exceptions import AuthError, ConnectionError_, NotFoundError, ServerError
from cmdref.models import CommandCreate, CommandItem, Session, Settings
from cmdref.output import get_output

COMMANDS_PATH = "/v1/commands"

_ITEM_LIST = TypeAdapter(list[CommandItem])


class CatalogClient:
    """Authenticated client for ``/v1/commands``.

    Must be used as a context manager so that the underlying transport is
    properly opened and closed.

    Args:
        settings: Supplies ``api_base`` and ``request_timeout``.
        session_store: Source of the bearer token.

    Example::

        with CatalogClient(settings, SessionStore()) as client:
            for item in client.search("docker"):
                print(item.id, item.title)
    """

    def __init__(self, settings: Settings, session_store: SessionStore) -> None:
        self._settings = settings
        self._store = session_store
        self._session: Optional[Session] = None
        self._client: Optional[httpx.Client] = None

    # ------------------------------------------------------------------ #
    # Context manager
    # ------------------------------------------------------------------ #

    def __enter__(self) -> CatalogClient:
        session = self._store.load()
        if session is None:
            raise AuthError("Not logged in. Run: cmdref login")
        self._session = session
        self._client = httpx.Client(
            base_url=self._settings.api_base,
            timeout=self._settings.request_timeout,
        )
        return self

    def __exit__(self, *args: object) -> None:
        if self._client:
            self._client.close()
            self._client = None

    # ------------------------------------------------------------------ #
    # Catalog operations
    # ------------------------------------------------------------------ #

    def create(self, item: CommandCreate) -> CommandItem:
        """Save a new command and return it as stored by the backend."""
        response = self.request("POST", COMMANDS_PATH, json_body=item.model_dump())
        return self._parse_item(response)

    def list(self) -> list[CommandItem]:
        """Return all saved commands, ordered by id."""
        response = self.request("GET", COMMANDS_PATH)
        return self._parse_items(response)

    def search(self, query: str) -> list[CommandItem]:
        """Return saved commands matching *query*, ordered by id."""
        response = self.request("GET", COMMANDS_PATH, params={"q": query})
        return self._parse_items(response)

    def get(self, item_id: int) -> CommandItem:
        """Fetch one saved command.

        Raises:
            NotFoundError: If no command has this id.
        """
        response = self.request("GET", f"{COMMANDS_PATH}/{item_id}")
        return self._parse_item(response)

    def delete(self, item_id: int) -> None:
        """Delete one saved command.

        Raises:
            NotFoundError: If no command has this id.
        """
        self.request("DELETE", f"{COMMANDS_PATH}/{item_id}")

    # ------------------------------------------------------------------ #
    # Transport
    # ------------------------------------------------------------------ #

    def request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json_body: Optional[Any] = None,
    ) -> httpx.Response:
        """Send an authenticated request and map error statuses to exceptions.

        Raises:
            AuthError: On 401 / 403.
            NotFoundError: On 404.
            ServerError: On any other status >= 400.
            ConnectionError_: On network / timeout errors.
        """
        assert self._client is not None, "Client not initialised -- use as context manager"
        assert self._session is not None

        headers = {
            "Accept": "application/json",
            "Authorization": f"Bearer {self._session.token}",
        }
        kwargs: dict[str, Any] = {"headers": headers}
        if params:
            kwargs["params"] = params
        if json_body is not None:
            kwargs["json"] = json_body

        get_output().debug(f"{method} {self._settings.api_base}{path}")
        try:
            response = self._client.request(method, path, **kwargs)
        except httpx.TimeoutException as exc:
            raise ConnectionError_(
                f"Request to {self._settings.api_base}{path} timed out"
            ) from exc
        except httpx.TransportError as exc:
            raise ConnectionError_(
                f"Could not reach {self._settings.api_base}: {exc}"
            ) from exc

        self._map_response_error(response)
        return response

    def _map_response_error(self, response: httpx.Response) -> None:
        """Raise a typed exception for error HTTP status codes."""
        status = response.status_code
        if status < 400:
            return

        try:
            detail = response.json()
            if isinstance(detail, dict):
                msg = detail.get("message") or detail.get("error") or detail.get("detail") or ""
            else:
                msg = str(detail)
        except ValueError:
            msg = response.text[:200].strip() if response.text else ""

        full_msg = f"HTTP {status}: {msg}" if msg else f"HTTP {status}"

        if status in (401, 403):
            raise AuthError(f"{full_msg}. Run: cmdref login")
        if status == 404:
            raise NotFoundError(f"Not found: {response.request.url.path}")
        raise ServerError(full_msg)

    @staticmethod
    def _parse_item(response: httpx.Response) -> CommandItem:
        try:
            return CommandItem.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ServerError(f"Malformed response from {response.request.url}: {exc}") from exc

    @staticmethod
    def _parse_items(response: httpx.Response) -> list[CommandItem]:
        try:
            items = _ITEM_LIST.validate_python(response.json() or [])
        except (ValueError, ValidationError) as exc:
            raise ServerError(f"Malformed response from {response.request.url}: {exc}") from exc
        return sorted(items, key=lambda it: it.id)
