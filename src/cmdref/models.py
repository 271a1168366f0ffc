"""Canonical Pydantic models shared across all cmdref modules.

The models fall into three groups:

**Configuration** -- :class:`Settings`, built by
:func:`cmdref.config.resolve_settings` and passed explicitly to the
components that need it.

**Authentication** -- :class:`PKCEParams`, :class:`AuthorizationResult`,
:class:`ExchangeResponse`, and :class:`Session`. Only :class:`Session` is
ever written to disk.

**Catalog** -- :class:`CommandItem` and :class:`CommandCreate`, the typed
request/response shapes of the command catalog API.

All models use Pydantic v2. JSON field names follow the backend's camelCase
(``createdAt``) through aliases; Python code uses snake_case.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# --- Configuration ---


DEFAULT_API_BASE = "http://127.0.0.1:8080"
DEFAULT_CLIENT_ID = "YOUR_DESKTOP_CLIENT_ID.apps.googleusercontent.com"
DEFAULT_AUTHORIZATION_URL = "https://accounts.google.com/o/oauth2/v2/auth"
DEFAULT_SCOPES = ["openid", "email", "profile"]
DEFAULT_LOGIN_TIMEOUT = 180.0


class Settings(BaseModel):
    """Effective runtime configuration.

    Resolved once per invocation from CLI flags and environment variables
    (see :func:`cmdref.config.resolve_settings`) and handed to the login
    flow, the code exchanger, and the catalog client at construction time.
    """

    api_base: str = Field(default=DEFAULT_API_BASE, description="Backend base URL")
    client_id: str = Field(default=DEFAULT_CLIENT_ID, description="OAuth client identifier")
    authorization_url: str = Field(
        default=DEFAULT_AUTHORIZATION_URL,
        description="Identity provider authorization endpoint",
    )
    scopes: list[str] = Field(default_factory=lambda: list(DEFAULT_SCOPES))
    login_timeout: float = Field(
        default=DEFAULT_LOGIN_TIMEOUT,
        gt=0,
        description="Seconds to wait for the browser redirect",
    )
    request_timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")
    shell: str = Field(default="/bin/sh", description="Shell used by 'cmdref run'")

    @field_validator("api_base")
    @classmethod
    def _strip_trailing_slash(cls, value: str) -> str:
        return value.rstrip("/")


# --- Authentication ---


class PKCEParams(BaseModel):
    """One login attempt's PKCE verifier, S256 challenge, and CSRF state."""

    model_config = ConfigDict(frozen=True)

    verifier: str
    challenge: str
    state: str


class AuthorizationResult(BaseModel):
    """The single outcome captured by the loopback callback server.

    Exactly one of ``code`` or ``error`` is set. A timeout is represented
    by the absence of a result, not by an instance of this class.
    """

    model_config = ConfigDict(frozen=True)

    code: Optional[str] = None
    error: Optional[str] = None
    error_description: Optional[str] = None

    @property
    def ok(self) -> bool:
        """``True`` when the provider returned an authorization code."""
        return self.code is not None and self.error is None


class ExchangeResponse(BaseModel):
    """Body returned by the backend's code-exchange endpoint."""

    token: str = ""
    email: str = ""
    name: str = ""
    picture: Optional[str] = None


class Session(BaseModel):
    """The durable login credential persisted by :class:`~cmdref.auth.SessionStore`.

    ``token`` is an opaque bearer credential issued by the cmdref backend,
    not a provider token. Instances are frozen: a new login always writes
    a whole new session.

    Example::

        Session(token="t1", email="a@b.com", name="Ada")
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    token: str = ""
    email: str = ""
    name: str = ""
    picture: Optional[str] = None
    created_at: Optional[datetime] = Field(default=None, alias="createdAt")

    @field_validator("token", "email", "name", mode="before")
    @classmethod
    def _null_as_empty(cls, value: Optional[str]) -> str:
        return "" if value is None else value


# --- Catalog ---


def normalize_tags(raw: str | list[str] | None) -> list[str]:
    """Split, trim, lower-case, de-duplicate and sort a tag list.

    Accepts either a comma-separated string (as typed on the command line)
    or an already-split list.
    """
    if raw is None:
        return []
    parts = raw.split(",") if isinstance(raw, str) else raw
    return sorted({p.strip().lower() for p in parts if p.strip()})


class CommandCreate(BaseModel):
    """Payload for ``POST /v1/commands``."""

    title: str
    command: str
    tags: list[str] = Field(default_factory=list)
    notes: str = ""

    @field_validator("title", "command", "notes")
    @classmethod
    def _strip(cls, value: str) -> str:
        return value.strip()

    @field_validator("tags", mode="before")
    @classmethod
    def _normalize_tags(cls, value: str | list[str] | None) -> list[str]:
        return normalize_tags(value)


class CommandItem(BaseModel):
    """A saved command as returned by the catalog API."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    title: str
    command: str
    tags: list[str] = Field(default_factory=list)
    notes: str = ""
    created_at: Optional[str] = Field(default=None, alias="createdAt")
    updated_at: Optional[str] = Field(default=None, alias="updatedAt")

    @field_validator("tags", mode="before")
    @classmethod
    def _none_tags(cls, value: Optional[list[str]]) -> list[str]:
        return value or []
