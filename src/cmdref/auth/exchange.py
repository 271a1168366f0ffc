"""Authorization-code exchange through the cmdref backend.

The CLI never talks to the identity provider's token endpoint. It posts the
code, the PKCE verifier, and the redirect URI to the backend, which
performs the provider exchange server-side and answers with a cmdref
session token plus the user's profile::

    POST {api_base}/v1/auth/google/exchange
    {"code": "...", "code_verifier": "...", "redirect_uri": "..."}

    200 {"token": "...", "email": "...", "name": "...", "picture": "..."}

Authorization codes are single-use, so nothing here retries.
"""

from __future__ import annotations

from typing import Any

import httpx
from pydantic import ValidationError

from cmdref.exceptions import ExchangeError
from cmdref.models import ExchangeResponse, Settings

EXCHANGE_PATH = "/v1/auth/google/exchange"


def exchange_endpoint(settings: Settings) -> str:
    return f"{settings.api_base}{EXCHANGE_PATH}"


def exchange_code(
    settings: Settings,
    code: str,
    code_verifier: str,
    redirect_uri: str,
) -> ExchangeResponse:
    """Exchange an authorization code for a cmdref session token.

    Args:
        settings: Supplies ``api_base`` and ``request_timeout``.
        code: The authorization code received on the callback.
        code_verifier: The PKCE verifier matching the challenge that was
            sent in the authorization URL.
        redirect_uri: The exact redirect URI used in the authorization
            request.

    Returns:
        The validated :class:`~cmdref.models.ExchangeResponse`.

    Raises:
        ExchangeError: On network errors, non-2xx status, a body that is
            not a JSON object of the expected shape, or an empty token.
    """
    url = exchange_endpoint(settings)
    payload = {
        "code": code,
        "code_verifier": code_verifier,
        "redirect_uri": redirect_uri,
    }

    try:
        response = httpx.post(
            url,
            json=payload,
            headers={"Accept": "application/json"},
            timeout=settings.request_timeout,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise ExchangeError(
            f"Token exchange at {url} failed with status {exc.response.status_code}: "
            f"{exc.response.text.strip()}"
        ) from exc
    except httpx.HTTPError as exc:
        raise ExchangeError(f"Token exchange at {url} failed: {exc}") from exc

    try:
        data: Any = response.json()
    except ValueError as exc:
        raise ExchangeError(f"Token exchange at {url} returned invalid JSON") from exc
    if not isinstance(data, dict):
        raise ExchangeError(f"Token exchange at {url} returned an unexpected body")

    try:
        result = ExchangeResponse.model_validate(data)
    except ValidationError as exc:
        raise ExchangeError(f"Token exchange at {url} returned a malformed body: {exc}") from exc

    if not result.token:
        raise ExchangeError(f"Token exchange at {url} returned an empty token")
    return result
