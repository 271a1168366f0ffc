"""PKCE parameter generation (:rfc:`7636`, S256 method only).

Every login attempt gets a fresh :class:`~cmdref.models.PKCEParams`:

- ``verifier`` -- 64 random bytes, base64url without padding (86 chars,
  inside the 43-128 range the RFC allows).
- ``challenge`` -- base64url(SHA-256(verifier)) without padding.
- ``state`` -- 32 independent random bytes used only for CSRF binding.

The ``plain`` challenge method is deliberately not supported.
"""

from __future__ import annotations

import base64
import hashlib
import secrets

from cmdref.models import PKCEParams

VERIFIER_BYTES = 64
STATE_BYTES = 32


def _b64url(raw: bytes) -> str:
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def random_urlsafe(n_bytes: int) -> str:
    """Return *n_bytes* of CSPRNG output as unpadded base64url text."""
    return _b64url(secrets.token_bytes(n_bytes))


def code_challenge_s256(verifier: str) -> str:
    """Compute the S256 code challenge for *verifier*."""
    digest = hashlib.sha256(verifier.encode("ascii")).digest()
    return _b64url(digest)


def generate_pkce() -> PKCEParams:
    """Generate a fresh verifier / challenge / state triple."""
    verifier = random_urlsafe(VERIFIER_BYTES)
    return PKCEParams(
        verifier=verifier,
        challenge=code_challenge_s256(verifier),
        state=random_urlsafe(STATE_BYTES),
    )
