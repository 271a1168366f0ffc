"""Tests for PKCE parameter generation."""

from __future__ import annotations

import base64
import hashlib
import re

from cmdref.auth.pkce import code_challenge_s256, generate_pkce, random_urlsafe

_B64URL = re.compile(r"^[A-Za-z0-9_-]+$")


class TestCodeChallenge:
    def test_rfc7636_vector(self) -> None:
        # Appendix B of RFC 7636
        verifier = "dBjftJeZ4CVP-mB92K27uhbUJU1p1r_wW1gFWFOEjXk"
        assert code_challenge_s256(verifier) == "E9Melhoa2OwvFrEMTJguCHaoeK1t8URWbuGJSstw-cM"

    def test_fixed_64_byte_verifier(self) -> None:
        # Bytes 0x00..0x3f, base64url without padding, as generate_pkce sizes it
        verifier = (
            "AAECAwQFBgcICQoLDA0ODxAREhMUFRYXGBkaGxwdHh8gISIjJCUmJygpKissLS4vMDEy"
            "MzQ1Njc4OTo7PD0-Pw"
        )
        assert len(verifier) == 86
        assert verifier == base64.urlsafe_b64encode(bytes(range(64))).decode("ascii").rstrip("=")
        assert code_challenge_s256(verifier) == "wsNdZaf3VpLTsEDmR5gPk2C6xYVWxKb0xcaG3O6kX10"

    def test_matches_sha256_of_verifier(self) -> None:
        verifier = "a" * 86
        digest = hashlib.sha256(verifier.encode("ascii")).digest()
        expected = base64.urlsafe_b64encode(digest).decode("ascii").rstrip("=")
        assert code_challenge_s256(verifier) == expected

    def test_no_padding(self) -> None:
        challenge = code_challenge_s256("some-verifier")
        assert "=" not in challenge
        assert len(challenge) == 43


class TestGeneratePkce:
    def test_verifier_length_and_alphabet(self) -> None:
        params = generate_pkce()
        assert len(params.verifier) == 86
        assert 43 <= len(params.verifier) <= 128
        assert _B64URL.match(params.verifier)
        assert "=" not in params.verifier

    def test_challenge_derived_from_verifier(self) -> None:
        params = generate_pkce()
        assert params.challenge == code_challenge_s256(params.verifier)

    def test_state_is_independent(self) -> None:
        params = generate_pkce()
        assert len(params.state) == 43
        assert _B64URL.match(params.state)
        assert params.state != params.verifier

    def test_fresh_values_each_call(self) -> None:
        first, second = generate_pkce(), generate_pkce()
        assert first.verifier != second.verifier
        assert first.state != second.state


def test_random_urlsafe_length() -> None:
    assert len(random_urlsafe(32)) == 43
    assert len(random_urlsafe(64)) == 86
