"""Unit tests for auth/tokens.py -- access-token issuance and verification.

Covers:
- round trip returns the same Identity
- tampered signature / payload and the wrong secret are SIGNATURE_INVALID
- any single-character change, including non-canonical base64url spellings
- strict expiry: one second before exp is valid, exp itself and after are not
- configured leeway widens the window
- wrong segment count is MALFORMED
- missing/mistyped claims and foreign issuer are CLAIMS_INVALID
- non-UUID subject is SUBJECT_INVALID
- alg=none is refused
"""

import base64
import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jws, jwt

from auth.models import Identity
from auth.results import AuthError
from auth.tokens import ALGORITHM, ISSUER, create_access_token, verify_access_token

SECRET = "unit-test-secret-that-is-at-least-32-chars"
TTL = timedelta(hours=1)
NOW = datetime(2024, 1, 1, 12, 0, 0, tzinfo=timezone.utc)
_B64URL = "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_"


@pytest.fixture
def identity() -> Identity:
    return Identity.new()


@pytest.fixture
def token(identity) -> str:
    return create_access_token(identity, SECRET, TTL, now=NOW)


def _claims(**overrides) -> dict:
    claims = {
        "iss": ISSUER,
        "sub": str(Identity.new()),
        "iat": int(NOW.timestamp()),
        "exp": int((NOW + TTL).timestamp()),
    }
    claims.update(overrides)
    return {k: v for k, v in claims.items() if v is not None}


def _b64(data: dict) -> str:
    return base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()


def _flip_middle_char(segment: str) -> str:
    i = len(segment) // 2
    replacement = "A" if segment[i] != "A" else "B"
    return segment[:i] + replacement + segment[i + 1 :]


class TestRoundTrip:
    def test_returns_identity(self, identity, token):
        result = verify_access_token(token, SECRET, now=NOW + timedelta(minutes=5))
        assert result.ok
        assert result.value == identity

    def test_claims_shape(self, identity, token):
        claims = jwt.get_unverified_claims(token)
        assert claims["iss"] == "chirpy"
        assert claims["sub"] == str(identity)
        assert claims["exp"] - claims["iat"] == 3600

    def test_compact_serialization(self, token):
        assert token.count(".") == 2


class TestSignature:
    def test_tampered_signature(self, token):
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, _flip_middle_char(signature)])
        assert verify_access_token(tampered, SECRET, now=NOW).error is AuthError.SIGNATURE_INVALID

    def test_tampered_payload(self, token):
        header, payload, signature = token.split(".")
        tampered = ".".join([header, _flip_middle_char(payload), signature])
        assert verify_access_token(tampered, SECRET, now=NOW).error is AuthError.SIGNATURE_INVALID

    def test_wrong_secret(self, token):
        other = "another-secret-that-is-at-least-32-chars!"
        assert verify_access_token(token, other, now=NOW).error is AuthError.SIGNATURE_INVALID

    def test_alg_none_refused(self):
        unsigned = ".".join([_b64({"alg": "none", "typ": "JWT"}), _b64(_claims()), ""])
        assert verify_access_token(unsigned, SECRET, now=NOW).error is AuthError.SIGNATURE_INVALID

    def test_every_character_change_is_rejected(self, token):
        """Any single-character change anywhere in the token, including the
        low-bit-only spellings of a final character, fails the signature check."""
        segments = token.split(".")
        for index, segment in enumerate(segments):
            for pos, char in enumerate(segment):
                code = _B64URL.index(char)
                for replacement in {_B64URL[code ^ 1], "A" if char != "A" else "B"}:
                    changed = list(segments)
                    changed[index] = segment[:pos] + replacement + segment[pos + 1 :]
                    result = verify_access_token(".".join(changed), SECRET, now=NOW)
                    assert result.error is AuthError.SIGNATURE_INVALID, (index, pos, replacement)

    def test_low_bit_flip_of_last_signature_char(self, token):
        header, payload, signature = token.split(".")
        last = _B64URL[_B64URL.index(signature[-1]) ^ 1]
        tampered = ".".join([header, payload, signature[:-1] + last])
        assert verify_access_token(tampered, SECRET, now=NOW).error is AuthError.SIGNATURE_INVALID

    def test_garbage_segments(self):
        assert verify_access_token("abc.def.ghi", SECRET, now=NOW).error is AuthError.SIGNATURE_INVALID


class TestExpiry:
    def test_one_second_before_exp_is_valid(self, token):
        assert verify_access_token(token, SECRET, now=NOW + TTL - timedelta(seconds=1)).ok

    def test_exactly_at_exp_is_expired(self, token):
        assert verify_access_token(token, SECRET, now=NOW + TTL).error is AuthError.EXPIRED

    def test_one_second_after_exp_is_expired(self, token):
        assert verify_access_token(token, SECRET, now=NOW + TTL + timedelta(seconds=1)).error is AuthError.EXPIRED

    def test_leeway_extends_window(self, token):
        assert verify_access_token(token, SECRET, now=NOW + TTL + timedelta(seconds=1), leeway=5).ok

    def test_expired_and_tampered_reports_signature(self, token):
        header, payload, signature = token.split(".")
        tampered = ".".join([header, payload, _flip_middle_char(signature)])
        later = NOW + TTL + timedelta(days=1)
        assert verify_access_token(tampered, SECRET, now=later).error is AuthError.SIGNATURE_INVALID


class TestMalformed:
    @pytest.mark.parametrize("raw", ["", "abc", "a.b", "a.b.c.d"])
    def test_wrong_segment_count(self, raw):
        assert verify_access_token(raw, SECRET, now=NOW).error is AuthError.MALFORMED


class TestClaims:
    @pytest.mark.parametrize("missing", ["sub", "iss", "iat", "exp"])
    def test_missing_claim(self, missing):
        signed = jws.sign(_claims(**{missing: None}), SECRET, algorithm=ALGORITHM)
        assert verify_access_token(signed, SECRET, now=NOW).error is AuthError.CLAIMS_INVALID

    def test_foreign_issuer(self):
        signed = jws.sign(_claims(iss="someone-else"), SECRET, algorithm=ALGORITHM)
        assert verify_access_token(signed, SECRET, now=NOW).error is AuthError.CLAIMS_INVALID

    def test_string_exp(self):
        signed = jws.sign(_claims(exp="tomorrow"), SECRET, algorithm=ALGORITHM)
        assert verify_access_token(signed, SECRET, now=NOW).error is AuthError.CLAIMS_INVALID

    def test_payload_not_an_object(self):
        signed = jws.sign(b"[1, 2, 3]", SECRET, algorithm=ALGORITHM)
        assert verify_access_token(signed, SECRET, now=NOW).error is AuthError.CLAIMS_INVALID

    def test_subject_not_a_uuid(self):
        signed = jws.sign(_claims(sub="user-42"), SECRET, algorithm=ALGORITHM)
        assert verify_access_token(signed, SECRET, now=NOW).error is AuthError.SUBJECT_INVALID
