"""
auth/results.py -- Tagged outcomes for every verification and resolution step.

Verification functions in auth/ never raise for an expected failure (bad
signature, expired token, unknown refresh token, wrong password). They return
an Outcome carrying either a value or exactly one AuthError tag. The handler
at the HTTP boundary logs the precise tag and answers with a deliberately
vague message, so diagnostic detail survives in logs without leaking to an
unauthenticated caller.

HashingError is the one exception: it signals an internal crypto fault, not
a user mistake, and is surfaced as HTTP 500.

Layer rule: no imports from api/, chirps/, or core/.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Generic, TypeVar

T = TypeVar("T")


class AuthError(str, Enum):
    """One tag per failure kind. The value doubles as a log-friendly code."""

    MISSING = "missing"
    EMPTY = "empty"
    MALFORMED = "malformed"
    SIGNATURE_INVALID = "signature_invalid"
    EXPIRED = "expired"
    CLAIMS_INVALID = "claims_invalid"
    SUBJECT_INVALID = "subject_invalid"
    PASSWORD_MISMATCH = "password_mismatch"
    NOT_FOUND = "not_found"
    REVOKED = "revoked"
    ALREADY_REVOKED = "already_revoked"
    FORBIDDEN = "forbidden"
    UNAUTHORIZED = "unauthorized"
    STORAGE_CONFLICT = "storage_conflict"

    @property
    def category(self) -> str:
        """Coarse error class used when reporting, e.g. 'InputMalformed'."""
        return _CATEGORIES[self]


_CATEGORIES: dict[AuthError, str] = {
    AuthError.MISSING: "InputMalformed",
    AuthError.EMPTY: "InputMalformed",
    AuthError.MALFORMED: "InputMalformed",
    AuthError.CLAIMS_INVALID: "InputMalformed",
    AuthError.SUBJECT_INVALID: "InputMalformed",
    AuthError.SIGNATURE_INVALID: "SignatureInvalid",
    AuthError.EXPIRED: "Expired",
    AuthError.REVOKED: "Revoked",
    AuthError.ALREADY_REVOKED: "Revoked",
    AuthError.NOT_FOUND: "NotFound",
    AuthError.FORBIDDEN: "Forbidden",
    AuthError.PASSWORD_MISMATCH: "Unauthorized",
    AuthError.UNAUTHORIZED: "Unauthorized",
    AuthError.STORAGE_CONFLICT: "StorageConflict",
}


@dataclass(frozen=True)
class Outcome(Generic[T]):
    """Success with an optional value, or failure with exactly one AuthError.

    Usage:
        result = verify_access_token(token, secret)
        if not result.ok:
            logger.info("rejected: %s", result.error.value)
            ...
        identity = result.value
    """

    value: T | None = None
    error: AuthError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    @classmethod
    def success(cls, value: T | None = None) -> Outcome[T]:
        return cls(value=value)

    @classmethod
    def failure(cls, error: AuthError) -> Outcome[T]:
        return cls(error=error)


class HashingError(RuntimeError):
    """bcrypt could not produce a hash (entropy or computation fault)."""
