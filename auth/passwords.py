"""
auth/passwords.py -- bcrypt password hashing and timing-equalized login.

Security design decisions:
  bcrypt directly (no passlib wrapper). The cost factor is embedded in every
  hash ($2b$<cost>$...), so verification always uses the cost that produced
  the hash and BCRYPT_ROUNDS can be raised later without invalidating old
  accounts.

  bcrypt only reads the first 72 bytes of its input, and bcrypt 5.x raises
  on longer input instead of truncating. _encode() truncates explicitly so
  every string is hashable and hash/verify agree on the bytes used.

  The plaintext password is never logged, at any level.

Layer rule: no imports from api/, chirps/, or core/.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import TYPE_CHECKING

import bcrypt

from auth.results import AuthError, HashingError, Outcome

if TYPE_CHECKING:
    from auth.models import User
    from auth.store import UserStore

logger = logging.getLogger("chirpy.auth.passwords")

DEFAULT_ROUNDS = 12
_BCRYPT_MAX_BYTES = 72


def _encode(plain: str) -> bytes:
    # surrogatepass: a lone surrogate from a JSON body still has one byte form.
    return plain.encode("utf-8", "surrogatepass")[:_BCRYPT_MAX_BYTES]


def hash_password(plain: str, rounds: int = DEFAULT_ROUNDS) -> str:
    """Return a salted bcrypt hash of the given plaintext password.

    Raises HashingError only if bcrypt itself fails (salt generation or the
    key schedule). Never raises because of the password's content.
    """
    secret = _encode(plain)
    try:
        return bcrypt.hashpw(secret, bcrypt.gensalt(rounds=rounds)).decode("utf-8")
    except (ValueError, OSError) as exc:
        raise HashingError("password hashing failed") from exc


def verify_password(plain: str, hashed: str) -> Outcome[None]:
    """Re-derive the hash with its embedded salt and cost and compare.

    A stored hash that bcrypt cannot parse counts as a mismatch; it is
    logged without any password material.
    """
    secret = _encode(plain)
    try:
        matched = bcrypt.checkpw(secret, hashed.encode("utf-8"))
    except ValueError:
        logger.warning("Stored password hash is not a valid bcrypt hash")
        matched = False
    if not matched:
        return Outcome.failure(AuthError.PASSWORD_MISMATCH)
    return Outcome.success()


@lru_cache(maxsize=4)
def _dummy_hash(rounds: int) -> str:
    # Same cost as real hashes so an unknown email costs as much as a wrong password.
    return hash_password("chirpy_timing_dummy", rounds)


def authenticate(store: UserStore, email: str, password: str, rounds: int = DEFAULT_ROUNDS) -> Outcome[User]:
    """Authenticate an email/password login with timing equalization.

    Always runs bcrypt whether or not the account exists, so response time
    does not reveal which emails are registered:
    - Unknown email: bcrypt runs against a dummy hash of the same cost.
    - Wrong password: bcrypt runs against the real hash.

    Both failures come back as PASSWORD_MISMATCH; callers answer with the
    same message for either.
    """
    user = store.get_by_email(email)
    if user is None:
        verify_password(password, _dummy_hash(rounds))
        return Outcome.failure(AuthError.PASSWORD_MISMATCH)
    result = verify_password(password, user.hashed_password)
    if not result.ok:
        return Outcome.failure(result.error)
    return Outcome.success(user)
