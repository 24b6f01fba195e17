"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Mirrors the approach
in chirps/models.py -- dataclasses own domain shape; stores and routes do
the work.

Layer rule: no imports from api/, chirps/, or core/.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, order=True)
class Identity:
    """Opaque account identifier shared by access and refresh tokens.

    Wraps a UUID so the token codec and the account store never compare raw
    strings. str(identity) is the canonical text form used in the JWT "sub"
    claim and in the database.
    """

    value: uuid.UUID

    @classmethod
    def new(cls) -> Identity:
        return cls(uuid.uuid4())

    @classmethod
    def parse(cls, raw: str) -> Identity:
        """Parse the canonical text form. Raises ValueError if not a UUID."""
        if not isinstance(raw, str):
            raise ValueError(f"identity must be a string, got {type(raw).__name__}")
        return cls(uuid.UUID(raw))

    def __str__(self) -> str:
        return str(self.value)


@dataclass
class User:
    """A registered account.

    hashed_password is a bcrypt modular-crypt string. The plaintext never
    reaches this object.
    """

    email: str
    hashed_password: str
    id: Identity | None = None
    is_chirpy_red: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class RefreshToken:
    """A long-lived, opaque, server-resolved credential.

    Security design:
    - token is 64 hex chars from secrets.token_hex(32) -- 256 bits of entropy.
    - usable only while revoked_at is None and now < expires_at.
    - revoked_at is written once (guarded UPDATE) and never cleared.
    - rows disappear only through the ON DELETE CASCADE from users.
    """

    token: str
    user_id: Identity
    expires_at: datetime
    created_at: datetime | None = None
    updated_at: datetime | None = None
    revoked_at: datetime | None = None
