"""
API request and response models for Chirpy REST endpoints.

These Pydantic v2 models define the HTTP transport contract for the API layer.
They are intentionally separate from the dataclasses in auth/models.py and
chirps/models.py, which own the internal domain representation. Route
handlers map between the two.

Response models never carry a password hash. LoginResponse and TokenResponse
are the only models that carry token material.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from auth.models import User
from chirps.content import MAX_CHIRP_LENGTH
from chirps.models import Chirp

# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class SortEnum(str, Enum):
    asc = "asc"
    desc = "desc"


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class UserCredentials(BaseModel):
    """Request body for POST /users, PUT /users and POST /login."""

    model_config = ConfigDict(extra="forbid")

    email: str = Field(min_length=3, max_length=255, pattern=r"^[^@\s]+@[^@\s]+$")
    # Passwords are taken verbatim (no whitespace stripping).
    password: str = Field(min_length=1, max_length=255)


class ChirpCreate(BaseModel):
    """Request body for POST /chirps and PUT /chirps/{id}.

    The length limit applies to the raw body, before profanity masking.
    """

    model_config = ConfigDict(extra="forbid")

    body: str = Field(min_length=1, max_length=MAX_CHIRP_LENGTH)


class WebhookData(BaseModel):
    user_id: uuid.UUID


class WebhookEvent(BaseModel):
    """Payload of POST /polka/webhooks. Unknown fields are ignored."""

    event: str
    data: WebhookData


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    email: str
    is_chirpy_red: bool

    @classmethod
    def from_user(cls, user: User) -> "UserResponse":
        """Factory Method: map the domain User onto the public contract."""
        return cls(
            id=user.id.value,
            created_at=user.created_at,
            updated_at=user.updated_at,
            email=user.email,
            is_chirpy_red=user.is_chirpy_red,
        )


class LoginResponse(UserResponse):
    """Response for POST /login: the user plus an access/refresh token pair."""

    token: str
    refresh_token: str


class TokenResponse(BaseModel):
    """Response for POST /refresh."""

    model_config = ConfigDict(frozen=True)

    token: str


class ChirpResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: uuid.UUID
    created_at: datetime
    updated_at: datetime
    body: str
    user_id: uuid.UUID

    @classmethod
    def from_chirp(cls, chirp: Chirp) -> "ChirpResponse":
        return cls(
            id=chirp.id,
            created_at=chirp.created_at,
            updated_at=chirp.updated_at,
            body=chirp.body,
            user_id=chirp.user_id.value,
        )


class ErrorDetail(BaseModel):
    """Machine-readable error payload."""

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: Optional[str] = None


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
