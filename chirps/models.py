"""
chirps/models.py -- Domain dataclass for a chirp (short post).

Pure data container with zero logic. Content rules (length limit, profanity
masking) live in chirps/content.py; persistence lives in chirps/store.py.
"""

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from auth.models import Identity


@dataclass
class Chirp:
    """A short post owned by exactly one account.

    user_id is the owner Identity. Ownership checks compare it against the
    identity proven by the caller's access token.

    id is None before the record is written to the database.
    """

    body: str
    user_id: Identity
    id: Optional[uuid.UUID] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
