"""
chirps/store.py -- SQLAlchemy-backed persistence layer for chirps.

Uses SQLAlchemy Core (not ORM) so the domain dataclass in chirps/models.py
remains the authoritative domain representation.

Pattern: Repository + Data Mapper. ChirpStore is the repository; _row_to_chirp
is the mapper. Route handlers never touch SQL directly.

The chirps table is declared on the shared MetaData from auth/store.py so
its user_id foreign key can reference users.id with ON DELETE CASCADE:
deleting an account removes its chirps in the same statement.

Security: all queries use bound parameters. No f-strings in SQL.

Usage:
    store = ChirpStore(get_settings().db_url)
    chirp = store.create_chirp(Chirp(body="hello", user_id=identity))
    store.list_chirps(author_id=identity, newest_first=True)
    store.close()
"""

import uuid
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, ForeignKey, String, Table, Text
from sqlalchemy.engine import Engine

from auth.models import Identity
from auth.store import make_engine, metadata
from chirps.models import Chirp

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_chirps = Table(
    "chirps",
    metadata,
    Column("id", String(36), primary_key=True),
    Column("body", Text, nullable=False),
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class ChirpStore:
    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        metadata.create_all(self.engine)

    def create_chirp(self, chirp: Chirp) -> Chirp:
        """Insert a chirp and return it with id and timestamps set.

        Raises sqlalchemy.exc.IntegrityError if user_id does not exist.
        """
        now = _now_iso()
        chirp_id = chirp.id or uuid.uuid4()
        with self.engine.begin() as conn:
            conn.execute(
                _chirps.insert().values(
                    id=str(chirp_id),
                    body=chirp.body,
                    user_id=str(chirp.user_id),
                    created_at=now,
                    updated_at=now,
                )
            )
        return self.get_chirp(chirp_id)

    def get_chirp(self, chirp_id: uuid.UUID) -> Optional[Chirp]:
        with self.engine.connect() as conn:
            row = conn.execute(_chirps.select().where(_chirps.c.id == str(chirp_id))).fetchone()
        return _row_to_chirp(row) if row is not None else None

    def list_chirps(self, author_id: Optional[Identity] = None, newest_first: bool = False) -> list[Chirp]:
        """Return chirps ordered by created_at, optionally for one author."""
        query = _chirps.select()
        if author_id is not None:
            query = query.where(_chirps.c.user_id == str(author_id))
        order = _chirps.c.created_at.desc() if newest_first else _chirps.c.created_at.asc()
        with self.engine.connect() as conn:
            rows = conn.execute(query.order_by(order)).fetchall()
        return [_row_to_chirp(r) for r in rows]

    def update_chirp(self, chirp_id: uuid.UUID, body: str) -> Optional[Chirp]:
        """Replace the body. Returns None if chirp_id is unknown."""
        with self.engine.begin() as conn:
            result = conn.execute(
                _chirps.update().where(_chirps.c.id == str(chirp_id)).values(body=body, updated_at=_now_iso())
            )
        if result.rowcount == 0:
            return None
        return self.get_chirp(chirp_id)

    def delete_chirp(self, chirp_id: uuid.UUID) -> bool:
        with self.engine.begin() as conn:
            result = conn.execute(_chirps.delete().where(_chirps.c.id == str(chirp_id)))
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper
# ---------------------------------------------------------------------------


def _row_to_chirp(row) -> Chirp:
    return Chirp(
        id=uuid.UUID(row.id),
        body=row.body,
        user_id=Identity.parse(row.user_id),
        created_at=datetime.fromisoformat(row.created_at),
        updated_at=datetime.fromisoformat(row.updated_at),
    )
