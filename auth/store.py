"""
auth/store.py -- SQLAlchemy Core persistence layer for auth entities.

Pattern: Repository + Data Mapper (same as chirps/store.py).
UserStore is the repository; _row_to_user / _row_to_refresh_token are the
mappers. Route and service code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  refresh_tokens.token is the primary key, so two concurrent issuances can
  never both persist the same value -- the loser gets IntegrityError.

  mark_refresh_token_revoked() is one guarded UPDATE
  (WHERE token = :t AND revoked_at IS NULL). Two concurrent revokes of the
  same token apply exactly once; the second sees rowcount 0.

  refresh_tokens.user_id and chirps.user_id reference users.id with
  ON DELETE CASCADE. SQLite only honours that with PRAGMA foreign_keys=ON,
  which _set_sqlite_pragmas() enables on every pooled connection.

The shared MetaData lives here so chirps/store.py can declare its foreign
key against users.id.

Layer rule: no imports from api/, chirps/, or core/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Boolean, Column, ForeignKey, MetaData, String, Table, Text, create_engine, event, text
from sqlalchemy.engine import Engine

from auth.models import Identity, RefreshToken, User

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

users = Table(
    "users",
    metadata,
    Column("id", String(36), primary_key=True),  # UUID text form
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text, nullable=False),
    Column("is_chirpy_red", Boolean, nullable=False, server_default="0"),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
)

refresh_tokens = Table(
    "refresh_tokens",
    metadata,
    Column("token", String(64), primary_key=True),  # 64 hex chars
    Column("user_id", String(36), ForeignKey("users.id", ondelete="CASCADE"), nullable=False),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32), nullable=False),
    Column("expires_at", String(32), nullable=False),
    Column("revoked_at", String(32)),  # NULL until revoked
)


# ---------------------------------------------------------------------------
# SQLite pragmas
# ---------------------------------------------------------------------------


def _set_sqlite_pragmas(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode and foreign-key enforcement.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool. Without foreign_keys=ON the ON DELETE CASCADE
    clauses are silently ignored.
    """
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA journal_mode=WAL")
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def make_engine(db_url: str) -> Engine:
    """Create an engine with the connect args and pragmas every store needs."""
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_sqlite_pragmas)
    return engine


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _iso(moment: datetime) -> str:
    return moment.astimezone(timezone.utc).isoformat()


def _now_iso() -> str:
    return _iso(datetime.now(timezone.utc))


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User and RefreshToken rows.

    Usage:
        store = UserStore(get_settings().db_url)
        user = store.create_user(User(email="a@b.com", hashed_password=hash_password("secret")))
        store.get_by_email("a@b.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        metadata.create_all(self.engine)

    def ping(self) -> bool:
        """Return True if the database answers a trivial query."""
        with self.engine.connect() as conn:
            return conn.execute(text("SELECT 1")).scalar() == 1

    # ------------------------------------------------------------------
    # User queries
    # ------------------------------------------------------------------

    def create_user(self, user: User) -> User:
        """Insert a new user and return it with id and timestamps filled in.

        Raises sqlalchemy.exc.IntegrityError if the email already exists.
        """
        now = _now_iso()
        user_id = user.id or Identity.new()
        with self.engine.begin() as conn:
            conn.execute(
                users.insert().values(
                    id=str(user_id),
                    email=user.email,
                    hashed_password=user.hashed_password,
                    is_chirpy_red=user.is_chirpy_red,
                    created_at=now,
                    updated_at=now,
                )
            )
        return self.get_by_id(user_id)

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by exact email. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: Identity) -> User | None:
        """Look up a user by primary key. Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(users.select().where(users.c.id == str(user_id))).fetchone()
        return _row_to_user(row) if row is not None else None

    def list_users(self) -> list[User]:
        """Return all users, oldest first."""
        with self.engine.connect() as conn:
            rows = conn.execute(users.select().order_by(users.c.created_at)).fetchall()
        return [_row_to_user(r) for r in rows]

    def update_user(self, user_id: Identity, email: str, hashed_password: str) -> User | None:
        """Replace email and password hash. Returns the updated user or None.

        Raises sqlalchemy.exc.IntegrityError if the new email belongs to
        another account.
        """
        with self.engine.begin() as conn:
            result = conn.execute(
                users.update()
                .where(users.c.id == str(user_id))
                .values(email=email, hashed_password=hashed_password, updated_at=_now_iso())
            )
        if result.rowcount == 0:
            return None
        return self.get_by_id(user_id)

    def set_chirpy_red(self, user_id: Identity, is_chirpy_red: bool = True) -> bool:
        """Flip the Chirpy Red membership flag. Returns False if user_id is unknown."""
        with self.engine.begin() as conn:
            result = conn.execute(
                users.update()
                .where(users.c.id == str(user_id))
                .values(is_chirpy_red=is_chirpy_red, updated_at=_now_iso())
            )
        return result.rowcount > 0

    def delete_user(self, user_id: Identity) -> bool:
        """Permanently delete a user. Chirps and refresh tokens cascade.

        Returns True if deleted, False if not found. The ownership check is
        the caller's responsibility (see auth/guard.authorize_owner).
        """
        with self.engine.begin() as conn:
            result = conn.execute(users.delete().where(users.c.id == str(user_id)))
        return result.rowcount > 0

    def delete_all_users(self) -> int:
        """Delete every user (dev reset). Returns the number of rows removed."""
        with self.engine.begin() as conn:
            result = conn.execute(users.delete())
        return result.rowcount

    # ------------------------------------------------------------------
    # Refresh-token row primitives
    # ------------------------------------------------------------------

    def insert_refresh_token(self, record: RefreshToken) -> RefreshToken:
        """Persist a new refresh token row.

        Raises sqlalchemy.exc.IntegrityError on a duplicate token value or an
        unknown user_id. The caller decides whether to retry.
        """
        created = record.created_at or datetime.now(timezone.utc)
        with self.engine.begin() as conn:
            conn.execute(
                refresh_tokens.insert().values(
                    token=record.token,
                    user_id=str(record.user_id),
                    created_at=_iso(created),
                    updated_at=_iso(created),
                    expires_at=_iso(record.expires_at),
                    revoked_at=None,
                )
            )
        return RefreshToken(
            token=record.token,
            user_id=record.user_id,
            expires_at=record.expires_at,
            created_at=created,
            updated_at=created,
        )

    def find_refresh_token(self, token: str) -> RefreshToken | None:
        """Look up a refresh token row by its exact value."""
        with self.engine.connect() as conn:
            row = conn.execute(refresh_tokens.select().where(refresh_tokens.c.token == token)).fetchone()
        return _row_to_refresh_token(row) if row is not None else None

    def mark_refresh_token_revoked(self, token: str, revoked_at: datetime) -> bool:
        """Set revoked_at once. Returns True only for the call that applied it."""
        stamp = _iso(revoked_at)
        with self.engine.begin() as conn:
            result = conn.execute(
                refresh_tokens.update()
                .where((refresh_tokens.c.token == token) & (refresh_tokens.c.revoked_at.is_(None)))
                .values(revoked_at=stamp, updated_at=stamp)
            )
        return result.rowcount == 1

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=Identity.parse(row.id),
        email=row.email,
        hashed_password=row.hashed_password,
        is_chirpy_red=bool(row.is_chirpy_red),
        created_at=_parse(row.created_at),
        updated_at=_parse(row.updated_at),
    )


def _row_to_refresh_token(row) -> RefreshToken:
    return RefreshToken(
        token=row.token,
        user_id=Identity.parse(row.user_id),
        created_at=_parse(row.created_at),
        updated_at=_parse(row.updated_at),
        expires_at=_parse(row.expires_at),
        revoked_at=_parse(row.revoked_at),
    )
