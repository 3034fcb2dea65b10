"""
auth/store.py -- SQLAlchemy Core persistence layer for user accounts.

Pattern: Repository + Data Mapper. UserStore is the repository; _row_to_user
is the mapper. Route and session code never touches SQL directly.

The store is the credential store of the session core:
  find_by_email / exists_by_email / find_by_refresh_token_and_email / save
plus the directory operations used by the /users routes.

Security:
  All queries use bound parameters. No f-strings in SQL.
  Email lookups are exact and case-sensitive.

Failure model:
  Driver and connection errors surface as core.errors.StoreUnavailable.
  IntegrityError (unique email) is let through unchanged so callers can turn
  it into a domain conflict.

Layer rule: no imports from api/ or company/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, func, select
from sqlalchemy.engine import Engine

from auth.models import User
from core.db import make_engine, translate_store_errors
from core.pagination import offset_for

_PROFILE_FIELDS = frozenset({"name", "age", "gender", "address", "company_id"})

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

_metadata = MetaData()

_users = Table(
    "users",
    _metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("name", String(255), nullable=False),
    Column("hashed_password", Text, nullable=False),
    Column("role", String(30), nullable=False, server_default="user"),
    Column("refresh_token", Text),  # NULL = no active session
    Column("age", Integer),
    Column("gender", String(10)),
    Column("address", String(255)),
    Column("company_id", Integer),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32)),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore("sqlite:///jobhunter.db")
        user = store.save(User(email="a@x.com", name="A", hashed_password=hash_password("pw")))
        store.find_by_email("a@x.com")
        store.close()
    """

    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        _metadata.create_all(self.engine)

    # ------------------------------------------------------------------
    # Credential lookups
    # ------------------------------------------------------------------

    @translate_store_errors
    def find_by_email(self, email: str) -> User | None:
        """Look up a user by exact email (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    @translate_store_errors
    def exists_by_email(self, email: str) -> bool:
        with self.engine.connect() as conn:
            found = conn.execute(select(_users.c.id).where(_users.c.email == email).limit(1)).first()
        return found is not None

    @translate_store_errors
    def find_by_refresh_token_and_email(self, token: str, email: str) -> User | None:
        """Return the user whose stored refresh token equals `token` exactly.

        Both conditions must match. A rotated or revoked token finds nothing.
        """
        if not token:
            return None
        with self.engine.connect() as conn:
            row = conn.execute(
                _users.select().where((_users.c.refresh_token == token) & (_users.c.email == email))
            ).fetchone()
        return _row_to_user(row) if row is not None else None

    @translate_store_errors
    def get_by_id(self, user_id: int) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    # ------------------------------------------------------------------
    # Writes
    # ------------------------------------------------------------------

    @translate_store_errors
    def save(self, user: User) -> User | None:
        """Insert a new user (id is None) or overwrite an existing one.

        Returns the stored record as read back from the database, so
        created_at / updated_at / id reflect what was persisted. Returns None
        when an update targets a row that no longer exists.

        Raises sqlalchemy.exc.IntegrityError if the email is already taken.
        """
        values = {
            "email": user.email,
            "name": user.name,
            "hashed_password": user.hashed_password,
            "role": user.role,
            "refresh_token": user.refresh_token,
            "age": user.age,
            "gender": user.gender,
            "address": user.address,
            "company_id": user.company_id,
        }
        with self.engine.connect() as conn:
            if user.id is None:
                result = conn.execute(_users.insert().values(created_at=_now_iso(), **values))
                user_id = result.inserted_primary_key[0]
            else:
                conn.execute(_users.update().where(_users.c.id == user.id).values(updated_at=_now_iso(), **values))
                user_id = user.id
            conn.commit()
            row = conn.execute(_users.select().where(_users.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None

    @translate_store_errors
    def update_profile(self, user_id: int, **fields) -> bool:
        """Update profile columns only (name, age, gender, address, company_id).

        A single UPDATE that never touches email, role, hashed_password or
        refresh_token, so it cannot undo a concurrent logout or rotation.
        Unknown field names raise ValueError. Returns False if user_id was
        not found.
        """
        unknown = set(fields) - _PROFILE_FIELDS
        if unknown:
            raise ValueError(f"Unknown profile fields: {unknown!r}")
        with self.engine.connect() as conn:
            result = conn.execute(_users.update().where(_users.c.id == user_id).values(updated_at=_now_iso(), **fields))
            conn.commit()
        return result.rowcount > 0

    @translate_store_errors
    def delete_user(self, user_id: int) -> bool:
        """Permanently delete a user record. Returns False if it did not exist."""
        with self.engine.connect() as conn:
            result = conn.execute(_users.delete().where(_users.c.id == user_id))
            conn.commit()
        return result.rowcount > 0

    # ------------------------------------------------------------------
    # Directory queries
    # ------------------------------------------------------------------

    @translate_store_errors
    def has_users(self) -> bool:
        with self.engine.connect() as conn:
            count = conn.execute(select(func.count()).select_from(_users)).scalar()
        return (count or 0) > 0

    @translate_store_errors
    def list_users(
        self,
        page: int,
        page_size: int,
        email: str | None = None,
        name: str | None = None,
    ) -> tuple[list[User], int]:
        """Return one page of users ordered by id, plus the total match count.

        email and name are substring filters; both apply when both are given.
        """
        conditions = []
        if email:
            conditions.append(_users.c.email.contains(email, autoescape=True))
        if name:
            conditions.append(_users.c.name.contains(name, autoescape=True))

        query = _users.select().order_by(_users.c.id)
        count_query = select(func.count()).select_from(_users)
        for cond in conditions:
            query = query.where(cond)
            count_query = count_query.where(cond)

        with self.engine.connect() as conn:
            total = conn.execute(count_query).scalar() or 0
            rows = conn.execute(query.offset(offset_for(page, page_size)).limit(page_size)).fetchall()
        return [_row_to_user(r) for r in rows], total

    def close(self) -> None:
        self.engine.dispose()


# ---------------------------------------------------------------------------
# Row mapper (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        email=row.email,
        name=row.name,
        hashed_password=row.hashed_password,
        role=row.role,
        refresh_token=row.refresh_token,
        age=row.age,
        gender=row.gender,
        address=row.address,
        company_id=row.company_id,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
