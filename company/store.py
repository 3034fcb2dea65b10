"""
company/store.py -- SQLAlchemy-backed persistence for companies.

Same shape as auth/store.py: SQLAlchemy Core tables, a repository class and a
row mapper. Usually shares the database URL (and file) with the user store;
each store owns its own table and engine.

Usage:
    store = CompanyStore("sqlite:///jobhunter.db")
    company_id = store.create_company(Company(name="Acme"))
    companies, total = store.list_companies(page=1, page_size=10)
    store.close()
"""

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import Column, Integer, MetaData, String, Table, Text, func, select
from sqlalchemy.engine import Engine

from company.models import Company
from core.db import make_engine, translate_store_errors
from core.pagination import offset_for

_UPDATABLE_FIELDS = frozenset({"name", "description", "address", "logo"})

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

metadata = MetaData()

_companies = Table(
    "companies",
    metadata,
    Column("id", Integer, primary_key=True, autoincrement=True),
    Column("name", String(255), nullable=False),
    Column("description", Text),
    Column("address", String(255)),
    Column("logo", String(255)),
    Column("created_at", String(32), nullable=False),
    Column("updated_at", String(32)),
)


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class CompanyStore:
    def __init__(self, db_url: str) -> None:
        self.engine: Engine = make_engine(db_url)
        metadata.create_all(self.engine)

    @translate_store_errors
    def create_company(self, company: Company) -> int:
        """Insert a company and return its assigned ID."""
        with self.engine.connect() as conn:
            result = conn.execute(
                _companies.insert().values(
                    name=company.name,
                    description=company.description,
                    address=company.address,
                    logo=company.logo,
                    created_at=_now_iso(),
                )
            )
            conn.commit()
            return result.inserted_primary_key[0]

    @translate_store_errors
    def get_company(self, company_id: int) -> Optional[Company]:
        with self.engine.connect() as conn:
            row = conn.execute(_companies.select().where(_companies.c.id == company_id)).fetchone()
        return _row_to_company(row) if row is not None else None

    @translate_store_errors
    def list_companies(self, page: int, page_size: int, name: Optional[str] = None) -> tuple[list[Company], int]:
        """Return one page of companies ordered by id, plus the total match count."""
        query = _companies.select().order_by(_companies.c.id)
        count_query = select(func.count()).select_from(_companies)
        if name:
            cond = _companies.c.name.contains(name, autoescape=True)
            query = query.where(cond)
            count_query = count_query.where(cond)
        with self.engine.connect() as conn:
            total = conn.execute(count_query).scalar() or 0
            rows = conn.execute(query.offset(offset_for(page, page_size)).limit(page_size)).fetchall()
        return [_row_to_company(r) for r in rows], total

    @translate_store_errors
    def update_company(self, company_id: int, **fields) -> bool:
        """Update mutable fields (name, description, address, logo).

        Unknown field names raise ValueError. Returns False if company_id was
        not found.
        """
        unknown = set(fields) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"Unknown company fields: {unknown!r}")
        with self.engine.connect() as conn:
            result = conn.execute(
                _companies.update().where(_companies.c.id == company_id).values(updated_at=_now_iso(), **fields)
            )
            conn.commit()
        return result.rowcount > 0

    @translate_store_errors
    def delete_company(self, company_id: int) -> bool:
        with self.engine.connect() as conn:
            result = conn.execute(_companies.delete().where(_companies.c.id == company_id))
            conn.commit()
        return result.rowcount > 0

    def close(self) -> None:
        self.engine.dispose()


def _row_to_company(row) -> Company:
    return Company(
        id=row.id,
        name=row.name,
        description=row.description,
        address=row.address,
        logo=row.logo,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
