"""
Travel Planner Backend — Country SQLAlchemy Model
===================================================

What:  ORM model representing the `countries` reference table.
Why:   Maps rows to Python objects for the country repository's queries.
How:   Inherits from the shared DeclarativeBase; Alembic reads this for migrations.
Who:   Queried by CountryRepository; populated by scripts/seed_countries.py.

Table Design Rationale:
    - code / code3: ISO 3166-1 alpha-2 and alpha-3, both unique. Lookups match
      either column, so both are indexed.
    - continent: indexed; drives the continent filter and the grouped count.
    - name: indexed; every listing is ordered by it.
    - languages / currencies / calling_codes: JSON arrays. JSON rather than
      PostgreSQL ARRAY so the same model runs on SQLite in tests.
"""

from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import JSON, Boolean, Float, Integer, String, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.types import TIMESTAMP

from app.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Country(Base):
    """
    A country as stored in the relational store.

    Lifecycle:
        Seeded once, edited by operators directly in the database. The API
        never writes to this table; after an edit, operators call the cache
        invalidation endpoint.
    """

    __tablename__ = "countries"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    # ── Identifiers ───────────────────────────────────────────────────────
    code: Mapped[str] = mapped_column(
        String(2),
        nullable=False,
        unique=True,
        index=True,
        comment="ISO 3166-1 alpha-2 code",
    )
    code3: Mapped[str] = mapped_column(
        String(3),
        nullable=False,
        unique=True,
        index=True,
        comment="ISO 3166-1 alpha-3 code",
    )

    # ── Descriptive attributes ────────────────────────────────────────────
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    official_name: Mapped[str] = mapped_column(String(200), nullable=False)
    capital: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)
    continent: Mapped[str] = mapped_column(String(50), nullable=False, index=True)
    region: Mapped[str] = mapped_column(String(100), nullable=False)

    languages: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    currencies: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)
    calling_codes: Mapped[List[str]] = mapped_column(JSON, nullable=False, default=list)

    is_popular_destination: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=text("false"),
    )
    flag: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    latitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    longitude: Mapped[Optional[float]] = mapped_column(Float, nullable=True)

    # ── Timestamps ────────────────────────────────────────────────────────
    created_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )
    updated_at: Mapped[datetime] = mapped_column(
        TIMESTAMP(timezone=True),
        nullable=False,
        default=_utcnow,
        onupdate=_utcnow,
        server_default=text("CURRENT_TIMESTAMP"),
    )

    def __repr__(self) -> str:
        """Developer-friendly string representation for debugging."""
        return f"<Country(code='{self.code}', code3='{self.code3}', name='{self.name}')>"
