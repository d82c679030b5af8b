"""
Travel Planner Backend — Country Repository (Store Gateway)
=============================================================

What:  Read-only queries against the `countries` table, plus the connectivity
       flag the country service checks before choosing a branch.
Why:   Keeps SQLAlchemy out of the service, which only sees predicates,
       ORM rows and plain counts.
How:   Each method opens its own AsyncSession from the injected factory,
       runs one statement, and closes the session. Library errors are wrapped
       in UpstreamServiceError(service="database").
Who:   CountryService.

Predicates:
    A predicate is a list of boolean SQL clauses, AND-combined by `where()`.
    build_country_predicate() turns CountryFilters into one clause per present
    field, so each branch can be unit-tested by compiling the clause.
"""

from typing import List, Optional, Sequence, Tuple

from sqlalchemy import ColumnElement, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from app.database import DatabaseState
from app.exceptions import UpstreamServiceError
from app.models.country import Country
from app.schemas.country import CountryFilters

Predicate = Sequence[ColumnElement[bool]]


# ══════════════════════════════════════════════════════════════════════════
# Predicate Builders
# ══════════════════════════════════════════════════════════════════════════

def build_country_predicate(filters: CountryFilters) -> List[ColumnElement[bool]]:
    """
    Translate listing filters into SQL clauses.

        continent → lower(continent) = lower(:value)
        region    → region ILIKE %value%
        search    → name ILIKE %value% OR code ILIKE %value% OR code3 ILIKE %value%

    LIKE wildcards in user input (% and _) are escaped, so they match literally.
    """
    clauses: List[ColumnElement[bool]] = []
    if filters.continent:
        clauses.append(func.lower(Country.continent) == filters.continent.lower())
    if filters.region:
        clauses.append(Country.region.icontains(filters.region, autoescape=True))
    if filters.search:
        term = filters.search
        clauses.append(
            or_(
                Country.name.icontains(term, autoescape=True),
                Country.code.icontains(term, autoescape=True),
                Country.code3.icontains(term, autoescape=True),
            )
        )
    return clauses


def code_predicate(code: str) -> List[ColumnElement[bool]]:
    """Match either ISO code column, ignoring case."""
    wanted = code.strip().upper()
    return [
        or_(
            func.upper(Country.code) == wanted,
            func.upper(Country.code3) == wanted,
        )
    ]


def popular_predicate() -> List[ColumnElement[bool]]:
    return [Country.is_popular_destination.is_(True)]


# ══════════════════════════════════════════════════════════════════════════
# Repository
# ══════════════════════════════════════════════════════════════════════════

class CountryRepository:
    """
    Store gateway for country rows.

    Listing methods always order by name ascending so pages are stable.
    """

    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        state: DatabaseState,
    ):
        self._session_factory = session_factory
        self._state = state

    def is_connected(self) -> bool:
        return self._state.connected

    async def count(self, predicate: Predicate = ()) -> int:
        stmt = select(func.count(Country.id)).where(*predicate)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return result.scalar_one()
        except (SQLAlchemyError, OSError) as e:
            raise _upstream("count", e) from e

    async def find_many(
        self,
        predicate: Predicate = (),
        offset: int = 0,
        limit: Optional[int] = None,
    ) -> List[Country]:
        stmt = select(Country).where(*predicate).order_by(Country.name.asc())
        if offset:
            stmt = stmt.offset(offset)
        if limit is not None:
            stmt = stmt.limit(limit)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return list(result.scalars().all())
        except (SQLAlchemyError, OSError) as e:
            raise _upstream("find_many", e) from e

    async def find_first(self, predicate: Predicate) -> Optional[Country]:
        stmt = select(Country).where(*predicate).order_by(Country.id.asc()).limit(1)
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return result.scalars().first()
        except (SQLAlchemyError, OSError) as e:
            raise _upstream("find_first", e) from e

    async def group_by_continent(self) -> List[Tuple[str, int]]:
        """(continent, number of countries) pairs, ascending by continent."""
        stmt = (
            select(Country.continent, func.count(Country.id))
            .group_by(Country.continent)
            .order_by(Country.continent.asc())
        )
        try:
            async with self._session_factory() as session:
                result = await session.execute(stmt)
                return [(continent, count) for continent, count in result.all()]
        except (SQLAlchemyError, OSError) as e:
            raise _upstream("group_by_continent", e) from e


def _upstream(op: str, error: Exception) -> UpstreamServiceError:
    return UpstreamServiceError(
        "database",
        context={"op": op, "error_type": type(error).__name__},
    )
