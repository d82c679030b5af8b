"""
Seed the countries table with the built-in dataset.

    python -m scripts.seed_countries               # upsert into DATABASE_URL
    python -m scripts.seed_countries --create-tables

Existing rows are matched by alpha-2 code and updated in place, so the script
can be re-run safely. After seeding a live deployment, call
POST /api/countries/cache/invalidate so cached aggregates pick up the change.
"""

import argparse
import asyncio
import logging
import sys

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker

from app.database import Base, async_session_factory, engine
from app.models.country import Country
from app.schemas.country import CountryResponse
from app.services.fallback_countries import FALLBACK_COUNTRIES

logger = logging.getLogger("travel_planner.seed")


async def upsert_countries(
    session_factory: async_sessionmaker[AsyncSession],
    countries=FALLBACK_COUNTRIES,
) -> int:
    """Insert or update each country; returns the number of new rows."""
    created = 0
    async with session_factory() as session:
        async with session.begin():
            for country in countries:
                row = await session.scalar(select(Country).where(Country.code == country.code))
                if row is None:
                    session.add(Country(**_columns(country)))
                    created += 1
                else:
                    for field, value in _columns(country).items():
                        setattr(row, field, value)
    return created


def _columns(country: CountryResponse) -> dict:
    return country.model_dump(mode="json", by_alias=False)


async def create_tables(db_engine: AsyncEngine) -> None:
    async with db_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


async def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="create missing tables first (for local runs without Alembic)",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    try:
        if args.create_tables:
            await create_tables(engine)
        created = await upsert_countries(async_session_factory)
    finally:
        await engine.dispose()

    logger.info(
        "Seeded %d countries (%d new, %d updated)",
        len(FALLBACK_COUNTRIES),
        created,
        len(FALLBACK_COUNTRIES) - created,
    )
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))
