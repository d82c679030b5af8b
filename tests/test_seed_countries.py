"""
Travel Planner Backend — Seed Script Tests
============================================
"""

import pytest
from sqlalchemy import select
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from app.models.country import Country
from scripts.seed_countries import create_tables, upsert_countries


@pytest.mark.asyncio
async def test_seeds_empty_database(tmp_path):
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'seed.db'}")
    try:
        await create_tables(engine)
        factory = async_sessionmaker(engine, expire_on_commit=False)

        assert await upsert_countries(factory) == 7
        # Re-running updates in place
        assert await upsert_countries(factory) == 0

        async with factory() as session:
            codes = (await session.scalars(select(Country.code).order_by(Country.code))).all()
        assert codes == ["AU", "CA", "DE", "FR", "GB", "JP", "US"]
    finally:
        await engine.dispose()


@pytest.mark.asyncio
async def test_existing_rows_are_updated(session_factory):
    async with session_factory() as session:
        japan = await session.scalar(select(Country).where(Country.code == "JP"))
        japan.capital = "Kyoto"
        await session.commit()

    assert await upsert_countries(session_factory) == 0

    async with session_factory() as session:
        japan = await session.scalar(select(Country).where(Country.code == "JP"))
    assert japan.capital == "Tokyo"
