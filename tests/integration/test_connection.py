"""
Integration Tests for the Configured Database Connection
Exercises the global engine, session helpers and the database-backed adjudicator
"""

from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy import text

from petcover.core.config import get_settings
from petcover.db import connection
from petcover.db.connection import (
    check_db_connection,
    close_db_connection,
    get_engine,
    get_session,
    get_session_maker,
    init_db,
)
from petcover.schemas.coverage import CoverageRule, Plan, Procedure
from petcover.services import adjudicator as adjudicator_module
from petcover.services.adjudicator import get_adjudicator
from petcover.services.coverage_catalog import DatabaseCoverageCatalog
from petcover.services.usage_ledger import DatabaseUsageLedger


@pytest_asyncio.fixture
async def configured_db(tmp_path, monkeypatch):
    """Point PETCOVER_DATABASE_URL at a fresh SQLite file and reset globals."""
    monkeypatch.setenv("PETCOVER_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'engine.db'}")
    monkeypatch.setenv("PETCOVER_ENVIRONMENT", "testing")
    get_settings.cache_clear()
    await close_db_connection()
    monkeypatch.setattr(adjudicator_module, "_adjudicator", None)
    try:
        await init_db()
        yield
    finally:
        await close_db_connection()
        get_settings.cache_clear()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_database_connection(configured_db):
    """Test that database connection works"""
    assert await check_db_connection() is True
    assert get_session_maker() is get_session_maker()


@pytest.mark.integration
@pytest.mark.asyncio
async def test_session_commits_on_success(configured_db):
    """get_session commits the unit of work when the caller finishes cleanly"""
    async for session in get_session():
        await session.execute(
            text("INSERT INTO plans (id, name, is_active, plan_type) VALUES ('p1', 'Basic', 1, 'with_waiting_period')")
        )

    async for session in get_session():
        result = await session.execute(text("SELECT name FROM plans WHERE id = 'p1'"))
        assert result.scalar() == "Basic"


@pytest.mark.integration
@pytest.mark.asyncio
async def test_session_rolls_back_on_error(configured_db):
    """get_session rolls back and re-raises on failure"""
    sessions = get_session()
    session = await sessions.__anext__()
    await session.execute(
        text("INSERT INTO plans (id, name, is_active, plan_type) VALUES ('p2', 'Flex', 1, 'with_waiting_period')")
    )
    with pytest.raises(RuntimeError):
        await sessions.athrow(RuntimeError("abort"))

    async for session in get_session():
        result = await session.execute(text("SELECT COUNT(*) FROM plans"))
        assert result.scalar() == 0


@pytest.mark.integration
@pytest.mark.asyncio
async def test_get_adjudicator_uses_configured_database(configured_db):
    """The singleton adjudicator reads and writes the configured database"""
    adjudicator = get_adjudicator()
    assert get_adjudicator() is adjudicator
    assert isinstance(adjudicator.catalog, DatabaseCoverageCatalog)
    assert isinstance(adjudicator.ledger, DatabaseUsageLedger)

    await adjudicator.catalog.save_plan(Plan(id="plan-basic", name="Basic"))
    await adjudicator.catalog.save_procedure(Procedure(id="exam-blood", name="Blood Count"))
    await adjudicator.catalog.save_rule(
        CoverageRule(plan_id="plan-basic", procedure_id="exam-blood", gross_price=9000, annual_limit=2)
    )

    decision = await adjudicator.evaluate("pet-rex", "exam-blood", "plan-basic", date(2024, 1, 1), date(2024, 4, 1))
    assert decision.remaining_annual_uses == 1
    assert await adjudicator.commit(decision, "pet-rex", "exam-blood", "plan-basic") == 1


@pytest.mark.integration
@pytest.mark.asyncio
async def test_close_db_connection_resets_engine(configured_db):
    """Closing disposes the engine; the next call builds a new one"""
    engine = get_engine()
    await close_db_connection()
    assert connection._engine is None
    assert connection._async_session_maker is None
    assert get_engine() is not engine


@pytest.mark.integration
@pytest.mark.asyncio
async def test_check_db_connection_failure(tmp_path, monkeypatch):
    """An unreachable database reports unhealthy instead of raising"""
    monkeypatch.setenv("PETCOVER_DATABASE_URL", f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'engine.db'}")
    get_settings.cache_clear()
    await close_db_connection()
    try:
        assert await check_db_connection() is False
    finally:
        await close_db_connection()
        get_settings.cache_clear()
