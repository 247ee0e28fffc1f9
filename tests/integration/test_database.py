"""
Integration Tests for Database Operations
Tests the SQLAlchemy catalog and ledger against a real SQLite database
"""

import asyncio

import pytest
from sqlalchemy import text
from sqlalchemy.exc import OperationalError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from petcover.core.enums import PlanType, ProcedureCategory
from petcover.schemas.coverage import CoverageRule, Plan, Procedure
from petcover.services.coverage_catalog import DatabaseCoverageCatalog
from petcover.services.usage_ledger import DatabaseUsageLedger, _upsert_increment, UsageKey
from petcover.utils.errors import CatalogUnavailableError, LedgerUnavailableError


@pytest.fixture
def db_catalog(db_session_maker):
    return DatabaseCoverageCatalog(db_session_maker)


@pytest.fixture
def db_ledger(db_session_maker):
    return DatabaseUsageLedger(db_session_maker)


async def _seed(catalog: DatabaseCoverageCatalog) -> None:
    await catalog.save_plan(Plan(id="plan-basic", name="Basic"))
    await catalog.save_plan(
        Plan(id="plan-flex", name="Flex", plan_type=PlanType.WITHOUT_WAITING_PERIOD)
    )
    await catalog.save_procedure(
        Procedure(id="vaccine-v10", name="V10 Vaccine", category=ProcedureCategory.VACCINE)
    )
    await catalog.save_rule(
        CoverageRule(
            plan_id="plan-basic",
            procedure_id="vaccine-v10",
            gross_price=15000,
            payer_value=8000,
            waiting_period_days=30,
            annual_limit=1,
        )
    )


@pytest.mark.integration
@pytest.mark.asyncio
async def test_database_query(db_session_maker):
    """Test that the tables exist"""
    async with db_session_maker() as session:
        result = await session.execute(text("SELECT COUNT(*) FROM procedure_usage"))
        assert result.scalar() == 0


@pytest.mark.integration
@pytest.mark.asyncio
async def test_catalog_round_trip(db_catalog):
    """Rules, plans and procedures read back as saved"""
    await _seed(db_catalog)

    rule = await db_catalog.lookup("plan-basic", "vaccine-v10")
    assert rule is not None
    assert (rule.gross_price, rule.payer_value, rule.coparticipation) == (15000, 8000, 0)
    assert (rule.waiting_period_days, rule.annual_limit) == (30, 1)

    assert await db_catalog.lookup("plan-flex", "vaccine-v10") is None
    assert (await db_catalog.get_plan("plan-flex")).plan_type == PlanType.WITHOUT_WAITING_PERIOD
    assert (await db_catalog.get_procedure("vaccine-v10")).category == ProcedureCategory.VACCINE
    assert await db_catalog.has_plan("plan-ghost") is False
    assert [r.procedure_id for r in await db_catalog.rules_for_plan("plan-basic")] == ["vaccine-v10"]


@pytest.mark.integration
@pytest.mark.asyncio
async def test_catalog_save_rule_replaces(db_catalog):
    """Saving a rule for an existing pair updates it in place"""
    await _seed(db_catalog)
    rule = await db_catalog.lookup("plan-basic", "vaccine-v10")
    await db_catalog.save_rule(rule.model_copy(update={"payer_value": 9000}))

    rules = await db_catalog.all_rules()
    assert len(rules) == 1
    assert rules[0].payer_value == 9000


@pytest.mark.integration
@pytest.mark.asyncio
async def test_ledger_sequential_increments(db_catalog, db_ledger):
    """Counters are created lazily and only grow"""
    await _seed(db_catalog)

    assert await db_ledger.current_count("pet-rex", "vaccine-v10", "plan-basic", 2024) == 0
    counts = [
        await db_ledger.increment("pet-rex", "vaccine-v10", "plan-basic", 2024)
        for _ in range(5)
    ]
    assert counts == [1, 2, 3, 4, 5]
    assert await db_ledger.current_count("pet-rex", "vaccine-v10", "plan-basic", 2024) == 5
    assert await db_ledger.current_count("pet-rex", "vaccine-v10", "plan-basic", 2025) == 0

    records = await db_ledger.records_for_pet("pet-rex", 2024)
    assert len(records) == 1
    assert records[0].count == 5
    assert await db_ledger.counts_for_pet("pet-rex", 2024) == {("vaccine-v10", "plan-basic"): 5}


@pytest.mark.integration
@pytest.mark.asyncio
async def test_ledger_unavailable(tmp_path):
    """Storage faults surface as retryable engine errors"""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'empty.db'}")
    session_maker = async_sessionmaker(engine, class_=AsyncSession)
    try:
        ledger = DatabaseUsageLedger(session_maker)
        with pytest.raises(LedgerUnavailableError) as exc_info:
            await ledger.current_count("pet", "proc", "plan", 2024)
        assert isinstance(exc_info.value.__cause__, OperationalError)

        with pytest.raises(LedgerUnavailableError):
            await ledger.increment("pet", "proc", "plan", 2024)

        with pytest.raises(CatalogUnavailableError):
            await DatabaseCoverageCatalog(session_maker).lookup("plan", "proc")
    finally:
        await engine.dispose()


@pytest.mark.integration
def test_upsert_rejects_unsupported_dialect():
    with pytest.raises(LedgerUnavailableError):
        _upsert_increment("mssql", UsageKey("pet", "proc", "plan", 2024))


@pytest.mark.integration
@pytest.mark.asyncio
async def test_ledger_concurrent_increments(db_catalog, db_ledger):
    """Concurrent increments of one key lose no updates"""
    await _seed(db_catalog)

    results = await asyncio.gather(
        *[db_ledger.increment("pet-rex", "vaccine-v10", "plan-basic", 2024) for _ in range(25)]
    )
    assert sorted(results) == list(range(1, 26))
    assert await db_ledger.current_count("pet-rex", "vaccine-v10", "plan-basic", 2024) == 25
