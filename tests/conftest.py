"""
Pytest Configuration and Fixtures.
Shared test fixtures for all test modules.
"""

from datetime import date

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from petcover.core.enums import PlanType, ProcedureCategory
from petcover.db.connection import init_db
from petcover.schemas.coverage import CoverageRule, Membership, Plan, Procedure
from petcover.services.adjudicator import Adjudicator
from petcover.services.coverage_catalog import InMemoryCoverageCatalog
from petcover.services.usage_ledger import InMemoryUsageLedger

PET_ID = "pet-rex"
BASIC_PLAN = "plan-basic"
COPART_PLAN = "plan-flex"
VACCINE = "vaccine-v10"
CONSULTATION = "consultation"
BLOOD_EXAM = "exam-blood"
SURGERY = "surgery-ortho"
COVERAGE_START = date(2024, 1, 1)


@pytest.fixture
def plans():
    """Plans offered in the test catalog."""
    return [
        Plan(id=BASIC_PLAN, name="Basic", plan_type=PlanType.WITH_WAITING_PERIOD),
        Plan(id=COPART_PLAN, name="Flex", plan_type=PlanType.WITHOUT_WAITING_PERIOD),
    ]


@pytest.fixture
def procedures():
    """Procedures known to the test catalog."""
    return [
        Procedure(id=VACCINE, name="V10 Vaccine", category=ProcedureCategory.VACCINE),
        Procedure(id=CONSULTATION, name="Consultation", category=ProcedureCategory.CONSULTATION),
        Procedure(id=BLOOD_EXAM, name="Blood Count", category=ProcedureCategory.EXAM),
        Procedure(id=SURGERY, name="Orthopedic Surgery", category=ProcedureCategory.SURGERY),
    ]


@pytest.fixture
def rules():
    """
    Coverage rules of the basic plan.

    The vaccine is the annual vaccine scenario: 30 waiting days, once a year,
    BRL 150.00 gross of which BRL 80.00 is remitted to the unit.
    """
    return [
        CoverageRule(
            plan_id=BASIC_PLAN,
            procedure_id=VACCINE,
            gross_price=15000,
            payer_value=8000,
            coparticipation=0,
            waiting_period_days=30,
            annual_limit=1,
        ),
        CoverageRule(
            plan_id=BASIC_PLAN,
            procedure_id=CONSULTATION,
            gross_price=12000,
            payer_value=6000,
            coparticipation=1200,
            waiting_period_days=0,
            annual_limit=0,
        ),
        CoverageRule(
            plan_id=BASIC_PLAN,
            procedure_id=BLOOD_EXAM,
            gross_price=9000,
            payer_value=4500,
            coparticipation=900,
            waiting_period_days=0,
            annual_limit=3,
        ),
        CoverageRule(
            plan_id=BASIC_PLAN,
            procedure_id=SURGERY,
            is_included=False,
            gross_price=500000,
            payer_value=250000,
            coparticipation=50000,
            waiting_period_days=180,
            annual_limit=1,
        ),
    ]


@pytest.fixture
def catalog(plans, procedures, rules):
    """In-memory coverage catalog seeded with the test plans."""
    return InMemoryCoverageCatalog(plans=plans, procedures=procedures, rules=rules)


@pytest.fixture
def ledger():
    """Empty in-memory usage ledger."""
    return InMemoryUsageLedger()


@pytest.fixture
def adjudicator(catalog, ledger):
    """Adjudicator over the in-memory catalog and ledger."""
    return Adjudicator(catalog=catalog, ledger=ledger)


@pytest.fixture
def membership():
    """Membership of the test pet in the basic plan."""
    return Membership(pet_id=PET_ID, plan_id=BASIC_PLAN, coverage_start_date=COVERAGE_START)


@pytest_asyncio.fixture
async def db_session_maker(tmp_path):
    """Session maker over a fresh SQLite database file with all tables created."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'petcover-test.db'}",
        poolclass=NullPool,
    )
    await init_db(engine)
    try:
        yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    finally:
        await engine.dispose()


# Configure pytest markers
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )
