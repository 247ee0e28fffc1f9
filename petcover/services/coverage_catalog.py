"""
Coverage Catalog.

Maps (plan, procedure) to the CoverageRule in force. Read-heavy and
side-effect free for the adjudicator; the write side (CoverageStore) is only
used by the administrative authoring path.

Two implementations share one interface:
- InMemoryCoverageCatalog: dictionaries, for tests and embedded use
- DatabaseCoverageCatalog: SQLAlchemy asyncio over plan_procedures
"""

import logging
from abc import ABC, abstractmethod
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from petcover.core.enums import PlanType, ProcedureCategory
from petcover.models.coverage import PlanProcedureRecord, PlanRecord, ProcedureRecord
from petcover.schemas.coverage import CoverageRule, Plan, Procedure
from petcover.utils.errors import CatalogUnavailableError

logger = logging.getLogger(__name__)


class CoverageCatalog(ABC):
    """Read interface consumed by the adjudicator."""

    @abstractmethod
    async def lookup(self, plan_id: str, procedure_id: str) -> Optional[CoverageRule]:
        """
        Find the coverage rule for a plan/procedure pair.

        Returns None when no rule exists; callers treat that exactly like an
        excluded procedure, never as an error.
        """
        pass

    @abstractmethod
    async def get_plan(self, plan_id: str) -> Optional[Plan]:
        """Get a plan by ID."""
        pass

    @abstractmethod
    async def get_procedure(self, procedure_id: str) -> Optional[Procedure]:
        """Get a procedure by ID."""
        pass

    @abstractmethod
    async def rules_for_plan(self, plan_id: str) -> list[CoverageRule]:
        """All coverage rules of a plan."""
        pass

    async def has_plan(self, plan_id: str) -> bool:
        """Check if the plan exists at all."""
        return await self.get_plan(plan_id) is not None

    async def has_procedure(self, procedure_id: str) -> bool:
        """Check if the procedure exists at all."""
        return await self.get_procedure(procedure_id) is not None


class CoverageStore(CoverageCatalog):
    """Catalog with the administrative write side."""

    @abstractmethod
    async def save_plan(self, plan: Plan) -> Plan:
        """Create or replace a plan."""
        pass

    @abstractmethod
    async def save_procedure(self, procedure: Procedure) -> Procedure:
        """Create or replace a procedure."""
        pass

    @abstractmethod
    async def save_rule(self, rule: CoverageRule) -> CoverageRule:
        """Create or replace the rule for the rule's plan/procedure pair."""
        pass

    @abstractmethod
    async def all_rules(self) -> list[CoverageRule]:
        """Every rule in the catalog."""
        pass


# =============================================================================
# In-Memory Implementation
# =============================================================================


class InMemoryCoverageCatalog(CoverageStore):
    """
    Dictionary-backed catalog.

    Rules are immutable values and are replaced whole, so readers never see a
    half-written rule.
    """

    def __init__(
        self,
        plans: Optional[list[Plan]] = None,
        procedures: Optional[list[Procedure]] = None,
        rules: Optional[list[CoverageRule]] = None,
    ):
        self._plans: dict[str, Plan] = {p.id: p for p in plans or []}
        self._procedures: dict[str, Procedure] = {p.id: p for p in procedures or []}
        self._rules: dict[tuple[str, str], CoverageRule] = {
            (r.plan_id, r.procedure_id): r for r in rules or []
        }

    async def lookup(self, plan_id: str, procedure_id: str) -> Optional[CoverageRule]:
        return self._rules.get((plan_id, procedure_id))

    async def get_plan(self, plan_id: str) -> Optional[Plan]:
        return self._plans.get(plan_id)

    async def get_procedure(self, procedure_id: str) -> Optional[Procedure]:
        return self._procedures.get(procedure_id)

    async def rules_for_plan(self, plan_id: str) -> list[CoverageRule]:
        return [rule for (p_id, _), rule in self._rules.items() if p_id == plan_id]

    async def save_plan(self, plan: Plan) -> Plan:
        self._plans[plan.id] = plan
        return plan

    async def save_procedure(self, procedure: Procedure) -> Procedure:
        self._procedures[procedure.id] = procedure
        return procedure

    async def save_rule(self, rule: CoverageRule) -> CoverageRule:
        self._rules[(rule.plan_id, rule.procedure_id)] = rule
        logger.debug(f"Coverage rule saved: plan={rule.plan_id}, procedure={rule.procedure_id}")
        return rule

    async def all_rules(self) -> list[CoverageRule]:
        return list(self._rules.values())

    def clear(self) -> None:
        """Drop every plan, procedure and rule."""
        self._plans.clear()
        self._procedures.clear()
        self._rules.clear()


# =============================================================================
# Database Implementation
# =============================================================================


def _rule_from_record(record: PlanProcedureRecord) -> CoverageRule:
    return CoverageRule(
        plan_id=record.plan_id,
        procedure_id=record.procedure_id,
        is_included=record.is_included,
        gross_price=record.price,
        payer_value=record.pay_value,
        coparticipation=record.coparticipation,
        waiting_period_days=record.waiting_period_days,
        annual_limit=record.annual_limit,
    )


def _plan_from_record(record: PlanRecord) -> Plan:
    return Plan(
        id=record.id,
        name=record.name,
        is_active=record.is_active,
        plan_type=PlanType(record.plan_type),
    )


def _procedure_from_record(record: ProcedureRecord) -> Procedure:
    return Procedure(
        id=record.id,
        name=record.name,
        category=ProcedureCategory(record.category) if record.category else None,
        is_active=record.is_active,
    )


class DatabaseCoverageCatalog(CoverageStore):
    """
    Catalog backed by the plans / procedures / plan_procedures tables.

    Every read is a single SELECT. Storage failures surface as
    CatalogUnavailableError so the caller can retry.
    """

    def __init__(self, session_maker: Optional[async_sessionmaker[AsyncSession]] = None):
        if session_maker is None:
            from petcover.db.connection import get_session_maker

            session_maker = get_session_maker()
        self._session_maker = session_maker

    async def lookup(self, plan_id: str, procedure_id: str) -> Optional[CoverageRule]:
        stmt = select(PlanProcedureRecord).where(
            PlanProcedureRecord.plan_id == plan_id,
            PlanProcedureRecord.procedure_id == procedure_id,
        )
        try:
            async with self._session_maker() as session:
                record = (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as exc:
            logger.error(f"Coverage lookup failed: plan={plan_id}, procedure={procedure_id}: {exc}")
            raise CatalogUnavailableError("Coverage catalog read failed") from exc
        return _rule_from_record(record) if record is not None else None

    async def get_plan(self, plan_id: str) -> Optional[Plan]:
        try:
            async with self._session_maker() as session:
                record = await session.get(PlanRecord, plan_id)
        except SQLAlchemyError as exc:
            logger.error(f"Plan lookup failed: plan={plan_id}: {exc}")
            raise CatalogUnavailableError("Coverage catalog read failed") from exc
        return _plan_from_record(record) if record is not None else None

    async def get_procedure(self, procedure_id: str) -> Optional[Procedure]:
        try:
            async with self._session_maker() as session:
                record = await session.get(ProcedureRecord, procedure_id)
        except SQLAlchemyError as exc:
            logger.error(f"Procedure lookup failed: procedure={procedure_id}: {exc}")
            raise CatalogUnavailableError("Coverage catalog read failed") from exc
        return _procedure_from_record(record) if record is not None else None

    async def rules_for_plan(self, plan_id: str) -> list[CoverageRule]:
        stmt = (
            select(PlanProcedureRecord)
            .where(PlanProcedureRecord.plan_id == plan_id)
            .order_by(PlanProcedureRecord.display_order, PlanProcedureRecord.procedure_id)
        )
        try:
            async with self._session_maker() as session:
                records = (await session.execute(stmt)).scalars().all()
        except SQLAlchemyError as exc:
            logger.error(f"Plan rules lookup failed: plan={plan_id}: {exc}")
            raise CatalogUnavailableError("Coverage catalog read failed") from exc
        return [_rule_from_record(r) for r in records]

    async def all_rules(self) -> list[CoverageRule]:
        try:
            async with self._session_maker() as session:
                records = (await session.execute(select(PlanProcedureRecord))).scalars().all()
        except SQLAlchemyError as exc:
            raise CatalogUnavailableError("Coverage catalog read failed") from exc
        return [_rule_from_record(r) for r in records]

    async def save_plan(self, plan: Plan) -> Plan:
        async with self._session_maker() as session:
            async with session.begin():
                await session.merge(
                    PlanRecord(
                        id=plan.id,
                        name=plan.name,
                        is_active=plan.is_active,
                        plan_type=plan.plan_type.value,
                    )
                )
        return plan

    async def save_procedure(self, procedure: Procedure) -> Procedure:
        async with self._session_maker() as session:
            async with session.begin():
                await session.merge(
                    ProcedureRecord(
                        id=procedure.id,
                        name=procedure.name,
                        category=procedure.category.value if procedure.category else None,
                        is_active=procedure.is_active,
                    )
                )
        return procedure

    async def save_rule(self, rule: CoverageRule) -> CoverageRule:
        stmt = select(PlanProcedureRecord).where(
            PlanProcedureRecord.plan_id == rule.plan_id,
            PlanProcedureRecord.procedure_id == rule.procedure_id,
        )
        async with self._session_maker() as session:
            async with session.begin():
                record = (await session.execute(stmt)).scalar_one_or_none()
                if record is None:
                    record = PlanProcedureRecord(plan_id=rule.plan_id, procedure_id=rule.procedure_id)
                    session.add(record)
                record.is_included = rule.is_included
                record.price = rule.gross_price
                record.pay_value = rule.payer_value
                record.coparticipation = rule.coparticipation
                record.waiting_period_days = rule.waiting_period_days
                record.annual_limit = rule.annual_limit
        logger.debug(f"Coverage rule saved: plan={rule.plan_id}, procedure={rule.procedure_id}")
        return rule
