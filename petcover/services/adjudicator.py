"""
Claim Adjudicator.

Composes the coverage catalog, waiting period gate, usage ledger, usage
limiter and money splitter into one decision per claim request. This is the
only engine component the claim-entry workflow calls directly.

Evaluation walks a fixed state sequence (never persisted):

    CATALOG_LOOKUP -> NOT_COVERED
                   -> GATE_CHECK -> WAITING_BLOCKED
                                 -> LIMIT_CHECK -> LIMIT_EXCEEDED
                                                -> APPROVED

``evaluate`` only reads. ``commit`` is the single mutation: it records one
use for an approved decision.
"""

import logging
from datetime import date
from typing import Optional

from petcover.core.enums import AdjudicationState, DecisionReason
from petcover.schemas.adjudication import ClaimDecision, ClaimRequest, MoneyBreakdown
from petcover.schemas.coverage import CoverageRule, Membership
from petcover.services.coverage_catalog import CoverageCatalog
from petcover.services.money_splitter import MoneySplitter
from petcover.services.usage_ledger import UsageLedger
from petcover.services.usage_limiter import UsageLimiter
from petcover.services.waiting_period import WaitingPeriodGate
from petcover.utils.errors import (
    CommitNotAllowedError,
    DecisionMismatchError,
    MembershipNotEffectiveError,
    UnknownPlanError,
    UnknownProcedureError,
)

logger = logging.getLogger(__name__)


class Adjudicator:
    """
    Decides coverage and money split for one (pet, procedure, plan) claim.

    Args:
        catalog: Coverage catalog to read rules from
        ledger: Usage ledger holding yearly counters
        verify_ids: Raise for plan/procedure ids unknown to the catalog
            instead of answering NOT_COVERED
    """

    def __init__(
        self,
        catalog: CoverageCatalog,
        ledger: UsageLedger,
        verify_ids: bool = True,
    ):
        self.catalog = catalog
        self.ledger = ledger
        self.verify_ids = verify_ids

    async def evaluate(
        self,
        pet_id: str,
        procedure_id: str,
        plan_id: str,
        membership_start: date,
        as_of: date,
    ) -> ClaimDecision:
        """
        Adjudicate one claim without changing any state.

        Args:
            pet_id: Pet receiving the procedure
            procedure_id: Requested procedure
            plan_id: Plan the pet is covered by
            membership_start: Start date of the governing contract
            as_of: Date of service

        Returns:
            ClaimDecision; denials are values, not exceptions

        Raises:
            UnknownPlanError / UnknownProcedureError: ids that do not exist
            RetryableEngineError: catalog or ledger unavailable (no decision)
        """
        year = as_of.year

        state = AdjudicationState.CATALOG_LOOKUP
        rule = await self.catalog.lookup(plan_id, procedure_id)
        if rule is None and self.verify_ids:
            await self._verify_ids(plan_id, procedure_id)

        if rule is None or not rule.is_included:
            state = AdjudicationState.NOT_COVERED
            return self._decide(
                state,
                DecisionReason.NOT_COVERED,
                MoneyBreakdown.zero(),
                pet_id, procedure_id, plan_id, as_of,
            )

        money = MoneySplitter.split(rule)
        eligible_on = WaitingPeriodGate.eligible_on(membership_start, rule.waiting_period_days)

        state = AdjudicationState.GATE_CHECK
        if not WaitingPeriodGate.is_satisfied(membership_start, rule.waiting_period_days, as_of):
            state = AdjudicationState.WAITING_BLOCKED
            return self._decide(
                state,
                DecisionReason.WAITING_PERIOD,
                money,
                pet_id, procedure_id, plan_id, as_of,
                rule=rule,
                eligible_on=eligible_on,
            )

        state = AdjudicationState.LIMIT_CHECK
        current = await self.ledger.current_count(pet_id, procedure_id, plan_id, year)
        limit = UsageLimiter.has_remaining(rule, current)
        if not limit.has_remaining:
            state = AdjudicationState.LIMIT_EXCEEDED
            return self._decide(
                state,
                DecisionReason.ANNUAL_LIMIT_REACHED,
                money,
                pet_id, procedure_id, plan_id, as_of,
                rule=rule,
                remaining=0,
                eligible_on=eligible_on,
            )

        state = AdjudicationState.APPROVED
        # Report what is left once this claim is consumed
        remaining = None if limit.is_unlimited else limit.remaining - 1
        return self._decide(
            state,
            DecisionReason.APPROVED,
            money,
            pet_id, procedure_id, plan_id, as_of,
            rule=rule,
            remaining=remaining,
            eligible_on=eligible_on,
        )

    async def evaluate_request(self, request: ClaimRequest, membership: Membership) -> ClaimDecision:
        """
        Adjudicate an inbound claim tuple against the pet's membership.

        The caller resolves the membership from its own contract records.
        """
        if membership.pet_id != request.pet_id:
            raise MembershipNotEffectiveError(request.pet_id, membership.pet_id, membership.plan_id)
        return await self.evaluate(
            pet_id=request.pet_id,
            procedure_id=request.procedure_id,
            plan_id=membership.plan_id,
            membership_start=membership.coverage_start_date,
            as_of=request.requested_at.date(),
        )

    async def commit(
        self,
        decision: ClaimDecision,
        pet_id: str,
        procedure_id: str,
        plan_id: str,
        year: Optional[int] = None,
    ) -> int:
        """
        Record one use for an approved decision.

        Args:
            decision: Result of a prior ``evaluate``; must be allowed
            pet_id, procedure_id, plan_id: Usage key, must match the decision
            year: Calendar year to charge; defaults to the decision's year

        Returns:
            The new usage count for the key

        Raises:
            CommitNotAllowedError: decision was not approved
            DecisionMismatchError: key differs from the evaluated one
        """
        if not decision.allowed:
            logger.error(
                f"Commit rejected: reason={decision.reason.value}, pet={pet_id}, procedure={procedure_id}"
            )
            raise CommitNotAllowedError(decision.reason.value)

        year = decision.year if year is None else year
        for field, expected, actual in (
            ("pet_id", decision.pet_id, pet_id),
            ("procedure_id", decision.procedure_id, procedure_id),
            ("plan_id", decision.plan_id, plan_id),
            ("year", decision.year, year),
        ):
            if expected != actual:
                raise DecisionMismatchError(field, expected, actual)

        new_count = await self.ledger.increment(pet_id, procedure_id, plan_id, year)

        if decision.annual_limit and new_count > decision.annual_limit:
            # Another claim for the same key committed after this one was evaluated
            logger.warning(
                f"Annual limit overrun: pet={pet_id}, procedure={procedure_id}, plan={plan_id}, "
                f"year={year}, count={new_count}, limit={decision.annual_limit}"
            )

        logger.info(
            f"Usage committed: pet={pet_id}, procedure={procedure_id}, plan={plan_id}, "
            f"year={year}, count={new_count}"
        )
        return new_count

    async def _verify_ids(self, plan_id: str, procedure_id: str) -> None:
        if not await self.catalog.has_plan(plan_id):
            raise UnknownPlanError(plan_id)
        if not await self.catalog.has_procedure(procedure_id):
            raise UnknownProcedureError(procedure_id)

    @staticmethod
    def _decide(
        state: AdjudicationState,
        reason: DecisionReason,
        money: MoneyBreakdown,
        pet_id: str,
        procedure_id: str,
        plan_id: str,
        as_of: date,
        rule: Optional[CoverageRule] = None,
        remaining: Optional[int] = None,
        eligible_on: Optional[date] = None,
    ) -> ClaimDecision:
        annual_limit = rule.annual_limit if rule is not None and not rule.is_unlimited else None
        decision = ClaimDecision(
            allowed=reason == DecisionReason.APPROVED,
            reason=reason,
            gross=money.gross,
            payer_value=money.payer_value,
            coparticipation=money.coparticipation,
            remaining_annual_uses=remaining,
            pet_id=pet_id,
            procedure_id=procedure_id,
            plan_id=plan_id,
            as_of=as_of,
            year=as_of.year,
            eligible_on=eligible_on,
            annual_limit=annual_limit,
        )
        logger.debug(
            f"Claim evaluated: pet={pet_id}, procedure={procedure_id}, plan={plan_id}, "
            f"as_of={as_of}, state={state.value}, reason={reason.value}"
        )
        return decision


# =============================================================================
# Factory Functions
# =============================================================================


_adjudicator: Optional[Adjudicator] = None


def get_adjudicator() -> Adjudicator:
    """Get singleton Adjudicator backed by the configured database."""
    global _adjudicator
    if _adjudicator is None:
        from petcover.services.coverage_catalog import DatabaseCoverageCatalog
        from petcover.services.usage_ledger import DatabaseUsageLedger

        _adjudicator = Adjudicator(
            catalog=DatabaseCoverageCatalog(),
            ledger=DatabaseUsageLedger(),
        )
    return _adjudicator


def create_adjudicator(
    catalog: Optional[CoverageCatalog] = None,
    ledger: Optional[UsageLedger] = None,
    verify_ids: bool = True,
) -> Adjudicator:
    """Create a new Adjudicator; defaults to in-memory catalog and ledger."""
    from petcover.services.coverage_catalog import InMemoryCoverageCatalog
    from petcover.services.usage_ledger import InMemoryUsageLedger

    return Adjudicator(
        catalog=catalog if catalog is not None else InMemoryCoverageCatalog(),
        ledger=ledger if ledger is not None else InMemoryUsageLedger(),
        verify_ids=verify_ids,
    )
