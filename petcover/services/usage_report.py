"""
Usage Report Service.

Read model of a pet's yearly usage: for every limited procedure of the
pet's plan, how many uses were consumed, how many remain, how long the
waiting period still runs and whether the procedure can be used today.
"""

import logging
from datetime import date
from typing import Optional

from petcover.schemas.coverage import Membership
from petcover.schemas.usage import PetUsageReport, ProcedureUsageSummary
from petcover.services.coverage_catalog import CoverageCatalog
from petcover.services.usage_ledger import UsageLedger
from petcover.services.waiting_period import WaitingPeriodGate
from petcover.utils.errors import UnknownPlanError

logger = logging.getLogger(__name__)


class UsageReportService:
    """Builds per-pet usage reports from the catalog and ledger."""

    def __init__(self, catalog: CoverageCatalog, ledger: UsageLedger):
        self.catalog = catalog
        self.ledger = ledger

    async def pet_report(
        self,
        membership: Membership,
        as_of: Optional[date] = None,
        year: Optional[int] = None,
    ) -> PetUsageReport:
        """
        Build the usage report for one pet.

        Only included procedures with an annual limit are listed; unlimited
        procedures have nothing to count down.

        Args:
            membership: The pet's current membership
            as_of: Reference date for waiting periods (defaults to today)
            year: Usage year (defaults to as_of's year)
        """
        as_of = as_of or date.today()
        year = year or as_of.year

        plan = await self.catalog.get_plan(membership.plan_id)
        if plan is None:
            raise UnknownPlanError(membership.plan_id)

        counts = await self.ledger.counts_for_pet(membership.pet_id, year)
        report = PetUsageReport(
            pet_id=membership.pet_id,
            plan_id=plan.id,
            plan_name=plan.name,
            year=year,
        )

        for rule in await self.catalog.rules_for_plan(plan.id):
            if not rule.is_included or rule.is_unlimited:
                continue

            procedure = await self.catalog.get_procedure(rule.procedure_id)
            used = counts.get((rule.procedure_id, plan.id), 0)
            remaining = max(0, rule.annual_limit - used)
            waiting_ok = WaitingPeriodGate.is_satisfied(
                membership.coverage_start_date, rule.waiting_period_days, as_of
            )

            report.procedures.append(
                ProcedureUsageSummary(
                    procedure_id=rule.procedure_id,
                    name=procedure.name if procedure else rule.procedure_id,
                    category=procedure.category.value if procedure and procedure.category else None,
                    annual_limit=rule.annual_limit,
                    used=used,
                    remaining=remaining,
                    waiting_days_total=rule.waiting_period_days,
                    waiting_days_remaining=WaitingPeriodGate.days_remaining(
                        membership.coverage_start_date, rule.waiting_period_days, as_of
                    ),
                    can_use=remaining > 0 and waiting_ok,
                    coparticipation=rule.coparticipation,
                )
            )

        logger.debug(
            f"Usage report built: pet={membership.pet_id}, year={year}, "
            f"procedures={len(report.procedures)}"
        )
        return report
