"""
Coverage Authoring Service.

Administrative write path for coverage rules. Default percentages from
RulesSettings are applied here, once, when a rule is authored or when the
administrator changes the defaults. The adjudicator only ever reads the
materialised values.
"""

import logging
import re
from typing import Optional

from pydantic import ValidationError

from petcover.core.money import percentage_of
from petcover.schemas.coverage import CoverageRule, CoverageRuleDraft, RepricingSummary, RulesSettings
from petcover.services.coverage_catalog import CoverageStore
from petcover.utils.errors import InvalidCoverageRuleError, UnknownPlanError, UnknownProcedureError

logger = logging.getLogger(__name__)

_FIRST_NUMBER = re.compile(r"(\d+)")
_UNLIMITED_WORDS = ("ilimitado", "ilimitada", "unlimited", "sem limite")


def parse_waiting_period(text: Optional[str]) -> int:
    """
    Read a legacy waiting period value such as "30 dias".

    The first integer in the text is the number of days; text without a
    number (e.g. "sem carência") means no waiting period.
    """
    if not text:
        return 0
    match = _FIRST_NUMBER.search(text)
    return int(match.group(1)) if match else 0


def parse_annual_limit(text: Optional[str]) -> int:
    """
    Read a legacy annual limit such as "2 vezes no ano" or "ilimitado".

    Returns the number of uses per year, 0 meaning unlimited.
    """
    if not text:
        return 0
    lowered = text.strip().lower()
    if any(word in lowered for word in _UNLIMITED_WORDS):
        return 0
    match = _FIRST_NUMBER.search(lowered)
    return int(match.group(1)) if match else 0


class CoverageAuthoringService:
    """
    Materialises coverage rules from administrative drafts.

    Args:
        store: Catalog write side
        rules_settings: Default percentages; read from configuration if omitted
    """

    def __init__(
        self,
        store: CoverageStore,
        rules_settings: Optional[RulesSettings] = None,
    ):
        self.store = store
        self.rules_settings = rules_settings or RulesSettings.from_settings()

    async def author_rule(self, draft: CoverageRuleDraft) -> CoverageRule:
        """
        Create or replace the coverage rule described by a draft.

        Unset ``payer_value`` defaults to ``pay_value_percentage`` of the gross
        price. Unset ``coparticipation`` defaults to
        ``coparticipation_percentage`` of the gross price for plans that carry
        coparticipation and to zero otherwise.
        """
        plan = await self.store.get_plan(draft.plan_id)
        if plan is None:
            raise UnknownPlanError(draft.plan_id)
        if not await self.store.has_procedure(draft.procedure_id):
            raise UnknownProcedureError(draft.procedure_id)

        payer_value = draft.payer_value
        if payer_value is None:
            payer_value = percentage_of(draft.gross_price, self.rules_settings.pay_value_percentage)

        coparticipation = draft.coparticipation
        if coparticipation is None:
            if plan.plan_type.has_coparticipation:
                coparticipation = percentage_of(
                    draft.gross_price, self.rules_settings.coparticipation_percentage
                )
            else:
                coparticipation = 0

        waiting_period_days = draft.waiting_period_days
        if waiting_period_days is None:
            waiting_period_days = parse_waiting_period(draft.waiting_period_text)

        annual_limit = draft.annual_limit
        if annual_limit is None:
            annual_limit = parse_annual_limit(draft.annual_limit_text)

        try:
            rule = CoverageRule(
                plan_id=draft.plan_id,
                procedure_id=draft.procedure_id,
                is_included=draft.is_included,
                gross_price=draft.gross_price,
                payer_value=payer_value,
                coparticipation=coparticipation,
                waiting_period_days=waiting_period_days,
                annual_limit=annual_limit,
            )
        except ValidationError as exc:
            raise InvalidCoverageRuleError(str(exc)) from exc

        saved = await self.store.save_rule(rule)
        logger.info(
            f"Coverage rule authored: plan={rule.plan_id}, procedure={rule.procedure_id}, "
            f"included={rule.is_included}, gross={rule.gross_price}, payer={rule.payer_value}, "
            f"copart={rule.coparticipation}"
        )
        return saved

    async def update_rules_settings(self, new_settings: RulesSettings) -> RepricingSummary:
        """
        Change the default percentages and re-price existing rules.

        Only rules with a gross price are touched, and only the fields that
        are already non-zero: a zero payer value or coparticipation is a
        deliberate administrative choice and is kept.
        """
        old = self.rules_settings
        pay_changed = old.pay_value_percentage != new_settings.pay_value_percentage
        copart_changed = old.coparticipation_percentage != new_settings.coparticipation_percentage
        self.rules_settings = new_settings

        summary = RepricingSummary()
        if not (pay_changed or copart_changed):
            return summary

        for rule in await self.store.all_rules():
            if rule.gross_price <= 0:
                summary.skipped_without_price += 1
                continue

            updates: dict[str, int] = {}
            if pay_changed and rule.payer_value > 0:
                updates["payer_value"] = percentage_of(
                    rule.gross_price, new_settings.pay_value_percentage
                )
                summary.payer_values_updated += 1
            if copart_changed and rule.coparticipation > 0:
                updates["coparticipation"] = percentage_of(
                    rule.gross_price, new_settings.coparticipation_percentage
                )
                summary.coparticipations_updated += 1

            if updates:
                await self.store.save_rule(rule.model_copy(update=updates))

        logger.info(
            f"Rules settings updated: payer_values={summary.payer_values_updated}, "
            f"coparticipations={summary.coparticipations_updated}, "
            f"skipped={summary.skipped_without_price}"
        )
        return summary
