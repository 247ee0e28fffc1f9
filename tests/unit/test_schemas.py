"""
Unit Tests for Pydantic Schemas
"""

from datetime import date
from decimal import Decimal

import pytest
from pydantic import ValidationError

from petcover.core.enums import DecisionReason, PlanType
from petcover.schemas.adjudication import ClaimDecision, MoneyBreakdown
from petcover.schemas.coverage import CoverageRule, RulesSettings


def _approved(**kwargs) -> ClaimDecision:
    data = dict(
        allowed=True,
        reason=DecisionReason.APPROVED,
        gross=15000,
        payer_value=8000,
        coparticipation=0,
        pet_id="pet",
        procedure_id="proc",
        plan_id="plan",
        as_of=date(2024, 2, 1),
        year=2024,
    )
    data.update(kwargs)
    return ClaimDecision(**data)


@pytest.mark.unit
class TestClaimDecision:
    """Decision value invariants"""

    def test_allowed_must_match_reason(self):
        with pytest.raises(ValidationError):
            _approved(reason=DecisionReason.WAITING_PERIOD)
        with pytest.raises(ValidationError):
            _approved(allowed=False)

    def test_frozen(self):
        decision = _approved()
        with pytest.raises(ValidationError):
            decision.allowed = False

    def test_json_round_trip(self):
        decision = _approved(remaining_annual_uses=0, annual_limit=1)
        assert ClaimDecision.model_validate_json(decision.model_dump_json()) == decision

    def test_display_amounts(self):
        decision = _approved()
        assert decision.display_amounts()["payer_value"] == Decimal("80.00")
        assert decision.to_display()["reason"] == "APPROVED"
        assert decision.breakdown == MoneyBreakdown(gross=15000, payer_value=8000, coparticipation=0)

    def test_unlimited_only_for_approvals(self):
        assert _approved().is_unlimited is True
        assert _approved(remaining_annual_uses=2).is_unlimited is False


@pytest.mark.unit
class TestCoverageSchemas:
    """Catalog value validation"""

    def test_negative_values_rejected(self):
        with pytest.raises(ValidationError):
            CoverageRule(plan_id="p", procedure_id="x", waiting_period_days=-1)
        with pytest.raises(ValidationError):
            CoverageRule(plan_id="p", procedure_id="x", annual_limit=-1)

    def test_rules_settings_range(self):
        with pytest.raises(ValidationError):
            RulesSettings(coparticipation_percentage=Decimal("101"))

    def test_plan_type_coparticipation(self):
        assert PlanType.WITHOUT_WAITING_PERIOD.has_coparticipation is True
        assert PlanType.WITH_WAITING_PERIOD.has_coparticipation is False
