"""
Pydantic Schemas for the Coverage Catalog.
Source: plan_procedures table of the pet-health platform
Verified: 2026-10-19

Money fields are integer minor units (cents) and are validated strictly so a
float can never slip into the engine.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from petcover.core.enums import PlanType, ProcedureCategory


# =============================================================================
# Catalog Entities
# =============================================================================


class Plan(BaseModel):
    """A sellable insurance product."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(..., min_length=1, description="Plan identifier")
    name: str = Field(..., min_length=1, description="Plan name")
    is_active: bool = Field(default=True, description="Plan can be sold")
    plan_type: PlanType = Field(
        default=PlanType.WITH_WAITING_PERIOD,
        description="Drives the default coparticipation policy",
    )


class Procedure(BaseModel):
    """A billable veterinary service, independent of any plan."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str = Field(..., min_length=1, description="Procedure identifier")
    name: str = Field(..., min_length=1, description="Procedure name")
    category: Optional[ProcedureCategory] = Field(None, description="Procedure category")
    is_active: bool = Field(default=True, description="Procedure is offered")


class CoverageRule(BaseModel):
    """
    Plan <-> procedure coverage terms.

    ``payer_value`` and ``coparticipation`` are configured independently of
    ``gross_price``; no reconciliation between them is assumed.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    plan_id: str = Field(..., min_length=1)
    procedure_id: str = Field(..., min_length=1)
    is_included: bool = Field(default=True, description="Procedure is payable under the plan")

    gross_price: int = Field(default=0, ge=0, strict=True, description="Full retail value (cents)")
    payer_value: int = Field(default=0, ge=0, strict=True, description="Remitted to the unit (cents)")
    coparticipation: int = Field(default=0, ge=0, strict=True, description="Owed by the client (cents)")

    waiting_period_days: int = Field(default=0, ge=0, strict=True, description="Calendar days")
    annual_limit: int = Field(default=0, ge=0, strict=True, description="Uses per calendar year, 0 = unlimited")

    @property
    def is_unlimited(self) -> bool:
        """Check if the rule has no annual usage cap."""
        return self.annual_limit == 0


class Membership(BaseModel):
    """A pet covered by a plan from the governing contract's start date."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    pet_id: str = Field(..., min_length=1)
    plan_id: str = Field(..., min_length=1)
    coverage_start_date: date = Field(..., description="Contract start; waiting periods count from here")


# =============================================================================
# Authoring Schemas
# =============================================================================


class RulesSettings(BaseModel):
    """
    Administrator-configured default percentages.

    Applied once, when a coverage rule is authored or re-priced; never read
    at evaluation time.
    """

    model_config = ConfigDict(frozen=True)

    pay_value_percentage: Decimal = Field(default=Decimal("0.00"), ge=0, le=100, decimal_places=2)
    coparticipation_percentage: Decimal = Field(default=Decimal("10.00"), ge=0, le=100, decimal_places=2)

    @classmethod
    def from_settings(cls, settings=None) -> "RulesSettings":  # type: ignore[no-untyped-def]
        """Build rules settings from the engine configuration."""
        if settings is None:
            from petcover.core.config import get_settings

            settings = get_settings()
        return cls(
            pay_value_percentage=settings.DEFAULT_PAY_VALUE_PERCENTAGE,
            coparticipation_percentage=settings.DEFAULT_COPARTICIPATION_PERCENTAGE,
        )


class CoverageRuleDraft(BaseModel):
    """
    Administrative input for a coverage rule.

    Unset money fields are derived from ``RulesSettings``. Waiting period and
    annual limit may be given as integers or as the legacy free-text values
    ("30 dias", "2 vezes no ano", "ilimitado").
    """

    plan_id: str = Field(..., min_length=1)
    procedure_id: str = Field(..., min_length=1)
    is_included: bool = True

    gross_price: int = Field(..., ge=0, strict=True)
    payer_value: Optional[int] = Field(None, ge=0, strict=True)
    coparticipation: Optional[int] = Field(None, ge=0, strict=True)

    waiting_period_days: Optional[int] = Field(None, ge=0, strict=True)
    annual_limit: Optional[int] = Field(None, ge=0, strict=True)
    waiting_period_text: Optional[str] = None
    annual_limit_text: Optional[str] = None

    @model_validator(mode="after")
    def check_single_source(self) -> "CoverageRuleDraft":
        """A field may be given as a number or as legacy text, not both."""
        if self.waiting_period_days is not None and self.waiting_period_text:
            raise ValueError("Give waiting_period_days or waiting_period_text, not both")
        if self.annual_limit is not None and self.annual_limit_text:
            raise ValueError("Give annual_limit or annual_limit_text, not both")
        return self


class RepricingSummary(BaseModel):
    """Counts reported after default percentages change."""

    payer_values_updated: int = 0
    coparticipations_updated: int = 0
    skipped_without_price: int = 0
