"""
Pydantic Schemas for Claim Adjudication.
Verified: 2026-10-19
"""

from datetime import date, datetime
from decimal import Decimal
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from petcover.core.enums import DecisionReason
from petcover.core.money import to_decimal


class ClaimRequest(BaseModel):
    """Inbound claim tuple recorded by unit staff."""

    model_config = ConfigDict(frozen=True)

    pet_id: str = Field(..., min_length=1)
    procedure_id: str = Field(..., min_length=1)
    unit_id: str = Field(..., min_length=1, description="Credentialed unit performing the service")
    requested_at: datetime = Field(..., description="When the service was requested")


class MoneyBreakdown(BaseModel):
    """Three-way split of a procedure's value, in minor units."""

    model_config = ConfigDict(frozen=True)

    gross: int = Field(default=0, ge=0, strict=True)
    payer_value: int = Field(default=0, ge=0, strict=True)
    coparticipation: int = Field(default=0, ge=0, strict=True)

    @classmethod
    def zero(cls) -> "MoneyBreakdown":
        """Breakdown reported for procedures the plan does not cover."""
        return cls()


class ClaimDecision(BaseModel):
    """
    Result of adjudicating one claim.

    Immutable and safe to serialise. ``remaining_annual_uses`` is ``None``
    when the procedure has no annual cap; for approvals it already accounts
    for the claim being decided.
    """

    model_config = ConfigDict(frozen=True)

    allowed: bool
    reason: DecisionReason

    gross: int = Field(default=0, ge=0, strict=True)
    payer_value: int = Field(default=0, ge=0, strict=True)
    coparticipation: int = Field(default=0, ge=0, strict=True)
    remaining_annual_uses: Optional[int] = Field(default=None, ge=0)

    # Identity of the evaluation
    pet_id: str
    procedure_id: str
    plan_id: str
    as_of: date
    year: int
    eligible_on: Optional[date] = Field(
        default=None,
        description="First date the waiting period is satisfied",
    )
    annual_limit: Optional[int] = Field(default=None, description="Cap in force, None when unlimited or not covered")

    @model_validator(mode="after")
    def check_allowed_matches_reason(self) -> "ClaimDecision":
        """Only APPROVED decisions may be allowed."""
        if self.allowed != (self.reason == DecisionReason.APPROVED):
            raise ValueError(f"allowed={self.allowed} is inconsistent with reason={self.reason.value}")
        return self

    @property
    def is_unlimited(self) -> bool:
        """Check if an approved decision carries no annual cap."""
        return self.allowed and self.remaining_annual_uses is None

    @property
    def breakdown(self) -> MoneyBreakdown:
        """Money fields as a breakdown value."""
        return MoneyBreakdown(
            gross=self.gross,
            payer_value=self.payer_value,
            coparticipation=self.coparticipation,
        )

    def to_display(self) -> dict[str, Any]:
        """Decision with money converted to decimals for presentation."""
        data = self.model_dump(mode="json")
        data["gross"] = to_decimal(self.gross)
        data["payer_value"] = to_decimal(self.payer_value)
        data["coparticipation"] = to_decimal(self.coparticipation)
        return data

    def display_amounts(self) -> dict[str, Decimal]:
        """Only the money fields, as decimals."""
        return {
            "gross": to_decimal(self.gross),
            "payer_value": to_decimal(self.payer_value),
            "coparticipation": to_decimal(self.coparticipation),
        }
