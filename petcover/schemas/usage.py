"""
Pydantic Schemas for Procedure Usage.
Verified: 2026-10-19
"""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UsageRecord(BaseModel):
    """Yearly usage counter for one (pet, procedure, plan) key."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    pet_id: str
    procedure_id: str
    plan_id: str
    year: int = Field(..., ge=1900, le=9999)
    count: int = Field(default=0, ge=0)
    updated_at: Optional[datetime] = None


class ProcedureUsageSummary(BaseModel):
    """One limited procedure of a pet's plan, as shown to the client."""

    procedure_id: str
    name: str
    category: Optional[str] = None
    annual_limit: int = Field(..., ge=1)
    used: int = Field(default=0, ge=0)
    remaining: int = Field(default=0, ge=0)
    waiting_days_total: int = Field(default=0, ge=0)
    waiting_days_remaining: int = Field(default=0, ge=0)
    can_use: bool = False
    coparticipation: int = Field(default=0, ge=0, description="Minor units")


class PetUsageReport(BaseModel):
    """Usage of every limited procedure for one pet in one year."""

    pet_id: str
    plan_id: str
    plan_name: Optional[str] = None
    year: int
    procedures: list[ProcedureUsageSummary] = Field(default_factory=list)
