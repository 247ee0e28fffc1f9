"""
Pydantic Schemas for the Benefit Adjudication Engine.
"""

from petcover.schemas.coverage import (
    Plan,
    Procedure,
    CoverageRule,
    Membership,
    RulesSettings,
    CoverageRuleDraft,
    RepricingSummary,
)
from petcover.schemas.adjudication import (
    ClaimRequest,
    MoneyBreakdown,
    ClaimDecision,
)
from petcover.schemas.usage import (
    UsageRecord,
    ProcedureUsageSummary,
    PetUsageReport,
)

__all__ = [
    # Coverage
    "Plan",
    "Procedure",
    "CoverageRule",
    "Membership",
    "RulesSettings",
    "CoverageRuleDraft",
    "RepricingSummary",
    # Adjudication
    "ClaimRequest",
    "MoneyBreakdown",
    "ClaimDecision",
    # Usage
    "UsageRecord",
    "ProcedureUsageSummary",
    "PetUsageReport",
]
