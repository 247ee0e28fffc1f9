"""
Core Enumerations for the Benefit Adjudication Engine.
Source: Plan, procedure and claim vocabulary of the pet-health platform
Verified: 2026-10-19
"""

from enum import Enum


# =============================================================================
# Plan Enums
# =============================================================================


class PlanType(str, Enum):
    """Sellable plan flavours."""

    WITH_WAITING_PERIOD = "with_waiting_period"  # Annual billing, no coparticipation
    WITHOUT_WAITING_PERIOD = "without_waiting_period"  # Monthly billing, coparticipation

    @property
    def has_coparticipation(self) -> bool:
        """Plans sold without waiting periods charge coparticipation by default."""
        return self is PlanType.WITHOUT_WAITING_PERIOD


class ProcedureCategory(str, Enum):
    """Categories of billable veterinary services."""

    CONSULTATION = "consultation"
    EXAM = "exam"
    VACCINE = "vaccine"
    SURGERY = "surgery"
    EMERGENCY = "emergency"
    HOSPITALIZATION = "hospitalization"
    OTHER = "other"


# =============================================================================
# Adjudication Enums
# =============================================================================


class DecisionReason(str, Enum):
    """Outcome codes of a single adjudication."""

    APPROVED = "APPROVED"
    NOT_COVERED = "NOT_COVERED"
    WAITING_PERIOD = "WAITING_PERIOD"
    ANNUAL_LIMIT_REACHED = "ANNUAL_LIMIT_REACHED"


class AdjudicationState(str, Enum):
    """States walked by one evaluation (never persisted)."""

    CATALOG_LOOKUP = "catalog_lookup"
    NOT_COVERED = "not_covered"
    GATE_CHECK = "gate_check"
    WAITING_BLOCKED = "waiting_blocked"
    LIMIT_CHECK = "limit_check"
    LIMIT_EXCEEDED = "limit_exceeded"
    APPROVED = "approved"


# =============================================================================
# Runtime Enums
# =============================================================================


class Environment(str, Enum):
    """Deployment environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TESTING = "testing"


class Currency(str, Enum):
    """Currencies money values can be displayed in."""

    BRL = "BRL"
    USD = "USD"
    EUR = "EUR"
