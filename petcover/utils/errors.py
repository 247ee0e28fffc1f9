"""
Custom Exceptions
Engine-specific error handling

Domain outcomes (not covered, waiting period, annual limit) are never
raised; they are returned as ClaimDecision values. Exceptions here are
either caller bugs (ContractViolationError) or persistence faults the
caller may retry (RetryableEngineError).
"""


class AdjudicationEngineError(Exception):
    """Base exception for all engine errors."""

    pass


# =============================================================================
# Contract Violations (programming faults in the caller)
# =============================================================================


class ContractViolationError(AdjudicationEngineError):
    """Raised when a caller breaks the engine's usage contract."""

    pass


class CommitNotAllowedError(ContractViolationError):
    """Raised when commit is attempted for a decision that was not approved"""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f"Cannot commit usage for a decision with reason {reason}")


class DecisionMismatchError(ContractViolationError):
    """Raised when a decision is committed against a different usage key"""

    def __init__(self, field: str, expected: object, actual: object):
        self.field = field
        self.expected = expected
        self.actual = actual
        super().__init__(
            f"Decision was evaluated for {field}={expected!r} but commit received {actual!r}"
        )


class UnknownPlanError(ContractViolationError):
    """Raised when a plan id does not exist in the catalog at all"""

    def __init__(self, plan_id: str):
        self.plan_id = plan_id
        super().__init__(f"Unknown plan: {plan_id}")


class UnknownProcedureError(ContractViolationError):
    """Raised when a procedure id does not exist in the catalog at all"""

    def __init__(self, procedure_id: str):
        self.procedure_id = procedure_id
        super().__init__(f"Unknown procedure: {procedure_id}")


class InvalidCoverageRuleError(ContractViolationError):
    """Raised when an authored coverage rule breaks a field invariant"""

    pass


class MembershipNotEffectiveError(ContractViolationError):
    """Raised when a claim is evaluated against another pet's membership"""

    def __init__(self, pet_id: str, membership_pet_id: str, plan_id: str):
        self.pet_id = pet_id
        self.membership_pet_id = membership_pet_id
        self.plan_id = plan_id
        super().__init__(
            f"Claim for pet {pet_id} was given the membership of pet {membership_pet_id} "
            f"in plan {plan_id}"
        )


# =============================================================================
# Persistence Faults (retryable)
# =============================================================================


class RetryableEngineError(AdjudicationEngineError):
    """Raised when a storage round trip fails; the operation may be retried."""

    retryable = True


class LedgerUnavailableError(RetryableEngineError):
    """Raised when the usage ledger cannot be read or written"""

    pass


class CatalogUnavailableError(RetryableEngineError):
    """Raised when the coverage catalog cannot be read"""

    pass
