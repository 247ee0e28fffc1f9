"""
Operator-facing decision messages.

The engine core returns reason codes only; the claim-entry workflow renders
them with these helpers.
"""

from typing import Optional

from petcover.core.config import get_settings
from petcover.core.enums import DecisionReason
from petcover.core.money import format_money
from petcover.schemas.adjudication import ClaimDecision


def describe_decision(decision: ClaimDecision, currency: Optional[str] = None) -> str:
    """
    Render a decision as a one-line message for unit staff.

    Amounts are shown in ``currency``, defaulting to the configured
    PETCOVER_CURRENCY.

    >>> describe_decision(decision)  # doctest: +SKIP
    'Waiting period not yet met, eligible on 2024-01-31'
    """
    if decision.reason == DecisionReason.NOT_COVERED:
        return "Procedure not covered by this plan"

    if decision.reason == DecisionReason.WAITING_PERIOD:
        if decision.eligible_on is not None:
            return f"Waiting period not yet met, eligible on {decision.eligible_on.isoformat()}"
        return "Waiting period not yet met"

    if decision.reason == DecisionReason.ANNUAL_LIMIT_REACHED:
        if decision.annual_limit is not None:
            uses = "use" if decision.annual_limit == 1 else "uses"
            return f"Annual limit of {decision.annual_limit} {uses} reached"
        return "Annual limit reached"

    currency = currency or get_settings().CURRENCY.value
    message = (
        f"Approved: insurer pays {format_money(decision.payer_value, currency)}, "
        f"client coparticipation {format_money(decision.coparticipation, currency)}"
    )
    if decision.remaining_annual_uses is not None:
        message += f" ({decision.remaining_annual_uses} remaining this year)"
    return message
