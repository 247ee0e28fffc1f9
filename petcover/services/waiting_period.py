"""
Waiting Period Gate.

Decides whether a procedure's waiting period (carência) has elapsed since
the pet's coverage started. Plain calendar-day arithmetic: no business days
or holidays.
"""

from datetime import date, timedelta


class WaitingPeriodGate:
    """Pure date checks for waiting periods."""

    @staticmethod
    def eligible_on(coverage_start: date, waiting_period_days: int) -> date:
        """
        First date on which the procedure may be claimed.

        Args:
            coverage_start: Date the governing contract started
            waiting_period_days: Waiting period length in calendar days

        Returns:
            coverage_start + waiting_period_days
        """
        if waiting_period_days < 0:
            raise ValueError(f"waiting_period_days must be >= 0, got {waiting_period_days}")
        return coverage_start + timedelta(days=waiting_period_days)

    @staticmethod
    def is_satisfied(coverage_start: date, waiting_period_days: int, as_of: date) -> bool:
        """
        Check if the waiting period has elapsed on ``as_of``.

        A coverage start later than ``as_of`` is never satisfied, whatever the
        waiting period length.
        """
        if coverage_start > as_of:
            return False
        return as_of >= WaitingPeriodGate.eligible_on(coverage_start, waiting_period_days)

    @staticmethod
    def days_remaining(coverage_start: date, waiting_period_days: int, as_of: date) -> int:
        """Calendar days left before the procedure becomes claimable (0 when satisfied)."""
        eligible = WaitingPeriodGate.eligible_on(coverage_start, waiting_period_days)
        return max(0, (eligible - as_of).days)
