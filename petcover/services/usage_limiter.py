"""
Usage Limiter.

Compares a usage counter with a coverage rule's annual cap.
"""

from typing import NamedTuple, Optional

from petcover.schemas.coverage import CoverageRule

# remaining value reported for rules without a cap
UNLIMITED: Optional[int] = None


class LimitCheck(NamedTuple):
    """Outcome of a limit check. ``remaining`` is UNLIMITED (None) for uncapped rules."""

    has_remaining: bool
    remaining: Optional[int]

    @property
    def is_unlimited(self) -> bool:
        return self.remaining is UNLIMITED


class UsageLimiter:
    """Annual usage cap checks."""

    @staticmethod
    def has_remaining(rule: CoverageRule, current_count: int) -> LimitCheck:
        """
        Check whether one more use fits under the rule's annual limit.

        Args:
            rule: Coverage rule carrying ``annual_limit`` (0 = unlimited)
            current_count: Uses already committed this calendar year

        Returns:
            LimitCheck(has_remaining, remaining)
        """
        if current_count < 0:
            raise ValueError(f"current_count must be >= 0, got {current_count}")

        if rule.annual_limit == 0:
            return LimitCheck(True, UNLIMITED)

        return LimitCheck(
            current_count < rule.annual_limit,
            max(0, rule.annual_limit - current_count),
        )
