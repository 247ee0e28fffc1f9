"""
Money Splitter.

Reports the gross / payer value / coparticipation split of a coverage rule.
The three values are stored pre-computed per plan-procedure pair, so this is
a verbatim pass-through in integer minor units. It does not gate: excluded
rules still report figures for "what would it cost" previews.
"""

from petcover.schemas.adjudication import MoneyBreakdown
from petcover.schemas.coverage import CoverageRule


class MoneySplitter:
    """Monetary breakdown of a coverage rule."""

    @staticmethod
    def split(rule: CoverageRule) -> MoneyBreakdown:
        """
        Split a rule's value between insurer and client.

        Args:
            rule: Coverage rule to split

        Returns:
            MoneyBreakdown with gross, payer_value and coparticipation (cents)
        """
        return MoneyBreakdown(
            gross=rule.gross_price,
            payer_value=rule.payer_value,
            coparticipation=rule.coparticipation,
        )
