"""
Effective-Period Classifier

Maps payment dates to the period they are displayed under.
"""

from decimal import Decimal

from ..models import Transaction
from ..values import next_period, period_of


class EffectivePeriodClassifier:
    """
    Applies the month-end cutoff rule.

    Tenants often pay at the end of a month for the upcoming one, so payments
    arriving on or after the cutoff day are shown under the following month.
    Classification is for display only; it never limits which obligations a
    payment may cover.
    """

    CUTOFF_DAY = 25

    def classify(self, date: str) -> str:
        """Effective period of a YYYY-MM-DD date."""
        day = int(date[8:10])
        if day >= self.CUTOFF_DAY:
            return next_period(period_of(date))
        return period_of(date)

    def group_by_period(self, transactions: list[Transaction]) -> dict[str, list[Transaction]]:
        """Transactions keyed by effective period, input order preserved."""
        grouped: dict[str, list[Transaction]] = {}
        for tx in transactions:
            grouped.setdefault(self.classify(tx.date), []).append(tx)
        return grouped

    def sum_by_period(self, transactions: list[Transaction]) -> dict[str, Decimal]:
        totals: dict[str, Decimal] = {}
        for tx in transactions:
            period = self.classify(tx.date)
            totals[period] = totals.get(period, Decimal('0')) + tx.amount
        return totals
