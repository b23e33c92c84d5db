"""
Period Sequencer

Determines the billing window of a tenancy and generates its monthly periods.
"""

from ..models import LedgerContext, PropertyDataBounds, Tenancy, Transaction
from ..values import make_period, next_period, split_period


class PeriodSequencer:
    """Generates the contiguous list of billing periods for a ledger."""

    def sequence(self, ctx: LedgerContext) -> list[str]:
        """
        Resolve the window for the context and generate its periods.

        Populates ctx.start_period and ctx.end_period. Returns an empty list
        when there is no basis for a start or the start lies past the end.
        """
        ctx.start_period = self.resolve_start(ctx.tenancy, ctx.bounds, ctx.transactions)
        ctx.end_period = self.resolve_end(ctx.bounds, ctx.reference_period)

        if ctx.start_period is None or ctx.start_period > ctx.reference_period:
            return []
        return self.generate(ctx.start_period, ctx.end_period)

    def generate(self, start: str, end: str) -> list[str]:
        """All periods from start to end inclusive; empty if start > end."""
        periods = []
        year, month = split_period(start)
        end_year, end_month = split_period(end)

        while (year, month) <= (end_year, end_month):
            periods.append(make_period(year, month))
            month += 1
            if month > 12:
                month = 1
                year += 1

        return periods

    def resolve_start(
        self,
        tenancy: Tenancy,
        bounds: PropertyDataBounds,
        transactions: list[Transaction]
    ) -> str | None:
        """
        Start period of the ledger.

        Priority:
        1. Later of earliest observed property data and the move-in month
        2. Month of the earliest payment (neither of the above known)
        3. None (no basis at all)

        Anything before the earliest observed data counts as settled.
        """
        start = bounds.earliest_observed_period

        move_in = tenancy.move_in_period
        if move_in and (start is None or move_in > start):
            start = move_in

        if start is None and transactions:
            start = min(t.calendar_period for t in transactions)

        return start

    def resolve_end(self, bounds: PropertyDataBounds, reference_period: str) -> str:
        """
        End period of the ledger.

        Normally the reference period. When the latest observed data is older,
        end one period after it so payments shifted forward by the cutoff rule
        still have a row, but never beyond the reference period.
        """
        latest = bounds.latest_observed_period
        if latest and latest < reference_period:
            return min(next_period(latest), reference_period)
        return reference_period
