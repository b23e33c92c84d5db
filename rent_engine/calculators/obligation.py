"""
Obligation Calculator

Computes the net rent owed for a billing period.
"""

from decimal import Decimal

from ..models import GroupMember, LedgerContext, RentReduction, Tenancy


class ObligationCalculator:
    """Net rent after approved reductions, floored at zero."""

    def calculate(self, ctx: LedgerContext) -> list[Decimal]:
        """Obligation for every period in the context, in order."""
        return [self.for_period(ctx.tenancy, period, ctx.reductions) for period in ctx.periods]

    def for_period(self, tenancy: Tenancy, period: str, reductions: dict[str, Decimal]) -> Decimal:
        """
        obligation = max(0, contractual_rent - reduction)

        Members of a pooled group owe nothing themselves; the representative's
        rent carries the whole group obligation.
        """
        if isinstance(tenancy.obligor_kind, GroupMember):
            return Decimal('0')

        reduction = reductions.get(period, Decimal('0'))
        return max(Decimal('0'), tenancy.contractual_rent - reduction)

    @staticmethod
    def reductions_by_period(reductions: list[RentReduction], tenancy_id: str) -> dict[str, Decimal]:
        """Reductions of one tenancy keyed by exact period (same-period entries add up)."""
        by_period: dict[str, Decimal] = {}
        for reduction in reductions:
            if reduction.tenancy_id != tenancy_id:
                continue
            by_period[reduction.period] = by_period.get(reduction.period, Decimal('0')) + reduction.amount
        return by_period
