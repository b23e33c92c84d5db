"""
Ledger Allocator

Applies a tenancy's payments to its billing periods, oldest debt first
(§366 BGB).
"""

from decimal import Decimal

from .classifier import EffectivePeriodClassifier
from ..models import (
    LedgerContext, PeriodLedger, Saldo,
    STATUS_NO_DATA, STATUS_OPEN, STATUS_PAID, STATUS_PARTIAL,
)
from ..values import previous_period


class LedgerAllocator:
    """Consumes one fungible credit pool across periods in chronological order."""

    def __init__(self, classifier: EffectivePeriodClassifier | None = None):
        self.classifier = classifier or EffectivePeriodClassifier()

    def allocate(self, ctx: LedgerContext) -> Saldo:
        """
        Build the saldo for the context.

        Payments are not tied to the month they arrived in. Their cumulative
        sum forms a single credit pool which covers each period's obligation
        in turn, oldest first:

            covered   = min(remaining_credit, obligation)
            remaining = remaining_credit - covered

        Payments are attached to the row of their effective period for
        display only; that has no influence on coverage.
        """
        total_paid = ctx.total_paid

        if not ctx.periods:
            return self.empty(ctx, total_paid)

        display = self.classifier.group_by_period(ctx.transactions)

        remaining_credit = total_paid
        rows = []
        for period, obligation in zip(ctx.periods, ctx.obligations):
            covered = min(remaining_credit, obligation)
            remaining_credit -= covered

            rows.append(PeriodLedger(
                period=period,
                obligation=obligation,
                covered=covered,
                status=self.status_of(covered, obligation),
                display_payments=display.get(period, [])
            ))

        total_obligation = sum((row.obligation for row in rows), Decimal('0'))

        return Saldo(
            tenancy_id=ctx.tenancy.tenancy_id,
            reference_period=ctx.reference_period,
            periods=rows,
            total_obligation=total_obligation,
            total_paid=total_paid,
            balance=total_paid - total_obligation,
            balance_excluding_current_period=self._closed_balance(rows, total_paid, ctx.reference_period),
            current_period_status=self._status_for(rows, ctx.reference_period),
            last_closed_period_status=self._status_for(rows, previous_period(ctx.reference_period))
        )

    def empty(self, ctx: LedgerContext, total_paid: Decimal) -> Saldo:
        """
        Saldo without any billing period.

        With no basis for a start there can be no payments either. A tenancy
        that is not yet due keeps all its payments as credit.
        """
        return Saldo(
            tenancy_id=ctx.tenancy.tenancy_id,
            reference_period=ctx.reference_period,
            total_paid=total_paid,
            balance=total_paid,
            balance_excluding_current_period=total_paid,
            current_period_status=STATUS_NO_DATA,
            last_closed_period_status=STATUS_NO_DATA
        )

    @staticmethod
    def status_of(covered: Decimal, obligation: Decimal) -> str:
        if covered >= obligation:
            return STATUS_PAID
        if covered > 0:
            return STATUS_PARTIAL
        return STATUS_OPEN

    def _closed_balance(self, rows: list[PeriodLedger], total_paid: Decimal, reference_period: str) -> Decimal:
        """Balance over closed periods only, so the accruing current month does not count as arrears."""
        closed_obligation = sum(
            (row.obligation for row in rows if row.period < reference_period),
            Decimal('0')
        )
        return total_paid - closed_obligation

    def _status_for(self, rows: list[PeriodLedger], period: str) -> str:
        for row in rows:
            if row.period == period:
                return row.status
        return STATUS_NO_DATA
