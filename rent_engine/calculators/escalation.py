"""
Arrears / Escalation State Machine

Determines which periods are short and the next notice level for a tenancy.
"""

from decimal import Decimal

from .obligation import ObligationCalculator
from ..models import (
    EscalationDecision, EscalationRecord, OpenPeriod, Saldo, Tenancy, Transaction,
    STATUS_PAID,
)
from ..values import add_days


class EscalationStateMachine:
    """
    Three-level notice escalation per tenancy.

    Levels never decrease and saturate at MAX_LEVEL:
        1 = payment reminder, 2 = first notice, 3 = second notice
    """

    MAX_LEVEL = 3
    DEFAULT_DEADLINE_DAYS = 14
    TERMINATION_THRESHOLD_PERIODS = 2

    BASIS_CALENDAR = 'calendar'
    BASIS_LEDGER = 'ledger'

    LEVEL_TITLES = {
        1: "Payment reminder",
        2: "First notice",
        3: "Second notice",
    }

    def __init__(self, obligation_calculator: ObligationCalculator | None = None):
        self.obligation_calculator = obligation_calculator or ObligationCalculator()

    def next_level(self, history: list[EscalationRecord]) -> int:
        """next = min(3, highest issued + 1); 1 without history."""
        if not history:
            return 1
        highest = max(record.level for record in history)
        return min(self.MAX_LEVEL, highest + 1)

    def open_periods(
        self,
        tenancy: Tenancy,
        transactions: list[Transaction],
        periods: list[str],
        reductions: dict[str, Decimal]
    ) -> list[OpenPeriod]:
        """
        Short periods by direct calendar-month comparison.

        Each period's obligation is compared with the payments whose raw
        calendar month is that period. Nothing carries forward: an overpaid
        month does not offset a later short one. This deliberately differs
        from the ledger allocation.
        """
        received_by_period: dict[str, Decimal] = {}
        for tx in transactions:
            period = tx.calendar_period
            received_by_period[period] = received_by_period.get(period, Decimal('0')) + tx.amount

        result = []
        for period in periods:
            obligation = self.obligation_calculator.for_period(tenancy, period, reductions)
            received = received_by_period.get(period, Decimal('0'))
            diff = obligation - received
            if diff > 0:
                result.append(OpenPeriod(period=period, obligation=obligation, received=received, diff=diff))
        return result

    def open_periods_from_ledger(self, saldo: Saldo) -> list[OpenPeriod]:
        """Short periods as seen by the oldest-debt-first ledger."""
        return [
            OpenPeriod(
                period=row.period,
                obligation=row.obligation,
                received=row.covered,
                diff=row.outstanding
            )
            for row in saldo.periods
            if row.status != STATUS_PAID
        ]

    def decide(
        self,
        tenancy_id: str,
        open_periods: list[OpenPeriod],
        history: list[EscalationRecord],
        issue_date: str,
        deadline_days: int = DEFAULT_DEADLINE_DAYS
    ) -> EscalationDecision:
        """
        Build the decision for the next notice.

        A second notice covering two or more short periods carries the
        termination warning (§543 (2) no. 3 BGB).
        """
        level = self.next_level(history)
        issued = [record.issued_on for record in history if record.issued_on]

        return EscalationDecision(
            tenancy_id=tenancy_id,
            next_level=level,
            open_periods=open_periods,
            total_debt=sum((p.diff for p in open_periods), Decimal('0')),
            level_title=self.LEVEL_TITLES[level],
            deadline=add_days(issue_date, deadline_days),
            termination_warning=(
                level == self.MAX_LEVEL and len(open_periods) >= self.TERMINATION_THRESHOLD_PERIODS
            ),
            last_issued_on=max(issued) if issued else None
        )
