"""
Output Builder

Constructs the API response dictionaries from engine results.
"""

from decimal import Decimal

from .models import EscalationDecision, OpenPeriod, PeriodLedger, PropertyResult, Saldo, Transaction
from .values import period_label


def to_money(value: Decimal) -> float:
    """Convert Decimal to float with 2 decimal places."""
    return round(float(value), 2)


def _fmt(value) -> str:
    """Format a number as currency string for descriptions."""
    return f"€{value:,.2f}"


class OutputBuilder:
    """Builds the final output responses."""

    def build_saldo(self, saldo: Saldo) -> dict:
        """Construct the saldo response: one row per period plus summary."""
        return {
            "tenancy_id": saldo.tenancy_id,
            "reference_period": saldo.reference_period,
            "periods": [self._build_period(row) for row in saldo.periods],
            "summary": self._build_summary(saldo),
            "current_period_status": saldo.current_period_status,
            "last_closed_period_status": saldo.last_closed_period_status
        }

    def build_escalation(self, decision: EscalationDecision) -> dict:
        return {
            "tenancy_id": decision.tenancy_id,
            "next_level": decision.next_level,
            "level_title": decision.level_title,
            "open_periods": [self._build_open_period(p) for p in decision.open_periods],
            "total_debt": to_money(decision.total_debt),
            "deadline": decision.deadline,
            "termination_warning": decision.termination_warning,
            "last_issued_on": decision.last_issued_on
        }

    def build_property(self, result: PropertyResult) -> dict:
        return {
            "reference_period": result.reference_period,
            "saldos": {
                tenancy_id: self.build_saldo(saldo)
                for tenancy_id, saldo in result.saldos.items()
            },
            "member_payments": {
                tenancy_id: {period: to_money(amount) for period, amount in sorted(payments.items())}
                for tenancy_id, payments in result.member_payments.items()
            },
            "arrears": [self.build_escalation(decision) for decision in result.arrears]
        }

    def _build_period(self, row: PeriodLedger) -> dict:
        return {
            "period": row.period,
            "label": period_label(row.period),
            "obligation": to_money(row.obligation),
            "covered": to_money(row.covered),
            "outstanding": to_money(row.outstanding),
            "status": row.status,
            "payments": [self._build_payment(tx) for tx in row.display_payments]
        }

    def _build_payment(self, tx: Transaction) -> dict:
        return {
            "id": tx.transaction_id,
            "tenancy_id": tx.tenancy_id,
            "date": tx.date,
            "amount": to_money(tx.amount),
            "description": tx.description
        }

    def _build_open_period(self, open_period: OpenPeriod) -> dict:
        return {
            "period": open_period.period,
            "label": period_label(open_period.period, long=True),
            "obligation": to_money(open_period.obligation),
            "received": to_money(open_period.received),
            "diff": to_money(open_period.diff)
        }

    def _build_summary(self, saldo: Saldo) -> dict:
        """Summary section with value and dynamic description for each figure."""
        rows = saldo.periods
        total_obligation = to_money(saldo.total_obligation)
        total_paid = to_money(saldo.total_paid)
        balance = to_money(saldo.balance)
        closed_balance = to_money(saldo.balance_excluding_current_period)

        if rows:
            window = f"{period_label(rows[0].period)} to {period_label(rows[-1].period)}"
            obligation_desc = f"Rent owed over {len(rows)} period(s), {window}, after reductions"
        else:
            obligation_desc = "No billing periods - no data for this tenancy yet"

        return {
            "total_obligation": {
                "value": total_obligation,
                "description": obligation_desc
            },
            "total_paid": {
                "value": total_paid,
                "description": "All incoming payments, applied to the oldest open period first"
            },
            "balance": {
                "value": balance,
                "description": f"paid ({_fmt(total_paid)}) - owed ({_fmt(total_obligation)}) = {_fmt(balance)}"
            },
            "balance_excluding_current_period": {
                "value": closed_balance,
                "description": f"Balance over periods before {period_label(saldo.reference_period)} only"
            }
        }
