"""
Unit Tests for Escalation State Machine

Tests verify notice level transitions and arrears detection.
"""

from decimal import Decimal

import pytest

from rent_engine.calculators.escalation import EscalationStateMachine
from rent_engine.models import (
    EscalationRecord, OpenPeriod, PeriodLedger, Saldo, Tenancy, Transaction,
)


class TestNextLevel:
    """Test level transitions from notice history."""

    @pytest.fixture
    def machine(self):
        return EscalationStateMachine()

    def test_no_history_starts_at_reminder(self, machine):
        assert machine.next_level([]) == 1

    def test_after_reminder_comes_first_notice(self, machine):
        assert machine.next_level(self._history(1)) == 2

    def test_after_first_notice_comes_second_notice(self, machine):
        assert machine.next_level(self._history(1, 2)) == 3

    def test_uses_highest_issued_level(self, machine):
        """Order of records does not matter."""
        assert machine.next_level(self._history(2, 1)) == 3

    @pytest.mark.parametrize("levels", [(3,), (1, 2, 3), (1, 2, 3, 3, 3)])
    def test_saturates_at_three(self, machine, levels):
        assert machine.next_level(self._history(*levels)) == 3

    def _history(self, *levels):
        return [EscalationRecord(tenancy_id="t1", level=level) for level in levels]


class TestOpenPeriods:
    """Test the direct calendar-month arrears comparison."""

    @pytest.fixture
    def machine(self):
        return EscalationStateMachine()

    @pytest.fixture
    def tenancy(self):
        return Tenancy(tenancy_id="t1", contractual_rent=Decimal("500"))

    def test_short_month_is_open(self, machine, tenancy):
        transactions = [
            Transaction("tx1", "t1", "2025-01-03", Decimal("500")),
            Transaction("tx2", "t1", "2025-02-03", Decimal("300")),
        ]
        result = machine.open_periods(tenancy, transactions, ["2025-01", "2025-02"], {})

        assert result == [OpenPeriod("2025-02", Decimal("500"), Decimal("300"), Decimal("200"))]

    def test_overpayment_does_not_carry_forward(self, machine, tenancy):
        """January overpaid, February unpaid → February still open."""
        transactions = [Transaction("tx1", "t1", "2025-01-03", Decimal("1000"))]
        result = machine.open_periods(tenancy, transactions, ["2025-01", "2025-02"], {})

        assert [p.period for p in result] == ["2025-02"]
        assert result[0].diff == Decimal("500")

    def test_uses_raw_calendar_month_not_cutoff(self, machine, tenancy):
        """A payment on Jan 28 counts for January here."""
        transactions = [Transaction("tx1", "t1", "2025-01-28", Decimal("500"))]
        result = machine.open_periods(tenancy, transactions, ["2025-01", "2025-02"], {})

        assert [p.period for p in result] == ["2025-02"]

    def test_reductions_lower_the_comparison(self, machine, tenancy):
        transactions = [Transaction("tx1", "t1", "2025-02-03", Decimal("400"))]
        result = machine.open_periods(tenancy, transactions, ["2025-02"], {"2025-02": Decimal("100")})

        assert result == []

    def test_from_ledger(self, machine):
        saldo = Saldo(
            tenancy_id="t1",
            reference_period="2025-03",
            periods=[
                PeriodLedger("2025-01", Decimal("500"), Decimal("500"), "paid"),
                PeriodLedger("2025-02", Decimal("500"), Decimal("200"), "partial"),
                PeriodLedger("2025-03", Decimal("500"), Decimal("0"), "open"),
            ],
        )
        result = machine.open_periods_from_ledger(saldo)

        assert [(p.period, p.received, p.diff) for p in result] == [
            ("2025-02", Decimal("200"), Decimal("300")),
            ("2025-03", Decimal("0"), Decimal("500")),
        ]


class TestDecide:
    """Test the assembled escalation decision."""

    @pytest.fixture
    def machine(self):
        return EscalationStateMachine()

    @pytest.fixture
    def open_periods(self):
        return [
            OpenPeriod("2025-01", Decimal("500"), Decimal("0"), Decimal("500")),
            OpenPeriod("2025-02", Decimal("500"), Decimal("300"), Decimal("200")),
        ]

    def test_first_decision(self, machine, open_periods):
        decision = machine.decide("t1", open_periods, [], "2025-02-20")

        assert decision.next_level == 1
        assert decision.level_title == "Payment reminder"
        assert decision.total_debt == Decimal("700")
        assert decision.deadline == "2025-03-06"
        assert decision.termination_warning is False
        assert decision.last_issued_on is None

    def test_custom_deadline(self, machine, open_periods):
        decision = machine.decide("t1", open_periods, [], "2025-12-20", deadline_days=30)
        assert decision.deadline == "2026-01-19"

    def test_second_notice_with_two_open_periods_warns_of_termination(self, machine, open_periods):
        history = [
            EscalationRecord("t1", 1, issued_on="2025-01-10"),
            EscalationRecord("t1", 2, issued_on="2025-02-01"),
        ]
        decision = machine.decide("t1", open_periods, history, "2025-02-20")

        assert decision.next_level == 3
        assert decision.level_title == "Second notice"
        assert decision.termination_warning is True
        assert decision.last_issued_on == "2025-02-01"

    def test_second_notice_with_one_open_period_has_no_warning(self, machine, open_periods):
        history = [EscalationRecord("t1", 2)]
        decision = machine.decide("t1", open_periods[:1], history, "2025-02-20")

        assert decision.next_level == 3
        assert decision.termination_warning is False

    def test_nothing_open(self, machine):
        decision = machine.decide("t1", [], [], "2025-02-20")
        assert decision.total_debt == Decimal("0")
