"""
Input Validation for the Rent Ledger Engine

Validates parsed input at the API boundary before processing begins.
The calculators assume validated input and never re-check it.
Raises ParseError / ClassificationError with clear messages for any violation.
"""

from .exceptions import ClassificationError, ParseError
from .models import (
    EscalationInput, EscalationRecord, LedgerInput, PropertyInput, RentReduction, Tenancy,
)


class InputValidator:
    """Validates engine input according to business rules."""

    VALID_BASES = ('calendar', 'ledger')
    MAX_DEADLINE_DAYS = 3650

    def validate(self, input_data: LedgerInput) -> None:
        """Run all checks for a single-tenancy ledger."""
        self._validate_tenancy(input_data.tenancy)
        self._validate_reductions(input_data.reductions)

    def validate_escalation(self, input_data: EscalationInput) -> None:
        self._validate_tenancy(input_data.tenancy)
        self._validate_reductions(input_data.reductions)
        self._validate_history(input_data.history)
        self._validate_notice_options(input_data.deadline_days, input_data.basis)

    def validate_property(self, input_data: PropertyInput) -> None:
        """Property-wide checks, including that every classified payment has an owner."""
        seen = set()
        for tenancy in input_data.tenancies:
            if tenancy.tenancy_id in seen:
                raise ParseError(f"Duplicate tenancy id: {tenancy.tenancy_id}")
            seen.add(tenancy.tenancy_id)
            self._validate_tenancy(tenancy)

        self._validate_reductions(input_data.reductions)
        self._validate_history(input_data.history)
        self._validate_notice_options(input_data.deadline_days, input_data.basis)

        for reduction in input_data.reductions:
            if reduction.tenancy_id not in seen:
                raise ParseError(f"Rent reduction references unknown tenancy: {reduction.tenancy_id}")

        for tx in input_data.transactions:
            if tx.tenancy_id is not None and tx.tenancy_id not in seen:
                raise ClassificationError(
                    f"Transaction {tx.transaction_id} is classified to unknown tenancy: {tx.tenancy_id}"
                )

    def _validate_tenancy(self, tenancy: Tenancy) -> None:
        if tenancy.contractual_rent < 0:
            raise ParseError(
                f"contractual_rent cannot be negative, got: {tenancy.contractual_rent} "
                f"(tenancy {tenancy.tenancy_id})"
            )

    def _validate_reductions(self, reductions: list[RentReduction]) -> None:
        for reduction in reductions:
            if reduction.amount <= 0:
                raise ParseError(f"Rent reduction amount must be positive: {reduction}")

    def _validate_history(self, history: list[EscalationRecord]) -> None:
        for record in history:
            if not (1 <= record.level <= 3):
                raise ParseError(f"Escalation level must be between 1 and 3, got: {record.level}")
            if record.amount < 0:
                raise ParseError(f"Escalation amount cannot be negative: {record}")

    def _validate_notice_options(self, deadline_days, basis: str) -> None:
        if isinstance(deadline_days, bool) or not isinstance(deadline_days, int) or deadline_days < 0:
            raise ParseError(f"deadline_days must be a non-negative integer, got: {deadline_days!r}")

        if deadline_days > self.MAX_DEADLINE_DAYS:
            raise ParseError(
                f"deadline_days cannot exceed {self.MAX_DEADLINE_DAYS}, got: {deadline_days}"
            )

        if basis not in self.VALID_BASES:
            raise ParseError(f"Invalid basis: {basis}. Must be 'calendar' or 'ledger'")
