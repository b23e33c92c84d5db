"""
Ledger Processor - Main Orchestrator

Coordinates the saldo and escalation pipelines through discrete, testable steps.
The processor is stateless: every call recomputes from the supplied snapshot.
"""

import json
import logging
from typing import Any, Dict

from .calculators import (
    EffectivePeriodClassifier,
    EscalationStateMachine,
    LedgerAllocator,
    ObligationCalculator,
    ObligorGroupPool,
    PeriodSequencer,
)
from .models import (
    EscalationDecision, EscalationInput, GroupMember, LedgerContext,
    LedgerInput, PropertyDataBounds, PropertyInput, PropertyResult, RentReduction,
    Saldo, Tenancy, Transaction,
)
from .output import OutputBuilder
from .validators import InputValidator

logger = logging.getLogger(__name__)


class LedgerProcessor:
    """
    Main orchestrator for ledger processing.

    Saldo pipeline:
    1. Build Context (reductions by period)
    2. Collect Pooled Transactions
    3. Sequence Periods
    4. Calculate Obligations
    5. Allocate Credit (oldest debt first)

    Escalation pipeline:
    1. Determine Short Periods (calendar comparison or ledger)
    2. Decide Next Level
    """

    def __init__(self):
        # Initialize all calculators
        self.validator = InputValidator()
        self.classifier = EffectivePeriodClassifier()
        self.sequencer = PeriodSequencer()
        self.obligation_calculator = ObligationCalculator()
        self.pool = ObligorGroupPool(self.classifier)
        self.allocator = LedgerAllocator(self.classifier)
        self.escalation = EscalationStateMachine(self.obligation_calculator)
        self.output_builder = OutputBuilder()

    def process(self, input_data: LedgerInput) -> Saldo:
        """
        Compute the saldo of one tenancy (or pooled group).

        Args:
            input_data: validated LedgerInput

        Returns:
            Saldo with one row per billing period
        """
        return self._saldo(
            input_data.tenancy,
            input_data.reductions,
            input_data.transactions,
            input_data.bounds,
            input_data.reference_period
        )

    def escalate(self, input_data: EscalationInput) -> EscalationDecision:
        """Decide the next notice level and the short periods it covers."""
        tenancy = input_data.tenancy
        history = [r for r in input_data.history if r.tenancy_id == tenancy.tenancy_id]

        if input_data.basis == EscalationStateMachine.BASIS_LEDGER:
            saldo = self._saldo(
                tenancy,
                input_data.reductions,
                input_data.transactions,
                input_data.bounds,
                input_data.reference_period
            )
            open_periods = self.escalation.open_periods_from_ledger(saldo)
        else:
            periods = input_data.periods
            if periods is None:
                periods = self._billing_periods(tenancy, input_data)
            open_periods = self.escalation.open_periods(
                tenancy,
                self.pool.collect(tenancy, input_data.transactions),
                periods,
                ObligationCalculator.reductions_by_period(input_data.reductions, tenancy.tenancy_id)
            )

        decision = self.escalation.decide(
            tenancy.tenancy_id,
            open_periods,
            history,
            input_data.issue_date,
            input_data.deadline_days
        )
        logger.debug(
            "Escalation for %s: level %s, %s open period(s)",
            tenancy.tenancy_id, decision.next_level, len(decision.open_periods)
        )
        return decision

    def process_property(self, input_data: PropertyInput) -> PropertyResult:
        """
        Dashboard view of a whole property.

        - Solo tenancies and group representatives get a saldo
        - Group members get their own payments per effective period
        - Eligible tenancies with calendar arrears appear in the arrears list
        """
        tenancies = ObligorGroupPool.resolve_kinds(input_data.tenancies)
        result = PropertyResult(reference_period=input_data.reference_period)

        for tenancy in tenancies:
            if isinstance(tenancy.obligor_kind, GroupMember):
                result.member_payments[tenancy.tenancy_id] = self.pool.member_payments(
                    tenancy.tenancy_id, input_data.transactions
                )
                continue

            result.saldos[tenancy.tenancy_id] = self._saldo(
                tenancy,
                input_data.reductions,
                input_data.transactions,
                input_data.bounds,
                input_data.reference_period
            )

            if not self._eligible_for_escalation(tenancy):
                continue

            decision = self.escalate(EscalationInput(
                tenancy=tenancy,
                issue_date=input_data.issue_date,
                reference_period=input_data.reference_period,
                reductions=input_data.reductions,
                transactions=input_data.transactions,
                history=input_data.history,
                bounds=input_data.bounds,
                periods=self._observed_periods(tenancy, input_data.transactions),
                deadline_days=input_data.deadline_days,
                basis=input_data.basis
            ))
            if decision.total_debt > 0:
                result.arrears.append(decision)

        logger.info(
            "Processed property: %s ledger(s), %s in arrears",
            len(result.saldos), len(result.arrears)
        )
        return result

    def process_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """
        Compute a saldo from raw dictionary input.

        Convenience method for API usage.
        """
        input_data = LedgerInput.from_dict(data)
        self.validator.validate(input_data)
        return self.output_builder.build_saldo(self.process(input_data))

    def escalate_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        input_data = EscalationInput.from_dict(data)
        self.validator.validate_escalation(input_data)
        return self.output_builder.build_escalation(self.escalate(input_data))

    def process_property_from_dict(self, data: Dict[str, Any]) -> Dict[str, Any]:
        input_data = PropertyInput.from_dict(data)
        self.validator.validate_property(input_data)
        return self.output_builder.build_property(self.process_property(input_data))

    def _saldo(
        self,
        tenancy: Tenancy,
        reductions: list[RentReduction],
        transactions: list[Transaction],
        bounds: PropertyDataBounds,
        reference_period: str
    ) -> Saldo:
        # Step 1: Build context
        ctx = LedgerContext(
            tenancy=tenancy,
            reference_period=reference_period,
            reductions=ObligationCalculator.reductions_by_period(reductions, tenancy.tenancy_id),
            bounds=bounds
        )

        # Step 2: Collect the tenancy's (or group's) payments
        ctx.transactions = self.pool.collect(tenancy, transactions)

        # Step 3: Sequence billing periods
        ctx.periods = self.sequencer.sequence(ctx)

        # Step 4: Obligation per period
        ctx.obligations = self.obligation_calculator.calculate(ctx)

        # Step 5: Allocate credit pool, oldest debt first
        saldo = self.allocator.allocate(ctx)

        logger.debug(
            "Saldo for %s: %s period(s) %s..%s, balance %s",
            tenancy.tenancy_id, len(ctx.periods), ctx.start_period, ctx.end_period, saldo.balance
        )
        return saldo

    def _billing_periods(self, tenancy: Tenancy, input_data: EscalationInput) -> list[str]:
        """Same window the tenancy's ledger would use."""
        ctx = LedgerContext(
            tenancy=tenancy,
            reference_period=input_data.reference_period,
            bounds=input_data.bounds
        )
        ctx.transactions = self.pool.collect(tenancy, input_data.transactions)
        return self.sequencer.sequence(ctx)

    def _observed_periods(self, tenancy: Tenancy, transactions: list[Transaction]) -> list[str]:
        """
        Calendar months with classified property data, from move-in onward.
        """
        periods = sorted({t.calendar_period for t in transactions if t.tenancy_id is not None})
        move_in = tenancy.move_in_period
        if move_in:
            periods = [p for p in periods if p >= move_in]
        return periods

    @staticmethod
    def _eligible_for_escalation(tenancy: Tenancy) -> bool:
        return (
            tenancy.is_active
            and not tenancy.is_vacant
            and tenancy.contractual_rent > 0
            and not isinstance(tenancy.obligor_kind, GroupMember)
        )


# =============================================================================
# CONVENIENCE FUNCTIONS
# =============================================================================

def calculate_saldo_from_dict(input_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Compute a saldo from Python dict and return Python dict.
    """
    processor = LedgerProcessor()
    return processor.process_from_dict(input_data)


def calculate_saldo_from_json(json_input: str) -> str:
    """
    Compute a saldo from JSON string input and return JSON string output.
    """
    try:
        input_data = json.loads(json_input)
        processor = LedgerProcessor()
        result = processor.process_from_dict(input_data)
        return json.dumps(result, indent=2)

    except ValueError as e:
        error_response = {"error": str(e), "status": "validation_failed"}
        return json.dumps(error_response, indent=2)

    except (KeyError, TypeError) as e:
        error_response = {"error": f"Missing or invalid field: {e}", "status": "validation_failed"}
        return json.dumps(error_response, indent=2)
