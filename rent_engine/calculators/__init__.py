"""
Calculators Package

Provides all calculation components for ledger processing.
"""

from .allocator import LedgerAllocator
from .classifier import EffectivePeriodClassifier
from .escalation import EscalationStateMachine
from .obligation import ObligationCalculator
from .periods import PeriodSequencer
from .pool import ObligorGroupPool

__all__ = [
    "PeriodSequencer",
    "EffectivePeriodClassifier",
    "ObligationCalculator",
    "LedgerAllocator",
    "ObligorGroupPool",
    "EscalationStateMachine",
]
