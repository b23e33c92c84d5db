"""
RENT LEDGER ENGINE
Oldest-debt-first saldo and arrears escalation for rental tenancies
"""

from .exceptions import ClassificationError, LedgerInputError, ParseError
from .models import EscalationDecision, EscalationInput, LedgerInput, PropertyInput, PropertyResult, Saldo
from .processor import LedgerProcessor

__all__ = [
    'LedgerProcessor',
    'LedgerInput',
    'EscalationInput',
    'PropertyInput',
    'Saldo',
    'EscalationDecision',
    'PropertyResult',
    'LedgerInputError',
    'ParseError',
    'ClassificationError',
]
