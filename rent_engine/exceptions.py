"""
Input Errors for the Rent Ledger Engine

The ledger computation itself never raises for well-typed input. These errors
are raised while parsing and validating raw records at the boundary, before
data reaches the calculators. All subclass ValueError so API layers can treat
them as validation failures.
"""


class LedgerInputError(ValueError):
    """Base class for rejected engine input."""


class ParseError(LedgerInputError):
    """A raw field is malformed: bad date, period, amount, level or reference."""


class ClassificationError(LedgerInputError):
    """A transaction is assigned to a tenancy that does not exist."""
