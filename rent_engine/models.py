"""
Domain Models for the Rent Ledger Engine

These dataclasses provide type-safe representations of all business entities.
All monetary values use Decimal for precision; dates are "YYYY-MM-DD" strings
and billing periods are "YYYY-MM" strings.
"""

from dataclasses import dataclass, field
from decimal import Decimal

from .exceptions import ParseError
from .values import parse_date, parse_flag, parse_money, parse_period, period_of

# Ledger row statuses
STATUS_PAID = "paid"
STATUS_PARTIAL = "partial"
STATUS_OPEN = "open"
STATUS_NO_DATA = "no_data"

# =============================================================================
# OBLIGOR KINDS
# =============================================================================


@dataclass(frozen=True)
class Solo:
    """Tenancy that pays its own rent."""

    name = "solo"


@dataclass(frozen=True)
class GroupMember:
    """Individual payer whose payments discharge the representative's obligation."""

    representative_id: str
    name = "group_member"


@dataclass(frozen=True)
class GroupRepresentative:
    """Tenancy carrying the combined obligation of a pooled obligor group."""

    member_ids: tuple[str, ...] = ()
    name = "group_representative"


ObligorKind = Solo | GroupMember | GroupRepresentative

# =============================================================================
# INPUT MODELS
# =============================================================================


@dataclass
class Tenancy:
    """Contractual facts of a tenancy. Never mutated by the engine."""

    tenancy_id: str
    contractual_rent: Decimal
    move_in_date: str | None = None
    is_active: bool = True
    obligor_kind: ObligorKind = field(default_factory=Solo)
    name: str = ""
    unit_label: str = ""
    is_vacant: bool = False

    @property
    def move_in_period(self) -> str | None:
        return period_of(self.move_in_date) if self.move_in_date else None

    @classmethod
    def from_dict(cls, data: dict) -> "Tenancy":
        representative = data.get("group_representative_id")
        members = data.get("group_member_ids") or []
        if representative:
            kind = GroupMember(representative_id=str(representative))
        elif members:
            kind = GroupRepresentative(member_ids=tuple(str(m) for m in members))
        else:
            kind = Solo()

        move_in = data.get("move_in_date")
        # Accept the legacy 'rent_total' column name from the record store
        rent = data.get("contractual_rent", data.get("rent_total"))
        return cls(
            tenancy_id=str(data["id"]),
            contractual_rent=parse_money(rent, "contractual_rent"),
            move_in_date=parse_date(move_in, "move_in_date") if move_in else None,
            is_active=parse_flag(data.get("is_active", True), "is_active"),
            obligor_kind=kind,
            name=data.get("name", ""),
            unit_label=data.get("unit_label", ""),
            is_vacant=parse_flag(data.get("is_vacant", False), "is_vacant"),
        )


@dataclass
class Transaction:
    """An incoming bank payment, already classified to a tenancy (or not)."""

    transaction_id: str
    tenancy_id: str | None
    date: str
    amount: Decimal
    description: str = ""

    @property
    def calendar_period(self) -> str:
        return period_of(self.date)

    @property
    def participates(self) -> bool:
        """Only classified, incoming payments count towards rent."""
        return self.tenancy_id is not None and self.amount > 0

    @classmethod
    def from_dict(cls, data: dict) -> "Transaction":
        tenancy_id = data.get("tenancy_id")
        return cls(
            transaction_id=str(data["id"]),
            tenancy_id=str(tenancy_id) if tenancy_id is not None else None,
            date=parse_date(data.get("date"), "date"),
            amount=parse_money(data.get("amount"), "amount"),
            description=data.get("description", ""),
        )


@dataclass
class RentReduction:
    """Approved reduction of a single period's rent."""

    tenancy_id: str
    period: str
    amount: Decimal

    @classmethod
    def from_dict(cls, data: dict) -> "RentReduction":
        return cls(
            tenancy_id=str(data["tenancy_id"]),
            period=parse_period(data.get("period"), "period"),
            amount=parse_money(data.get("amount"), "amount"),
        )


@dataclass
class PropertyDataBounds:
    """Earliest and latest periods with classified transactions for the property."""

    earliest_observed_period: str | None = None
    latest_observed_period: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "PropertyDataBounds":
        earliest = data.get("earliest_observed_period")
        latest = data.get("latest_observed_period")
        return cls(
            earliest_observed_period=parse_period(earliest, "earliest_observed_period") if earliest else None,
            latest_observed_period=parse_period(latest, "latest_observed_period") if latest else None,
        )

    @classmethod
    def from_transactions(cls, transactions: list[Transaction]) -> "PropertyDataBounds":
        periods = sorted({t.calendar_period for t in transactions if t.tenancy_id is not None})
        if not periods:
            return cls()
        return cls(earliest_observed_period=periods[0], latest_observed_period=periods[-1])


@dataclass
class EscalationRecord:
    """An issued arrears notice. History is append-only."""

    tenancy_id: str
    level: int
    amount: Decimal = Decimal("0")
    periods: list[str] = field(default_factory=list)
    issued_on: str | None = None

    @classmethod
    def from_dict(cls, data: dict) -> "EscalationRecord":
        issued_on = data.get("issued_on")
        level = data.get("level")
        if isinstance(level, bool) or not isinstance(level, int):
            raise ParseError(f"level must be an integer, got: {level!r}")
        return cls(
            tenancy_id=str(data["tenancy_id"]),
            level=level,
            amount=parse_money(data.get("amount", 0), "amount"),
            periods=[parse_period(p, "periods") for p in data.get("periods", [])],
            issued_on=parse_date(issued_on, "issued_on") if issued_on else None,
        )


def _bounds_from(data: dict, transactions: list[Transaction] | None = None) -> PropertyDataBounds:
    """
    Supplied bounds win, even when empty. Without them, bounds are only
    derived when the full property snapshot is passed in.
    """
    if "bounds" in data:
        return PropertyDataBounds.from_dict(data["bounds"] or {})
    if transactions is None:
        return PropertyDataBounds()
    return PropertyDataBounds.from_transactions(transactions)


@dataclass
class LedgerInput:
    """Complete input for computing one tenancy's saldo."""

    tenancy: Tenancy
    reference_period: str
    reductions: list[RentReduction] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    bounds: PropertyDataBounds = field(default_factory=PropertyDataBounds)

    @classmethod
    def from_dict(cls, data: dict) -> "LedgerInput":
        transactions = [Transaction.from_dict(t) for t in data.get("transactions", [])]
        return cls(
            tenancy=Tenancy.from_dict(data["tenancy"]),
            reference_period=parse_period(data.get("reference_period"), "reference_period"),
            reductions=[RentReduction.from_dict(r) for r in data.get("reductions", [])],
            transactions=transactions,
            bounds=_bounds_from(data),
        )


@dataclass
class EscalationInput:
    """Input for deciding the next arrears notice of one tenancy."""

    tenancy: Tenancy
    issue_date: str
    reference_period: str
    reductions: list[RentReduction] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    history: list[EscalationRecord] = field(default_factory=list)
    bounds: PropertyDataBounds = field(default_factory=PropertyDataBounds)
    periods: list[str] | None = None  # None = the ledger window
    deadline_days: int = 14
    basis: str = "calendar"  # 'calendar' or 'ledger'

    @classmethod
    def from_dict(cls, data: dict) -> "EscalationInput":
        transactions = [Transaction.from_dict(t) for t in data.get("transactions", [])]
        issue_date = parse_date(data.get("issue_date"), "issue_date")
        reference = data.get("reference_period")
        periods = data.get("periods")
        return cls(
            tenancy=Tenancy.from_dict(data["tenancy"]),
            issue_date=issue_date,
            reference_period=parse_period(reference, "reference_period") if reference else period_of(issue_date),
            reductions=[RentReduction.from_dict(r) for r in data.get("reductions", [])],
            transactions=transactions,
            history=[EscalationRecord.from_dict(h) for h in data.get("history", [])],
            bounds=_bounds_from(data),
            periods=[parse_period(p, "periods") for p in periods] if periods is not None else None,
            deadline_days=data.get("deadline_days", 14),
            basis=data.get("basis", "calendar"),
        )


@dataclass
class PropertyInput:
    """All tenancies of one property with their shared transaction snapshot."""

    tenancies: list[Tenancy]
    reference_period: str
    issue_date: str
    reductions: list[RentReduction] = field(default_factory=list)
    transactions: list[Transaction] = field(default_factory=list)
    history: list[EscalationRecord] = field(default_factory=list)
    bounds: PropertyDataBounds = field(default_factory=PropertyDataBounds)
    deadline_days: int = 14
    basis: str = "calendar"

    @classmethod
    def from_dict(cls, data: dict) -> "PropertyInput":
        transactions = [Transaction.from_dict(t) for t in data.get("transactions", [])]
        issue_date = parse_date(data.get("issue_date"), "issue_date")
        reference = data.get("reference_period")
        return cls(
            tenancies=[Tenancy.from_dict(t) for t in data.get("tenancies", [])],
            reference_period=parse_period(reference, "reference_period") if reference else period_of(issue_date),
            issue_date=issue_date,
            reductions=[RentReduction.from_dict(r) for r in data.get("reductions", [])],
            transactions=transactions,
            history=[EscalationRecord.from_dict(h) for h in data.get("history", [])],
            bounds=_bounds_from(data, transactions),
            deadline_days=data.get("deadline_days", 14),
            basis=data.get("basis", "calendar"),
        )


# =============================================================================
# OUTPUT / RESULT MODELS
# =============================================================================


@dataclass
class PeriodLedger:
    """One billing period row of a saldo."""

    period: str
    obligation: Decimal
    covered: Decimal = Decimal("0")
    status: str = STATUS_OPEN
    display_payments: list[Transaction] = field(default_factory=list)

    @property
    def outstanding(self) -> Decimal:
        return self.obligation - self.covered


@dataclass
class Saldo:
    """Per-tenancy ledger result. Derived on demand, never persisted."""

    tenancy_id: str
    reference_period: str
    periods: list[PeriodLedger] = field(default_factory=list)
    total_obligation: Decimal = Decimal("0")
    total_paid: Decimal = Decimal("0")
    balance: Decimal = Decimal("0")  # positive = credit, negative = arrears
    balance_excluding_current_period: Decimal = Decimal("0")
    current_period_status: str = STATUS_NO_DATA
    last_closed_period_status: str = STATUS_NO_DATA


@dataclass
class OpenPeriod:
    """A period still short of its obligation."""

    period: str
    obligation: Decimal
    received: Decimal
    diff: Decimal


@dataclass
class EscalationDecision:
    """Next permissible notice for a tenancy, consumed by the document generator."""

    tenancy_id: str
    next_level: int
    open_periods: list[OpenPeriod] = field(default_factory=list)
    total_debt: Decimal = Decimal("0")
    level_title: str = ""
    deadline: str | None = None
    termination_warning: bool = False
    last_issued_on: str | None = None


@dataclass
class PropertyResult:
    """Dashboard view of a whole property."""

    reference_period: str
    saldos: dict[str, Saldo] = field(default_factory=dict)
    member_payments: dict[str, dict[str, Decimal]] = field(default_factory=dict)
    arrears: list[EscalationDecision] = field(default_factory=list)


@dataclass
class LedgerContext:
    """
    Holds all intermediate state during ledger computation.
    This is the "bag" that flows through the pipeline.
    """

    # Input (immutable during processing)
    tenancy: Tenancy
    reference_period: str
    reductions: dict[str, Decimal] = field(default_factory=dict)
    bounds: PropertyDataBounds = field(default_factory=PropertyDataBounds)

    # Step results (populated as we go)
    transactions: list[Transaction] = field(default_factory=list)
    start_period: str | None = None
    end_period: str | None = None
    periods: list[str] = field(default_factory=list)
    obligations: list[Decimal] = field(default_factory=list)

    @property
    def total_paid(self) -> Decimal:
        return sum((t.amount for t in self.transactions), Decimal("0"))
