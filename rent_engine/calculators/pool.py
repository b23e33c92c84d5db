"""
Obligor Group Pool

Merges the payment streams of a shared-apartment group into one credit pool.
"""

from dataclasses import replace
from decimal import Decimal

from .classifier import EffectivePeriodClassifier
from ..exceptions import ParseError
from ..models import GroupMember, GroupRepresentative, Solo, Tenancy, Transaction


class ObligorGroupPool:
    """Resolves obligor groups and collects the transactions each ledger consumes."""

    def __init__(self, classifier: EffectivePeriodClassifier | None = None):
        self.classifier = classifier or EffectivePeriodClassifier()

    def pool_ids(self, tenancy: Tenancy) -> set[str]:
        """Tenancy ids whose payments feed this tenancy's ledger."""
        kind = tenancy.obligor_kind
        if isinstance(kind, GroupRepresentative):
            return {tenancy.tenancy_id, *kind.member_ids}
        return {tenancy.tenancy_id}

    def collect(self, tenancy: Tenancy, transactions: list[Transaction]) -> list[Transaction]:
        """
        Participating transactions of the pool in chronological order.

        Ties on the same date are broken by transaction id so the result does
        not depend on input order.
        """
        ids = self.pool_ids(tenancy)
        pooled = [t for t in transactions if t.participates and t.tenancy_id in ids]
        return sorted(pooled, key=lambda t: (t.date, t.transaction_id))

    def member_payments(self, tenancy_id: str, transactions: list[Transaction]) -> dict[str, Decimal]:
        """
        A single member's own payments summed per effective period.

        Informational only (shown greyed out next to the pooled ledger); has
        no part in the allocation.
        """
        own = [t for t in transactions if t.participates and t.tenancy_id == tenancy_id]
        own.sort(key=lambda t: (t.date, t.transaction_id))
        return self.classifier.sum_by_period(own)

    @staticmethod
    def resolve_kinds(tenancies: list[Tenancy]) -> list[Tenancy]:
        """
        Resolve obligor kinds once for a set of loaded tenancies.

        Membership may be stated on the member (pointer to its representative)
        or on the representative (list of member ids); both are merged.
        """
        by_id = {t.tenancy_id: t for t in tenancies}
        representative_of: dict[str, str] = {}

        def link(member_id: str, representative_id: str) -> None:
            if member_id == representative_id:
                raise ParseError(f"Tenancy {member_id} cannot be a member of its own group")
            for tenancy_id in (member_id, representative_id):
                if tenancy_id not in by_id:
                    raise ParseError(f"Obligor group references unknown tenancy {tenancy_id}")
            known = representative_of.get(member_id)
            if known is not None and known != representative_id:
                raise ParseError(
                    f"Tenancy {member_id} belongs to both group {known} and group {representative_id}"
                )
            representative_of[member_id] = representative_id

        for tenancy in tenancies:
            kind = tenancy.obligor_kind
            if isinstance(kind, GroupMember):
                link(tenancy.tenancy_id, kind.representative_id)
            elif isinstance(kind, GroupRepresentative):
                for member_id in kind.member_ids:
                    link(member_id, tenancy.tenancy_id)

        members: dict[str, list[str]] = {}
        for member_id, representative_id in representative_of.items():
            if representative_id in representative_of:
                raise ParseError(
                    f"Tenancy {member_id} references {representative_id}, which is itself a group member"
                )
            members.setdefault(representative_id, []).append(member_id)

        resolved = []
        for tenancy in tenancies:
            if tenancy.tenancy_id in representative_of:
                kind = GroupMember(representative_id=representative_of[tenancy.tenancy_id])
            elif tenancy.tenancy_id in members:
                kind = GroupRepresentative(member_ids=tuple(sorted(members[tenancy.tenancy_id])))
            else:
                kind = Solo()
            resolved.append(replace(tenancy, obligor_kind=kind))

        return resolved
