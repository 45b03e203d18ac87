"""
Pure reconciliation between purchased quantities and existing sessions.

Given a deal's plannable product lines and its current sessions, decides
which empty sessions may be deleted, which surplus sessions must be
flagged (they hold data), and how many new sessions each line needs.

Ordering is load-bearing: sessions are sorted by creation time ascending
with the session id as tie-break, and both deletion and flagging consume
the tail of that order, so the earliest-created sessions are kept.

Dependencies: training_erp.core.planning.rules
System role: Decision core of session provisioning (no I/O)
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from training_erp.core.planning.rules import ensure_positive_int, is_session_empty

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


@dataclass(frozen=True)
class ProductLine:
    """A plannable deal product line."""

    id: str
    code: str | None
    quantity: Any
    hours: Any
    name: str | None = None

    @property
    def required(self) -> int:
        return ensure_positive_int(self.quantity)


@dataclass(frozen=True)
class SessionSnapshot:
    """The fields of a persisted session that reconciliation looks at."""

    session_id: str
    deal_product_id: str | None
    created_at: datetime | None
    start_at: datetime | None = None
    end_at: datetime | None = None
    sala_id: str | None = None
    direccion: str | None = None
    comentarios: str | None = None
    trainer_ids: tuple[str, ...] = ()
    mobile_unit_ids: tuple[str, ...] = ()

    @property
    def is_empty(self) -> bool:
        return is_session_empty(
            self.start_at,
            self.end_at,
            self.sala_id,
            self.direccion,
            self.comentarios,
            self.trainer_ids,
            self.mobile_unit_ids,
        )


@dataclass
class ProductAssessment:
    """Outcome of reconciling one product line."""

    deletable_ids: list[str] = field(default_factory=list)
    flagged_ids: list[str] = field(default_factory=list)
    empty_ids: list[str] = field(default_factory=list)
    missing_count: int = 0


@dataclass
class ReconciliationPlan:
    """Outcome of reconciling a whole deal."""

    to_create: list[tuple[ProductLine, int]] = field(default_factory=list)
    to_delete: set[str] = field(default_factory=set)
    to_flag: set[str] = field(default_factory=set)
    empty: set[str] = field(default_factory=set)

    @property
    def create_count(self) -> int:
        return sum(count for _, count in self.to_create)

    @property
    def is_noop(self) -> bool:
        return not self.to_delete and self.create_count == 0


def _created_key(snapshot: SessionSnapshot) -> tuple[float, str]:
    created = snapshot.created_at
    if created is None:
        timestamp = 0.0
    else:
        if created.tzinfo is None:
            created = created.replace(tzinfo=timezone.utc)
        timestamp = (created - _EPOCH).total_seconds()
    return timestamp, snapshot.session_id


def order_sessions(sessions: list[SessionSnapshot]) -> list[SessionSnapshot]:
    """Sort by creation time ascending, then by session id."""
    return sorted(sessions, key=_created_key)


def assess_product_sessions(
    required: int,
    sessions: list[SessionSnapshot],
) -> ProductAssessment:
    """
    Reconcile the sessions of a single product line against its quantity.

    Args:
        required: Number of sessions the line should have (>= 0)
        sessions: Sessions currently linked to the line, any order

    Returns:
        ProductAssessment with deletable, flagged and empty ids plus the
        number of sessions still missing
    """
    ordered = order_sessions(sessions)
    empty_sessions = [session for session in ordered if session.is_empty]
    assessment = ProductAssessment(
        empty_ids=[session.session_id for session in empty_sessions]
    )

    remaining_excess = max(0, len(ordered) - required)
    for session in reversed(empty_sessions):
        if remaining_excess <= 0:
            break
        assessment.deletable_ids.append(session.session_id)
        remaining_excess -= 1

    deletable = set(assessment.deletable_ids)
    remaining = [session for session in ordered if session.session_id not in deletable]

    flagged_count = max(0, len(remaining) - required)
    if flagged_count:
        assessment.flagged_ids = [
            session.session_id for session in reversed(remaining[-flagged_count:])
        ]

    assessment.missing_count = max(0, required - len(remaining))
    return assessment


def group_by_product(sessions: list[SessionSnapshot]) -> dict[str, list[SessionSnapshot]]:
    """Group sessions by product line id; sessions without one are skipped."""
    grouped: dict[str, list[SessionSnapshot]] = {}
    for session in sessions:
        if session.deal_product_id:
            grouped.setdefault(session.deal_product_id, []).append(session)
    return grouped


def plan_reconciliation(
    products: list[ProductLine],
    sessions: list[SessionSnapshot],
) -> ReconciliationPlan:
    """
    Build the reconciliation plan for a deal.

    Sessions attached to non-plannable lines (or to no line) are never
    deleted, flagged or counted; they only contribute to the empty set.
    """
    plan = ReconciliationPlan(
        empty={session.session_id for session in sessions if session.is_empty}
    )
    by_product = group_by_product(sessions)

    for product in products:
        if not product.id:
            continue
        assessment = assess_product_sessions(
            product.required, by_product.get(product.id, [])
        )
        plan.to_delete.update(assessment.deletable_ids)
        plan.to_flag.update(assessment.flagged_ids)
        if assessment.missing_count:
            plan.to_create.append((product, assessment.missing_count))

    return plan
