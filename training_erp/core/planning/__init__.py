"""
Session planning domain: status machine, reconciliation and conflicts.
"""

from training_erp.core.planning.conflicts import (
    ConflictDetail,
    ResourceConflictSummary,
    ResourceType,
    TimeRange,
    build_conflict_message,
)
from training_erp.core.planning.reconciliation import (
    ProductLine,
    ReconciliationPlan,
    SessionSnapshot,
    assess_product_sessions,
    plan_reconciliation,
)
from training_erp.core.planning.rules import (
    ACTIVE_STATUSES,
    SessionStatus,
    derive_end,
    ensure_positive_int,
    is_plannable_product,
    is_session_complete,
    is_session_empty,
    is_valid_range,
    normalize_status,
    resolve_status,
    to_nullable_string,
)

__all__ = [
    "ACTIVE_STATUSES",
    "ConflictDetail",
    "ProductLine",
    "ReconciliationPlan",
    "ResourceConflictSummary",
    "ResourceType",
    "SessionSnapshot",
    "SessionStatus",
    "TimeRange",
    "assess_product_sessions",
    "build_conflict_message",
    "derive_end",
    "ensure_positive_int",
    "is_plannable_product",
    "is_session_complete",
    "is_session_empty",
    "is_valid_range",
    "normalize_status",
    "plan_reconciliation",
    "resolve_status",
    "to_nullable_string",
]
