"""
Session planning rules.

Pure functions describing the session status machine, plannable
products, session emptiness and completeness, and end-time derivation.
Nothing here touches the database.

Dependencies: training_erp.core.exceptions
System role: Domain rules shared by the reconciler, mutation and query services
"""

import enum
from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Any

from training_erp.core.exceptions import ValidationError

MILLISECONDS_PER_HOUR = 60 * 60 * 1000


class SessionStatus(str, enum.Enum):
    """
    Deal session lifecycle states.

    DRAFT: Incomplete session, computed automatically
    SCHEDULED: Complete session (start, end, room, trainer, address, site)
    SUSPENDED: Manually paused; never overridden automatically
    CANCELLED: Manually cancelled; never occupies resources
    """

    DRAFT = "Borrador"
    SCHEDULED = "Planificada"
    SUSPENDED = "Suspendido"
    CANCELLED = "Cancelado"


ACTIVE_STATUSES = frozenset(
    {SessionStatus.DRAFT, SessionStatus.SCHEDULED, SessionStatus.SUSPENDED}
)
STICKY_STATUSES = frozenset({SessionStatus.SUSPENDED, SessionStatus.CANCELLED})

_STATUS_ALIASES = {
    "borrador": SessionStatus.DRAFT,
    "planificada": SessionStatus.SCHEDULED,
    "suspendido": SessionStatus.SUSPENDED,
    "cancelado": SessionStatus.CANCELLED,
}


def to_nullable_string(value: Any) -> str | None:
    """Trim a value to text; blank or missing becomes None."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def normalize_status(value: Any) -> SessionStatus | None:
    """
    Normalize an incoming status label.

    Accepts the canonical label or its lowercase alias. Blank means
    "not provided".

    Raises:
        ValidationError: If the value is not a known status
    """
    if isinstance(value, SessionStatus):
        return value
    text = to_nullable_string(value)
    if text is None:
        return None
    if text in _STATUS_ALIASES:
        return _STATUS_ALIASES[text]
    try:
        return SessionStatus(text)
    except ValueError:
        raise ValidationError(
            "El campo estado contiene un valor no válido", field="estado"
        ) from None


def decimal_to_number(value: Any) -> float | None:
    """Convert numeric-ish values (Decimal, str, int) to float."""
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float, Decimal)):
        number = float(value)
    elif isinstance(value, str) and value.strip():
        try:
            number = float(value)
        except ValueError:
            return None
    else:
        return None
    if number != number or number in (float("inf"), float("-inf")):
        return None
    return number


def ensure_positive_int(value: Any) -> int:
    """Round a quantity to a non-negative integer; unparsable values are 0."""
    number = decimal_to_number(value)
    if number is None:
        return 0
    # JS Math.round semantics: halves round up
    return max(0, int(Decimal(str(number)).to_integral_value(rounding=ROUND_HALF_UP)))


def is_plannable_product(
    code: Any,
    prefixes: Sequence[str],
    excluded_prefix: str,
) -> bool:
    """Return True when a product code produces training sessions."""
    if not isinstance(code, str):
        return False
    normalized = code.strip().lower()
    if not normalized:
        return False
    if excluded_prefix and normalized.startswith(excluded_prefix.lower()):
        return False
    return any(normalized.startswith(prefix.lower()) for prefix in prefixes)


def _has_text(value: str | None) -> bool:
    return isinstance(value, str) and bool(value.strip())


def is_session_empty(
    start_at: datetime | None,
    end_at: datetime | None,
    sala_id: str | None,
    direccion: str | None,
    comentarios: str | None,
    trainer_ids: Iterable[str] = (),
    mobile_unit_ids: Iterable[str] = (),
) -> bool:
    """
    A session is empty when no schedule, room, address, comment, trainer or
    mobile unit has been recorded. Site (sede) alone does not count.
    """
    return not (
        start_at is not None
        or end_at is not None
        or _has_text(sala_id)
        or _has_text(direccion)
        or _has_text(comentarios)
        or any(True for _ in trainer_ids)
        or any(True for _ in mobile_unit_ids)
    )


def is_session_complete(
    start_at: datetime | None,
    end_at: datetime | None,
    sala_id: str | None,
    trainer_count: int,
    direccion: str | None,
    sede: str | None,
) -> bool:
    """A session may be Scheduled only when every planning field is set."""
    return bool(
        start_at is not None
        and end_at is not None
        and _has_text(sala_id)
        and trainer_count > 0
        and _has_text(direccion)
        and _has_text(sede)
    )


def resolve_status(
    current: SessionStatus | None,
    explicit: SessionStatus | None,
    complete: bool,
) -> SessionStatus:
    """
    Decide the status a session ends up with after a write.

    Args:
        current: Persisted status (None on create)
        explicit: Status supplied by the caller, if any
        complete: Whether the post-write session is complete

    Raises:
        ValidationError: If Scheduled is requested for an incomplete session
    """
    if explicit is not None:
        if explicit is SessionStatus.SCHEDULED and not complete:
            raise ValidationError(
                "Para marcar la sesión como Planificada deben completarse inicio, "
                "fin, sala, al menos un formador, dirección y sede",
                field="estado",
            )
        return explicit
    if current in STICKY_STATUSES:
        return current
    return SessionStatus.SCHEDULED if complete else SessionStatus.DRAFT


def derive_end(start_at: datetime | None, hours: Any) -> datetime | None:
    """Return start + hours when the product carries a positive duration."""
    if start_at is None:
        return None
    whole_hours = ensure_positive_int(hours)
    if whole_hours <= 0:
        return None
    return start_at + timedelta(milliseconds=whole_hours * MILLISECONDS_PER_HOUR)


def is_valid_range(start_at: datetime | None, end_at: datetime | None) -> bool:
    """True when both endpoints exist and end is strictly after start."""
    return start_at is not None and end_at is not None and end_at > start_at
