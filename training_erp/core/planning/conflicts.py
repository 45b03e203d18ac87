"""
Resource conflict value objects and message rendering.

Dependencies: training_erp.core.timezone
System role: Shapes shared by the conflict finder, mutation service and API
"""

import enum
from dataclasses import asdict, dataclass, field
from datetime import datetime
from typing import Any

from training_erp.core.timezone import format_local_range


class ResourceType(str, enum.Enum):
    """Kinds of schedulable resources."""

    ROOM = "sala"
    TRAINER = "formador"
    MOBILE_UNIT = "unidad_movil"


RESOURCE_TYPE_LABELS = {
    ResourceType.ROOM: "La sala seleccionada",
    ResourceType.TRAINER: "El formador seleccionado",
    ResourceType.MOBILE_UNIT: "La unidad móvil seleccionada",
}


@dataclass(frozen=True)
class TimeRange:
    """Half-open [start, end) interval; start < end is the caller's job."""

    start: datetime
    end: datetime


@dataclass(frozen=True)
class ConflictDetail:
    """An active session that already occupies a resource."""

    session_id: str
    deal_id: str
    deal_title: str | None
    organization_name: str | None
    product_code: str | None
    product_name: str | None
    inicio: str | None
    fin: str | None


@dataclass
class ResourceConflictSummary:
    """All conflicts found for one resource."""

    resource_type: ResourceType
    resource_id: str
    resource_label: str | None = None
    conflicts: list[ConflictDetail] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource_type": self.resource_type.value,
            "resource_id": self.resource_id,
            "resource_label": self.resource_label,
            "conflicts": [asdict(detail) for detail in self.conflicts],
        }


def build_conflict_message(summaries: list[ResourceConflictSummary]) -> str:
    """
    Summarize the first conflict as one sentence.

    Example:
        "La sala seleccionada (Aula 1) ya está asignado a Acme Training
        en el horario 10/03/25 10:00 – 10/03/25 12:00."
    """
    first = summaries[0]
    detail = first.conflicts[0] if first.conflicts else None

    resource_label = first.resource_label or first.resource_id
    parts = [f"{RESOURCE_TYPE_LABELS[first.resource_type]} ({resource_label})"]

    if detail is not None:
        deal_label = detail.deal_title or detail.organization_name or detail.deal_id
        if deal_label:
            parts.append(f"ya está asignado a {deal_label}")
        range_label = format_local_range(detail.inicio, detail.fin)
        if range_label:
            parts.append(f"en el horario {range_label}")

    return f"{' '.join(parts)}."
