"""
Deal session request and response schemas.

Request bodies keep track of which keys were supplied (model_fields_set)
so updates can patch only those fields. Blank strings are accepted where
the API has always treated them as "no value".

Dependencies: pydantic
System role: Deal session API contracts
"""

from datetime import datetime
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from training_erp.core.timezone import parse_iso
from training_erp.models.common import OkResponse

SESSION_FIELD_NAMES = frozenset(
    {
        "inicio",
        "fin",
        "sala_id",
        "formadores",
        "unidades_moviles",
        "direccion",
        "sede",
        "comentarios",
        "estado",
        "deal_product_id",
    }
)

_DEAL_ID_ALIASES = AliasChoices("dealId", "deal_id")


def _id_text(value: Any) -> Any:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(value)
    return value


class DealSessionFields(BaseModel):
    """Writable session fields; all optional."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    inicio: datetime | None = Field(default=None, description="Start (ISO-8601; naive = Europe/Madrid)")
    fin: datetime | None = Field(default=None, description="End (ISO-8601; derived from product hours if omitted)")
    sala_id: str | None = None
    formadores: list[str | None] | None = Field(default=None, description="Trainer ids (full replacement)")
    unidades_moviles: list[str | None] | None = Field(default=None, description="Mobile unit ids (full replacement)")
    direccion: str | None = None
    sede: str | None = None
    comentarios: str | None = None
    estado: str | None = Field(default=None, description="Borrador, Planificada, Suspendido or Cancelado")
    deal_product_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("deal_product_id", "dealProductId"),
    )
    expand: str | list[str] | None = None

    @field_validator("inicio", "fin", mode="before")
    @classmethod
    def iso_text_only(cls, value: Any) -> Any:
        # pydantic would otherwise read numbers as epoch seconds
        if value is None or isinstance(value, datetime):
            return value
        if isinstance(value, str):
            return parse_iso(value) if value.strip() else None
        raise ValueError("expected an ISO-8601 string")

    @field_validator("sala_id", "deal_product_id", mode="before")
    @classmethod
    def numeric_id_as_text(cls, value: Any) -> Any:
        return _id_text(value)

    @field_validator("formadores", "unidades_moviles", mode="before")
    @classmethod
    def numeric_ids_as_text(cls, value: Any) -> Any:
        if isinstance(value, list):
            return [_id_text(item) for item in value]
        return value

    def supplied_fields(self) -> dict[str, Any]:
        """Session fields present in the request body, by name."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set & SESSION_FIELD_NAMES
        }

    @property
    def has_session_fields(self) -> bool:
        return bool(self.model_fields_set & SESSION_FIELD_NAMES)


class CreateDealSessionRequest(DealSessionFields):
    """POST /deal-sessions body: creates a session, or syncs when no field is given."""

    deal_id: str | None = Field(default=None, validation_alias=_DEAL_ID_ALIASES)


class UpdateDealSessionRequest(DealSessionFields):
    """PATCH /deal-sessions/{id} body."""


class SyncDealSessionsRequest(BaseModel):
    """POST /deal-sessions/sync body."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    deal_id: str | None = Field(default=None, validation_alias=_DEAL_ID_ALIASES)


class DealProductSummary(BaseModel):
    id: str
    code: str | None = None
    name: str | None = None
    hours: float | None = None


class RoomSummary(BaseModel):
    sala_id: str
    name: str | None = None
    sede: str | None = None


class TrainerSummary(BaseModel):
    trainer_id: str
    name: str | None = None
    activo: bool = False


class MobileUnitSummary(BaseModel):
    unidad_id: str
    name: str | None = None
    matricula: str | None = None
    tipo: list[str] = Field(default_factory=list)
    sede: list[str] = Field(default_factory=list)


class SessionOrigin(BaseModel):
    deal_product_id: str | None = None
    code: str | None = None


class DealSessionResponse(BaseModel):
    """Session representation; every key is always present."""

    session_id: str
    deal_id: str
    deal_product_id: str | None
    deal_product: DealProductSummary | None
    inicio: str | None
    fin: str | None
    sala_id: str | None
    sala: RoomSummary | None
    formadores: list[TrainerSummary]
    unidades_moviles: list[MobileUnitSummary]
    direccion: str | None
    sede: str | None
    comentarios: str | None
    estado: str | None
    origen: SessionOrigin
    created_at: str | None
    updated_at: str | None
    is_empty: bool
    is_exceeding_quantity: bool


class DealSessionEnvelope(OkResponse):
    session: DealSessionResponse


class DealSessionListEnvelope(OkResponse):
    sessions: list[DealSessionResponse]


class SyncResultEnvelope(OkResponse):
    """Result of reconciling a deal's sessions with its products."""

    created: int
    deleted: int
    flagged: list[str]
    total: int
