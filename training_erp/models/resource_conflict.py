"""
Resource conflict schemas.

Dependencies: pydantic
System role: Resource conflict API contracts
"""

from pydantic import BaseModel, Field

from training_erp.models.common import OkResponse


class ConflictDetailResponse(BaseModel):
    session_id: str
    deal_id: str
    deal_title: str | None = None
    organization_name: str | None = None
    product_code: str | None = None
    product_name: str | None = None
    inicio: str | None = None
    fin: str | None = None


class ResourceConflictSummaryResponse(BaseModel):
    resource_type: str = Field(description="sala, formador or unidad_movil")
    resource_id: str
    resource_label: str | None = None
    conflicts: list[ConflictDetailResponse] = Field(default_factory=list)


class ResourceConflictEnvelope(OkResponse):
    conflicts: list[ResourceConflictSummaryResponse]
